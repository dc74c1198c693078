"""
Dashboard statistics.

Aggregates over any sequence of package-like objects: immutable
ProcurementPackage values or Package rows read from the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from paketwatch.core.config.models import PackageStatus, PackageType


def _label(value: Any) -> str:
    return getattr(value, "value", value)


def format_rupiah(amount: float | int) -> str:
    """Format an amount as Indonesian Rupiah, e.g. ``Rp 1.234.567``."""
    rounded = round(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}Rp {abs(rounded):,}".replace(",", ".")


# =============================================================================
# Summary
# =============================================================================


@dataclass(frozen=True)
class DashboardSummary:
    """Headline totals for a (possibly filtered) set of packages."""

    total_packages: int
    total_budget: int
    total_hps: int
    total_realization: int
    completion_percentage: float
    is_filtered: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_packages": self.total_packages,
            "total_budget": self.total_budget,
            "total_hps": self.total_hps,
            "total_realization": self.total_realization,
            "completion_percentage": self.completion_percentage,
            "is_filtered": self.is_filtered,
        }


def summarize(packages: Sequence[Any], total_count: int | None = None) -> DashboardSummary:
    """Compute dashboard totals.

    Args:
        packages: Packages currently shown
        total_count: Size of the unfiltered set; marks the summary as
            filtered when it differs from ``len(packages)``

    Returns:
        DashboardSummary with absorption of budget as completion percentage
    """
    total_budget = sum(p.budget for p in packages)
    total_hps = sum(p.hps for p in packages)
    total_realization = sum(p.realization for p in packages)

    completion = (total_realization / total_budget) * 100 if total_budget > 0 else 0.0

    return DashboardSummary(
        total_packages=len(packages),
        total_budget=total_budget,
        total_hps=total_hps,
        total_realization=total_realization,
        completion_percentage=completion,
        is_filtered=bool(total_count) and len(packages) != total_count,
    )


# =============================================================================
# Breakdowns
# =============================================================================


@dataclass(frozen=True)
class BreakdownItem:
    label: str
    count: int
    percentage: float


def _breakdown(values: list[str], labels: Iterable[str]) -> list[BreakdownItem]:
    total = len(values)
    counts = {label: 0 for label in labels}
    for value in values:
        if value in counts:
            counts[value] += 1

    items = [
        BreakdownItem(label=label, count=count, percentage=round(count / total * 100, 1))
        for label, count in counts.items()
        if count > 0
    ]
    # Stable: ties keep enum order
    return sorted(items, key=lambda item: item.count, reverse=True)


def breakdown_by_status(packages: Sequence[Any]) -> list[BreakdownItem]:
    """Package counts per status, zeros dropped, largest first."""
    return _breakdown(
        [_label(p.status) for p in packages],
        (status.value for status in PackageStatus),
    )


def breakdown_by_type(packages: Sequence[Any]) -> list[BreakdownItem]:
    """Package counts per procurement type, zeros dropped, largest first."""
    return _breakdown(
        [_label(p.type) for p in packages],
        (package_type.value for package_type in PackageType),
    )


# =============================================================================
# Filters and selections
# =============================================================================


def filter_packages(
    packages: Iterable[Any],
    search: str | None = None,
    opd_name: str | None = None,
    package_type: PackageType | str | None = None,
) -> list[Any]:
    """Filter packages the way the public dashboard does.

    ``search`` is a case-insensitive substring of name or location.
    """
    needle = search.lower() if search else None
    type_label = _label(package_type) if package_type else None

    result = []
    for p in packages:
        if needle and needle not in p.name.lower() and needle not in p.location.lower():
            continue
        if opd_name and p.opd_name != opd_name:
            continue
        if type_label and _label(p.type) != type_label:
            continue
        result.append(p)
    return result


def opd_options(packages: Iterable[Any]) -> list[str]:
    """Sorted unique OPD names."""
    return sorted({p.opd_name for p in packages})


def top_by_budget(packages: Iterable[Any], limit: int = 5) -> list[Any]:
    """Largest packages by budget that have an image to show."""
    with_image = [p for p in packages if p.image_url]
    return sorted(with_image, key=lambda p: p.budget, reverse=True)[:limit]
