"""
Canonical procurement package model.

Provides a clean interface between raw CSV rows and database persistence.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from paketwatch.core.config.models import (
    ColumnRule,
    CsvFormat,
    NormalizerConfig,
    PackageStatus,
    PackageType,
)
from paketwatch.core.errors import UnknownFormatError

from .coordinates import Coordinates, coordinates_from_values, generate_fallback_coordinates
from .parsing import normalize_whitespace, parse_currency, parse_status, parse_type

logger = logging.getLogger(__name__)


def compute_progress(budget: float, realization: float) -> int:
    """Realization as a whole percentage of budget.

    0 when budget is not positive or the ratio overflows.

    Halves round up.
    """
    if budget <= 0:
        return 0
    try:
        ratio = realization / budget * 100
    except OverflowError:
        return 0
    if not math.isfinite(ratio):
        return 0
    return math.floor(ratio + 0.5)


def placeholder_image(index: int, images: Sequence[str]) -> str:
    """Pick a placeholder image for the row at ``index``."""
    return images[index % len(images)]


@dataclass(frozen=True)
class ProcurementPackage:
    """Normalized procurement package ready for persistence.

    Immutable; ``progress`` is always derived from budget and realization.
    The database assigns the ID.
    """

    name: str
    type: PackageType
    location: str
    coordinates: Coordinates
    budget: int
    hps: int
    realization: int
    status: PackageStatus
    provider_name: str
    provider_address: str
    opd_name: str
    image_url: str | None = None

    @property
    def progress(self) -> int:
        return compute_progress(self.budget, self.realization)

    def with_changes(self, **changes: Any) -> "ProcurementPackage":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "name": self.name,
            "type": self.type.value,
            "location": self.location,
            "coordinates": self.coordinates.to_dict(),
            "budget": self.budget,
            "hps": self.hps,
            "realization": self.realization,
            "progress": self.progress,
            "status": self.status.value,
            "provider_name": self.provider_name,
            "provider_address": self.provider_address,
            "opd_name": self.opd_name,
            "image_url": self.image_url,
        }


def _resolve(row: Mapping[str, str], rule: ColumnRule) -> str:
    """First non-blank value among the rule's headers, else its default."""
    for header in rule.headers:
        value = row.get(header)
        if value is not None and value.strip():
            return normalize_whitespace(value)
    return rule.default


def build_package(
    row: Mapping[str, str],
    fmt: CsvFormat,
    *,
    config: NormalizerConfig | None = None,
    rng: random.Random | None = None,
    index: int = 0,
) -> ProcurementPackage | None:
    """Build a package from one CSV row.

    Args:
        row: Header to value mapping from the tokenizer
        fmt: Detected export shape
        config: Normalizer defaults and column tables
        rng: Random source for fallback coordinates
        index: Row position, used to pick the placeholder image

    Returns:
        The package, or None when the row has no real name

    Raises:
        UnknownFormatError: if ``fmt`` has no column table
    """
    config = config or NormalizerConfig()
    columns = config.formats.get(fmt)
    if columns is None:
        raise UnknownFormatError(f"No column table for format: {fmt.value}")

    name = _resolve(row, columns.name) or config.placeholder_name
    if name == config.placeholder_name:
        logger.debug("Row %d dropped: no package name", index, extra={"row": index})
        return None

    budget = parse_currency(_resolve(row, columns.budget))
    realization = parse_currency(_resolve(row, columns.realization))
    hps = budget if columns.hps_from_budget else parse_currency(_resolve(row, columns.hps))

    package_type = columns.fixed_type or parse_type(_resolve(row, columns.type))

    coordinates = coordinates_from_values(
        _resolve(row, columns.latitude),
        _resolve(row, columns.longitude),
    )
    if coordinates is None:
        coordinates = generate_fallback_coordinates(
            rng,
            box=config.bounding_box,
            fallback=config.safe_point,
        )

    image_url = _resolve(row, columns.image_url) or placeholder_image(index, config.placeholder_images)

    return ProcurementPackage(
        name=name,
        type=package_type,
        location=_resolve(row, columns.location) or config.province,
        coordinates=coordinates,
        budget=budget,
        hps=hps,
        realization=realization,
        status=parse_status(_resolve(row, columns.status)),
        provider_name=_resolve(row, columns.provider_name),
        provider_address=_resolve(row, columns.provider_address) or config.province,
        opd_name=_resolve(row, columns.opd_name),
        image_url=image_url,
    )
