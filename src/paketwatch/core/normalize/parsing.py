"""
Parsing utilities for normalizing CSV field values.

Handles Rupiah currency strings, free-text package stages and
procurement categories as they appear in the provincial exports.
"""

from __future__ import annotations

import re
from typing import Any

from paketwatch.core.config.models import PackageStatus, PackageType


# =============================================================================
# Currency Parsing
# =============================================================================

_CURRENCY_MARKER = re.compile(r"^\s*rp\.?\s*", re.IGNORECASE)
_CENTS_GROUP = re.compile(r",\d{2}$")

# Leading float literal, the part JavaScript's parseFloat would accept
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Amounts are stored as signed 64-bit integers
MAX_AMOUNT = 2**63 - 1


def parse_currency(value: Any) -> int:
    """Parse a Rupiah amount such as ``"Rp. 1.234.567,00"`` into an int.

    The currency marker, a trailing two-digit cents group and the ``.``
    thousands separators are removed, then the leading numeric part of
    the remainder is read. Anything that is not a non-blank string, or
    that has no leading number, yields 0, as does an amount too large to
    store. Negative amounts pass through.

    Examples:
        >>> parse_currency("Rp. 1.234.567,00")
        1234567
        >>> parse_currency("abc")
        0
    """
    if not isinstance(value, str) or not value.strip():
        return 0

    text = _CURRENCY_MARKER.sub("", value.strip())
    text = _CENTS_GROUP.sub("", text)
    text = text.replace(".", "").strip()

    match = _LEADING_FLOAT.match(text)
    if not match:
        return 0

    try:
        amount = int(float(match.group()))
    except (ValueError, OverflowError):
        return 0

    if abs(amount) > MAX_AMOUNT:
        return 0
    return amount


# =============================================================================
# Status Parsing
# =============================================================================

# Evaluated in order, first match wins. Anything unmatched is PLANNING.
STATUS_PATTERNS: list[tuple[PackageStatus, list[str]]] = [
    (
        PackageStatus.COMPLETED,
        [
            "selesai",
            "completed",
        ],
    ),
    (
        PackageStatus.IN_PROGRESS,
        [
            "berjalan",
            "proses",
            "penandatanganan",
            "in progress",
            "underway",
        ],
    ),
    (
        PackageStatus.SUSPENDED,
        [
            "ditunda",
            "dibatalkan",
            "ditutup",
            "suspended",
            "cancelled",
            "canceled",
            "closed",
        ],
    ),
]


def parse_status(
    value: Any,
    *,
    default: PackageStatus = PackageStatus.PLANNING,
) -> PackageStatus:
    """Map a free-text package stage to a canonical status.

    Examples:
        >>> parse_status("Paket Sudah Selesai")
        <PackageStatus.COMPLETED: 'Selesai'>
    """
    if not isinstance(value, str):
        return default

    text = value.strip().lower()
    if not text:
        return default

    for status, patterns in STATUS_PATTERNS:
        if any(pattern in text for pattern in patterns):
            return status

    return default


# =============================================================================
# Type Parsing
# =============================================================================

SELF_MANAGED_TERMS = ("swakelola", "self-managed")
NON_TENDER_QUALIFIERS = ("tender", "konstruksi")
TENDER_TERMS = ("tender", "konstruksi", "konsultansi", "barang", "lainnya")


def parse_type(value: Any) -> PackageType:
    """Map a free-text procurement category to a package type.

    Anything that mentions self-management is Swakelola; "non" together
    with a tender/construction term is Non-Tender; everything else,
    including unrecognised text, is Tender.
    """
    if not isinstance(value, str):
        return PackageType.TENDER

    text = value.lower()

    if any(term in text for term in SELF_MANAGED_TERMS):
        return PackageType.SWAKELOLA
    if "non" in text and any(term in text for term in NON_TENDER_QUALIFIERS):
        return PackageType.NON_TENDER
    if any(term in text for term in TENDER_TERMS):
        return PackageType.TENDER

    return PackageType.TENDER


# =============================================================================
# Utility Functions
# =============================================================================


def normalize_whitespace(text: str | None) -> str:
    """Normalize whitespace in text."""
    if text is None:
        return ""
    return " ".join(text.split())


def parse_float(value: Any) -> float | None:
    """Parse a plain decimal number (``.`` or ``,`` as decimal mark)."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return float(value.strip().replace(",", "."))
    except ValueError:
        return None
