"""
Validation of manually entered packages.

Every field is required except the image URL, amounts must be finite
non-negative numbers, and coordinates are entered as ``"lat, lon"``.
"""

from __future__ import annotations

import math
from typing import Any

from paketwatch.core.config.models import PackageStatus, PackageType
from paketwatch.core.errors import InvalidCoordinatesError, PackageValidationError
from paketwatch.core.normalize.canonical import ProcurementPackage
from paketwatch.core.normalize.coordinates import Coordinates, parse_coordinates
from paketwatch.core.normalize.parsing import MAX_AMOUNT, normalize_whitespace

TEXT_FIELDS = ("name", "location", "provider_name", "provider_address", "opd_name")
AMOUNT_FIELDS = ("budget", "hps", "realization")


def require_text(field: str, value: Any) -> str:
    text = normalize_whitespace(value if isinstance(value, str) else None)
    if not text:
        raise PackageValidationError(f"Field '{field}' is required")
    return text


def require_amount(field: str, value: Any) -> int:
    """Accept a finite, non-negative number and truncate it to whole Rupiah."""
    if value is None or isinstance(value, bool):
        raise PackageValidationError(f"Field '{field}' is required")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise PackageValidationError(f"Field '{field}' must be a number: {value!r}") from e
    if not math.isfinite(number):
        raise PackageValidationError(f"Field '{field}' must be a finite number")
    if number < 0:
        raise PackageValidationError(f"Field '{field}' must not be negative")
    if number > MAX_AMOUNT:
        raise PackageValidationError(f"Field '{field}' is too large")
    return int(number)


def _coordinates(value: Any) -> Coordinates:
    if isinstance(value, Coordinates):
        if not value.is_valid():
            raise InvalidCoordinatesError(f"Coordinates out of range: {value}")
        return value
    return parse_coordinates(value)


def _choice(field: str, enum_cls: Any, value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise PackageValidationError(f"Field '{field}' must be one of: {allowed}") from e


def validate_changes(changes: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial set of package fields.

    Returns the cleaned values, ready for ``ProcurementPackage.with_changes``.

    Raises:
        PackageValidationError: a field is blank, non-finite or unknown
        InvalidCoordinatesError: coordinates are malformed or out of range
    """
    cleaned: dict[str, Any] = {}
    for field, value in changes.items():
        if field in TEXT_FIELDS:
            cleaned[field] = require_text(field, value)
        elif field in AMOUNT_FIELDS:
            cleaned[field] = require_amount(field, value)
        elif field == "coordinates":
            cleaned[field] = _coordinates(value)
        elif field == "type":
            cleaned[field] = _choice(field, PackageType, value)
        elif field == "status":
            cleaned[field] = _choice(field, PackageStatus, value)
        elif field == "image_url":
            cleaned[field] = normalize_whitespace(value) or None
        else:
            raise PackageValidationError(f"Unknown package field: {field}")
    return cleaned


def manual_package(**fields: Any) -> ProcurementPackage:
    """Build a package from form input.

    Raises:
        PackageValidationError: a required field is missing or invalid
    """
    required = TEXT_FIELDS + AMOUNT_FIELDS + ("coordinates", "type", "status")
    missing = [name for name in required if fields.get(name) is None]
    if missing:
        raise PackageValidationError(f"Missing required field(s): {', '.join(missing)}")

    return ProcurementPackage(**validate_changes(fields))
