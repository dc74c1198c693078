"""
Coordinate handling for package map markers.

Exports carry no coordinates, so imported packages are placed at a
random point inside the province. Every coordinate that leaves this
module is finite and within latitude/longitude ranges.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any

from paketwatch.core.config.models import BoundingBox, GeoPoint
from paketwatch.core.errors import InvalidCoordinatesError

from .parsing import parse_float


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair."""

    lat: float
    lon: float

    def is_valid(self) -> bool:
        return is_valid_point(self.lat, self.lon)

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}


SAFE_POINT = Coordinates(lat=-8.58, lon=116.12)


def is_valid_point(lat: Any, lon: Any) -> bool:
    """True when both values are finite numbers within lat/lon ranges."""
    for value in (lat, lon):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if not math.isfinite(value):
            return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def _safe_point(fallback: GeoPoint | Coordinates | None) -> Coordinates:
    if fallback is None:
        return SAFE_POINT
    return Coordinates(lat=fallback.lat, lon=fallback.lon)


def ensure_valid(
    coordinates: Coordinates | None,
    fallback: GeoPoint | Coordinates | None = None,
) -> Coordinates:
    """Return the coordinates if valid, otherwise the safe point."""
    if coordinates is not None and coordinates.is_valid():
        return coordinates
    return _safe_point(fallback)


def generate_fallback_coordinates(
    rng: random.Random | None = None,
    box: BoundingBox | None = None,
    fallback: GeoPoint | Coordinates | None = None,
) -> Coordinates:
    """Uniform random point inside the bounding box, rounded to 4 decimals.

    Pass a seeded ``random.Random`` for reproducible output. A generated
    point that is not valid is replaced by the safe point.
    """
    rng = rng or random.Random()
    box = box or BoundingBox()

    lat = rng.uniform(box.min_lat, box.max_lat)
    lon = rng.uniform(box.min_lon, box.max_lon)

    return ensure_valid(Coordinates(lat=round(lat, 4), lon=round(lon, 4)), fallback)


def coordinates_from_values(lat: Any, lon: Any) -> Coordinates | None:
    """Build coordinates from two raw cell values, or None if unusable."""
    lat_num = parse_float(lat)
    lon_num = parse_float(lon)
    if lat_num is None or lon_num is None:
        return None
    if not is_valid_point(lat_num, lon_num):
        return None
    return Coordinates(lat=lat_num, lon=lon_num)


def parse_coordinates(text: str) -> Coordinates:
    """Parse the manual entry form ``"latitude, longitude"``.

    Raises:
        InvalidCoordinatesError: if the text is not two numbers within
            latitude (-90..90) and longitude (-180..180) ranges
    """
    if not text or not text.strip():
        raise InvalidCoordinatesError("Coordinates are required")

    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 2:
        raise InvalidCoordinatesError(
            'Invalid coordinate format. Use "latitude, longitude".'
        )

    try:
        lat, lon = float(parts[0]), float(parts[1])
    except ValueError as e:
        raise InvalidCoordinatesError(f"Coordinates must be numbers: {text!r}") from e

    if not is_valid_point(lat, lon):
        raise InvalidCoordinatesError(
            "Invalid coordinates. Latitude must be between -90 and 90 "
            "and longitude between -180 and 180."
        )

    return Coordinates(lat=lat, lon=lon)
