"""Normalization of procurement package CSV exports."""

from .parsing import (
    STATUS_PATTERNS,
    normalize_whitespace,
    parse_currency,
    parse_float,
    parse_status,
    parse_type,
)
from .coordinates import (
    SAFE_POINT,
    Coordinates,
    coordinates_from_values,
    ensure_valid,
    generate_fallback_coordinates,
    is_valid_point,
    parse_coordinates,
)
from .csv_reader import iter_rows, read_headers, read_rows, split_line
from .formats import detect_format
from .canonical import (
    ProcurementPackage,
    build_package,
    compute_progress,
    placeholder_image,
)
from .batch import NormalizedBatch, normalize_csv

__all__ = [
    # Parsing
    "STATUS_PATTERNS",
    "normalize_whitespace",
    "parse_currency",
    "parse_float",
    "parse_status",
    "parse_type",
    # Coordinates
    "SAFE_POINT",
    "Coordinates",
    "coordinates_from_values",
    "ensure_valid",
    "generate_fallback_coordinates",
    "is_valid_point",
    "parse_coordinates",
    # Tokenizer
    "iter_rows",
    "read_headers",
    "read_rows",
    "split_line",
    # Formats
    "detect_format",
    # Canonical
    "ProcurementPackage",
    "build_package",
    "compute_progress",
    "placeholder_image",
    # Batch
    "NormalizedBatch",
    "normalize_csv",
]
