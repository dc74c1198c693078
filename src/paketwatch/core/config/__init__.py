"""Configuration loading and validation."""

from .models import (
    # Enums
    ActivityAction,
    CsvFormat,
    PackageStatus,
    PackageType,
    # Config models
    AppConfig,
    BoundingBox,
    ColumnRule,
    DatabaseConfig,
    FormatColumns,
    GeoPoint,
    LoggingConfig,
    NormalizerConfig,
    default_formats,
    swakelola_columns,
    tender_columns,
)
from .loader import ConfigError, load_app_config

__all__ = [
    # Enums
    "ActivityAction",
    "CsvFormat",
    "PackageStatus",
    "PackageType",
    # Config models
    "AppConfig",
    "BoundingBox",
    "ColumnRule",
    "DatabaseConfig",
    "FormatColumns",
    "GeoPoint",
    "LoggingConfig",
    "NormalizerConfig",
    "default_formats",
    "swakelola_columns",
    "tender_columns",
    # Loaders
    "ConfigError",
    "load_app_config",
]
