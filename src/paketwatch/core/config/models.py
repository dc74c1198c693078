"""
Pydantic configuration models for Paketwatch.

These models provide type-safe configuration with validation for:
- Application settings (paths, database, logging)
- CSV normalizer defaults (province, bounding box, placeholders)
- Column tables for the supported CSV export shapes
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Enums
# =============================================================================


class PackageType(str, Enum):
    """Procurement mode of a package."""

    TENDER = "Tender"
    NON_TENDER = "Non-Tender"
    SWAKELOLA = "Swakelola"


class PackageStatus(str, Enum):
    """Package lifecycle status as shown on the dashboard."""

    PLANNING = "Perencanaan"
    IN_PROGRESS = "Dalam Proses"
    COMPLETED = "Selesai"
    SUSPENDED = "Ditunda"
    AT_RISK = "Beresiko"


class CsvFormat(str, Enum):
    """Known CSV export shapes."""

    TENDER = "tender"
    SWAKELOLA = "swakelola"
    UNKNOWN = "unknown"


class ActivityAction(str, Enum):
    """Actions recorded in the activity log."""

    ADD = "ADD"
    EDIT = "EDIT"
    DELETE = "DELETE"
    IMPORT = "IMPORT"


# =============================================================================
# Normalizer Defaults
# =============================================================================

DEFAULT_PROVINCE = "Nusa Tenggara Barat"
PLACEHOLDER_NAME = "Tanpa Nama"
UNKNOWN_OPD = "OPD Tidak Diketahui"

DEFAULT_PLACEHOLDER_IMAGES = [
    "https://i.imgur.com/8m5g2a5.jpeg",
    "https://i.imgur.com/xQfV8GZ.jpeg",
    "https://i.imgur.com/pDRgq8s.jpeg",
    "https://i.imgur.com/s6XbK3g.jpeg",
    "https://i.imgur.com/so72y52.jpeg",
]


class GeoPoint(BaseModel):
    """A latitude/longitude pair."""

    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class BoundingBox(BaseModel):
    """Rectangle used to place packages without coordinates."""

    min_lat: float = Field(default=-9.0, ge=-90, le=90)
    max_lat: float = Field(default=-8.1, ge=-90, le=90)
    min_lon: float = Field(default=115.7, ge=-180, le=180)
    max_lon: float = Field(default=119.2, ge=-180, le=180)

    @model_validator(mode="after")
    def check_ordering(self) -> "BoundingBox":
        if self.min_lat > self.max_lat:
            raise ValueError("min_lat must not exceed max_lat")
        if self.min_lon > self.max_lon:
            raise ValueError("min_lon must not exceed max_lon")
        return self


class ColumnRule(BaseModel):
    """Candidate headers for one package field, tried in order.

    Empty cells fall through to the next header, then to the default.
    """

    headers: list[str] = Field(default_factory=list)
    default: str = ""


class FormatColumns(BaseModel):
    """Column table mapping one CSV export shape onto package fields."""

    signature: list[str] = Field(
        ...,
        min_length=1,
        description="Headers that must all be present to recognise this shape",
    )

    name: ColumnRule = Field(default_factory=lambda: ColumnRule(headers=["Nama Paket"], default=PLACEHOLDER_NAME))
    type: ColumnRule = Field(default_factory=lambda: ColumnRule(default="Tender"))
    location: ColumnRule = Field(default_factory=ColumnRule)
    budget: ColumnRule = Field(default_factory=lambda: ColumnRule(headers=["Nilai Pagu"], default="0"))
    hps: ColumnRule = Field(default_factory=lambda: ColumnRule(default="0"))
    realization: ColumnRule = Field(default_factory=lambda: ColumnRule(default="0"))
    status: ColumnRule = Field(default_factory=lambda: ColumnRule(default="Perencanaan"))
    provider_name: ColumnRule = Field(default_factory=ColumnRule)
    provider_address: ColumnRule = Field(default_factory=ColumnRule)
    opd_name: ColumnRule = Field(default_factory=lambda: ColumnRule(headers=["Nama Satker"], default=UNKNOWN_OPD))
    latitude: ColumnRule = Field(default_factory=lambda: ColumnRule(headers=["Lintang", "Latitude"]))
    longitude: ColumnRule = Field(default_factory=lambda: ColumnRule(headers=["Bujur", "Longitude"]))
    image_url: ColumnRule = Field(default_factory=lambda: ColumnRule(headers=["URL Gambar", "Image URL"]))

    fixed_type: PackageType | None = Field(
        default=None,
        description="Type assigned to every row regardless of the type column",
    )
    hps_from_budget: bool = Field(
        default=False,
        description="Use the budget as HPS (export has no HPS column)",
    )


def tender_columns() -> FormatColumns:
    """Column table for the Tender / Non-Tender export."""
    return FormatColumns(
        signature=["Nilai Kontrak", "Jenis Pengadaan"],
        type=ColumnRule(headers=["Jenis Pengadaan"], default="Tender"),
        location=ColumnRule(headers=["KLPD", "K/L/PD"]),
        hps=ColumnRule(headers=["Nilai HPS"], default="0"),
        realization=ColumnRule(headers=["Nilai Kontrak"], default="0"),
        status=ColumnRule(headers=["Tahap", "Status Paket"], default="Perencanaan"),
        provider_name=ColumnRule(headers=["Nama Pemenang"], default="Belum Ada Pemenang"),
        provider_address=ColumnRule(headers=["KLPD", "K/L/PD"]),
    )


def swakelola_columns() -> FormatColumns:
    """Column table for the Swakelola (self-managed) export."""
    return FormatColumns(
        # "Realiasai" is misspelled in the source system's export
        signature=["Nilai Total Realiasai", "Tipe Swakelola"],
        location=ColumnRule(headers=["K/L/PD", "KLPD"]),
        realization=ColumnRule(headers=["Nilai Total Realiasai"], default="0"),
        status=ColumnRule(headers=["Status Paket"], default="Perencanaan"),
        provider_name=ColumnRule(headers=["Nama Pelaksana"], default="Swakelola Internal"),
        provider_address=ColumnRule(headers=["Nama Satker"]),
        fixed_type=PackageType.SWAKELOLA,
        hps_from_budget=True,
    )


def default_formats() -> dict[CsvFormat, FormatColumns]:
    return {
        CsvFormat.TENDER: tender_columns(),
        CsvFormat.SWAKELOLA: swakelola_columns(),
    }


class NormalizerConfig(BaseModel):
    """CSV normalizer defaults."""

    province: str = Field(
        default=DEFAULT_PROVINCE,
        description="Location used when a row has none",
    )
    placeholder_name: str = Field(
        default=PLACEHOLDER_NAME,
        description="Resolved name that marks a row as unnamed (dropped)",
    )
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    safe_point: GeoPoint = Field(
        default_factory=lambda: GeoPoint(lat=-8.58, lon=116.12),
        description="Fallback point (Mataram) when generation fails",
    )
    placeholder_images: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PLACEHOLDER_IMAGES),
        min_length=1,
    )
    formats: dict[CsvFormat, FormatColumns] = Field(default_factory=default_formats)

    @field_validator("formats")
    @classmethod
    def no_unknown_format(cls, v: dict[CsvFormat, FormatColumns]) -> dict[CsvFormat, FormatColumns]:
        if CsvFormat.UNKNOWN in v:
            raise ValueError("'unknown' cannot have a column table")
        return v


# =============================================================================
# Database Configuration
# =============================================================================


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = Field(
        default="sqlite:///data/paketwatch.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements (debugging)",
    )
    pool_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Connection pool size",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=Path("logs/paketwatch.log"),
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    # Paths
    config_dir: Path = Field(
        default=Path("configs"),
        description="Configuration directory",
    )
    data_dir: Path = Field(
        default=Path("data"),
        description="Data storage directory",
    )

    # Components
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        for dir_path in [self.config_dir, self.data_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

        if self.logging.file:
            self.logging.file.parent.mkdir(parents=True, exist_ok=True)
