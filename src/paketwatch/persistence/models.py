"""
SQLAlchemy ORM models for Paketwatch.

Defines the database schema:
- Packages: Procurement packages (Tender, Non-Tender, Swakelola)
- ActivityLogs: Add/edit/delete/import history
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from paketwatch.core.config.models import PackageStatus, PackageType
from paketwatch.core.normalize.canonical import ProcurementPackage
from paketwatch.core.normalize.coordinates import Coordinates


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# Base Class
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all ORM models."""


# =============================================================================
# Mixins
# =============================================================================


class TimestampMixin:
    """Mixin providing created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        default=None,
        onupdate=utcnow,
        nullable=True,
    )


# =============================================================================
# Package Model
# =============================================================================


class Package(Base, TimestampMixin):
    """Procurement package tracked on the dashboard."""

    __tablename__ = "packages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(1000), nullable=False)
    package_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PackageType.TENDER.value,
        index=True,
    )
    location: Mapped[str] = mapped_column(String(500), nullable=False)

    # Map marker
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    # Values (Rupiah)
    budget: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    hps: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    realization: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Derived from budget/realization on every write
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PackageStatus.PLANNING.value,
        index=True,
    )

    # Provider and owning unit
    provider_name: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    provider_address: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    opd_name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)

    image_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    # "manual" or the imported file name
    source: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        Index("ix_package_type_status", "package_type", "status"),
    )

    @classmethod
    def from_value(cls, value: ProcurementPackage, source: str | None = None) -> "Package":
        package = cls(source=source)
        package.apply(value)
        return package

    def apply(self, value: ProcurementPackage) -> None:
        """Copy every field of a package value onto this row."""
        self.name = value.name
        self.package_type = value.type.value
        self.location = value.location
        self.latitude = value.coordinates.lat
        self.longitude = value.coordinates.lon
        self.budget = value.budget
        self.hps = value.hps
        self.realization = value.realization
        self.progress = value.progress
        self.status = value.status.value
        self.provider_name = value.provider_name
        self.provider_address = value.provider_address
        self.opd_name = value.opd_name
        self.image_url = value.image_url

    def to_value(self) -> ProcurementPackage:
        """Convert this row back to an immutable package value."""
        return ProcurementPackage(
            name=self.name,
            type=PackageType(self.package_type),
            location=self.location,
            coordinates=Coordinates(lat=self.latitude, lon=self.longitude),
            budget=self.budget,
            hps=self.hps,
            realization=self.realization,
            status=PackageStatus(self.status),
            provider_name=self.provider_name,
            provider_address=self.provider_address,
            opd_name=self.opd_name,
            image_url=self.image_url,
        )

    def to_dict(self) -> dict:
        data = self.to_value().to_dict()
        return {"id": self.id, **data, "source": self.source}

    # Attribute names shared with ProcurementPackage, used by the report module
    @property
    def type(self) -> str:
        return self.package_type

    def __repr__(self) -> str:
        return f"<Package(id={self.id}, name='{self.name[:50] if self.name else ''}')>"


# =============================================================================
# Activity Log Model
# =============================================================================


class ActivityLog(Base):
    """History of changes made through the admin commands."""

    __tablename__ = "activity_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    package_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("packages.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<ActivityLog(id={self.id}, action='{self.action}', package_id={self.package_id})>"
