"""
Repository pattern for database operations.

Provides clean abstractions for CRUD operations on packages and the
activity log. Progress is recomputed through ProcurementPackage on
every write.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from paketwatch.core.config.models import ActivityAction, PackageStatus, PackageType
from paketwatch.core.errors import (
    InvalidCoordinatesError,
    PackageNotFoundError,
    PackageValidationError,
)
from paketwatch.core.normalize.canonical import ProcurementPackage
from paketwatch.core.normalize.parsing import MAX_AMOUNT

from .models import ActivityLog, Package


# =============================================================================
# Package Repository
# =============================================================================


class PackageRepository:
    """Repository for Package CRUD operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, package_id: int) -> Package | None:
        """Get package by ID."""
        return self.session.get(Package, package_id)

    def require(self, package_id: int) -> Package:
        """Get package by ID or raise PackageNotFoundError."""
        package = self.get_by_id(package_id)
        if package is None:
            raise PackageNotFoundError(package_id)
        return package

    def _conditions(
        self,
        search: str | None = None,
        opd_name: str | None = None,
        package_type: PackageType | str | None = None,
        status: PackageStatus | str | None = None,
    ) -> list[Any]:
        conditions = []
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(Package.name).like(pattern),
                    func.lower(Package.location).like(pattern),
                )
            )
        if opd_name:
            conditions.append(Package.opd_name == opd_name)
        if package_type:
            conditions.append(Package.package_type == PackageType(package_type).value)
        if status:
            conditions.append(Package.status == PackageStatus(status).value)
        return conditions

    def list_packages(
        self,
        search: str | None = None,
        opd_name: str | None = None,
        package_type: PackageType | str | None = None,
        status: PackageStatus | str | None = None,
        limit: int | None = 100,
        offset: int = 0,
    ) -> Sequence[Package]:
        """List packages with filters, newest first.

        ``search`` matches name or location, case-insensitively.
        """
        stmt = select(Package)

        conditions = self._conditions(search, opd_name, package_type, status)
        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(Package.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)

        return self.session.execute(stmt).scalars().all()

    def count(self, **filters: Any) -> int:
        """Count packages matching the same filters as list_packages."""
        stmt = select(func.count(Package.id))
        conditions = self._conditions(**filters)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        return self.session.execute(stmt).scalar_one()

    def _check_storable(self, value: ProcurementPackage) -> None:
        if not value.coordinates.is_valid():
            raise InvalidCoordinatesError(
                f"Invalid coordinates for package '{value.name}': {value.coordinates}"
            )
        if abs(value.progress) > MAX_AMOUNT:
            raise PackageValidationError(
                f"Progress of package '{value.name}' is too large to store: {value.progress}%"
            )

    def create(self, value: ProcurementPackage, source: str | None = None) -> Package:
        """Insert a new package. The database assigns the ID.

        Raises:
            PackageValidationError: if the coordinates or progress cannot be stored
        """
        self._check_storable(value)
        package = Package.from_value(value, source=source)
        self.session.add(package)
        self.session.flush()
        return package

    def update(self, package_id: int, **changes: Any) -> Package:
        """Apply field changes to a package and recompute its progress.

        Field names are those of ProcurementPackage.

        Raises:
            PackageNotFoundError: if the package does not exist
            PackageValidationError: if the coordinates or progress cannot be stored
        """
        package = self.require(package_id)
        updated = package.to_value().with_changes(**changes)
        self._check_storable(updated)
        package.apply(updated)
        self.session.flush()
        return package

    def delete(self, package_id: int) -> bool:
        """Delete a package by ID."""
        package = self.get_by_id(package_id)
        if package:
            self.session.delete(package)
            self.session.flush()
            return True
        return False

    def count_by_status(self) -> dict[str, int]:
        """Get package counts grouped by status."""
        stmt = select(Package.status, func.count(Package.id)).group_by(Package.status)
        return {status: count for status, count in self.session.execute(stmt).all()}

    def count_by_type(self) -> dict[str, int]:
        """Get package counts grouped by type."""
        stmt = select(Package.package_type, func.count(Package.id)).group_by(Package.package_type)
        return {package_type: count for package_type, count in self.session.execute(stmt).all()}

    def opd_names(self) -> list[str]:
        """Distinct OPD names, sorted."""
        stmt = select(Package.opd_name).distinct().order_by(Package.opd_name)
        return list(self.session.execute(stmt).scalars().all())


# =============================================================================
# Activity Log Repository
# =============================================================================


class ActivityLogRepository:
    """Repository for the activity log."""

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        action: ActivityAction | str,
        description: str | None = None,
        package_id: int | None = None,
    ) -> ActivityLog:
        """Append an activity entry."""
        entry = ActivityLog(
            action=ActivityAction(action).value,
            description=description,
            package_id=package_id,
        )
        self.session.add(entry)
        self.session.flush()
        return entry

    def recent(self, limit: int = 50, action: ActivityAction | str | None = None) -> Sequence[ActivityLog]:
        """Most recent entries first."""
        stmt = select(ActivityLog)
        if action:
            stmt = stmt.where(ActivityLog.action == ActivityAction(action).value)
        stmt = stmt.order_by(ActivityLog.id.desc()).limit(limit)
        return self.session.execute(stmt).scalars().all()
