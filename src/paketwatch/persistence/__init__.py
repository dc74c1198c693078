"""Database persistence layer."""

from .db import dispose_engines, get_engine, get_session, init_db
from .models import ActivityLog, Base, Package
from .repo import ActivityLogRepository, PackageRepository

__all__ = [
    "dispose_engines",
    "get_engine",
    "get_session",
    "init_db",
    "ActivityLog",
    "Base",
    "Package",
    "ActivityLogRepository",
    "PackageRepository",
]
