"""CLI command modules."""

from . import db, ingest, logs, packages, report

__all__ = [
    "db",
    "ingest",
    "logs",
    "packages",
    "report",
]
