"""
Exception hierarchy for Paketwatch.

Batch-fatal import problems derive from ImportFormatError; everything
row-local is repaired with defaults and never raised.
"""

from __future__ import annotations


class PaketwatchError(Exception):
    """Base class for all Paketwatch errors."""


# =============================================================================
# Import Errors
# =============================================================================


class ImportFormatError(PaketwatchError):
    """The whole import batch must be rejected."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message)


class EmptyFileError(ImportFormatError):
    """CSV text has no header row or no data rows."""


class UnknownFormatError(ImportFormatError):
    """CSV headers match neither the Tender nor the Swakelola export."""

    def __init__(self, message: str, headers: list[str] | None = None, source: str | None = None):
        self.headers = headers or []
        super().__init__(message, source=source)


# =============================================================================
# Package Input Errors
# =============================================================================


class PackageValidationError(PaketwatchError):
    """Manually entered package data is incomplete or malformed."""


class InvalidCoordinatesError(PackageValidationError):
    """Coordinates are not two finite numbers within lat/lon ranges."""


class PackageNotFoundError(PaketwatchError):
    """No package with the requested ID."""

    def __init__(self, package_id: int):
        self.package_id = package_id
        super().__init__(f"Package not found: {package_id}")
