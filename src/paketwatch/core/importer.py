"""
CSV import workflow.

Coordinates the import of one procurement export: decode → normalize → persist.
A malformed file is rejected before anything is written; after that, every
package is stored in its own savepoint so one bad record does not take the
rest of the batch down with it.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, TYPE_CHECKING

from charset_normalizer import from_bytes
from sqlalchemy.exc import SQLAlchemyError

from paketwatch.core.config.models import ActivityAction, CsvFormat, NormalizerConfig
from paketwatch.core.errors import PaketwatchError
from paketwatch.core.logging import get_contextual_logger
from paketwatch.core.normalize import normalize_csv
from paketwatch.persistence.models import utcnow
from paketwatch.persistence.repo import ActivityLogRepository, PackageRepository

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


# =============================================================================
# Decoding
# =============================================================================


def decode_csv_bytes(raw: bytes) -> str:
    """Decode raw CSV bytes using the best detected encoding.

    Falls back to UTF-8 with replacement characters when detection fails
    or the detected codec cannot decode the payload.
    """
    if not raw:
        return ""

    if raw.startswith(b"\xef\xbb\xbf"):
        return raw.decode("utf-8-sig", errors="replace")

    match = from_bytes(raw).best()
    if match is not None and match.encoding:
        try:
            return raw.decode(match.encoding)
        except (LookupError, UnicodeDecodeError):
            pass

    return raw.decode("utf-8", errors="replace")


def read_csv_file(path: Path | str) -> str:
    """Read a CSV file from disk and decode it to text."""
    return decode_csv_bytes(Path(path).read_bytes())


# =============================================================================
# Statistics
# =============================================================================


@dataclass
class ImportStats:
    """Statistics for one import batch."""

    source: str | None = None
    batch_id: str | None = None
    format: CsvFormat | None = None
    dry_run: bool = False

    rows_read: int = 0
    built: int = 0
    skipped_unnamed: int = 0
    imported: int = 0
    failed: int = 0

    imported_ids: list[int] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    started_at: datetime = field(default_factory=utcnow)
    finished_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        """Get import duration in seconds."""
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source": self.source,
            "batch_id": self.batch_id,
            "format": self.format.value if self.format else None,
            "dry_run": self.dry_run,
            "rows_read": self.rows_read,
            "built": self.built,
            "skipped_unnamed": self.skipped_unnamed,
            "imported": self.imported,
            "failed": self.failed,
            "imported_ids": list(self.imported_ids),
            "errors": list(self.errors),
            "duration_seconds": self.duration_seconds,
        }


# =============================================================================
# Importer
# =============================================================================


class PackageImporter:
    """Imports procurement exports into the package table.

    Usage:
        with get_session() as session:
            stats = PackageImporter(session, config.normalizer).import_file(path)
    """

    def __init__(
        self,
        session: Session,
        config: NormalizerConfig | None = None,
        *,
        rng: random.Random | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the importer.

        Args:
            session: Database session (caller owns the transaction)
            config: Normalizer defaults and column tables
            rng: Random source for fallback coordinates
            dry_run: If True, normalize only and write nothing
        """
        self.session = session
        self.config = config or NormalizerConfig()
        self.rng = rng
        self.dry_run = dry_run

        self.packages = PackageRepository(session)
        self.activity = ActivityLogRepository(session)

    def import_file(self, path: Path | str) -> ImportStats:
        """Read, decode and import a CSV file."""
        path = Path(path)
        return self.import_text(read_csv_file(path), source=path.name)

    def import_text(self, text: str, source: str | None = None) -> ImportStats:
        """Import CSV text.

        Raises:
            ImportFormatError: the file is empty or of an unknown shape.
                Nothing is written in that case.
        """
        stats = ImportStats(
            source=source,
            batch_id=uuid.uuid4().hex[:8],
            dry_run=self.dry_run,
        )
        log = get_contextual_logger(__name__, source=source, batch_id=stats.batch_id)

        batch = normalize_csv(text, config=self.config, rng=self.rng, source=source)

        stats.format = batch.format
        stats.rows_read = batch.rows_read
        stats.built = len(batch.packages)
        stats.skipped_unnamed = batch.skipped_unnamed

        log.info(
            "Starting import of %d package(s)%s",
            stats.built,
            " (dry run)" if self.dry_run else "",
            extra={"csv_format": batch.format.value},
        )

        if self.dry_run:
            stats.finished_at = utcnow()
            return stats

        for row_number, package in enumerate(batch.packages, start=1):
            try:
                with self.session.begin_nested():
                    row = self.packages.create(package, source=source)
            except (SQLAlchemyError, PaketwatchError) as e:
                stats.failed += 1
                stats.errors.append(f"{package.name}: {e}")
                log.warning(
                    "Failed to store package '%s': %s",
                    package.name,
                    e,
                    extra={"row": row_number},
                )
                continue

            stats.imported += 1
            stats.imported_ids.append(row.id)
            log.debug("Stored package", extra={"row": row_number, "package_id": row.id})

        self.activity.record(
            ActivityAction.IMPORT,
            description=(
                f"Imported {stats.imported} {batch.format.value} package(s) "
                f"from {source or 'CSV text'}"
            ),
        )

        stats.finished_at = utcnow()
        log.info(
            "Import finished: %d imported, %d failed, %d without name",
            stats.imported,
            stats.failed,
            stats.skipped_unnamed,
        )
        return stats
