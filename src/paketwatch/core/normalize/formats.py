"""CSV export shape detection."""

from __future__ import annotations

from typing import Iterable, Mapping

from paketwatch.core.config.models import CsvFormat, FormatColumns, default_formats

# Tender is checked before Swakelola
DETECTION_ORDER = (CsvFormat.TENDER, CsvFormat.SWAKELOLA)


def detect_format(
    headers: Iterable[str],
    formats: Mapping[CsvFormat, FormatColumns] | None = None,
) -> CsvFormat:
    """Identify the export shape from its header row.

    A shape matches when every one of its signature headers is present.
    Returns ``CsvFormat.UNKNOWN`` when no shape matches.
    """
    formats = formats if formats is not None else default_formats()
    header_set = {h.strip() for h in headers}

    for fmt in DETECTION_ORDER:
        columns = formats.get(fmt)
        if columns is not None and set(columns.signature) <= header_set:
            return fmt

    return CsvFormat.UNKNOWN
