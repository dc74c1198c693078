"""
Whole-file normalization.

Turns CSV text into packages, or rejects the batch as a whole when the
file is empty or its shape is not recognised.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from paketwatch.core.config.models import CsvFormat, NormalizerConfig
from paketwatch.core.errors import EmptyFileError, UnknownFormatError

from .canonical import ProcurementPackage, build_package
from .csv_reader import read_headers, read_rows
from .formats import detect_format

logger = logging.getLogger(__name__)

EMPTY_FILE_MESSAGE = "CSV file is empty or has no data rows."
UNKNOWN_FORMAT_MESSAGE = (
    "Unrecognised CSV format. Make sure the file is a valid Tender or Swakelola export."
)


@dataclass
class NormalizedBatch:
    """Result of normalizing one CSV file."""

    format: CsvFormat
    headers: list[str]
    packages: list[ProcurementPackage] = field(default_factory=list)
    rows_read: int = 0
    skipped_unnamed: int = 0


def normalize_csv(
    text: str,
    *,
    config: NormalizerConfig | None = None,
    rng: random.Random | None = None,
    source: str | None = None,
) -> NormalizedBatch:
    """Normalize CSV text into procurement packages in source order.

    Args:
        text: Raw CSV text
        config: Normalizer defaults and column tables
        rng: Random source for fallback coordinates
        source: Name of the file, for error messages

    Raises:
        EmptyFileError: no usable data rows, checked before the format
        UnknownFormatError: headers match no known export shape
    """
    config = config or NormalizerConfig()

    rows = read_rows(text)
    if not rows:
        raise EmptyFileError(EMPTY_FILE_MESSAGE, source=source)

    headers = read_headers(text)
    fmt = detect_format(headers, config.formats)
    if fmt is CsvFormat.UNKNOWN:
        raise UnknownFormatError(UNKNOWN_FORMAT_MESSAGE, headers=headers, source=source)

    batch = NormalizedBatch(format=fmt, headers=headers)

    for index, row in enumerate(rows):
        batch.rows_read += 1
        package = build_package(row, fmt, config=config, rng=rng, index=index)
        if package is None:
            batch.skipped_unnamed += 1
            continue
        batch.packages.append(package)

    extra = {"csv_format": fmt.value}
    if source:
        extra["source"] = source

    logger.info(
        "Normalized %d package(s) from %d row(s) as %s (%d without name)",
        len(batch.packages),
        batch.rows_read,
        fmt.value,
        batch.skipped_unnamed,
        extra=extra,
    )

    return batch
