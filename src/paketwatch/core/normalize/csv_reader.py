"""
Line-oriented CSV tokenizer for package exports.

The first line holds the headers. Each following non-blank line is one
record. A ``"`` anywhere in a field toggles quoting, so quoted text may
contain commas, and ``""`` inside quotes is a literal quote.
Records shorter than the header row are dropped, extra trailing fields
are ignored.
"""

from __future__ import annotations

from typing import Iterator


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _lines(text: str) -> list[str]:
    text = text.lstrip("\ufeff").strip()
    if not text:
        return []
    return _normalize_newlines(text).split("\n")


def _clean(value: str) -> str:
    return value.strip()


def split_line(line: str) -> list[str]:
    """Split one CSV line into raw fields.

    Every ``"`` toggles quoting, wherever it appears in a field, and is
    not kept. Inside quotes ``""`` is a literal quote. Commas only split
    outside quotes.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and line[i + 1 : i + 2] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields


def read_headers(text: str) -> list[str]:
    """Return the cleaned header row, or an empty list when headerless."""
    lines = _lines(text)
    if len(lines) < 2:
        return []
    return [_clean(h) for h in split_line(lines[0])]


def iter_rows(text: str) -> Iterator[dict[str, str]]:
    """Yield one ``{header: value}`` mapping per usable data line.

    Text with fewer than two lines yields nothing. Calling again with the
    same text starts over.
    """
    lines = _lines(text)
    if len(lines) < 2:
        return

    headers = [_clean(h) for h in split_line(lines[0])]

    for line in lines[1:]:
        if not line.strip():
            continue

        values = split_line(line)
        if len(values) < len(headers):
            continue

        yield {header: _clean(values[i]) for i, header in enumerate(headers)}


def read_rows(text: str) -> list[dict[str, str]]:
    """Eager variant of :func:`iter_rows`."""
    return list(iter_rows(text))
