"""
import_engine.csv_parser - Low-level CSV reading.

Responsibilities:
  • Opening the source (bytes, binary stream, or path)
  • BOM removal (UTF-8 / UTF-8-SIG)
  • Skipping blank rows
  • Lazily yielding rows as lists of string cells

Any failure to open, decode or parse the source raises SourceError, which
aborts the whole import.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, TextIO, Union

Source = Union[bytes, str, Path, BinaryIO]


class SourceError(Exception):
    """Raised when the CSV source cannot be opened or read."""


def open_source(source: Source) -> TextIO:
    """Return a text stream over source, decoded as UTF-8 with any BOM dropped."""
    try:
        if isinstance(source, bytes):
            raw: BinaryIO = io.BytesIO(source)
        elif isinstance(source, (str, Path)):
            raw = open(source, "rb")
        else:
            raw = source
        return io.TextIOWrapper(raw, encoding="utf-8-sig", newline="")
    except (OSError, TypeError, AttributeError) as exc:
        raise SourceError(f"cannot open CSV source: {exc}") from exc


def read_rows(
    stream: TextIO,
    delimiter: str = ",",
    quotechar: str = '"',
) -> Iterator[list[str]]:
    """
    Yield non-blank rows from stream.

    A row is blank when it has no cells, or a single empty cell.
    """
    reader = csv.reader(stream, delimiter=delimiter, quotechar=quotechar)
    try:
        for cells in reader:
            if not cells or (len(cells) == 1 and cells[0] == ""):
                continue
            yield cells
    except (csv.Error, UnicodeDecodeError, OSError) as exc:
        raise SourceError(f"CSV read error near line {reader.line_num}: {exc}") from exc


def read_header(rows: Iterator[list[str]]) -> Optional[list[str]]:
    """Consume and return the first row (whitespace-stripped), or None if empty."""
    try:
        header = next(rows)
    except StopIteration:
        return None
    return [h.strip() for h in header]
