"""
app/parsing/row_parser.py

Splits raw dataset text into header cells and typed raw rows.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from typing import Iterator

from app.domain.policy_record import RawRow
from app.mappers.column_mapper import CANONICAL_FIELDS, ColumnMapping

logger = logging.getLogger(__name__)

DELIMITER = ","
QUOTE_CHAR = '"'


def split_cells(raw_line: str) -> list[str]:
    """
    Split one line into stripped cells.

    Quoted cells may contain the delimiter; surrounding quotes and
    whitespace are removed from every cell.
    """

    try:
        cells = next(csv.reader([raw_line], delimiter=DELIMITER, quotechar=QUOTE_CHAR))
    except (csv.Error, StopIteration):
        cells = raw_line.split(DELIMITER)
    return [cell.strip().strip(QUOTE_CHAR).strip() for cell in cells]


@dataclass(frozen=True)
class SplitText:
    """
    Header cells plus the remaining non-blank lines with their 1-based
    line numbers.
    """

    headers: list[str]
    lines: list[tuple[int, str]]


def split_text(text: str) -> SplitText:
    """
    Separate the header row from data lines, dropping blank lines.
    """

    numbered = [
        (number, line)
        for number, line in enumerate(text.splitlines(), start=1)
        if line.strip()
    ]
    if not numbered:
        return SplitText(headers=[], lines=[])
    _, header_line = numbered[0]
    return SplitText(headers=split_cells(header_line), lines=numbered[1:])


class RowParser:
    """
    Turns one raw line into a :class:`RawRow` keyed by canonical field.
    """

    def __init__(self, mapping: ColumnMapping) -> None:
        self._mapping = mapping
        self._header_count = len(mapping.source_headers)

    def parse(self, raw_line: str, *, line_number: int = 0) -> RawRow | None:
        """
        Return the mapped row, or ``None`` when the line has fewer cells
        than the header.
        """

        cells = split_cells(raw_line)
        if len(cells) < self._header_count:
            logger.debug(
                "Skipping line %d: insufficient values (%d < %d)",
                line_number, len(cells), self._header_count,
            )
            return None

        values = {
            field_name: cells[position]
            for field_name, position in self._mapping.field_to_position.items()
        }
        for field_name in CANONICAL_FIELDS:
            values.setdefault(field_name, "")
        return RawRow(line_number=line_number, values=values)

    def iter_rows(self, lines: list[tuple[int, str]]) -> Iterator[RawRow | None]:
        """Parse every numbered line, yielding ``None`` for skipped ones."""
        for line_number, raw_line in lines:
            yield self.parse(raw_line, line_number=line_number)
