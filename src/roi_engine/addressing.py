"""
ROI Engine Addressing

Conversion between A1 cell references and zero-based (row, col) pairs.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from openpyxl.utils import column_index_from_string, get_column_letter

from roi_engine.errors import AddressError


_A1_PATTERN = re.compile(r"^([A-Za-z]+)(\d+)$")

# openpyxl addresses columns A..ZZZ
MAX_COLUMN_INDEX = 18278


def column_to_index(letters: str) -> int:
    """Convert column letters ("A", "AN") to a zero-based column index."""
    if not letters or not letters.isalpha() or not letters.isascii():
        raise AddressError(f"Invalid column: {letters!r}", letters)
    try:
        return column_index_from_string(letters.upper()) - 1
    except ValueError as e:
        raise AddressError(f"Invalid column: {letters!r}", letters) from e


def index_to_column(col: int) -> str:
    """Convert a zero-based column index to column letters."""
    if col < 0 or col >= MAX_COLUMN_INDEX:
        raise AddressError(f"Column index out of range: {col}")
    return get_column_letter(col + 1)


def to_row_col(a1: str) -> tuple[int, int]:
    """
    Parse an A1 reference into a zero-based (row, col) pair.

    Args:
        a1: Reference such as "B12" (case-insensitive, surrounding blanks ignored)

    Returns:
        (row, col), both zero-based

    Raises:
        AddressError: on a non-letter column, non-digit row or row < 1
    """
    match = _A1_PATTERN.match(a1.strip())
    if not match:
        raise AddressError(f"Invalid A1 address: {a1!r}", a1)
    letters, digits = match.groups()
    row = int(digits) - 1
    if row < 0:
        raise AddressError(f"Invalid row in A1 address: {a1!r}", a1)
    return row, column_to_index(letters)


def to_a1(row: int, col: int) -> str:
    """Format a zero-based (row, col) pair as an upper-case A1 reference."""
    if row < 0:
        raise AddressError(f"Row index out of range: {row}")
    return f"{index_to_column(col)}{row + 1}"


def normalize(a1: str) -> str:
    """Canonical form of an A1 reference ("  b12 " -> "B12")."""
    return to_a1(*to_row_col(a1))


@dataclass(frozen=True)
class CellAddress:
    """Zero-based cell location on a named sheet."""
    sheet: str
    row: int
    col: int

    @classmethod
    def from_a1(cls, sheet: str, a1: str) -> "CellAddress":
        row, col = to_row_col(a1)
        return cls(sheet=sheet, row=row, col=col)

    @classmethod
    def parse(cls, ref: str) -> "CellAddress":
        """Parse a sheet-qualified reference such as "MODEL_INPUTS!B8"."""
        sheet, sep, a1 = ref.rpartition("!")
        if not sep or not sheet:
            raise AddressError(f"Missing sheet in address: {ref!r}", ref)
        return cls.from_a1(sheet.strip("'"), a1)

    @property
    def a1(self) -> str:
        return to_a1(self.row, self.col)

    @property
    def qualified(self) -> str:
        return f"{self.sheet}!{self.a1}"

    def __str__(self) -> str:
        return self.qualified
