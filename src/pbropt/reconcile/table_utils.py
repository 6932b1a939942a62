"""Helpers for position-addressed raw tables.

A raw table is a list of rows: row 0 holds column headers, row 1 units,
rows 2+ data. Cells are whatever the CSV/Excel reader produced (strings,
numbers, None).
"""

import math
from numbers import Real
from typing import Any, Optional, Sequence

import numpy as np

__all__ = ['HEADER_ROWS', 'header_of', 'data_rows', 'cell', 'to_finite_float']

HEADER_ROWS = 2


def header_of(table: Sequence[Sequence[Any]]) -> Sequence[Any]:
    """Column header row, or an empty row for an empty table."""
    return table[0] if len(table) > 0 else []


def data_rows(table: Sequence[Sequence[Any]]) -> Sequence[Sequence[Any]]:
    """Data rows, skipping header and units."""
    return table[HEADER_ROWS:]


def cell(row: Sequence[Any], index: Optional[int]) -> Any:
    """Cell at ``index``, None for short rows or a missing column."""
    if index is None or index >= len(row):
        return None
    return row[index]


def to_finite_float(value: Any) -> Optional[float]:
    """Parse a numeric cell; None unless the result is a finite number.

    Accepts ints/floats (including numpy scalars) and numeric strings.
    A decimal comma is accepted when the string has no dot (``"1,25"``).
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (Real, np.number)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if "," in text and "." not in text:
            text = text.replace(",", ".", 1)
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    return number if math.isfinite(number) else None
