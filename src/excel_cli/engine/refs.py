"""A1-style address and range parsing."""

from __future__ import annotations

from openpyxl.utils.cell import (
    column_index_from_string,
    coordinate_from_string,
    get_column_letter,
    range_boundaries,
)
from openpyxl.utils.exceptions import CellCoordinatesException

# (min_row, min_col, max_row, max_col), 1-based and inclusive
Bounds = tuple[int, int, int, int]


def parse_address(address: str) -> str:
    """Normalize a single cell address (``b5``, ``$B$5``) to ``B5``.

    Raises ValueError for anything that is not one cell.
    """
    try:
        letters, row = coordinate_from_string(address.strip().replace("$", "").upper())
        column_index_from_string(letters)
    except (CellCoordinatesException, ValueError) as e:
        raise ValueError(f"Invalid cell address: '{address}'") from e
    return f"{letters}{row}"


def parse_range(expr: str) -> tuple[int | None, int | None, int | None, int | None]:
    """Parse ``A1:C10``, ``B2``, ``A:C`` or ``2:5`` into optional bounds.

    Returns (min_row, min_col, max_row, max_col); open axes are None.
    """
    text = expr.strip().replace("$", "").upper()
    if not text:
        raise ValueError(f"Invalid range: '{expr}'")
    try:
        min_col, min_row, max_col, max_row = range_boundaries(text)
    except ValueError as e:
        raise ValueError(f"Invalid range: '{expr}'") from e
    bounds = (min_row, min_col, max_row, max_col)
    if all(b is None for b in bounds) or any(b is not None and b < 1 for b in bounds):
        raise ValueError(f"Invalid range: '{expr}'")
    if min_row is not None and max_row is not None and min_row > max_row:
        min_row, max_row = max_row, min_row
    if min_col is not None and max_col is not None and min_col > max_col:
        min_col, max_col = max_col, min_col
    return min_row, min_col, max_row, max_col


def resolve_range(expr: str, used: Bounds | None) -> Bounds | None:
    """Resolve a range expression, filling open axes from the used range."""
    min_row, min_col, max_row, max_col = parse_range(expr)
    if None in (min_row, min_col, max_row, max_col):
        if used is None:
            return None
        u_min_row, u_min_col, u_max_row, u_max_col = used
        min_row = u_min_row if min_row is None else min_row
        min_col = u_min_col if min_col is None else min_col
        max_row = u_max_row if max_row is None else max_row
        max_col = u_max_col if max_col is None else max_col
    return min_row, min_col, max_row, max_col


def address_of(row: int, column: int) -> str:
    return f"{get_column_letter(column)}{row}"
