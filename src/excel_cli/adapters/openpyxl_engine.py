"""openpyxl-based read operations: sheets, dimensions, records, cells, search, formulas."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, datetime, time, timedelta
from typing import Any

from openpyxl.cell.cell import Cell
from openpyxl.worksheet.worksheet import Worksheet

from excel_cli.contracts.common import CellType, CellValue, ErrorCode, Failure
from excel_cli.contracts.responses import (
    CellInfo,
    CellReading,
    CellSpan,
    FormulaEntry,
    FormulaList,
    SearchHit,
    SearchResult,
    SheetData,
    SheetDimensions,
    SheetList,
)
from excel_cli.engine.context import WorkbookContext
from excel_cli.engine.headers import build_records, normalize_headers
from excel_cli.engine.refs import Bounds, address_of, parse_address, resolve_range


# ---------------------------------------------------------------------------
# cell mapping
# ---------------------------------------------------------------------------
def map_cell(cell: Any) -> CellValue:
    """Map an openpyxl cell to a typed CellValue.

    Error cells are checked first: openpyxl stores ``#DIV/0!`` and friends
    as strings with data_type ``e``.
    """
    value = cell.value
    if getattr(cell, "data_type", None) == "e":
        return CellValue(type=CellType.ERROR, value=str(value))
    if value is None or value == "":
        return CellValue(type=CellType.BLANK)
    if isinstance(value, bool):
        return CellValue(type=CellType.BOOLEAN, value=value)
    if isinstance(value, (int, float)):
        return CellValue(type=CellType.NUMBER, value=float(value))
    if isinstance(value, datetime):
        return CellValue(type=CellType.DATE, value=value)
    if isinstance(value, date):
        return CellValue(type=CellType.DATE, value=datetime.combine(value, time()))
    if isinstance(value, timedelta):
        return CellValue(type=CellType.TIMESPAN, value=value)
    if isinstance(value, time):
        elapsed = timedelta(
            hours=value.hour, minutes=value.minute,
            seconds=value.second, microseconds=value.microsecond,
        )
        return CellValue(type=CellType.TIMESPAN, value=elapsed)
    return CellValue(type=CellType.STRING, value=str(value))


def used_bounds(ws: Worksheet) -> Bounds | None:
    """Smallest rectangle holding every non-blank cell, or None for an empty sheet."""
    min_row = min_col = max_row = max_col = 0
    found = False
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None or cell.value == "":
                continue
            if not found:
                min_row, min_col, max_row, max_col = cell.row, cell.column, cell.row, cell.column
                found = True
                continue
            min_row = min(min_row, cell.row)
            min_col = min(min_col, cell.column)
            max_row = max(max_row, cell.row)
            max_col = max(max_col, cell.column)
    if not found:
        return None
    return min_row, min_col, max_row, max_col


def _iter_used(ws: Worksheet, bounds: Bounds):
    min_row, min_col, max_row, max_col = bounds
    return ws.iter_rows(min_row=min_row, min_col=min_col, max_row=max_row, max_col=max_col)


def _is_blank_row(row: tuple[Cell, ...]) -> bool:
    return all(cell.value is None or cell.value == "" for cell in row)


# ---------------------------------------------------------------------------
# info / inspect
# ---------------------------------------------------------------------------
def list_sheets(ctx: WorkbookContext) -> SheetList:
    return SheetList(sheets=ctx.sheet_names())


def inspect_sheet(ctx: WorkbookContext, sheet_name: str) -> SheetDimensions | Failure:
    """Used-range dimensions; an empty sheet reports zeros and empty addresses."""
    ws = ctx.resolve_sheet(sheet_name)
    if isinstance(ws, Failure):
        return ws
    bounds = used_bounds(ws)
    if bounds is None:
        return SheetDimensions(sheet=ws.title)
    min_row, min_col, max_row, max_col = bounds
    return SheetDimensions(
        sheet=ws.title,
        rows=max_row - min_row + 1,
        columns=max_col - min_col + 1,
        range=CellSpan(first=address_of(min_row, min_col), last=address_of(max_row, max_col)),
    )


# ---------------------------------------------------------------------------
# read
# ---------------------------------------------------------------------------
def read_sheet(
    ctx: WorkbookContext,
    sheet_name: str,
    *,
    range_expr: str | None = None,
    header_row: int | None = None,
) -> SheetData | Failure:
    """Read every record of a sheet (or of ``range_expr``) below its header row.

    Without ``header_row`` the first used row of the range is the header.
    With it, that absolute row supplies the names (restricted to the range's
    columns) and only used rows strictly below it become records. No row
    limit is applied here.
    """
    ws = ctx.resolve_sheet(sheet_name)
    if isinstance(ws, Failure):
        return ws

    bounds = used_bounds(ws)
    if range_expr:
        try:
            bounds = resolve_range(range_expr, bounds)
        except ValueError as e:
            return Failure(code=ErrorCode.INVALID_ARGUMENT, message=str(e))
    if bounds is None:
        return SheetData()

    rows = [row for row in _iter_used(ws, bounds) if not _is_blank_row(row)]
    if not rows:
        return SheetData()

    _, min_col, _, max_col = bounds
    if header_row is None:
        header_cells = rows[0]
        data_rows = rows[1:]
    else:
        header_cells = next(ws.iter_rows(
            min_row=header_row, max_row=header_row, min_col=min_col, max_col=max_col,
        ))
        data_rows = [row for row in rows if row[0].row > header_row]

    headers = normalize_headers([map_cell(c).display() for c in header_cells], first_column=min_col)
    records = build_records(headers, ([map_cell(c) for c in row] for row in data_rows))
    return SheetData(headers=headers, rows=records)


# ---------------------------------------------------------------------------
# cell
# ---------------------------------------------------------------------------
def _locate(ctx: WorkbookContext, sheet_name: str, address: str) -> Cell | Failure:
    ws = ctx.resolve_sheet(sheet_name)
    if isinstance(ws, Failure):
        return ws
    try:
        coordinate = parse_address(address)
    except ValueError as e:
        return Failure(code=ErrorCode.INVALID_ARGUMENT, message=str(e))
    return ws[coordinate]


def read_cell(ctx: WorkbookContext, sheet_name: str, address: str) -> CellReading | Failure:
    cell = _locate(ctx, sheet_name, address)
    if isinstance(cell, Failure):
        return cell
    return CellReading(cell=cell.coordinate, value=map_cell(cell))


def read_cell_info(ctx: WorkbookContext, sheet_name: str, address: str) -> CellInfo | Failure:
    """Value, type tag and raw text of one cell. Blank cells have no raw text."""
    cell = _locate(ctx, sheet_name, address)
    if isinstance(cell, Failure):
        return cell
    value = map_cell(cell)
    raw = None if value.type is CellType.BLANK else value.display()
    return CellInfo(cell=cell.coordinate, value=value, type=value.type, raw=raw)


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------
def _matcher(term: str, regex: bool) -> Callable[[str | None], bool] | Failure:
    if regex:
        try:
            pattern = re.compile(term, re.IGNORECASE)
        except re.error as e:
            return Failure(code=ErrorCode.INVALID_ARGUMENT, message=f"Invalid regex pattern: {e}")

        def matches(text: str | None) -> bool:
            return bool(text) and pattern.match(text) is not None

        return matches

    needle = term.casefold()

    def contains(text: str | None) -> bool:
        return bool(text) and needle in text.casefold()

    return contains


def search_sheet(
    ctx: WorkbookContext,
    sheet_name: str,
    term: str,
    *,
    regex: bool = False,
) -> SearchResult | Failure:
    """Find used cells whose display or canonical text matches ``term``.

    Plain terms match as case-insensitive substrings. With ``regex`` the
    term is a case-insensitive pattern applied with ``re.match``, so it is
    anchored at the start of the text: ``Sales`` does not hit "Total Sales"
    and ``Total.*`` skips "Subtotal". Use ``.*Sales`` to match anywhere.
    Hits come back in row-major order.
    """
    ws = ctx.resolve_sheet(sheet_name)
    if isinstance(ws, Failure):
        return ws
    matches = _matcher(term, regex)
    if isinstance(matches, Failure):
        return matches

    hits: list[SearchHit] = []
    bounds = used_bounds(ws)
    if bounds is None:
        return SearchResult()
    for row in _iter_used(ws, bounds):
        for cell in row:
            value = map_cell(cell)
            if value.type is CellType.BLANK:
                continue
            if matches(value.display()) or matches(value.canonical()):
                hits.append(SearchHit(cell=cell.coordinate, value=value))
    return SearchResult(results=hits, count=len(hits))


# ---------------------------------------------------------------------------
# formulas
# ---------------------------------------------------------------------------
def formula_text(cell: Any) -> str | None:
    """Formula of a cell without its leading ``=``, or None for plain values."""
    if getattr(cell, "data_type", None) != "f":
        return None
    value = cell.value
    text = getattr(value, "text", None) or str(value)
    return text[1:] if text.startswith("=") else text


def list_formulas(ctx: WorkbookContext, sheet_name: str) -> FormulaList | Failure:
    """Every formula cell with its text and last-computed value.

    Requires a context opened with ``formulas=True``.
    """
    ws = ctx.resolve_sheet(sheet_name)
    if isinstance(ws, Failure):
        return ws
    formula_ws = ctx.formula_sheet(ws.title)

    entries: list[FormulaEntry] = []
    bounds = used_bounds(formula_ws)
    if bounds is None:
        return FormulaList()
    for row in _iter_used(formula_ws, bounds):
        for cell in row:
            text = formula_text(cell)
            if text is None:
                continue
            entries.append(FormulaEntry(
                cell=cell.coordinate,
                formula=text,
                value=map_cell(ws[cell.coordinate]),
            ))
    return FormulaList(formulas=entries, count=len(entries))
