"""WorkbookContext: opens a workbook for one request and resolves sheets."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from excel_cli.contracts.common import ErrorCode, Failure, WorkbookCorruptError


def _load(path: Path, *, data_only: bool) -> Workbook:
    try:
        return openpyxl.load_workbook(str(path), data_only=data_only)
    except Exception as e:
        raise WorkbookCorruptError(f"Cannot open workbook {path}: {e}") from e


class WorkbookContext:
    """Wraps the openpyxl views of a workbook for the duration of one request.

    ``values`` holds last-computed cell values. ``formulas`` holds formula
    text and is only loaded when asked for, since it doubles the load cost.
    Use as a context manager so the handles are released on every path.
    """

    def __init__(self, path: str | Path, *, formulas: bool = False) -> None:
        self.path = Path(path).resolve()
        if not self.path.exists():
            raise FileNotFoundError(f"Workbook not found: {self.path}")
        self.values: Workbook = _load(self.path, data_only=True)
        self.formulas: Workbook | None = None
        if formulas:
            try:
                self.formulas = _load(self.path, data_only=False)
            except Exception:
                self.values.close()
                raise

    def __enter__(self) -> "WorkbookContext":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def sheet_names(self) -> list[str]:
        return [ws.title for ws in self.values.worksheets]

    def resolve_sheet(self, name: str) -> Worksheet | Failure:
        """Case-insensitive exact match against the workbook's worksheets."""
        wanted = name.casefold()
        for ws in self.values.worksheets:
            if ws.title.casefold() == wanted:
                return ws
        available = ", ".join(self.sheet_names())
        return Failure(
            code=ErrorCode.SHEET_NOT_FOUND,
            message=f"Sheet '{name}' not found. Available sheets: {available}",
        )

    def formula_sheet(self, title: str) -> Worksheet:
        if self.formulas is None:
            raise RuntimeError("Workbook was opened without formulas")
        return self.formulas[title]

    def close(self) -> None:
        self.values.close()
        if self.formulas is not None:
            self.formulas.close()
