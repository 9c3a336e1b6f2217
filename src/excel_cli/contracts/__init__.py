"""Pydantic models for requests, responses, and the envelope."""

from excel_cli.contracts.common import (
    CellType,
    CellValue,
    ErrorCode,
    Failure,
    ResponseEnvelope,
    WorkbookCorruptError,
)
from excel_cli.contracts.requests import ServeRequest
from excel_cli.contracts.responses import (
    CellInfo,
    CellReading,
    FormulaEntry,
    FormulaList,
    ReadResult,
    ReadSummary,
    SearchHit,
    SearchResult,
    SheetData,
    SheetDimensions,
    SheetList,
)

__all__ = [
    "CellInfo",
    "CellReading",
    "CellType",
    "CellValue",
    "ErrorCode",
    "Failure",
    "FormulaEntry",
    "FormulaList",
    "ReadResult",
    "ReadSummary",
    "ResponseEnvelope",
    "SearchHit",
    "SearchResult",
    "ServeRequest",
    "SheetData",
    "SheetDimensions",
    "SheetList",
    "WorkbookCorruptError",
]
