"""Command-specific result models."""

from __future__ import annotations

from pydantic import Field

from excel_cli.contracts.common import CellType, CellValue, ContractModel

RowRecord = dict[str, CellValue]


class SheetList(ContractModel):
    """Result of ``info``."""

    sheets: list[str] = Field(default_factory=list)


class CellSpan(ContractModel):
    first: str = ""
    last: str = ""


class SheetDimensions(ContractModel):
    """Result of ``inspect``: the used range of one sheet."""

    sheet: str
    rows: int = 0
    columns: int = 0
    range: CellSpan = Field(default_factory=CellSpan)


class SheetData(ContractModel):
    """Normalized headers and every record below the header row."""

    headers: list[str] = Field(default_factory=list)
    rows: list[RowRecord] = Field(default_factory=list)


class ReadResult(ContractModel):
    """JSON payload of ``read``; ``count`` is always the untruncated total."""

    headers: list[str] = Field(default_factory=list)
    rows: list[RowRecord] = Field(default_factory=list)
    count: int = 0
    displayed: int = 0


class ReadSummary(ContractModel):
    """First NDJSON line of ``read``; rows follow one per line."""

    count: int = 0
    displayed: int = 0


class CellReading(ContractModel):
    cell: str
    value: CellValue = Field(default_factory=CellValue)


class CellInfo(ContractModel):
    """Single cell with its type tag and raw text."""

    cell: str
    value: CellValue = Field(default_factory=CellValue)
    type: CellType = CellType.BLANK
    raw: str | None = None


class SearchHit(ContractModel):
    cell: str
    value: CellValue


class SearchResult(ContractModel):
    results: list[SearchHit] = Field(default_factory=list)
    count: int = 0


class FormulaEntry(ContractModel):
    cell: str
    formula: str
    value: CellValue = Field(default_factory=CellValue)


class FormulaList(ContractModel):
    formulas: list[FormulaEntry] = Field(default_factory=list)
    count: int = 0


class UsageText(ContractModel):
    usage: str
