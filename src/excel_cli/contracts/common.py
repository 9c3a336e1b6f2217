"""Common Pydantic models: response envelope, failures, typed cell values."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = "1.0"

DataT = TypeVar("DataT")


class WorkbookCorruptError(Exception):
    """Raised when a workbook file cannot be parsed."""


class ContractModel(BaseModel):
    """Base for every model that is serialized to callers (camelCase keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorCode(str, Enum):
    """Machine-readable error categories carried by the envelope."""

    MISSING_ARGUMENT = "MISSING_ARGUMENT"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNKNOWN_COMMAND = "UNKNOWN_COMMAND"
    SHEET_NOT_FOUND = "SHEET_NOT_FOUND"
    UNHANDLED_ERROR = "UNHANDLED_ERROR"


class Failure(ContractModel):
    """Error arm of a query result."""

    code: ErrorCode
    message: str


class CellType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    TIMESPAN = "timespan"
    BLANK = "blank"
    ERROR = "error"


def format_number(value: float) -> str:
    """Shortest round-trip text in invariant form.

    Decimal exponents from -5 to 14 print in fixed notation with integral
    values losing their fraction (``3``, ``0.0001``). Anything outside uses
    ``d[.ddd]E+XX`` with at least two exponent digits (``1E+15``, ``1.5E-07``).
    """
    if not math.isfinite(value):
        return repr(value)
    if value == 0:
        return "0"
    dec = Decimal(repr(value)).normalize()
    sign, digits, exp = dec.as_tuple()
    exponent = exp + len(digits) - 1
    if -5 < exponent < 15:
        return format(dec, "f")
    mantissa = str(digits[0])
    if len(digits) > 1:
        mantissa += "." + "".join(str(d) for d in digits[1:])
    return f"{'-' if sign else ''}{mantissa}E{'-' if exponent < 0 else '+'}{abs(exponent):02d}"


def format_timespan(value: timedelta) -> str:
    """Render a duration as ``[-][d.]hh:mm:ss[.ffffff]``."""
    sign = "-" if value < timedelta(0) else ""
    value = abs(value)
    hours, rem = divmod(value.seconds, 3600)
    minutes, seconds = divmod(rem, 60)
    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if value.microseconds:
        text += f".{value.microseconds:06d}"
    if value.days:
        text = f"{value.days}.{text}"
    return sign + text


class CellValue(BaseModel):
    """A cell value tagged with its semantic type.

    Serializes to the bare JSON primitive so that row records and result
    lists carry plain values rather than tagged objects.
    """

    model_config = ConfigDict(frozen=True)

    type: CellType = CellType.BLANK
    value: Any = None

    def display(self) -> str:
        """Text as a spreadsheet user would see it (empty for blanks)."""
        if self.type is CellType.BLANK:
            return ""
        if self.type is CellType.BOOLEAN:
            return "TRUE" if self.value else "FALSE"
        if self.type is CellType.NUMBER:
            return format_number(self.value)
        if self.type is CellType.DATE:
            return self.value.isoformat(sep=" ")
        if self.type is CellType.TIMESPAN:
            return format_timespan(self.value)
        return str(self.value)

    def canonical(self) -> str | None:
        """Culture-independent text of the typed value, used for matching."""
        if self.value is None:
            return None
        if self.type is CellType.NUMBER:
            return format_number(self.value)
        if self.type is CellType.BOOLEAN:
            return "true" if self.value else "false"
        if self.type is CellType.DATE:
            return self.value.isoformat()
        if self.type is CellType.TIMESPAN:
            return format_timespan(self.value)
        return str(self.value)

    def json_value(self) -> Any:
        if isinstance(self.value, datetime):
            return self.value.isoformat()
        if isinstance(self.value, timedelta):
            return format_timespan(self.value)
        return self.value

    @model_serializer
    def _serialize(self) -> Any:
        return self.json_value()


class ResponseEnvelope(ContractModel, Generic[DataT]):
    """Standard response envelope returned by every command."""

    schema_version: str = SCHEMA_VERSION
    tool_version: str = "0.0.0"
    command: str = ""
    success: bool = True
    data: DataT | None = None
    warnings: list[str] = Field(default_factory=list)
    error_code: ErrorCode | None = None
    message: str | None = None
