"""Render command results: rich tables on stderr, or JSON on stdout.

Exactly one view is produced per invocation. Human output goes to the
diagnostic stream and disappears under ``--quiet``; machine output goes to
stdout as a pretty envelope, a compact envelope, or (for ``read``) NDJSON.
"""

from __future__ import annotations

import sys
from datetime import datetime, timedelta
from typing import Any

import orjson
from pydantic import BaseModel
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from excel_cli.config import RuntimeConfig
from excel_cli.contracts.common import (
    CellType,
    CellValue,
    Failure,
    ResponseEnvelope,
    format_timespan,
)
from excel_cli.contracts.responses import (
    CellReading,
    FormulaList,
    ReadResult,
    ReadSummary,
    SearchResult,
    SheetData,
    SheetDimensions,
    SheetList,
    UsageText,
)
from excel_cli.engine.parser import OutputMode


def dumps(data: Any, *, pretty: bool = False) -> str:
    option = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(data, option=option).decode()


def envelope_dict(envelope: ResponseEnvelope) -> dict[str, Any]:
    return envelope.model_dump(mode="json", by_alias=True)


def format_value(value: CellValue) -> str:
    """Rich-markup rendering of one value for human tables."""
    if value.type is CellType.BLANK or value.value is None:
        return "[dim]null[/]"
    if value.type is CellType.NUMBER:
        return f"{value.value:,.2f}"
    if isinstance(value.value, datetime):
        return value.value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value.value, timedelta):
        return format_timespan(value.value)
    if value.type is CellType.BOOLEAN:
        return "[green]true[/]" if value.value else "[red]false[/]"
    return escape(str(value.value))


def truncation_warning(displayed: int, total: int) -> str:
    return f"Showing {displayed} of {total} rows (use --limit to show more)"


class OutputFormatter:
    """Writes one invocation's result in the requested mode."""

    def __init__(
        self,
        config: RuntimeConfig,
        *,
        mode: OutputMode = OutputMode.HUMAN,
        quiet: bool = False,
        no_color: bool = False,
    ) -> None:
        self.config = config
        self.mode = mode
        self.quiet = quiet
        self.no_color = no_color or config.no_color

    @property
    def json_mode(self) -> bool:
        return self.mode is not OutputMode.HUMAN

    def console(self) -> Console:
        # Resolved per call so a swapped sys.stderr (tests, serve) is honored.
        return Console(stderr=True, no_color=self.no_color, highlight=False, soft_wrap=True)

    # -- envelopes ---------------------------------------------------------
    def envelope(
        self,
        command: str,
        data: BaseModel | None = None,
        *,
        warnings: list[str] | None = None,
        failure: Failure | None = None,
    ) -> ResponseEnvelope:
        if failure is not None:
            return ResponseEnvelope(
                tool_version=self.config.tool_version,
                schema_version=self.config.schema_version,
                command=command,
                success=False,
                error_code=failure.code,
                message=failure.message,
            )
        return ResponseEnvelope(
            tool_version=self.config.tool_version,
            schema_version=self.config.schema_version,
            command=command,
            success=True,
            data=data,
            warnings=warnings or [],
        )

    def write_line(self, text: str) -> None:
        sys.stdout.write(text + "\n")
        sys.stdout.flush()

    def write_envelope(self, envelope: ResponseEnvelope) -> None:
        self.write_line(dumps(envelope_dict(envelope), pretty=self.mode is OutputMode.PRETTY))

    # -- success -----------------------------------------------------------
    def success(self, command: str, data: BaseModel) -> None:
        """Render any non-``read`` result."""
        if self.json_mode:
            self.write_envelope(self.envelope(command, data))
            return
        if self.quiet:
            return
        if isinstance(data, SheetList):
            self._human_sheets(data)
        elif isinstance(data, SheetDimensions):
            self._human_dimensions(data)
        elif isinstance(data, CellReading):
            self.print_success(f"Cell {data.cell}: {format_value(data.value)}")
        elif isinstance(data, SearchResult):
            self._human_search(data)
        elif isinstance(data, FormulaList):
            self._human_formulas(data)
        elif isinstance(data, UsageText):
            self.console().print(data.usage, markup=False)

    def read(self, command: str, data: SheetData, limit: int | None = None) -> None:
        """Render ``read`` output; ``limit`` truncates only what is shown."""
        total = len(data.rows)
        shown = data.rows if limit is None else data.rows[:limit]
        warnings: list[str] = []
        if limit is not None and total > limit:
            warnings.append(truncation_warning(len(shown), total))

        if self.mode is OutputMode.NDJSON:
            summary = ReadSummary(count=total, displayed=len(shown))
            self.write_envelope(self.envelope(command, summary, warnings=warnings))
            for record in shown:
                self.write_line(dumps({k: v.json_value() for k, v in record.items()}))
            return
        if self.json_mode:
            result = ReadResult(headers=data.headers, rows=shown, count=total, displayed=len(shown))
            self.write_envelope(self.envelope(command, result, warnings=warnings))
            return
        if self.quiet:
            return

        con = self.console()
        if not data.rows:
            con.print("[yellow]No data found[/]")
            return
        table = Table(box=box.ROUNDED)
        for header in data.headers:
            table.add_column(escape(header), header_style="bold")
        for record in shown:
            table.add_row(*(format_value(record.get(h, CellValue())) for h in data.headers))
        con.print(table)
        if warnings:
            con.print(f"\n[yellow]{warnings[0]}[/]")
        else:
            con.print(f"\n[green]Total: {total} row(s)[/]")

    def manifest(self, data: BaseModel) -> None:
        """The tool manifest is bare JSON, never enveloped."""
        pretty = self.mode in (OutputMode.HUMAN, OutputMode.PRETTY)
        self.write_line(dumps(data.model_dump(mode="json", by_alias=True), pretty=pretty))

    # -- failures ----------------------------------------------------------
    def failure(self, command: str, failure: Failure, *, hint: str | None = None) -> None:
        if self.json_mode:
            self.write_envelope(self.envelope(command, failure=failure))
            return
        if self.quiet:
            return
        con = self.console()
        con.print(f"[red]Error:[/] {escape(failure.message)}")
        if hint:
            con.print(escape(hint))

    def print_success(self, message: str) -> None:
        if self.quiet:
            return
        self.console().print(f"[green]{message}[/]")

    # -- human views -------------------------------------------------------
    def _human_sheets(self, data: SheetList) -> None:
        con = self.console()
        table = Table()
        table.add_column("Sheet Name", header_style="bold", justify="center")
        for name in data.sheets:
            table.add_row(escape(name))
        con.print(table)
        con.print(f"\n[green]Found {len(data.sheets)} sheet(s)[/]")

    def _human_dimensions(self, data: SheetDimensions) -> None:
        table = Table(box=box.ROUNDED)
        table.add_column("Property", header_style="bold")
        table.add_column("Value", header_style="bold")
        table.add_row("Sheet Name", escape(data.sheet))
        table.add_row("Rows", str(data.rows))
        table.add_row("Columns", str(data.columns))
        table.add_row("First Cell", data.range.first)
        table.add_row("Last Cell", data.range.last)
        self.console().print(table)

    def _human_search(self, data: SearchResult) -> None:
        con = self.console()
        if not data.results:
            con.print("[yellow]No matches found[/]")
            return
        table = Table()
        table.add_column("Cell", header_style="bold")
        table.add_column("Value", header_style="bold")
        for hit in data.results:
            table.add_row(hit.cell, format_value(hit.value))
        con.print(table)
        con.print(f"\n[green]Found {data.count} match(es)[/]")

    def _human_formulas(self, data: FormulaList) -> None:
        con = self.console()
        if not data.formulas:
            con.print("[yellow]No formulas found[/]")
            return
        table = Table()
        table.add_column("Cell", header_style="bold")
        table.add_column("Formula", header_style="bold")
        table.add_column("Value", header_style="bold")
        for entry in data.formulas:
            table.add_row(entry.cell, f"[cyan]{escape(entry.formula)}[/]", format_value(entry.value))
        con.print(table)
        con.print(f"\n[green]Found {data.count} formula(s)[/]")
