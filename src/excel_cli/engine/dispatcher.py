"""Command dispatch: Invocation -> query operation -> formatter -> exit code."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel

from excel_cli.config import RuntimeConfig
from excel_cli.contracts.common import ErrorCode, Failure
from excel_cli.contracts.responses import SheetData, UsageText
from excel_cli.engine.context import WorkbookContext
from excel_cli.engine.parser import Invocation, ParseResult, parse_args
from excel_cli.help.commands import TOOL_NAME, USAGE, build_manifest
from excel_cli.observe.events import EventEmitter
from excel_cli.output.formatter import OutputFormatter

EXIT_SUCCESS = 0
EXIT_UNHANDLED = 1
EXIT_INVALID_ARGUMENTS = 2

ARGUMENT_ERRORS = {
    ErrorCode.MISSING_ARGUMENT,
    ErrorCode.INVALID_ARGUMENT,
    ErrorCode.UNKNOWN_COMMAND,
}


def exit_code_for(failure: Failure | None) -> int:
    """0 on success, 2 for argument-class errors, 1 for everything else."""
    if failure is None:
        return EXIT_SUCCESS
    if failure.code in ARGUMENT_ERRORS:
        return EXIT_INVALID_ARGUMENTS
    return EXIT_UNHANDLED


def formatter_for(invocation: Invocation, config: RuntimeConfig) -> OutputFormatter:
    return OutputFormatter(
        config,
        mode=invocation.output,
        quiet=invocation.quiet,
        no_color=invocation.no_color,
    )


def execute(invocation: Invocation) -> BaseModel | Failure:
    """Run one query command against a freshly opened workbook.

    Any exception escaping the workbook layer becomes UNHANDLED_ERROR with
    the exception's own text.
    """
    from excel_cli.adapters import openpyxl_engine as engine

    inv = invocation
    try:
        with WorkbookContext(inv.file, formulas=inv.command == "formulas") as ctx:
            if inv.command == "info":
                return engine.list_sheets(ctx)
            if inv.command == "inspect":
                return engine.inspect_sheet(ctx, inv.sheet)
            if inv.command == "read":
                return engine.read_sheet(ctx, inv.sheet, range_expr=inv.range, header_row=inv.header_row)
            if inv.command == "cell":
                if inv.json_mode:
                    return engine.read_cell_info(ctx, inv.sheet, inv.cell)
                return engine.read_cell(ctx, inv.sheet, inv.cell)
            if inv.command == "search":
                return engine.search_sheet(ctx, inv.sheet, inv.term, regex=inv.regex)
            if inv.command == "formulas":
                return engine.list_formulas(ctx, inv.sheet)
    except Exception as e:
        return Failure(code=ErrorCode.UNHANDLED_ERROR, message=str(e) or type(e).__name__)
    return Failure(code=ErrorCode.UNKNOWN_COMMAND, message=f"Unknown command: {inv.command}")


def dispatch(invocation: Invocation, config: RuntimeConfig) -> int:
    """Execute a validated invocation, render it, and return the exit code."""
    out = formatter_for(invocation, config)
    command = invocation.command

    if command == "help":
        out.success(command, UsageText(usage=USAGE))
        return EXIT_SUCCESS
    if command == "tools":
        out.manifest(build_manifest(config.tool_version, config.schema_version))
        return EXIT_SUCCESS
    if command == "serve":
        from excel_cli.server.stdio import StdioServer

        StdioServer(config).run()
        return EXIT_SUCCESS

    events = EventEmitter(config.events)
    with events.command(command, file=invocation.file, sheet=invocation.sheet) as outcome:
        result = execute(invocation)
        failure = result if isinstance(result, Failure) else None
        outcome["success"] = failure is None
        outcome["errorCode"] = failure.code.value if failure else None

    if failure is not None:
        out.failure(command, failure)
    elif isinstance(result, SheetData):
        out.read(command, result, invocation.limit)
    else:
        out.success(command, result)
    return exit_code_for(failure)


def respond(parsed: ParseResult, config: RuntimeConfig) -> int:
    """Render a validation failure, or dispatch a valid invocation."""
    if parsed.error is None:
        return dispatch(parsed.invocation, config)
    out = formatter_for(parsed.invocation, config)
    hint = None
    if parsed.error.code is ErrorCode.UNKNOWN_COMMAND:
        hint = f"Use '{TOOL_NAME} help' for usage information."
    out.failure(parsed.invocation.command, parsed.error, hint=hint)
    return exit_code_for(parsed.error)


def run(argv: Sequence[str], config: RuntimeConfig) -> int:
    """Single-shot entry: parse ``argv``, validate, dispatch."""
    if not argv:
        OutputFormatter(config).success("help", UsageText(usage=USAGE))
        return EXIT_SUCCESS
    return respond(parse_args(argv), config)
