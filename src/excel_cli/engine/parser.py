"""Argument parsing: flat argv -> validated Invocation.

Parsing is two passes over everything after the command name. The first
pass only collects output-mode flags, wherever they appear, so that even
an early validation failure is rendered in the requested mode. The second
pass consumes value-bearing flags and keeps every other token, including
unrecognized ``--flags``, as a positional in order.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, Field

from excel_cli.contracts.common import ErrorCode, Failure
from excel_cli.engine.refs import parse_address, parse_range
from excel_cli.help.commands import ARITY, DEFAULT_ARITY, HELP_ALIASES, META_COMMANDS, QUERY_COMMANDS


class OutputMode(str, Enum):
    HUMAN = "human"
    PRETTY = "json"
    COMPACT = "json-compact"
    NDJSON = "ndjson"


SWITCHES = {
    "--json": "json",
    "-j": "json",
    "--json-compact": "json_compact",
    "--ndjson": "ndjson",
    "--quiet": "quiet",
    "-q": "quiet",
    "--no-color": "no_color",
    "--regex": "regex",
}

VALUE_FLAGS = {"--range", "--limit", "--header-row"}

_INTEGER = re.compile(r"\s*[+-]?\d+\s*")


class Invocation(BaseModel):
    """A parsed command line (or translated loop request)."""

    command: str = ""
    file: str | None = None
    sheet: str | None = None
    cell: str | None = None
    term: str | None = None
    range: str | None = None
    limit: int | None = None
    header_row: int | None = None
    regex: bool = False
    quiet: bool = False
    no_color: bool = False
    output: OutputMode = OutputMode.HUMAN
    positionals: list[str] = Field(default_factory=list)

    @property
    def json_mode(self) -> bool:
        return self.output is not OutputMode.HUMAN


class ParseResult(BaseModel):
    invocation: Invocation
    error: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _output_mode(seen: set[str]) -> OutputMode:
    if "ndjson" in seen:
        return OutputMode.NDJSON
    if "json_compact" in seen:
        return OutputMode.COMPACT
    if "json" in seen:
        return OutputMode.PRETTY
    return OutputMode.HUMAN


def _invalid(flag: str, raw: object) -> Failure:
    return Failure(code=ErrorCode.INVALID_ARGUMENT, message=f"Invalid value for {flag}: '{raw}'")


def _parse_int(flag: str, raw: str) -> int | Failure:
    if not _INTEGER.fullmatch(raw):
        return _invalid(flag, raw)
    return int(raw)


def _missing_message(names: Sequence[str]) -> str:
    if len(names) == 1:
        return f"Missing required argument: {names[0]}"
    if len(names) == 2:
        return f"Missing required arguments: {names[0]} and {names[1]}"
    return f"Missing required arguments: {', '.join(names[:-1])}, and {names[-1]}"


def normalize_command(name: str) -> str:
    command = name.strip().lower()
    return "help" if command in HELP_ALIASES else command


def validate(inv: Invocation) -> Failure | None:
    """Check a fully populated invocation; normalizes its cell address in place.

    Shared by argv parsing and by loop-mode requests, which arrive already
    typed and skip the token scan.
    """
    if inv.range is not None:
        try:
            parse_range(inv.range)
        except ValueError:
            return _invalid("--range", inv.range)
    if inv.limit is not None and inv.limit < 0:
        return _invalid("--limit", inv.limit)
    if inv.header_row is not None and inv.header_row < 1:
        return _invalid("--header-row", inv.header_row)

    if inv.command not in QUERY_COMMANDS and inv.command not in META_COMMANDS:
        return Failure(code=ErrorCode.UNKNOWN_COMMAND, message=f"Unknown command: {inv.command}")

    required = ARITY[inv.command]
    if any(not getattr(inv, name) for name in required):
        return Failure(code=ErrorCode.MISSING_ARGUMENT, message=_missing_message(required))
    if inv.cell is not None:
        try:
            inv.cell = parse_address(inv.cell)
        except ValueError as e:
            return Failure(code=ErrorCode.INVALID_ARGUMENT, message=str(e))
    return None


def parse_args(argv: Sequence[str]) -> ParseResult:
    """Parse ``argv`` (command first). Never raises for bad input."""
    command = normalize_command(argv[0]) if argv else "help"
    rest = list(argv[1:])
    inv = Invocation(command=command)

    seen = {SWITCHES[arg] for arg in rest if arg in SWITCHES}
    inv.output = _output_mode(seen)
    inv.quiet = "quiet" in seen
    inv.no_color = "no_color" in seen
    inv.regex = "regex" in seen

    i = 0
    while i < len(rest):
        arg = rest[i]
        if arg in SWITCHES:
            i += 1
            continue
        if arg in VALUE_FLAGS:
            if i + 1 >= len(rest):
                return ParseResult(invocation=inv, error=Failure(
                    code=ErrorCode.MISSING_ARGUMENT, message=f"Missing value for {arg}",
                ))
            raw = rest[i + 1]
            i += 2
            if arg == "--range":
                inv.range = raw
                continue
            parsed = _parse_int(arg, raw)
            if isinstance(parsed, Failure):
                return ParseResult(invocation=inv, error=parsed)
            if arg == "--limit":
                inv.limit = parsed
            else:
                inv.header_row = parsed
            continue
        inv.positionals.append(arg)
        i += 1

    known = command in QUERY_COMMANDS or command in META_COMMANDS
    _assign(inv, ARITY[command] if known else DEFAULT_ARITY)
    return ParseResult(invocation=inv, error=validate(inv))


def _assign(inv: Invocation, names: Sequence[str]) -> None:
    for name, value in zip(names, inv.positionals):
        setattr(inv, name, value)
