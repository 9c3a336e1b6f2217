"""stdio server mode: one JSON request per stdin line, one compact envelope per stdout line."""

from __future__ import annotations

import sys
from typing import Any

import orjson
from pydantic import ValidationError

from excel_cli.config import RuntimeConfig
from excel_cli.contracts.common import ErrorCode, Failure
from excel_cli.contracts.requests import ServeRequest
from excel_cli.engine.parser import Invocation, OutputMode, ParseResult, normalize_command, validate
from excel_cli.observe.events import EventEmitter
from excel_cli.output.formatter import OutputFormatter

SERVE = "serve"


def invocation_from_request(request: ServeRequest) -> Invocation:
    """Build the invocation for one request; output is always compact and quiet.

    Fields are copied as typed, never re-tokenized, so a term or sheet name
    such as ``-q`` or ``--limit`` is taken literally.
    """
    return Invocation(
        command=normalize_command(request.command),
        file=request.file,
        sheet=request.sheet,
        cell=request.cell,
        term=request.term,
        range=request.range,
        limit=request.limit,
        header_row=request.header_row,
        regex=request.regex,
        quiet=True,
        output=OutputMode.COMPACT,
    )


class StdioServer:
    """Long-lived loop that answers requests until end of input.

    Each request opens and closes its own workbook; nothing is cached
    between lines.
    """

    def __init__(self, config: RuntimeConfig) -> None:
        self.config = config
        self.events = EventEmitter(config.events)
        self._out = OutputFormatter(config, mode=OutputMode.COMPACT, quiet=True)

    def _reject(self, command: str, code: ErrorCode, message: str) -> int:
        self._out.failure(command, Failure(code=code, message=message))
        return 2

    def parse_request(self, line: str) -> ServeRequest | Failure:
        try:
            payload: Any = orjson.loads(line)
        except orjson.JSONDecodeError as e:
            return Failure(code=ErrorCode.INVALID_ARGUMENT, message=f"Invalid JSON request: {e}")
        if not isinstance(payload, dict):
            return Failure(code=ErrorCode.INVALID_ARGUMENT, message="Request must be a JSON object")
        try:
            request = ServeRequest.model_validate(payload)
        except ValidationError as e:
            for err in e.errors():
                if err["type"] == "missing" and tuple(err["loc"]) == ("command",):
                    return Failure(code=ErrorCode.MISSING_ARGUMENT, message="Missing required argument: command")
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            return Failure(code=ErrorCode.INVALID_ARGUMENT, message=f"Invalid value for {field}: {first['msg']}")
        if not request.command.strip():
            return Failure(code=ErrorCode.MISSING_ARGUMENT, message="Missing required argument: command")
        return request

    def handle_line(self, line: str) -> int:
        """Answer one request line; returns the exit code a single-shot run would have."""
        from excel_cli.engine.dispatcher import respond

        request = self.parse_request(line)
        if isinstance(request, Failure):
            return self._reject(SERVE, request.code, request.message)
        if request.command.strip().lower() == SERVE:
            return self._reject(SERVE, ErrorCode.INVALID_ARGUMENT, "Nested serve requests are not supported")

        self.events.emit("serve.request", command=request.command)
        invocation = invocation_from_request(request)
        return respond(ParseResult(invocation=invocation, error=validate(invocation)), self.config)

    def run(self) -> None:
        """Main server loop: read JSON lines from stdin, write responses to stdout."""
        self.events.emit("serve.start")
        handled = 0
        for line in sys.stdin:
            line = line.strip()
            if not line:
                continue
            self.handle_line(line)
            handled += 1
        self.events.emit("serve.end", requests=handled)
