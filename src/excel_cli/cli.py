"""Typer CLI application: a single entry command that hands argv to the dispatcher.

The command grammar (positional arity per command, flags accepted anywhere,
unknown flags kept as positionals) is handled by ``engine.parser`` rather
than by click, so the host command accepts every token untouched.
"""

from __future__ import annotations

import typer

from excel_cli.config import RuntimeConfig
from excel_cli.contracts.common import ErrorCode, Failure
from excel_cli.engine.dispatcher import EXIT_UNHANDLED, run
from excel_cli.engine.parser import OutputMode
from excel_cli.help.commands import TOOL_DESCRIPTION, TOOL_NAME
from excel_cli.output.formatter import OutputFormatter

app = typer.Typer(
    name=TOOL_NAME,
    help=TOOL_DESCRIPTION,
    add_completion=False,
    pretty_exceptions_enable=False,
)


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "help_option_names": [],
    },
)
def entry(ctx: typer.Context) -> None:
    """Run one excel-cli command (see `excel-cli help`)."""
    config = RuntimeConfig.from_environment()
    raise typer.Exit(run(list(ctx.args), config))


def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Last resort: machine consumers get an envelope, never a traceback.
        config = RuntimeConfig.from_environment()
        failure = Failure(code=ErrorCode.UNHANDLED_ERROR, message=str(exc) or type(exc).__name__)
        OutputFormatter(config, mode=OutputMode.PRETTY).failure("unknown", failure)
        raise SystemExit(EXIT_UNHANDLED) from exc


if __name__ == "__main__":
    main()
