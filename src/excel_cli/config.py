"""Process-wide runtime configuration, built once at entry and passed down."""

from __future__ import annotations

import os
from collections.abc import Mapping
from importlib.metadata import PackageNotFoundError, version

from pydantic import BaseModel, ConfigDict

from excel_cli import __version__
from excel_cli.contracts.common import SCHEMA_VERSION

DIST_NAME = "excel-cli"

_TRUTHY = {"1", "true", "yes", "on"}


def tool_version() -> str:
    """Installed distribution version, or the in-tree version when not installed."""
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        return __version__


class RuntimeConfig(BaseModel):
    """Read-only settings shared by every command of one process."""

    model_config = ConfigDict(frozen=True)

    schema_version: str = SCHEMA_VERSION
    tool_version: str = __version__
    events: bool = False
    no_color: bool = False

    @classmethod
    def from_environment(cls, environ: Mapping[str, str] | None = None) -> "RuntimeConfig":
        env = os.environ if environ is None else environ
        return cls(
            tool_version=tool_version(),
            events=env.get("EXCEL_CLI_EVENTS", "").strip().lower() in _TRUTHY,
            no_color=bool(env.get("NO_COLOR")),
        )
