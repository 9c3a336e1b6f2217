"""Request models for the long-lived stdio loop."""

from __future__ import annotations

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from excel_cli.contracts.common import ContractModel


class ServeRequest(ContractModel):
    """One line of ``serve`` input. Unknown fields are ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        strict=True,
    )

    command: str
    file: str | None = None
    sheet: str | None = None
    cell: str | None = None
    term: str | None = None
    range: str | None = None
    limit: int | None = None
    header_row: int | None = None
    regex: bool = False
