"""Command table: drives positional arity, usage text, and the tool manifest."""

from __future__ import annotations

from pydantic import Field

from excel_cli.contracts.common import ContractModel

TOOL_NAME = "excel-cli"
TOOL_DESCRIPTION = "Universal Excel data extraction tool for humans and LLMs"

OUTPUT_MODES = ["--json", "--json-compact", "--ndjson"]
GLOBAL_OPTIONS = ["--quiet", "--no-color"]


class ParameterSpec(ContractModel):
    name: str
    type: str = "string"
    required: bool = True
    description: str = ""

    @property
    def positional(self) -> bool:
        return not self.name.startswith("-")


class CommandSpec(ContractModel):
    name: str
    description: str
    parameters: list[ParameterSpec] = Field(default_factory=list)

    @property
    def positionals(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.parameters if p.positional)


class ToolManifest(ContractModel):
    """Machine-readable description of every query command."""

    name: str = TOOL_NAME
    version: str
    schema_version: str
    description: str = TOOL_DESCRIPTION
    tools: list[CommandSpec] = Field(default_factory=list)
    output_modes: list[str] = Field(default_factory=lambda: list(OUTPUT_MODES))
    global_options: list[str] = Field(default_factory=lambda: list(GLOBAL_OPTIONS))


_FILE = ParameterSpec(name="file", description="Path to .xlsx/.xlsm file")
_SHEET = ParameterSpec(name="sheet", description="Sheet name (case-insensitive)")

COMMAND_SPECS: list[CommandSpec] = [
    CommandSpec(
        name="info",
        description="List all sheets in a workbook",
        parameters=[_FILE],
    ),
    CommandSpec(
        name="inspect",
        description="Show sheet dimensions and range",
        parameters=[_FILE, _SHEET],
    ),
    CommandSpec(
        name="read",
        description="Read sheet data as structured records",
        parameters=[
            _FILE,
            _SHEET,
            ParameterSpec(name="--range", required=False, description="Cell range (e.g. A1:C10)"),
            ParameterSpec(name="--limit", type="integer", required=False, description="Max rows to return"),
            ParameterSpec(
                name="--header-row", type="integer", required=False,
                description="Row number to use as header",
            ),
        ],
    ),
    CommandSpec(
        name="cell",
        description="Read a single cell value with type info",
        parameters=[_FILE, _SHEET, ParameterSpec(name="cell", description="Cell address (e.g. B5)")],
    ),
    CommandSpec(
        name="search",
        description="Search for a value across all cells in a sheet",
        parameters=[
            _FILE,
            _SHEET,
            ParameterSpec(name="term", description="Search term (substring or regex with --regex)"),
            ParameterSpec(
                name="--regex", type="boolean", required=False,
                description="Treat term as regex pattern",
            ),
        ],
    ),
    CommandSpec(
        name="formulas",
        description="List all cells with formulas in a sheet",
        parameters=[_FILE, _SHEET],
    ),
]

QUERY_COMMANDS = {spec.name for spec in COMMAND_SPECS}
META_COMMANDS = {"help", "tools", "serve"}
HELP_ALIASES = {"help", "--help", "-h"}

# Positional field names per command; unknown commands get the widest layout.
ARITY: dict[str, tuple[str, ...]] = {spec.name: spec.positionals for spec in COMMAND_SPECS}
ARITY.update({name: () for name in META_COMMANDS})
DEFAULT_ARITY = ("file", "sheet", "cell", "term")


def build_manifest(tool_version: str, schema_version: str) -> ToolManifest:
    return ToolManifest(version=tool_version, schema_version=schema_version, tools=COMMAND_SPECS)


USAGE = f"""
{TOOL_NAME} - {TOOL_DESCRIPTION}

USAGE:
    {TOOL_NAME} <command> [arguments] [options]

COMMANDS:
    info <file>                    List all sheets in the workbook
    inspect <file> <sheet>         Show sheet dimensions
    read <file> <sheet>            Read sheet data as structured records
    cell <file> <sheet> <cell>     Read a single cell value
    search <file> <sheet> <term>   Search for a value in a sheet
    formulas <file> <sheet>        List all cells with formulas
    tools                          Print a JSON manifest of every command
    serve                          Answer JSON requests read line by line from stdin
    help                           Show this message

OPTIONS:
    --json, -j                     Pretty JSON envelope on stdout
    --json-compact                 Single-line JSON envelope on stdout
    --ndjson                       Summary envelope, then one JSON line per row (read)
    --range <range>                Cell range (e.g. A1:C10) for read
    --limit <n>                    Limit number of rows displayed
    --header-row <n>               Absolute row number holding the headers (read)
    --regex                        Treat the search term as a regular expression
    --quiet, -q                    Suppress human-readable output
    --no-color                     Disable colors in human-readable output

EXAMPLES:
    {TOOL_NAME} info data.xlsx
    {TOOL_NAME} inspect data.xlsx Sheet1
    {TOOL_NAME} read data.xlsx Sheet1 --limit 10
    {TOOL_NAME} read data.xlsx Sheet1 --range A1:C10 --json
    {TOOL_NAME} read data.xlsx Sheet1 --header-row 3 --ndjson
    {TOOL_NAME} cell data.xlsx Sheet1 B5
    {TOOL_NAME} search data.xlsx Sheet1 "Total.*" --regex
    {TOOL_NAME} formulas data.xlsx Sheet1 --json
"""
