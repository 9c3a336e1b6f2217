"""Shared test fixtures."""

from __future__ import annotations

import re
import zipfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from openpyxl import Workbook

from excel_cli.config import RuntimeConfig


def inject_cached_values(path: Path, sheet_index: int, cached: dict[str, tuple[str, str]]) -> None:
    """Write last-computed values into formula cells of a saved workbook.

    openpyxl saves formulas without a cached result; ``cached`` maps a cell
    address to ``(cell type attribute, value text)``, e.g. ``("n", "60")``,
    ``("str", "ok")`` or ``("e", "#DIV/0!")``.
    """
    member = f"xl/worksheets/sheet{sheet_index}.xml"
    with zipfile.ZipFile(path) as zf:
        contents = {name: zf.read(name) for name in zf.namelist()}

    xml = contents[member].decode("utf-8")
    for address, (kind, text) in cached.items():
        pattern = re.compile(rf'<c r="{address}"([^>]*)><f>(.*?)</f>(?:<v\s*/>|<v></v>)')
        xml, n = pattern.subn(
            lambda m: f'<c r="{address}" t="{kind}"{m.group(1)}><f>{m.group(2)}</f><v>{text}</v>',
            xml,
        )
        assert n == 1, f"formula cell {address} not found in {member}"
    contents[member] = xml.encode("utf-8")

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in contents.items():
            zf.writestr(name, data)


@pytest.fixture()
def config() -> RuntimeConfig:
    return RuntimeConfig(tool_version="9.9.9")


@pytest.fixture()
def sales_workbook(tmp_path: Path) -> Path:
    """Three sheets: typed sales data, a formula summary, and an empty sheet."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Sales"
    ws.append(["Region", "Product", "Units", "Price", "Shipped", "Paid"])
    ws.append(["North", "Widget", 10, 2.5, datetime(2024, 1, 15), True])
    ws.append(["South", "Gadget", 20, 3.75, datetime(2024, 2, 1, 9, 30), False])
    ws.append(["East", "Widget", 30, 1.25, datetime(2024, 3, 10), True])
    ws.append(["West", "Gizmo", 40, 4.0, datetime(2024, 4, 5), False])

    summary = wb.create_sheet("Summary")
    summary["A1"] = "Total Units"
    summary["B1"] = "=SUM(Sales!C2:C5)"
    summary["A2"] = "Subtotal"
    summary["B2"] = "=B1/2"
    summary["A3"] = "TotalCost"
    summary["B3"] = "=1/0"
    summary["A4"] = "Status"
    summary["B4"] = '=IF(B1>50,"high","low")'

    wb.create_sheet("Empty")

    path = tmp_path / "sales.xlsx"
    wb.save(str(path))
    inject_cached_values(path, 2, {
        "B1": ("n", "100"),
        "B2": ("n", "50"),
        "B3": ("e", "#DIV/0!"),
        "B4": ("str", "high"),
    })
    return path


@pytest.fixture()
def messy_workbook(tmp_path: Path) -> Path:
    """Offset data with blank and duplicate headers, blank rows, a title row, and odd cells."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Report"
    ws["B2"] = "Quarterly report"
    # header row 4, starting at column B
    ws["B4"] = "Name"
    ws["C4"] = "name"
    ws["D4"] = None
    ws["E4"] = "Name_2"
    ws["F4"] = "   "
    ws["B5"] = "alpha"
    ws["C5"] = 1
    ws["D5"] = "x"
    ws["E5"] = "dup"
    ws["F5"] = "#N/A"
    # row 6 left blank on purpose
    ws["B7"] = "beta"
    ws["C7"] = 2
    ws["D7"] = timedelta(hours=1, minutes=30)
    ws["D7"].number_format = "[h]:mm:ss"
    ws["E7"] = None
    ws["F7"] = "tail"

    path = tmp_path / "messy.xlsx"
    wb.save(str(path))
    return path


@pytest.fixture()
def blank_cells_workbook(tmp_path: Path) -> Path:
    """Single sheet whose only cells hold empty strings."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Blank"
    ws["A1"] = ""
    ws["C3"] = ""
    path = tmp_path / "blank.xlsx"
    wb.save(str(path))
    return path


@pytest.fixture()
def corrupt_file(tmp_path: Path) -> Path:
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"this is not a zip archive")
    return path


@pytest.fixture()
def flag_text_workbook(tmp_path: Path) -> Path:
    """Cells and a sheet name that look like command-line flags."""
    wb = Workbook()
    ws = wb.active
    ws.title = "-j"
    ws.append(["Option", "Meaning"])
    ws.append(["-q", "quiet"])
    ws.append(["--limit", "row cap"])
    path = tmp_path / "flags.xlsx"
    wb.save(str(path))
    return path
