from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook

from nationwide_report import OUTPUT_HEADERS
from nationwide_report.config import PipelineConfig
from nationwide_report.directory import LocationDirectory
from nationwide_report.models import LocationRecord

INPUT_WIDTH = 21


def raw_row(
    code: str = "SFO",
    vin: str = "VIN123",
    *,
    year: Any = "2024",
    make: str = "Ford",
    model: str = "F-150",
    trim: str = "XLT",
    drive: str = "4WD",
    color: str = "Blue",
    miles: Any = "12,345",
    price: Any = "$45,000",
    msrp: Any = "$52,000",
    rental: str = "RentalY",
    district: str = "DistrictX",
    zone: str = "ZoneZ",
) -> list[Any]:
    row: list[Any] = [""] * INPUT_WIDTH
    row[0] = "2024-01-01"
    row[2] = zone
    row[3] = district
    row[4] = rental
    row[5] = code
    row[8] = vin
    row[9] = year
    row[10] = make
    row[11] = model
    row[12] = trim
    row[13] = miles
    row[17] = color
    row[18] = drive
    row[19] = msrp
    row[20] = price
    return row


# Number formats a dealer export puts on miles, MSRP and price.
EXPORT_FORMATS: dict[int, str] = {13: "#,##0", 19: '"$"#,##0', 20: '"$"#,##0'}


def typed_row(code: str = "SFO", vin: str = "VIN123", **overrides: Any) -> list[Any]:
    """A row as a real export stores it: a date cell and numeric cells."""
    values: dict[str, Any] = {"year": 2024, "miles": 12345, "price": 45000, "msrp": 52000}
    values.update(overrides)
    row = raw_row(code, vin, **values)
    row[0] = datetime(2024, 1, 1)
    return row


def write_input_workbook(
    path: Path,
    rows: Sequence[Sequence[Any]],
    formats: Mapping[int, str] | None = None,
) -> Path:
    """Write an inventory workbook; *formats* maps a 0-based column to a number format."""
    formats = formats or {}
    wb = Workbook()
    ws = wb.active
    ws.cell(row=1, column=1, value="Report date: 2024-01-01")
    for c_idx in range(1, INPUT_WIDTH + 1):
        ws.cell(row=3, column=c_idx, value=f"Col{c_idx}")
    for r_idx, row in enumerate(rows, 4):
        for c_idx, value in enumerate(row, 1):
            if value == "":
                continue
            cell = ws.cell(row=r_idx, column=c_idx, value=value)
            if c_idx - 1 in formats:
                cell.number_format = formats[c_idx - 1]
    wb.save(path)
    return path


def write_reference_workbook(path: Path, rows: Sequence[Sequence[str]]) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.append(["Id", "Code", "City", "State"])
    for row in rows:
        ws.append(list(row))
    wb.save(path)
    return path


def write_template(path: Path) -> Path:
    wb = Workbook()
    ws = wb.active
    headers = list(OUTPUT_HEADERS)
    headers[6] = "Body Type"
    ws.append(headers)
    wb.save(path)
    return path


@pytest.fixture
def directory() -> LocationDirectory:
    return LocationDirectory(
        [
            LocationRecord(code="SFO", city="San Francisco", state="CA"),
            LocationRecord(code="LAX", city="Los Angeles", state="CA"),
            LocationRecord(code="SEA", city="Seattle", state="WA"),
        ]
    )


@pytest.fixture
def config(tmp_path: Path) -> PipelineConfig:
    assets = tmp_path / "assets"
    assets.mkdir()
    reference = write_reference_workbook(
        assets / "Airport_Codes.xlsx",
        [
            ["1", "SFO", "San Francisco", "CA"],
            ["2", "LAX", "Los Angeles", "CA"],
            ["3", "SEA", "Seattle", "WA"],
        ],
    )
    template = write_template(assets / "nationwide_template.xlsx")
    return PipelineConfig(
        cache_path=assets / "airport_code_map.pkl",
        template_path=template,
        reference_path=reference,
        ledger_path=tmp_path / "ledger" / "airport_codes_to_update.csv",
        work_path=assets / "nationwide_template_copy.xlsx",
    )
