"""Tests for the nationwide workbook writer and its formatting contract."""

from __future__ import annotations

from pathlib import Path

from openpyxl import load_workbook

from conftest import write_template
from nationwide_report import OUTPUT_HEADERS
from nationwide_report.report import (
    CURRENCY_FMT,
    NUMBER_FMT,
    header_mismatches,
    read_headers,
    write_nationwide_report,
)


def _rows() -> list[list[object]]:
    return [
        ["CA", "Los Angeles", 2023, "Honda", "Civic", "LX", "FWD", "V1", "Red", 100, 20000, 25500, "", ""],
        ["WA", "Seattle", 2024, "Ford", "Edge", "SE", "AWD", "V2", "Gray", 5, 30000, "n/a", "", ""],
    ]


def test_write_report_renames_drive_and_writes_rows_from_a2(tmp_path: Path) -> None:
    work = write_template(tmp_path / "work.xlsx")
    out = tmp_path / "out" / "report.xlsx"

    path = write_nationwide_report(work, _rows(), out)

    assert path == out
    ws = load_workbook(path).worksheets[0]
    assert ws["G1"].value == "Drive"
    assert [c.value for c in ws[2]][:5] == ["CA", "Los Angeles", 2023, "Honda", "Civic"]
    assert ws["L3"].value == "n/a"
    assert ws.max_row == 3
    assert not (tmp_path / "out" / "report.tmp.xlsx").exists()


def test_write_report_applies_number_and_currency_formats(tmp_path: Path) -> None:
    work = write_template(tmp_path / "work.xlsx")

    path = write_nationwide_report(work, _rows(), tmp_path / "report.xlsx")

    ws = load_workbook(path).worksheets[0]
    for row in (2, 3):
        assert ws[f"C{row}"].number_format == NUMBER_FMT
        assert ws[f"J{row}"].number_format == NUMBER_FMT
        assert ws[f"K{row}"].number_format == CURRENCY_FMT
        assert ws[f"L{row}"].number_format == CURRENCY_FMT
        assert ws[f"K{row}"].font.name == "Calibri"
        assert ws[f"K{row}"].font.sz == 10
    assert ws["C1"].number_format == "General"


def test_write_report_clears_rows_left_in_template(tmp_path: Path) -> None:
    work = write_template(tmp_path / "work.xlsx")
    write_nationwide_report(work, _rows(), work)

    path = write_nationwide_report(work, _rows()[:1], tmp_path / "report.xlsx")

    ws = load_workbook(path).worksheets[0]
    assert ws.max_row == 2


def test_write_report_escapes_formula_like_text(tmp_path: Path) -> None:
    work = write_template(tmp_path / "work.xlsx")
    rows = _rows()
    rows[0][12] = "=HYPERLINK(\"x\")"

    path = write_nationwide_report(work, rows, tmp_path / "report.xlsx")

    ws = load_workbook(path).worksheets[0]
    assert ws["M2"].value == "'=HYPERLINK(\"x\")"


def test_write_report_with_no_rows_keeps_header_only(tmp_path: Path) -> None:
    work = write_template(tmp_path / "work.xlsx")

    path = write_nationwide_report(work, [], tmp_path / "report.xlsx")

    ws = load_workbook(path).worksheets[0]
    assert ws.max_row == 1
    assert read_headers(path) == OUTPUT_HEADERS


def test_header_mismatches_reports_unexpected_columns() -> None:
    headers = list(OUTPUT_HEADERS)
    headers[6] = "Body Type"

    problems = header_mismatches(headers[:13])

    assert len(problems) == 2
    assert "column 7" in problems[0]
    assert "Notes2" in problems[1]
    assert header_mismatches(OUTPUT_HEADERS) == []
