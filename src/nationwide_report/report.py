"""Excel writer — fills the nationwide template and saves the report."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.styles import Font
from openpyxl.worksheet.worksheet import Worksheet

from nationwide_report import OUTPUT_HEADERS

# ── Style constants ──────────────────────────────────────────────

CELL_FONT = Font(name="Calibri", size=10)
NUMBER_FMT = "0"
CURRENCY_FMT = '"$"#,##0'

DRIVE_HEADER_CELL = "G1"
DRIVE_HEADER = "Drive"

# Column letter → number format for data rows
_COL_FORMATS: dict[str, str] = {
    "C": NUMBER_FMT,  # Yr
    "J": NUMBER_FMT,  # Miles
    "K": CURRENCY_FMT,  # Price
    "L": CURRENCY_FMT,  # MSRP
}

_EXCEL_FORMULA_PREFIXES = ("=", "+", "-", "@")


# ── Helpers ──────────────────────────────────────────────────────


def _excel_value(val: Any) -> Any:
    if isinstance(val, str):
        if val.startswith("'"):
            return val
        stripped = val.lstrip()
        if stripped and stripped[0] in _EXCEL_FORMULA_PREFIXES:
            return f"'{val}"
    return val


def _clear_data_rows(ws: Worksheet) -> None:
    if ws.max_row > 1:
        ws.delete_rows(2, ws.max_row - 1)


def _write_rows(ws: Worksheet, rows: Sequence[Sequence[Any]]) -> None:
    for r_idx, row in enumerate(rows, 2):  # A2 is the first row after the header
        for c_idx, val in enumerate(row, 1):
            ws.cell(row=r_idx, column=c_idx, value=_excel_value(val))


def _apply_number_formats(ws: Worksheet, last_row: int) -> None:
    """Style the numeric columns on rows 2..*last_row*."""
    if last_row < 2:
        return
    for letter, fmt in _COL_FORMATS.items():
        for (cell,) in ws[f"{letter}2:{letter}{last_row}"]:
            cell.number_format = fmt
            cell.font = CELL_FONT


# ── Public API ───────────────────────────────────────────────────


def write_nationwide_report(
    work_path: Path, rows: Sequence[Sequence[Any]], save_path: Path
) -> Path:
    """Populate the template copy at *work_path* with *rows*, save to *save_path*.

    Rows are written in the order given, from ``A2`` down.  The ``Body
    Type`` header is renamed to ``Drive`` before anything else is written.
    """
    work_path = Path(work_path)
    save_path = Path(save_path)

    wb = load_workbook(work_path)
    try:
        ws = wb.worksheets[0]
        ws[DRIVE_HEADER_CELL] = DRIVE_HEADER
        _clear_data_rows(ws)
        _write_rows(ws, rows)
        _apply_number_formats(ws, len(rows) + 1)

        save_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = save_path.with_name(f"{save_path.stem}.tmp{save_path.suffix}")
        wb.save(tmp_path)
        tmp_path.replace(save_path)
    finally:
        wb.close()
    return save_path


def read_headers(path: Path) -> list[str]:
    """Return the header row of the first sheet of *path*."""
    wb = load_workbook(Path(path), read_only=True)
    try:
        ws = wb.worksheets[0]
        first = next(ws.iter_rows(min_row=1, max_row=1, values_only=True), ())
        return ["" if value is None else str(value) for value in first]
    finally:
        wb.close()


def header_mismatches(headers: Sequence[str]) -> list[str]:
    """Describe columns whose header differs from :data:`OUTPUT_HEADERS`."""
    problems: list[str] = []
    for idx, expected in enumerate(OUTPUT_HEADERS):
        actual = headers[idx] if idx < len(headers) else ""
        if actual.strip().lower() != expected.lower():
            problems.append(f"column {idx + 1}: expected {expected!r}, found {actual!r}")
    return problems
