"""I/O helpers — read positional sheet rows, copy the template."""

from __future__ import annotations

import re
import shutil
from datetime import date, datetime, time
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

_EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")
_DECIMALS_RE = re.compile(r"0\.(0+)")

# ── Cell rendering ───────────────────────────────────────────────


def _format_number(value: int | float, number_format: str | None) -> str:
    """Render *value* roughly the way Excel displays it under *number_format*.

    Only the parts the inventory sheets use are honoured: a ``$`` sign,
    thousands grouping and a fixed number of decimals.
    """
    fmt = number_format or "General"
    if isinstance(value, float) and value.is_integer():
        value = int(value)

    match = _DECIMALS_RE.search(fmt)
    decimals = len(match.group(1)) if match else 0
    grouped = "#,##" in fmt
    currency = "$" in fmt
    if not (grouped or currency or match):
        return str(value)

    text = f"{value:,.{decimals}f}" if grouped else f"{value:.{decimals}f}"
    if currency:
        text = f"-${text[1:]}" if text.startswith("-") else f"${text}"
    return text


def _cell_text(cell: Any) -> str:
    value = cell.value
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (int, float)):
        return _format_number(value, getattr(cell, "number_format", None))
    return str(value)


# ── Loading ──────────────────────────────────────────────────────


def _read_csv_rows(path: Path, skip_rows: int) -> list[list[str]]:
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            df = pd.read_csv(
                path,
                header=None,
                skiprows=skip_rows,
                dtype="string",
                encoding=encoding,
                encoding_errors="strict",
                keep_default_na=False,
                skip_blank_lines=False,
            )
        except pd.errors.EmptyDataError:
            return []
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            last_exc = exc
            continue
        df = df.astype("string").fillna("")
        return [[str(value) for value in row] for row in df.itertuples(index=False, name=None)]
    raise ValueError(f"Could not read CSV {path} (decode or parse failed)") from last_exc


def _read_excel_rows(path: Path, skip_rows: int) -> list[list[str]]:
    try:
        wb = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError) as exc:
        raise ValueError(f"Could not read workbook {path}: {exc}") from exc
    try:
        ws = wb.worksheets[0]
        return [
            [_cell_text(cell) for cell in row]
            for row in ws.iter_rows(min_row=skip_rows + 1)
        ]
    finally:
        wb.close()


def _pad_rows(rows: list[list[str]]) -> list[list[str]]:
    """Drop trailing blank rows and pad the rest to a common width."""
    while rows and not any(rows[-1]):
        rows.pop()
    width = max((len(row) for row in rows), default=0)
    return [row + [""] * (width - len(row)) for row in rows]


def load_rows(path: Path, skip_rows: int = 0) -> list[list[str]]:
    """Return the first sheet of *path* as positional rows of text.

    Workbook cells come back as displayed text: a numeric cell formatted
    ``"$"#,##0`` reads as ``"$52,000"``, a midnight date as ``2024-01-01``.
    Empty cells are ``""``.  The first *skip_rows* rows are dropped before
    anything is returned, and trailing blank rows are removed.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If *path* is a directory, has an unsupported extension, or
        cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.is_dir():
        raise ValueError(f"Input path is a directory, not a file: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        rows = _read_csv_rows(path, skip_rows)
    elif suffix in _EXCEL_SUFFIXES:
        rows = _read_excel_rows(path, skip_rows)
    else:
        raise ValueError(f"Unsupported file type: {suffix!r}. Use .xlsx or .csv")
    return _pad_rows(rows)


# ── Template ─────────────────────────────────────────────────────


def copy_template(template_path: Path, work_path: Path) -> Path:
    """Copy the destination template to *work_path* and return it.

    The template itself is never opened for writing.
    """
    template_path = Path(template_path)
    work_path = Path(work_path)
    if not template_path.is_file():
        raise FileNotFoundError(f"Template not found: {template_path}")
    work_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        shutil.copyfile(template_path, work_path)
    except OSError as exc:
        raise OSError(f"Cannot copy template {template_path} -> {work_path}: {exc}") from exc
    return work_path
