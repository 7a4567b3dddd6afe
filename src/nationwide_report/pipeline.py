"""Row transformation pipeline — pure functions, no file I/O."""

from __future__ import annotations

import logging
import re
import warnings
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from nationwide_report.directory import LocationDirectory
from nationwide_report.errors import MalformedRowError, ParseWarning
from nationwide_report.ledger import UnresolvedLedger
from nationwide_report.models import (
    CODE_COL,
    DATA_COLS,
    MIN_ROW_LENGTH,
    VIN_COL,
    RunReport,
    UnresolvedEntry,
)

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "n/a"
MIN_MSRP_TEXT_LENGTH = 7
_ZERO_FRACTION_RE = re.compile(r"\.0+$")
FIRST_DATA_ROW = 4  # date, blank line and header come first

# Output positions.
YEAR_IDX = 2
MILES_IDX = 9
PRICE_IDX = 10
MSRP_IDX = 11
NUMERIC_FIELDS: dict[int, str] = {
    YEAR_IDX: "year",
    MILES_IDX: "miles",
    PRICE_IDX: "price",
    MSRP_IDX: "msrp",
}
SORT_KEY_WIDTH = 5  # state, city, year, make, model
NOTES_CELLS = 2

ProjectedRow = list[Any]


# ── Projection ───────────────────────────────────────────────────


def check_row_shape(row: Sequence[str]) -> None:
    """Raise :class:`MalformedRowError` if *row* is blank or misses referenced columns.

    A row with neither a location code nor a VIN is a blank sheet line.
    """
    if len(row) < MIN_ROW_LENGTH:
        raise MalformedRowError(f"row has {len(row)} cells, needs at least {MIN_ROW_LENGTH}")
    if not str(row[CODE_COL]).strip() and not str(row[VIN_COL]).strip():
        raise MalformedRowError("row has no location code and no VIN")


def project_row(
    row: Sequence[str], directory: LocationDirectory
) -> tuple[ProjectedRow | None, bool]:
    """Reshape one raw row into the report layout.

    Returns ``(None, False)`` when the row's location code is unknown.
    """
    record, found = directory.lookup(row[CODE_COL])
    if not found or record is None:
        return None, False
    projected: ProjectedRow = [record.state, record.city]
    projected.extend(row[idx] for idx in DATA_COLS)
    projected.extend([""] * NOTES_CELLS)
    return projected, True


class Deduplicator:
    """Tracks identifiers already processed in the current run."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def seen(self, identifier: str) -> bool:
        return identifier in self._seen

    def mark(self, identifier: str) -> None:
        self._seen.add(identifier)

    def __len__(self) -> int:
        return len(self._seen)


# ── Ordering ─────────────────────────────────────────────────────


def sort_key(row: Sequence[Any]) -> tuple[str, ...]:
    return tuple(str(value) for value in row[:SORT_KEY_WIDTH])


def sort_rows(rows: Iterable[ProjectedRow]) -> list[ProjectedRow]:
    """Order rows by state, city, year, make, model (plain text comparison)."""
    return sorted(rows, key=sort_key)


# ── Sanitizing ───────────────────────────────────────────────────


def flag_implausible_msrp(row: ProjectedRow) -> ProjectedRow:
    """Replace an MSRP too short to be real with :data:`NOT_AVAILABLE`."""
    msrp = str(row[MSRP_IDX]).strip()
    if len(msrp) < MIN_MSRP_TEXT_LENGTH:
        row = list(row)
        row[MSRP_IDX] = NOT_AVAILABLE
    return row


def parse_int(value: object) -> tuple[int, bool]:
    """Parse ``"$45,000"``-style text to an int; ``(0, False)`` on failure.

    An all-zero fraction (``"$45,000.00"``) is accepted; any other fraction
    is a failure.
    """
    if isinstance(value, bool):
        return 0, False
    if isinstance(value, int):
        return value, True
    text = str(value).strip()
    if text.startswith("$"):
        text = text[1:]
    text = _ZERO_FRACTION_RE.sub("", text.replace(",", "").strip())
    try:
        return int(text), True
    except ValueError:
        return 0, False


def sanitize_row(row: ProjectedRow) -> tuple[ProjectedRow, list[str]]:
    """Convert year, miles, price and MSRP to ints.

    Returns the new row and the names of the fields that failed to parse
    (and were set to 0).  The MSRP sentinel is left as text.
    """
    clean = list(row)
    failed: list[str] = []
    for idx, name in NUMERIC_FIELDS.items():
        if idx == MSRP_IDX and clean[idx] == NOT_AVAILABLE:
            continue
        clean[idx], ok = parse_int(clean[idx])
        if not ok:
            failed.append(name)
    return clean, failed


# ── Main transformation ─────────────────────────────────────────


@dataclass
class TransformResult:
    rows: list[ProjectedRow]
    ledger: UnresolvedLedger
    report: RunReport = field(default_factory=RunReport)


def transform_rows(
    raw_rows: Iterable[Sequence[str]],
    directory: LocationDirectory,
    *,
    ledger: UnresolvedLedger | None = None,
    first_row: int = FIRST_DATA_ROW,
) -> TransformResult:
    """Run raw input rows through dedup, projection, sorting and sanitizing.

    Rows whose code is not in *directory* go to *ledger* (a fresh one when
    not given); nothing is written to disk here.  *first_row* is the sheet
    row number of the first raw row and only feeds log messages.
    """
    if ledger is None:
        ledger = UnresolvedLedger()
    report = RunReport()
    dedup = Deduplicator()
    msrp_flagged = 0
    buffer: list[ProjectedRow] = []

    for sheet_row, raw in enumerate(raw_rows, start=first_row):
        report.rows_in += 1
        try:
            check_row_shape(raw)
        except MalformedRowError as exc:
            report.malformed += 1
            logger.warning("Skipping sheet row %d: %s", sheet_row, exc)
            continue

        vin = raw[VIN_COL]
        if dedup.seen(vin):
            report.duplicates += 1
            continue
        dedup.mark(vin)

        projected, ok = project_row(raw, directory)
        if not ok or projected is None:
            ledger.record(UnresolvedEntry.from_row(raw))
            report.unresolved += 1
            continue

        checked = flag_implausible_msrp(projected)
        if checked[MSRP_IDX] == NOT_AVAILABLE:
            msrp_flagged += 1
        buffer.append(checked)

    failures: Counter[str] = Counter()
    rows: list[ProjectedRow] = []
    for row in sort_rows(buffer):
        clean, failed = sanitize_row(row)
        failures.update(failed)
        rows.append(clean)

    report.rows_out = len(rows)
    report.parse_failures = sum(failures.values())
    report.check()

    if report.malformed:
        report.warnings.append(
            f"Skipped {report.malformed} malformed rows "
            f"(blank or fewer than {MIN_ROW_LENGTH} columns)"
        )
    if report.duplicates:
        report.warnings.append(f"Skipped {report.duplicates} rows with a repeated VIN")
    if report.unresolved:
        codes = sorted({entry.code.strip() or "(blank)" for entry in ledger.entries})
        report.warnings.append(
            f"Found {report.unresolved} rows with unknown location codes: {', '.join(codes)}"
        )
    if msrp_flagged:
        report.warnings.append(f"Marked MSRP as {NOT_AVAILABLE!r} on {msrp_flagged} rows")
    for name in NUMERIC_FIELDS.values():
        count = failures.get(name, 0)
        if count:
            message = f"Found {count} unparseable values in {name}; set to 0"
            report.warnings.append(message)
            warnings.warn(message, ParseWarning, stacklevel=2)

    return TransformResult(rows=rows, ledger=ledger, report=report)
