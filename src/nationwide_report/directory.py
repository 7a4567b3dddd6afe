"""Location directory — location code to (city, state), cached on disk."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

import pandas as pd

from nationwide_report.errors import BuildError, LoadError, PersistError
from nationwide_report.io import load_rows
from nationwide_report.models import LocationRecord

logger = logging.getLogger(__name__)

CACHE_COLUMNS: list[str] = ["code", "city", "state"]

# Reference dataset positions.
REF_CODE_COL = 1
REF_CITY_COL = 2
REF_STATE_COL = 3


class LocationDirectory:
    """Read-only mapping from location code to :class:`LocationRecord`."""

    def __init__(self, records: Iterable[LocationRecord] = (), *, overwritten: int = 0) -> None:
        self._records: dict[str, LocationRecord] = {r.code: r for r in records}
        self.overwritten = overwritten

    def lookup(self, code: str) -> tuple[LocationRecord | None, bool]:
        record = self._records.get(code)
        return record, record is not None

    def __contains__(self, code: object) -> bool:
        return code in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def records(self) -> list[LocationRecord]:
        return list(self._records.values())

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [[r.code, r.city, r.state] for r in self.records()],
            columns=CACHE_COLUMNS,
            dtype="string",
        )


# ── Cache ────────────────────────────────────────────────────────


def load_directory(cache_path: Path) -> LocationDirectory:
    """Load a directory from its pickle cache.

    Raises :class:`LoadError` when the cache is absent, unreadable, or not a
    frame with ``code``/``city``/``state`` columns.  Never rebuilds.
    """
    cache_path = Path(cache_path)
    if not cache_path.is_file():
        raise LoadError(f"Directory cache not found: {cache_path}")
    try:
        frame = pd.read_pickle(cache_path)
    except Exception as exc:
        raise LoadError(f"Directory cache is unreadable: {cache_path} ({exc})") from exc

    if not isinstance(frame, pd.DataFrame) or list(frame.columns) != CACHE_COLUMNS:
        raise LoadError(f"Directory cache has an unexpected layout: {cache_path}")

    frame = frame.astype("string").fillna("")
    records = [
        LocationRecord(code=str(code), city=str(city), state=str(state))
        for code, city, state in frame.itertuples(index=False, name=None)
    ]
    return LocationDirectory(records)


def save_directory(directory: LocationDirectory, cache_path: Path) -> Path:
    """Persist *directory* to *cache_path* (atomic)."""
    cache_path = Path(cache_path)
    tmp_path = cache_path.with_suffix(cache_path.suffix + ".tmp")
    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        directory.to_frame().to_pickle(tmp_path)
        tmp_path.replace(cache_path)
    except OSError as exc:
        raise PersistError(f"Cannot write directory cache {cache_path}: {exc}") from exc
    return cache_path


# ── Building ─────────────────────────────────────────────────────


def load_reference_rows(reference_path: Path) -> list[list[str]]:
    """Read the reference workbook, header row included."""
    try:
        return load_rows(reference_path)
    except (FileNotFoundError, ValueError, OSError) as exc:
        raise BuildError(f"Cannot read reference dataset {reference_path}: {exc}") from exc


def build_directory(reference_rows: Sequence[Sequence[str]]) -> LocationDirectory:
    """Build a directory from reference rows.

    Row 0 is a header and is skipped without looking at it.  Each data row
    carries the code at position 1, the city at 2 and the state at 3.  When a
    code repeats, the later row wins; the number of overwritten codes is kept
    on :attr:`LocationDirectory.overwritten`.
    """
    data_rows = list(reference_rows)[1:]
    if not data_rows:
        raise BuildError("Reference dataset has no data rows")

    records: dict[str, LocationRecord] = {}
    overwritten = 0
    for offset, row in enumerate(data_rows, start=2):
        if len(row) <= REF_STATE_COL:
            raise BuildError(
                f"Reference row {offset} has {len(row)} cells, needs {REF_STATE_COL + 1}"
            )
        code = str(row[REF_CODE_COL])
        if not code:
            continue
        if code in records:
            overwritten += 1
            logger.debug("Reference code %s on row %d overwrites an earlier row", code, offset)
        records[code] = LocationRecord(
            code=code, city=str(row[REF_CITY_COL]), state=str(row[REF_STATE_COL])
        )

    if not records:
        raise BuildError("Reference dataset has no rows with a location code")
    if overwritten:
        logger.warning("%d duplicate location codes in reference data; last row wins", overwritten)

    return LocationDirectory(records.values(), overwritten=overwritten)


def ensure_directory(cache_path: Path, reference_path: Path) -> LocationDirectory:
    """Load the cached directory, rebuilding it from *reference_path* if needed."""
    try:
        return load_directory(cache_path)
    except LoadError as exc:
        logger.warning("%s; rebuilding from %s", exc, reference_path)

    directory = build_directory(load_reference_rows(reference_path))
    save_directory(directory, cache_path)
    logger.info("Location directory built with %d codes -> %s", len(directory), cache_path)
    return directory
