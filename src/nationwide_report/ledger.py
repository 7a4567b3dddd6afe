"""Append-only CSV ledger of rows whose location code did not resolve."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from nationwide_report.errors import PersistError
from nationwide_report.models import LEDGER_HEADER, UnresolvedEntry

logger = logging.getLogger(__name__)


class UnresolvedLedger:
    """Collects unresolved rows during a run and appends them on :meth:`flush`."""

    def __init__(self) -> None:
        self._entries: list[UnresolvedEntry] = []

    def record(self, entry: UnresolvedEntry) -> None:
        self._entries.append(entry)

    @property
    def entries(self) -> list[UnresolvedEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [entry.as_list() for entry in self._entries],
            columns=LEDGER_HEADER,
            dtype="string",
        )

    def flush(self, destination: Path) -> int:
        """Append pending entries to *destination* and return how many were written.

        The header is written only when *destination* does not exist yet.
        Nothing already in the file is touched.
        """
        if not self._entries:
            return 0

        destination = Path(destination)
        is_new = not destination.exists()
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, "a", newline="", encoding="utf-8") as fh:
                self.to_frame().to_csv(fh, header=is_new, index=False, lineterminator="\n")
        except OSError as exc:
            raise PersistError(f"Cannot append to ledger {destination}: {exc}") from exc

        written = len(self._entries)
        self._entries.clear()
        logger.info("Appended %d unresolved codes to %s", written, destination)
        return written
