from __future__ import annotations

from pathlib import Path

import pytest

from nationwide_report.errors import PersistError
from nationwide_report.ledger import UnresolvedLedger
from nationwide_report.models import UnresolvedEntry

HEADER_LINE = "Airport Code,Rental Desc,District Desc,Rental Zone Desc\n"


def _entry(code: str) -> UnresolvedEntry:
    return UnresolvedEntry(
        code=code, rental_desc="RentalY", district_desc="DistrictX", zone_desc="ZoneZ"
    )


def test_flush_writes_header_on_first_creation(tmp_path: Path) -> None:
    path = tmp_path / "assets" / "codes.csv"
    ledger = UnresolvedLedger()
    ledger.record(_entry("ZZZ"))

    written = ledger.flush(path)

    assert written == 1
    assert path.read_text(encoding="utf-8") == HEADER_LINE + "ZZZ,RentalY,DistrictX,ZoneZ\n"
    assert len(ledger) == 0


def test_second_flush_appends_without_touching_prior_bytes(tmp_path: Path) -> None:
    path = tmp_path / "codes.csv"
    first = UnresolvedLedger()
    first.record(_entry("AAA"))
    first.flush(path)
    before = path.read_bytes()

    second = UnresolvedLedger()
    second.record(_entry("BBB"))
    second.record(_entry("CCC"))
    second.flush(path)

    after = path.read_bytes()
    assert after.startswith(before)
    text = after.decode("utf-8")
    assert text.count("Airport Code") == 1
    assert text.splitlines()[1:] == [
        "AAA,RentalY,DistrictX,ZoneZ",
        "BBB,RentalY,DistrictX,ZoneZ",
        "CCC,RentalY,DistrictX,ZoneZ",
    ]


def test_flush_with_no_entries_creates_nothing(tmp_path: Path) -> None:
    path = tmp_path / "codes.csv"

    assert UnresolvedLedger().flush(path) == 0
    assert not path.exists()


def test_flush_quotes_fields_with_commas(tmp_path: Path) -> None:
    path = tmp_path / "codes.csv"
    ledger = UnresolvedLedger()
    ledger.record(UnresolvedEntry("QQQ", "Rental, Inc", "D", "Z"))

    ledger.flush(path)

    assert path.read_text(encoding="utf-8").splitlines()[1] == 'QQQ,"Rental, Inc",D,Z'


def test_flush_to_unwritable_destination_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "codes.csv"
    blocker.mkdir()
    ledger = UnresolvedLedger()
    ledger.record(_entry("ZZZ"))

    with pytest.raises(PersistError, match="Cannot append"):
        ledger.flush(blocker)

    assert len(ledger) == 1


def test_entry_from_row_takes_code_and_descriptions() -> None:
    row = ["date", "", "Zone", "District", "Rental", "ZZZ"] + [""] * 15

    assert UnresolvedEntry.from_row(row).as_list() == ["ZZZ", "Rental", "District", "Zone"]
