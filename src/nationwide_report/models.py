"""Data models shared across the package."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any

# Raw input positions (0-indexed) consumed by the pipeline.
ZONE_COL = 2
DISTRICT_COL = 3
RENTAL_COL = 4
CODE_COL = 5
VIN_COL = 8
# year, make, model, trim, drive, vin, color, miles, price, msrp
DATA_COLS: tuple[int, ...] = (9, 10, 11, 12, 18, 8, 17, 13, 20, 19)
MIN_ROW_LENGTH = max(CODE_COL, VIN_COL, *DATA_COLS) + 1

LEDGER_HEADER: list[str] = ["Airport Code", "Rental Desc", "District Desc", "Rental Zone Desc"]


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


@dataclass(frozen=True)
class LocationRecord:
    code: str
    city: str
    state: str


@dataclass(frozen=True)
class UnresolvedEntry:
    """A row whose location code is not in the directory."""

    code: str
    rental_desc: str
    district_desc: str
    zone_desc: str

    @classmethod
    def from_row(cls, row: Sequence[str]) -> UnresolvedEntry:
        return cls(
            code=row[CODE_COL],
            rental_desc=row[RENTAL_COL],
            district_desc=row[DISTRICT_COL],
            zone_desc=row[ZONE_COL],
        )

    def as_list(self) -> list[str]:
        return [self.code, self.rental_desc, self.district_desc, self.zone_desc]


@dataclass
class RunReport:
    """Row accounting for a single transformation run.

    Contract invariant:
    ``rows_in == rows_out + duplicates + unresolved + malformed``.
    """

    rows_in: int = 0
    rows_out: int = 0
    duplicates: int = 0
    unresolved: int = 0
    malformed: int = 0
    parse_failures: int = 0
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.rows_out = _to_non_negative_int(self.rows_out, "rows_out")
        self.duplicates = _to_non_negative_int(self.duplicates, "duplicates")
        self.unresolved = _to_non_negative_int(self.unresolved, "unresolved")
        self.malformed = _to_non_negative_int(self.malformed, "malformed")
        self.parse_failures = _to_non_negative_int(self.parse_failures, "parse_failures")
        self.warnings = _to_string_list(self.warnings, "warnings")
        self.check()

    @property
    def dropped_rows(self) -> int:
        return self.duplicates + self.unresolved + self.malformed

    def check(self) -> None:
        """Raise ``ValueError`` if the row counts do not add up."""
        if self.rows_out > self.rows_in:
            raise ValueError("rows_out must be <= rows_in")
        if self.rows_in != self.rows_out + self.dropped_rows:
            raise ValueError(
                "rows_in must equal rows_out + duplicates + unresolved + malformed"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows_in": self.rows_in,
            "rows_out": self.rows_out,
            "duplicates": self.duplicates,
            "unresolved": self.unresolved,
            "malformed": self.malformed,
            "parse_failures": self.parse_failures,
            "warnings": list(self.warnings),
        }
