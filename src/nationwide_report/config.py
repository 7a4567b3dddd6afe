"""Asset locations used by a run, resolved once by the caller."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

ASSETS_DIRNAME = ".nationwide_report"
CACHE_FILENAME = "airport_code_map.pkl"
TEMPLATE_FILENAME = "nationwide_template.xlsx"
WORK_FILENAME = "nationwide_template_copy.xlsx"
REFERENCE_FILENAME = "Airport_Codes.xlsx"
LEDGER_PATH = Path("assets") / "airport_codes_to_update.csv"


@dataclass(frozen=True)
class PipelineConfig:
    """Paths the pipeline reads from and writes to."""

    cache_path: Path
    template_path: Path
    reference_path: Path
    ledger_path: Path
    work_path: Path

    @classmethod
    def from_home(cls, home: Path | None = None) -> PipelineConfig:
        """Default layout under ``~/.nationwide_report/assets``.

        The unresolved-codes ledger stays relative to the current working
        directory so it sits next to wherever the report is generated.
        """
        if home is None:
            try:
                home = Path.home()
            except RuntimeError as exc:
                raise OSError(f"Cannot resolve home directory: {exc}") from exc
        assets = Path(home) / ASSETS_DIRNAME / "assets"
        return cls(
            cache_path=assets / CACHE_FILENAME,
            template_path=assets / TEMPLATE_FILENAME,
            reference_path=assets / REFERENCE_FILENAME,
            ledger_path=LEDGER_PATH,
            work_path=assets / WORK_FILENAME,
        )

    def with_overrides(self, **paths: Path | None) -> PipelineConfig:
        """Return a copy with every non-``None`` path in *paths* replaced."""
        changes = {name: Path(value) for name, value in paths.items() if value is not None}
        return replace(self, **changes)
