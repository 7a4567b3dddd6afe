"""End-to-end ``generate`` run: directory, input, ledger, workbook."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from nationwide_report.config import PipelineConfig
from nationwide_report.directory import ensure_directory
from nationwide_report.io import copy_template, load_rows
from nationwide_report.models import RunReport
from nationwide_report.pipeline import FIRST_DATA_ROW, transform_rows
from nationwide_report.report import header_mismatches, read_headers, write_nationwide_report

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    report_path: Path
    ledger_path: Path
    ledger_written: int
    directory_size: int
    report: RunReport


def generate(
    input_path: Path, output_path: Path, config: PipelineConfig | None = None
) -> GenerateResult:
    """Build the nationwide report for *input_path* and save it to *output_path*.

    Unknown location codes are appended to ``config.ledger_path``.  I/O
    failures propagate; nothing is retried.
    """
    if config is None:
        config = PipelineConfig.from_home()
    input_path = Path(input_path)
    output_path = Path(output_path)

    directory = ensure_directory(config.cache_path, config.reference_path)
    logger.debug("Loaded %d location codes from %s", len(directory), config.cache_path)

    raw_rows = load_rows(input_path, skip_rows=FIRST_DATA_ROW - 1)
    result = transform_rows(raw_rows, directory)

    ledger_written = result.ledger.flush(config.ledger_path)

    work_path = copy_template(config.template_path, config.work_path)
    report_path = write_nationwide_report(work_path, result.rows, output_path)

    for problem in header_mismatches(read_headers(report_path)):
        result.report.warnings.append(f"Template header mismatch: {problem}")

    logger.info("Wrote %d rows to %s", result.report.rows_out, report_path)
    return GenerateResult(
        report_path=report_path,
        ledger_path=config.ledger_path,
        ledger_written=ledger_written,
        directory_size=len(directory),
        report=result.report,
    )
