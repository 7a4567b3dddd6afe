"""CLI entry point for nationwide-report."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table as RichTable

from nationwide_report import __version__
from nationwide_report.config import PipelineConfig
from nationwide_report.directory import (
    build_directory,
    ensure_directory,
    load_reference_rows,
    save_directory,
)
from nationwide_report.errors import NationwideReportError
from nationwide_report.models import RunReport
from nationwide_report.runner import generate as run_generate

app = typer.Typer(
    name="nwreport",
    help="nationwide-report — Turn dealer inventory sheets into the nationwide report.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

_EXPECTED_ERRORS = (NationwideReportError, OSError, ValueError)


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"nationwide-report v{__version__}")
        raise typer.Exit()


def _setup_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, show_time=False)],
        force=True,
    )


def _config(
    *,
    cache: Path | None = None,
    template: Path | None = None,
    reference: Path | None = None,
    ledger: Path | None = None,
    work: Path | None = None,
) -> PipelineConfig:
    return PipelineConfig.from_home().with_overrides(
        cache_path=cache,
        template_path=template,
        reference_path=reference,
        ledger_path=ledger,
        work_path=work,
    )


def _summary_table(report: RunReport) -> RichTable:
    tbl = RichTable(title="Run Summary", show_lines=True)
    tbl.add_column("Check", style="bold")
    tbl.add_column("Result")
    tbl.add_row("Rows in", str(report.rows_in))
    tbl.add_row("Rows out", str(report.rows_out))
    tbl.add_row("Duplicate VINs", str(report.duplicates))
    tbl.add_row("Unresolved codes", str(report.unresolved))
    tbl.add_row("Malformed rows", str(report.malformed))
    tbl.add_row("Parse failures", str(report.parse_failures))
    for w in report.warnings:
        tbl.add_row("Warning", f"[yellow]{w}[/yellow]")
    return tbl


_CACHE_OPT = typer.Option(None, "--cache", help="Location directory cache (.pkl).")
_REFERENCE_OPT = typer.Option(
    None, "--reference", help="Reference workbook used to build the directory."
)


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """nationwide-report CLI."""


# ── generate command ─────────────────────────────────────────────


@app.command()
def generate(
    input_file: Path = typer.Argument(
        ..., help="Dealer inventory workbook (.xlsx).", exists=True, readable=True,
    ),
    output_file: Path = typer.Argument(..., help="Where to save the nationwide report."),
    cache: Path | None = _CACHE_OPT,
    reference: Path | None = _REFERENCE_OPT,
    template: Path | None = typer.Option(
        None, "--template", help="Nationwide template workbook."
    ),
    ledger: Path | None = typer.Option(
        None, "--ledger", help="CSV that collects unresolved location codes."
    ),
    work: Path | None = typer.Option(
        None, "--work", help="Working copy of the template."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress informational output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug logging."
    ),
) -> None:
    """Generate the nationwide report from a dealer inventory sheet."""
    _setup_logging(verbose=verbose)
    echo = _printer(quiet)
    config = _config(
        cache=cache, template=template, reference=reference, ledger=ledger, work=work
    )

    if not quiet:
        console.print(Panel(
            f"[bold]nationwide-report[/bold] v{__version__}\n"
            f"Input:  {input_file}\nOutput: {output_file}",
            title="Generate", border_style="blue",
        ))

    echo("[blue]>[/blue] Generating sheet …")
    try:
        result = run_generate(input_file, output_file, config)
    except _EXPECTED_ERRORS as exc:
        _err(str(exc))
        raise typer.Exit(code=2)
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)

    if not quiet:
        console.print(_summary_table(result.report))
        if result.ledger_written:
            console.print(
                f"  {result.ledger_written} unresolved codes -> {result.ledger_path}"
            )
        console.print(Panel(
            f"[green]Done[/green] — {result.report.rows_out} rows -> {result.report_path}",
            title="Sheet Generated", border_style="green",
        ))


# ── build-directory command ──────────────────────────────────────


@app.command("build-directory")
def build_directory_cmd(
    cache: Path | None = _CACHE_OPT,
    reference: Path | None = _REFERENCE_OPT,
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress informational output."
    ),
) -> None:
    """Rebuild the location directory cache from the reference workbook."""
    _setup_logging(verbose=False)
    echo = _printer(quiet)
    config = _config(cache=cache, reference=reference)

    echo(f"[blue]>[/blue] Reading {config.reference_path} …")
    try:
        directory = build_directory(load_reference_rows(config.reference_path))
        save_directory(directory, config.cache_path)
    except _EXPECTED_ERRORS as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    if directory.overwritten:
        echo(f"  [yellow]![/yellow] {directory.overwritten} duplicate codes (last row wins)")
    echo(f"  {len(directory)} codes -> {config.cache_path}")


# ── lookup command ───────────────────────────────────────────────


@app.command()
def lookup(
    code: str = typer.Argument(..., help="Location code, e.g. SFO."),
    cache: Path | None = _CACHE_OPT,
    reference: Path | None = _REFERENCE_OPT,
) -> None:
    """Print the city and state a location code resolves to."""
    _setup_logging(verbose=False)
    config = _config(cache=cache, reference=reference)
    try:
        directory = ensure_directory(config.cache_path, config.reference_path)
    except _EXPECTED_ERRORS as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    record, found = directory.lookup(code)
    if not found or record is None:
        _err(f"Unknown location code: {code}")
        raise typer.Exit(code=1)
    console.print(f"{record.code}: {record.city}, {record.state}")
