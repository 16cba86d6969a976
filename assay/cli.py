#!/usr/bin/env python3
"""
Assay CLI - HTTP Response Assertion Tool

Usage:
    assay run <suite.yaml> [OPTIONS]
    assay validate <suite.yaml>
    assay --version
"""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .errors import AssayError
from .reporting import LogFormat, LogMode, LogSettings
from .suite import load_suite, run_suite

app = typer.Typer(
    name="assay",
    help="🔬 Assay - fluent assertions for HTTP responses",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"🔬 Assay v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
    debug: bool = typer.Option(
        False, "--debug",
        help="Show debug logging on stderr"
    ),
):
    """
    🔬 Assay - fluent assertions for HTTP responses

    Check live HTTP services with declarative YAML suites.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def resolve_log_settings(
    suite_settings: LogSettings,
    fmt: Optional[str],
    collect_all: Optional[bool],
) -> LogSettings:
    """
    Combine suite, environment and command-line log settings.

    Command-line flags win over the environment, which wins over the suite.
    """
    mode = os.environ.get("ASSAY_LOG_MODE") or suite_settings.mode.value
    if collect_all is not None:
        mode = LogMode.ALL_OUTCOMES.value if collect_all else LogMode.FAIL_FAST.value
    log_format = fmt or os.environ.get("ASSAY_LOG_FORMAT") or suite_settings.format.value
    return LogSettings.from_values(mode, log_format)


@app.command()
def run(
    suite_file: Path = typer.Argument(
        ...,
        help="Path to the suite YAML file",
        exists=True,
        readable=True,
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", "-u",
        help="Override the suite's base URL"
    ),
    fmt: Optional[str] = typer.Option(
        None, "--format", "-f",
        help="Outcome format: text or json"
    ),
    collect_all: Optional[bool] = typer.Option(
        None, "--collect-all/--fail-fast",
        help="Report every outcome, or stop at the first failure"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Only show outcomes and final status"
    ),
    report_dir: Path = typer.Option(
        Path("reports"), "--report-dir", "-r",
        help="Directory to save JSON reports"
    ),
    no_report: bool = typer.Option(
        False, "--no-report",
        help="Don't save a JSON report file"
    ),
):
    """
    Run a suite.

    Send every request in the suite, check each response and generate a
    run report.
    """
    suite, validation = load_suite(suite_file)

    if not validation.is_valid:
        console.print(f"\n[red]❌ Validation failed:[/red]")
        console.print(str(validation), markup=False)
        raise typer.Exit(code=1)

    try:
        settings = resolve_log_settings(suite.log, fmt, collect_all)
    except AssayError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    # JSON outcome lines must not be interleaved with progress output
    quiet = quiet or settings.format is LogFormat.JSON

    if not quiet:
        console.print(f"\n{'='*60}")
        console.print(f"  [bold]Running:[/bold] {suite.name}")
        console.print(f"  [bold]Base URL:[/bold] {base_url or suite.base_url}")
        console.print(f"  [bold]Requests:[/bold] {len(suite.requests)}")
        console.print(f"  [bold]Mode:[/bold] {settings.mode.value}")
        console.print(f"{'='*60}\n")

    try:
        report = asyncio.run(run_suite(
            suite,
            log_settings=settings,
            stream=sys.stdout,
            base_url=base_url,
            console=None if quiet else console,
        ))
    except AssayError as e:
        console.print(f"[red]❌ {type(e).__name__}:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    if not quiet:
        console.print("\n" + report.summary(), markup=False)

    if not no_report:
        report_path = report.save_json(report_dir / f"{report.run_id}.json")
        if not quiet:
            console.print(f"\n📁 Report saved: {report_path}")

    raise typer.Exit(code=0 if report.passed else 1)


@app.command()
def validate(
    suite_file: Path = typer.Argument(
        ...,
        help="Path to the suite YAML file",
        exists=True,
        readable=True,
    ),
):
    """
    Validate a suite YAML file.

    Check the schema and report any errors without sending requests.
    """
    console.print(f"\n📄 Validating: {suite_file}")

    suite, validation = load_suite(suite_file)

    if not validation.is_valid:
        console.print(f"\n[red]❌ Validation failed:[/red]")
        console.print(str(validation), markup=False)
        raise typer.Exit(code=1)

    console.print(f"\n[green]✅ Valid suite:[/green] {suite.name}")
    console.print(f"   Base URL: {suite.base_url}")
    console.print(f"   Requests: {len(suite.requests)}")

    table = Table(title="Requests")
    table.add_column("ID", style="cyan")
    table.add_column("Method", style="magenta")
    table.add_column("Path")
    table.add_column("Expectations")

    for request in suite.requests:
        checks = ", ".join(check.describe() for check in request.expect) or "-"
        table.add_row(request.id, request.method.value, request.path or "/", checks)

    console.print()
    console.print(table)
    raise typer.Exit(code=0)


@app.command()
def info():
    """
    Show information about Assay.
    """
    console.print(f"""
🔬 [bold]Assay[/bold] v{__version__}

Fluent assertions for HTTP responses

[bold]Features:[/bold]
  • Declarative YAML suites
  • Status, header, JSON body, JSON path and response time checks
  • JSON Schema validation
  • Fail-fast or collect-all reporting, as text or JSON lines
  • Authentication support (Bearer, API Key, Basic)

[bold]Quick Start:[/bold]
  assay run suites/users.yaml
  assay validate suites/users.yaml
""")


if __name__ == "__main__":
    app()
