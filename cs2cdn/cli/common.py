"""Shared CLI utilities for cs2cdn commands."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from cs2cdn.config import Cs2CdnConfig, load_config, validate_log_level
from cs2cdn.context import PipelineContext
from cs2cdn.exceptions import Cs2CdnError
from cs2cdn.extractor import DumpReport
from cs2cdn.logging_utils import setup_logging

console = Console()


def fail(message: str) -> None:
    """Print an error line and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def resolve_config(
    config_path: Path | None,
    directory: Path | None = None,
    log_level: str | None = None,
    interval: int | None = None,
) -> Cs2CdnConfig:
    """Load configuration and apply command line overrides."""
    try:
        config = load_config(config_path)
        if directory is not None:
            config.directory = directory
        if log_level is not None:
            config.log_level = validate_log_level(log_level)
        if interval is not None:
            if interval < 0:
                fail("--interval must not be negative")
            config.update_interval = interval
    except Cs2CdnError as e:
        fail(str(e))
    return config


def build_context(config: Cs2CdnConfig) -> PipelineContext:
    """Set up logging and the pipeline context for a command."""
    log = setup_logging(config.log_level)
    return PipelineContext(config=config, log=log)


def print_dump_report(report: DumpReport) -> None:
    """Print extraction counts and any failed paths."""
    console.print(
        f"[green]Extracted {len(report.succeeded)} path(s)[/green]"
        + (f", [red]{len(report.failed)} failed[/red]" if report.failed else "")
    )
    for path, detail in report.failed:
        console.print(f"  [red]{escape(path)}[/red] [dim]{escape(detail)}[/dim]")
