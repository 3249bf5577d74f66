"""CLI entry point for cs2cdn."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from cs2cdn import __version__
from cs2cdn.archive import load_index, required_segments
from cs2cdn.cli.common import (
    build_context,
    console,
    fail,
    print_dump_report,
    resolve_config,
)
from cs2cdn.config import Cs2CdnConfig
from cs2cdn.constants import CONFIG_FILENAME
from cs2cdn.exceptions import Cs2CdnError
from cs2cdn.scheduler import CycleResult, UpdateScheduler
from cs2cdn.sync import sync_tree

app = typer.Typer(
    name="cs2cdn",
    help="Mirror CS2 economy images from the game depot into a flat file tree.",
    no_args_is_help=True,
    add_completion=False,
)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help=f"Path to {CONFIG_FILENAME}. Defaults to discovery."),
]
DirectoryOption = Annotated[
    Optional[Path],
    typer.Option("--directory", "-d", help="Data directory for tools, archive and output."),
]
LogLevelOption = Annotated[
    Optional[str],
    typer.Option("--log-level", "-l", help="Log verbosity (debug, info, warning, error)."),
]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"cs2cdn {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Mirror CS2 economy images from the game depot into a flat file tree."""


def _report(result: CycleResult) -> None:
    if result.skipped:
        console.print("[dim]Archive index already present. Use --force to update.[/dim]")
        return
    if not result.ok:
        stage = result.failed_in.value.replace("_", " ") if result.failed_in else "update"
        fail(f"Update failed while {stage}: {result.error}")
    if result.dump_report is not None:
        print_dump_report(result.dump_report)
    if result.normalize_report is not None and result.normalize_report.errors:
        console.print(
            f"[yellow]{len(result.normalize_report.errors)} file(s) could not be renamed[/yellow]"
        )
    console.print("[green]Finished updating CS2 files[/green]")


@app.command()
def update(
    config_path: ConfigOption = None,
    directory: DirectoryOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Run a single full update cycle.

    Examples:
        cs2cdn update
        cs2cdn update --directory /srv/cs2 --log-level debug
    """
    config = resolve_config(config_path, directory, log_level, interval=0)
    with build_context(config) as ctx:
        result = UpdateScheduler(ctx).run_once()
    _report(result)


@app.command()
def run(
    config_path: ConfigOption = None,
    directory: DirectoryOption = None,
    log_level: LogLevelOption = None,
    interval: Annotated[
        Optional[int],
        typer.Option("--interval", "-i", help="Seconds between cycles. 0 runs once."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="In one-shot mode, update even if the index is present."),
    ] = False,
) -> None:
    """Run the scheduler using the configured update interval.

    With an interval of 0 the archive is only fetched when it is missing.
    Otherwise a cycle runs every interval seconds until one fails.
    """
    config = resolve_config(config_path, directory, log_level, interval)
    with build_context(config) as ctx:
        try:
            result = UpdateScheduler(ctx).run(force=force)
        except KeyboardInterrupt:
            console.print("[dim]Interrupted[/dim]")
            raise typer.Exit(130)
    _report(result)


@app.command()
def segments(
    config_path: ConfigOption = None,
    directory: DirectoryOption = None,
) -> None:
    """Print the archive segments the current selection needs."""
    config = resolve_config(config_path, directory)
    with build_context(config) as ctx:
        try:
            index = load_index(ctx.index_path)
        except Cs2CdnError as e:
            fail(str(e))
        ids = required_segments(index, config.selection())
    console.print(" ".join(str(i) for i in ids) if ids else "[dim]No segments required[/dim]")


@app.command()
def sync(
    bucket_url: Annotated[
        str,
        typer.Argument(help="Destination, e.g. s3://cs2cdn/econ/"),
    ],
    config_path: ConfigOption = None,
    directory: DirectoryOption = None,
) -> None:
    """Mirror the normalized econ tree to object storage with s5cmd."""
    config = resolve_config(config_path, directory)
    with build_context(config) as ctx:
        try:
            sync_tree(ctx, bucket_url)
        except Cs2CdnError as e:
            fail(str(e))
    console.print(f"[green]Synced to {bucket_url}[/green]")


@app.command()
def init(
    path: Annotated[
        Path,
        typer.Argument(help="Where to write the config file."),
    ] = Path(CONFIG_FILENAME),
) -> None:
    """Write a default cs2cdn.toml."""
    if path.exists():
        fail(f"{path} already exists")
    Cs2CdnConfig().save(path)
    console.print(f"[green]Created {path}[/green]")


if __name__ == "__main__":
    app()
