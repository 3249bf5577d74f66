"""Depot downloads driven through a transient manifest file."""

import os
import tempfile
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from cs2cdn.constants import (
    APP_ID,
    ARCHIVE_SUBDIR,
    DEPOT_ID,
    INDEX_FILE_NAME,
    SEGMENT_NAME_TEMPLATE,
)
from cs2cdn.context import PipelineContext
from cs2cdn.exceptions import FetchFailed
from cs2cdn.fetcher.tools import DEPOT_DOWNLOADER, executable_path

# The depot uses Windows separators for archive-relative paths
DEPOT_SEPARATOR = "\\"

STDERR_LIMIT = 500


def depot_path(file_name: str) -> str:
    """Archive-relative path of a file in the package directory."""
    return DEPOT_SEPARATOR.join((*ARCHIVE_SUBDIR, file_name))


def index_depot_path() -> str:
    return depot_path(INDEX_FILE_NAME)


def segment_depot_path(segment_id: int) -> str:
    return depot_path(SEGMENT_NAME_TEMPLATE.format(segment_id))


@contextmanager
def manifest_file(directory: Path, base_name: str, lines: Iterable[str]) -> Iterator[Path]:
    """Write a manifest for one download call and remove it on every exit path.

    The file name carries the process id plus a random component, so
    overlapping runs sharing a directory never write the same manifest.

    Raises:
        FetchFailed: If the manifest cannot be created or written
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=f"{base_name}-{os.getpid()}-", dir=directory)
    except OSError as e:
        raise FetchFailed(f"Failed to create manifest in {directory}: {e}")
    path = Path(name)
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write("\n".join(lines))
        except OSError as e:
            raise FetchFailed(f"Failed to write manifest {path}: {e}")
        yield path
    finally:
        path.unlink(missing_ok=True)


def build_download_command(ctx: PipelineContext, manifest: Path) -> list[str]:
    config = ctx.config
    return [
        str(executable_path(ctx, DEPOT_DOWNLOADER)),
        "-app", str(APP_ID),
        "-depot", str(DEPOT_ID),
        "-filelist", str(manifest),
        "-dir", str(config.directory),
        "-os", "windows",
        "-osarch", "64",
        "-max-downloads", str(config.max_downloads),
        "-validate",
    ]


def fetch_files(ctx: PipelineContext, depot_paths: list[str]) -> None:
    """Download archive-relative paths with validation enabled.

    Raises:
        FetchFailed: If the download tool cannot be launched or exits non-zero
    """
    if not depot_paths:
        ctx.log.debug("Nothing to download")
        return

    with manifest_file(ctx.directory, ctx.config.file_list, depot_paths) as manifest:
        command = build_download_command(ctx, manifest)
        ctx.log.debug("Running %s", " ".join(command))
        try:
            result = ctx.runner(command)
        except OSError as e:
            raise FetchFailed(f"Failed to launch {DEPOT_DOWNLOADER.name}: {e}")

    if result.stdout:
        ctx.log.debug(result.stdout)
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()[:STDERR_LIMIT]
        raise FetchFailed(
            f"{DEPOT_DOWNLOADER.name} exited with status {result.returncode} "
            f"fetching {len(depot_paths)} file(s): {detail}"
        )


def fetch_index(ctx: PipelineContext) -> Path:
    """Download the archive directory file and return its local path."""
    ctx.log.debug("Downloading archive index")
    fetch_files(ctx, [index_depot_path()])
    return ctx.index_path


def fetch_segments(ctx: PipelineContext, segment_ids: list[int]) -> None:
    """Download the physical segments with the given ids."""
    ctx.log.debug("Downloading required archive segments %s", segment_ids)
    fetch_files(ctx, [segment_depot_path(i) for i in segment_ids])
