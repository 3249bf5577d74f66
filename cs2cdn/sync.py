"""Mirror of the normalized output tree to object storage via s5cmd."""

import os
import shutil

from cs2cdn.constants import ECON_PATH
from cs2cdn.context import PipelineContext
from cs2cdn.exceptions import SyncFailed

SYNC_TOOL = "s5cmd"
ENDPOINT_ENV = "S3_ENDPOINT_URL"


def build_sync_command(
    ctx: PipelineContext, bucket_url: str, endpoint_url: str | None = None
) -> list[str]:
    source = ctx.output_root / ECON_PATH
    command = [SYNC_TOOL]
    if endpoint_url:
        command += ["--endpoint-url", endpoint_url]
    command += ["sync", "--delete", f"{source.as_posix()}/*", bucket_url]
    return command


def sync_tree(ctx: PipelineContext, bucket_url: str) -> None:
    """Delete-reconciling mirror of the public econ tree to bucket_url.

    Raises:
        SyncFailed: If s5cmd is missing or exits non-zero
    """
    if shutil.which(SYNC_TOOL) is None:
        raise SyncFailed(f"{SYNC_TOOL} not found on PATH")

    command = build_sync_command(ctx, bucket_url, os.environ.get(ENDPOINT_ENV))
    ctx.log.info("Syncing %s to %s", ctx.output_root / ECON_PATH, bucket_url)
    try:
        result = ctx.runner(command)
    except OSError as e:
        raise SyncFailed(f"Failed to launch {SYNC_TOOL}: {e}")
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()[:500]
        raise SyncFailed(f"{SYNC_TOOL} exited with status {result.returncode}: {detail}")
