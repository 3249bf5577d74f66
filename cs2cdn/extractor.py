"""Concurrent extraction of selected logical paths from the local archive."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from cs2cdn.context import PipelineContext
from cs2cdn.exceptions import ExtractionPartialFailure
from cs2cdn.fetcher.tools import SOURCE2_VIEWER, executable_path

ERROR_TEXT_LIMIT = 500


@dataclass
class DumpJob:
    """One logical path or prefix handed to the extraction tool.

    Attributes:
        path: Logical path or prefix used as the extraction filter
        success: Whether the tool finished cleanly
        error_detail: Truncated error text for failed jobs
    """

    path: str
    success: bool = False
    error_detail: str | None = None


@dataclass
class DumpReport:
    """Outcome of one extraction batch, in submission order."""

    jobs: list[DumpJob] = field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        return [job.path for job in self.jobs if job.success]

    @property
    def failed(self) -> list[tuple[str, str]]:
        return [(job.path, job.error_detail or "") for job in self.jobs if not job.success]

    @property
    def has_failures(self) -> bool:
        return any(not job.success for job in self.jobs)

    def as_error(self) -> ExtractionPartialFailure | None:
        """The partial-failure error describing this batch, if any job failed."""
        if not self.has_failures:
            return None
        return ExtractionPartialFailure(self.failed)


def _truncate(text: str) -> str:
    text = text.strip()
    if len(text) > ERROR_TEXT_LIMIT:
        return text[:ERROR_TEXT_LIMIT] + "..."
    return text


def build_dump_command(ctx: PipelineContext, path: str) -> list[str]:
    return [
        str(executable_path(ctx, SOURCE2_VIEWER)),
        "--input", str(ctx.index_path),
        "--vpk_filepath", path,
        "-o", str(ctx.output_root),
        "-d",
    ]


def _run_job(ctx: PipelineContext, job: DumpJob) -> DumpJob:
    ctx.log.debug("Dumping %s...", job.path)
    try:
        result = ctx.runner(build_dump_command(ctx, job.path))
    except OSError as e:
        job.error_detail = _truncate(f"failed to launch {SOURCE2_VIEWER.name}: {e}")
        return job

    stderr = (result.stderr or "").strip()
    if result.returncode != 0:
        job.error_detail = _truncate(stderr or f"exit status {result.returncode}")
    elif stderr:
        job.error_detail = _truncate(stderr)
    else:
        job.success = True
    return job


def dump(ctx: PipelineContext, paths: list[str]) -> DumpReport:
    """Extract every path concurrently and report per-path results.

    A failing path never aborts its siblings; all jobs run to completion
    before the report is returned.
    """
    report = DumpReport(jobs=[DumpJob(path=p) for p in paths])
    if not report.jobs:
        return report

    Path(ctx.output_root).mkdir(parents=True, exist_ok=True)
    workers = max(1, min(ctx.config.max_workers, len(report.jobs)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(lambda job: _run_job(ctx, job), report.jobs))

    for path, detail in report.failed:
        ctx.log.error("Failed to dump %s: %s", path, detail)
    ctx.log.info(
        "Dumped %d path(s), %d failed", len(report.succeeded), len(report.failed)
    )
    return report
