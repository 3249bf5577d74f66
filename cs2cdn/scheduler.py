"""Update cycle state machine and the scheduler that repeats it."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from cs2cdn.archive import ArchiveIndex, dump_targets, load_index, required_segments
from cs2cdn.context import PipelineContext
from cs2cdn.exceptions import Cs2CdnError, ExtractionPartialFailure, IndexUnreadable
from cs2cdn.extractor import DumpReport, dump
from cs2cdn.fetcher import ensure_tools, fetch_index, fetch_segments
from cs2cdn.normalizer import NormalizeReport, normalize


class CycleState(Enum):
    IDLE = "idle"
    CHECKING_TOOLS = "checking_tools"
    FETCHING_INDEX = "fetching_index"
    LOADING_INDEX = "loading_index"
    FETCHING_SEGMENTS = "fetching_segments"
    EXTRACTING = "extracting"
    NORMALIZING = "normalizing"
    FAILED = "failed"


@dataclass
class CycleResult:
    """Outcome of one update cycle.

    Attributes:
        state: IDLE after success, FAILED after a fatal error
        failed_in: Stage that was running when the cycle failed
        extraction_error: Non-fatal summary of failed extraction paths
        skipped: True when a one-shot run found the index already present
    """

    state: CycleState = CycleState.IDLE
    failed_in: CycleState | None = None
    error: Cs2CdnError | None = None
    segments: list[int] = field(default_factory=list)
    dump_report: DumpReport | None = None
    normalize_report: NormalizeReport | None = None
    extraction_error: ExtractionPartialFailure | None = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.state is not CycleState.FAILED


def run_cycle(
    ctx: PipelineContext,
    on_state: Callable[[CycleState], None] | None = None,
) -> CycleResult:
    """Run check-tools, fetch-index, select, fetch-segments, extract, normalize.

    Fatal errors stop the cycle and are returned in the result rather
    than raised. Extraction and rename failures are reported only.
    """
    result = CycleResult()
    state = CycleState.IDLE

    def enter(next_state: CycleState) -> None:
        nonlocal state
        state = next_state
        if on_state is not None:
            on_state(next_state)

    ctx.log.info("Checking for CS2 file updates")
    selection = ctx.config.selection()

    try:
        enter(CycleState.CHECKING_TOOLS)
        ctx.ensure_directories()
        ensure_tools(ctx)

        enter(CycleState.FETCHING_INDEX)
        fetch_index(ctx)

        enter(CycleState.LOADING_INDEX)
        index: ArchiveIndex = load_index(ctx.index_path)
        ctx.log.debug("Loaded archive index with %d entries", len(index))

        enter(CycleState.FETCHING_SEGMENTS)
        result.segments = required_segments(index, selection)
        fetch_segments(ctx, result.segments)

        enter(CycleState.EXTRACTING)
        result.dump_report = dump(ctx, dump_targets(index, selection))
    except (Cs2CdnError, OSError) as e:
        error = e if isinstance(e, Cs2CdnError) else Cs2CdnError(f"Filesystem error: {e}")
        ctx.log.error("Update failed while %s: %s", state.value.replace("_", " "), error)
        result.state = CycleState.FAILED
        result.failed_in = state
        result.error = error
        enter(CycleState.FAILED)
        return result

    result.extraction_error = result.dump_report.as_error()
    if result.extraction_error is not None:
        ctx.log.warning("%s, continuing with normalization", result.extraction_error)

    enter(CycleState.NORMALIZING)
    result.normalize_report = normalize(ctx.output_root, ctx.log)

    enter(CycleState.IDLE)
    ctx.log.info("Finished updating CS2 files")
    return result


class UpdateScheduler:
    """Runs update cycles once or on a fixed interval.

    Only one cycle may be in flight; a nested call to run_once while a
    cycle is running is rejected. A failed cycle halts recurring mode.
    """

    def __init__(
        self,
        ctx: PipelineContext,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._ctx = ctx
        self._sleep = sleep
        self._running = False
        self.state = CycleState.IDLE

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval(self) -> int:
        return self._ctx.config.update_interval

    def _set_state(self, state: CycleState) -> None:
        self.state = state

    def run_once(self) -> CycleResult:
        """Run a single full cycle.

        Raises:
            RuntimeError: If a cycle is already running
        """
        if self._running:
            raise RuntimeError("An update cycle is already running")
        self._running = True
        try:
            return run_cycle(self._ctx, on_state=self._set_state)
        finally:
            self._running = False

    def index_present(self) -> bool:
        """Return True if a previously fetched index loads cleanly."""
        try:
            load_index(self._ctx.index_path)
        except IndexUnreadable:
            return False
        return True

    def run(self, force: bool = False, max_cycles: int | None = None) -> CycleResult:
        """Run according to the configured interval.

        With an interval of 0 this is one-shot: an already present index
        skips the cycle unless force is set. Otherwise cycles repeat every
        interval seconds until one fails or max_cycles have run.
        """
        log = self._ctx.log

        if not self._ctx.config.recurring:
            log.info("Auto-updates disabled, checking if required files exist")
            if not force and self.index_present():
                log.info("Archive index already present, skipping update")
                return CycleResult(skipped=True)
            if not force:
                log.warning("Needed CS2 files not installed")
            return self.run_once()

        log.info(
            "Auto-updates enabled, checking for updates every %d seconds", self.interval
        )
        cycles = 0
        while True:
            result = self.run_once()
            cycles += 1
            if not result.ok:
                log.error("Scheduler halted after failed cycle, restart required")
                return result
            if max_cycles is not None and cycles >= max_cycles:
                return result
            self._sleep(self.interval)
