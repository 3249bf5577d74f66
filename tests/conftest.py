"""Test configuration and fixtures."""

import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

import httpx
import pytest

from cs2cdn.archive import ArchiveIndex, IndexEntry
from cs2cdn.config import Cs2CdnConfig
from cs2cdn.context import PipelineContext
from cs2cdn.logging_utils import get_logger


class FakeRunner:
    """Stands in for subprocess execution of the external tools.

    Handlers are keyed by executable file name and receive the full
    argument list. Unhandled tools succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.handlers: dict[str, Callable[[list[str]], subprocess.CompletedProcess]] = {}

    def on(self, executable: str, handler: Callable[[list[str]], subprocess.CompletedProcess]) -> None:
        self.handlers[executable] = handler

    def __call__(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        args = list(args)
        self.calls.append(args)
        handler = self.handlers.get(Path(args[0]).name)
        if handler is not None:
            return handler(args)
        return completed(args)

    def calls_to(self, executable: str) -> list[list[str]]:
        return [c for c in self.calls if Path(c[0]).name == executable]


def completed(args: Sequence[str], returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(list(args), returncode, stdout=stdout, stderr=stderr)


def arg_after(args: list[str], flag: str) -> str:
    return args[args.index(flag) + 1]


def make_index(entries: dict[str, int]) -> ArchiveIndex:
    """Build an index from logical path -> segment id."""
    return ArchiveIndex(
        IndexEntry(logical_path=path, segment_id=segment, size=1)
        for path, segment in entries.items()
    )


def _not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404)


@pytest.fixture
def config(tmp_path: Path) -> Cs2CdnConfig:
    """Default configuration rooted in a temporary data directory."""
    return Cs2CdnConfig(directory=tmp_path / "data")


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def http_handler():
    """Mutable holder for the mock transport's request handler."""
    return {"handler": _not_found}


@pytest.fixture
def ctx(config: Cs2CdnConfig, runner: FakeRunner, http_handler) -> PipelineContext:
    """Pipeline context with mocked HTTP and process execution."""
    transport = httpx.MockTransport(lambda request: http_handler["handler"](request))
    client = httpx.Client(transport=transport, follow_redirects=True)
    context = PipelineContext(config=config, http=client, log=get_logger(), runner=runner)
    yield context
    context.close()


@pytest.fixture
def installed_tools(ctx: PipelineContext) -> PipelineContext:
    """Context whose tool executables already exist on disk."""
    ctx.directory.mkdir(parents=True, exist_ok=True)
    for name in (ctx.config.depot_downloader, ctx.config.source2_viewer):
        (ctx.directory / name).write_text("#!/bin/sh\n")
    return ctx
