"""Per-process pipeline context handed to every stage."""

import logging
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from cs2cdn.config import Cs2CdnConfig
from cs2cdn.constants import ARCHIVE_SUBDIR, INDEX_FILE_NAME
from cs2cdn.logging_utils import get_logger

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
)

ProcessRunner = Callable[[Sequence[str]], subprocess.CompletedProcess]


def run_process(args: Sequence[str]) -> subprocess.CompletedProcess:
    """Run an external tool to completion, capturing its output as text."""
    return subprocess.run(
        list(args),
        capture_output=True,
        text=True,
        check=False,
    )


def make_http_client() -> httpx.Client:
    return httpx.Client(
        headers={"user-agent": USER_AGENT},
        follow_redirects=True,
        timeout=60.0,
    )


@dataclass
class PipelineContext:
    """Configuration plus the collaborators the pipeline talks through.

    Built once per process. Tests swap in a mock HTTP transport and a
    fake process runner instead of touching the network or real tools.
    """

    config: Cs2CdnConfig
    http: httpx.Client = field(default_factory=make_http_client)
    log: logging.Logger = field(default_factory=get_logger)
    runner: ProcessRunner = run_process

    @property
    def directory(self) -> Path:
        return self.config.directory

    @property
    def output_root(self) -> Path:
        return self.config.output_root

    @property
    def index_path(self) -> Path:
        """Local path of the downloaded archive directory file."""
        return self.directory.joinpath(*ARCHIVE_SUBDIR, INDEX_FILE_NAME)

    def tool_path(self, executable: str) -> Path:
        return self.directory / executable

    def ensure_directories(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.output_root.mkdir(parents=True, exist_ok=True)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "PipelineContext":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
