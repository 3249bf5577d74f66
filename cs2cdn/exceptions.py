"""Shared exception classes for cs2cdn."""


class Cs2CdnError(Exception):
    """Base exception for cs2cdn errors."""


class ConfigNotFoundError(Cs2CdnError):
    """Raised when an explicitly requested cs2cdn.toml does not exist."""


class ConfigParseError(Cs2CdnError):
    """Raised when cs2cdn.toml cannot be parsed."""


class ConfigValidationError(Cs2CdnError):
    """Raised when cs2cdn.toml contains invalid configuration."""


class ToolResolutionFailed(Cs2CdnError):
    """Raised when the latest release of an external tool cannot be resolved."""


class ToolDownloadFailed(Cs2CdnError):
    """Raised when an external tool's release asset cannot be downloaded."""


class IndexUnreadable(Cs2CdnError):
    """Raised when the archive index file is missing or malformed."""


class FetchFailed(Cs2CdnError):
    """Raised when the download tool exits non-zero or cannot be launched."""


class SyncFailed(Cs2CdnError):
    """Raised when mirroring the output tree to object storage fails."""


class ExtractionPartialFailure(Cs2CdnError):
    """Some extraction jobs failed. Reported, never raised by the pipeline."""

    def __init__(self, failed: list[tuple[str, str]]) -> None:
        self.failed = failed
        super().__init__(f"{len(failed)} extraction job(s) failed")


class NormalizationFailure(Cs2CdnError):
    """A file could not be renamed. Reported, never raised by the pipeline."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to normalize {path}: {detail}")
