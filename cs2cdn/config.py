"""Configuration management for cs2cdn.toml."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli
import tomli_w

from cs2cdn.archive.selection import (
    CATEGORY_CONFIGS,
    DEFAULT_REQUIRED_FILES,
    Category,
    FeatureSelection,
)
from cs2cdn.constants import CONFIG_FILENAME
from cs2cdn.exceptions import ConfigNotFoundError, ConfigParseError, ConfigValidationError

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def _default_categories() -> dict[Category, bool]:
    return {c: cfg.enabled_by_default for c, cfg in CATEGORY_CONFIGS.items()}


@dataclass
class Cs2CdnConfig:
    """Configuration from cs2cdn.toml.

    Example:
        directory = "data"
        update_interval = 3600

        [categories]
        weapons = false

        [required]
        patterns = ['^resource/csgo_[a-z]+\\.txt$']
    """

    path: Path | None = None
    directory: Path = Path("data")
    output_directory: Path | None = None
    update_interval: int = 0
    log_level: str = "info"
    source2_viewer: str = "Source2Viewer-CLI"
    depot_downloader: str = "DepotDownloader"
    file_list: str = "filelist.txt"
    max_workers: int = 8
    max_downloads: int = 100
    categories: dict[Category, bool] = field(default_factory=_default_categories)
    required_files: list[str] = field(default_factory=lambda: list(DEFAULT_REQUIRED_FILES))
    required_patterns: list[str] = field(default_factory=list)

    @property
    def output_root(self) -> Path:
        """Directory the extraction tool writes into."""
        return self.output_directory or self.directory

    @property
    def recurring(self) -> bool:
        return self.update_interval > 0

    def selection(self) -> FeatureSelection:
        """Build the immutable feature selection for this configuration."""
        return FeatureSelection.build(
            self.categories, self.required_files, self.required_patterns
        )

    @classmethod
    def load(cls, path: Path) -> "Cs2CdnConfig":
        """Load configuration from cs2cdn.toml.

        Args:
            path: Path to the cs2cdn.toml file

        Returns:
            Parsed Cs2CdnConfig

        Raises:
            ConfigNotFoundError: If the file doesn't exist
            ConfigParseError: If the file cannot be parsed
            ConfigValidationError: If the configuration is invalid
        """
        if not path.exists():
            raise ConfigNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigParseError(f"Failed to parse {path}: {e}")

        return cls.from_dict(data, path=path)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: Path | None = None) -> "Cs2CdnConfig":
        """Create a Cs2CdnConfig from a parsed TOML dict."""
        config = cls(path=path)

        if "directory" in data:
            config.directory = Path(_expect(data, "directory", str))
        if "output_directory" in data:
            config.output_directory = Path(_expect(data, "output_directory", str))
        if "update_interval" in data:
            config.update_interval = _expect(data, "update_interval", int)
            if config.update_interval < 0:
                raise ConfigValidationError("'update_interval' must not be negative")
        if "log_level" in data:
            config.log_level = validate_log_level(_expect(data, "log_level", str))
        for key in ("source2_viewer", "depot_downloader", "file_list"):
            if key in data:
                value = _expect(data, key, str)
                if not value:
                    raise ConfigValidationError(f"'{key}' must not be empty")
                setattr(config, key, value)
        for key in ("max_workers", "max_downloads"):
            if key in data:
                value = _expect(data, key, int)
                if value < 1:
                    raise ConfigValidationError(f"'{key}' must be at least 1")
                setattr(config, key, value)

        # Parse categories
        categories_data = data.get("categories", {})
        if not isinstance(categories_data, dict):
            raise ConfigValidationError("'categories' must be a table")
        for name, enabled in categories_data.items():
            try:
                category = Category(name)
            except ValueError:
                valid = ", ".join(c.value for c in Category)
                raise ConfigValidationError(
                    f"Unknown category '{name}'. Must be one of: {valid}"
                )
            if not isinstance(enabled, bool):
                raise ConfigValidationError(
                    f"Category '{name}' must be true or false, got {type(enabled).__name__}"
                )
            config.categories[category] = enabled

        # Parse always-required paths
        required_data = data.get("required", {})
        if not isinstance(required_data, dict):
            raise ConfigValidationError("'required' must be a table")
        if "files" in required_data:
            config.required_files = _expect_str_list(required_data, "files")
        if "patterns" in required_data:
            patterns = _expect_str_list(required_data, "patterns")
            for pattern in patterns:
                try:
                    re.compile(pattern)
                except re.error as e:
                    raise ConfigValidationError(f"Invalid pattern '{pattern}': {e}")
            config.required_patterns = patterns

        return config

    def save(self, path: Path | None = None) -> None:
        """Save configuration to cs2cdn.toml."""
        target = path or self.path or Path(CONFIG_FILENAME)
        with open(target, "wb") as f:
            tomli_w.dump(self.to_dict(), f)
        self.path = target

    def to_dict(self) -> dict[str, Any]:
        """Convert to a TOML-serializable dict."""
        data: dict[str, Any] = {
            "directory": self.directory.as_posix(),
            "update_interval": self.update_interval,
            "log_level": self.log_level,
            "source2_viewer": self.source2_viewer,
            "depot_downloader": self.depot_downloader,
            "file_list": self.file_list,
            "max_workers": self.max_workers,
            "max_downloads": self.max_downloads,
        }
        if self.output_directory is not None:
            data["output_directory"] = self.output_directory.as_posix()
        data["categories"] = {c.value: enabled for c, enabled in self.categories.items()}
        data["required"] = {
            "files": list(self.required_files),
            "patterns": list(self.required_patterns),
        }
        return data


def _expect(data: dict[str, Any], key: str, expected: type) -> Any:
    value = data[key]
    # bool is a subclass of int and must not pass as one
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigValidationError(
            f"'{key}' must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _expect_str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigValidationError(f"'required.{key}' must be a list of strings")
    return list(value)


def validate_log_level(level: str) -> str:
    """Return the normalized log level name or raise ConfigValidationError."""
    normalized = level.lower()
    if normalized not in LOG_LEVELS:
        raise ConfigValidationError(
            f"Invalid log level '{level}'. Must be one of: {', '.join(LOG_LEVELS)}"
        )
    return normalized


def find_config(start_path: Path | None = None) -> Path | None:
    """Locate cs2cdn.toml in start_path or its nearest parent directory.

    Lookup starts at the current working directory when start_path is
    not given. Returns None if no directory up to the root has one.
    """
    start = (start_path or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, start_path: Path | None = None) -> Cs2CdnConfig:
    """Load an explicit config file, a discovered one, or the defaults."""
    if path is not None:
        return Cs2CdnConfig.load(path)
    existing = find_config(start_path)
    if existing:
        return Cs2CdnConfig.load(existing)
    return Cs2CdnConfig()
