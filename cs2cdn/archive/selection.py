"""Selection of the archive segments and logical paths a cycle needs."""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from cs2cdn.archive.index import ArchiveIndex
from cs2cdn.constants import ECON_PATH, EMBEDDED_ARCHIVE_INDEX


class Category(Enum):
    """Independently toggleable group of economy images."""

    STICKERS = "stickers"
    PATCHES = "patches"
    GRAFFITI = "graffiti"
    CHARACTERS = "characters"
    MUSIC_KITS = "music_kits"
    CASES = "cases"
    TOOLS = "tools"
    STATUS_ICONS = "status_icons"
    WEAPONS = "weapons"
    OTHER_WEAPONS = "other_weapons"
    SET_ICONS = "set_icons"
    SEASON_ICONS = "season_icons"
    PREMIER_SEASONS = "premier_seasons"
    TOURNAMENTS = "tournaments"
    KEYCHAINS = "keychains"


@dataclass(frozen=True)
class CategoryConfig:
    """Where a category lives in the archive and whether it is on by default."""

    category: Category
    prefix: str  # e.g., "panorama/images/econ/stickers"
    enabled_by_default: bool = True


CATEGORY_CONFIGS: dict[Category, CategoryConfig] = {
    Category.STICKERS: CategoryConfig(Category.STICKERS, f"{ECON_PATH}/stickers"),
    Category.PATCHES: CategoryConfig(Category.PATCHES, f"{ECON_PATH}/patches"),
    Category.GRAFFITI: CategoryConfig(Category.GRAFFITI, f"{ECON_PATH}/stickers/default"),
    Category.CHARACTERS: CategoryConfig(Category.CHARACTERS, f"{ECON_PATH}/characters"),
    Category.MUSIC_KITS: CategoryConfig(Category.MUSIC_KITS, f"{ECON_PATH}/music_kits"),
    Category.CASES: CategoryConfig(Category.CASES, f"{ECON_PATH}/weapon_cases"),
    Category.TOOLS: CategoryConfig(Category.TOOLS, f"{ECON_PATH}/tools"),
    Category.STATUS_ICONS: CategoryConfig(Category.STATUS_ICONS, f"{ECON_PATH}/status_icons"),
    Category.WEAPONS: CategoryConfig(Category.WEAPONS, f"{ECON_PATH}/default_generated"),
    Category.OTHER_WEAPONS: CategoryConfig(Category.OTHER_WEAPONS, f"{ECON_PATH}/weapons"),
    Category.SET_ICONS: CategoryConfig(Category.SET_ICONS, f"{ECON_PATH}/set_icons"),
    Category.SEASON_ICONS: CategoryConfig(Category.SEASON_ICONS, f"{ECON_PATH}/season_icons"),
    Category.PREMIER_SEASONS: CategoryConfig(Category.PREMIER_SEASONS, f"{ECON_PATH}/premier_seasons"),
    Category.TOURNAMENTS: CategoryConfig(Category.TOURNAMENTS, f"{ECON_PATH}/tournaments"),
    Category.KEYCHAINS: CategoryConfig(Category.KEYCHAINS, f"{ECON_PATH}/keychains"),
}

DEFAULT_REQUIRED_FILES: tuple[str, ...] = (
    "scripts/items/items_game.txt",
    "resource/csgo_english.txt",
)


@dataclass(frozen=True)
class FeatureSelection:
    """Which categories and extra logical paths a cycle must mirror.

    Attributes:
        enabled: Enabled state for every category
        required_files: Logical paths that are always needed
        required_patterns: Compiled patterns for additional needed paths
    """

    enabled: Mapping[Category, bool] = field(
        default_factory=lambda: {
            c: cfg.enabled_by_default for c, cfg in CATEGORY_CONFIGS.items()
        }
    )
    required_files: tuple[str, ...] = DEFAULT_REQUIRED_FILES
    required_patterns: tuple[re.Pattern[str], ...] = ()

    @classmethod
    def build(
        cls,
        enabled: Mapping[Category, bool],
        required_files: Iterable[str] = DEFAULT_REQUIRED_FILES,
        required_patterns: Iterable[str | re.Pattern[str]] = (),
    ) -> "FeatureSelection":
        """Create a selection, filling unspecified categories with their defaults."""
        flags = {c: cfg.enabled_by_default for c, cfg in CATEGORY_CONFIGS.items()}
        flags.update(enabled)
        patterns = tuple(
            p if isinstance(p, re.Pattern) else re.compile(p) for p in required_patterns
        )
        return cls(
            enabled=flags,
            required_files=tuple(required_files),
            required_patterns=patterns,
        )

    @property
    def enabled_categories(self) -> list[Category]:
        """Enabled categories in table order."""
        return [c for c in CATEGORY_CONFIGS if self.enabled.get(c, False)]

    @property
    def enabled_prefixes(self) -> list[str]:
        return [CATEGORY_CONFIGS[c].prefix for c in self.enabled_categories]

    def matches_pattern(self, logical_path: str) -> bool:
        return any(p.search(logical_path) for p in self.required_patterns)

    def is_required(self, logical_path: str, prefixes: list[str] | None = None) -> bool:
        """Return True if a logical path is needed by this selection.

        A path is needed when it lies under an enabled category prefix,
        equals a required file, or matches a required pattern.
        """
        if prefixes is None:
            prefixes = self.enabled_prefixes
        return (
            any(logical_path.startswith(prefix) for prefix in prefixes)
            or logical_path in self.required_files
            or self.matches_pattern(logical_path)
        )


def required_segments(index: ArchiveIndex, selection: FeatureSelection) -> list[int]:
    """Compute the sorted, duplicate-free segment ids a selection needs.

    Entries stored inside the directory file itself have no segment and
    are skipped, since the index is always present before this runs.
    """
    prefixes = selection.enabled_prefixes
    segments: set[int] = set()
    for entry in index.entries():
        if entry.segment_id == EMBEDDED_ARCHIVE_INDEX:
            continue
        if selection.is_required(entry.logical_path, prefixes):
            segments.add(entry.segment_id)
    return sorted(segments)


def _collapse_nested(prefixes: list[str]) -> list[str]:
    """Drop prefixes that sit inside another selected prefix."""
    collapsed = []
    for prefix in prefixes:
        if prefix in collapsed:
            continue
        if any(
            prefix != other and prefix.startswith(other.rstrip("/") + "/")
            for other in prefixes
        ):
            continue
        collapsed.append(prefix)
    return collapsed


def dump_targets(index: ArchiveIndex, selection: FeatureSelection) -> list[str]:
    """Logical paths and prefixes to hand to the extraction tool.

    Enabled category prefixes come first, then the required files, then
    every index entry matching a required pattern. Prefixes nested in
    another selected prefix are dropped so extraction outputs never overlap.
    """
    targets = _collapse_nested(selection.enabled_prefixes)
    seen = set(targets)

    def covered(path: str) -> bool:
        return any(path.startswith(prefix.rstrip("/") + "/") for prefix in targets)

    for path in selection.required_files:
        if path not in seen and not covered(path):
            targets.append(path)
            seen.add(path)

    if selection.required_patterns:
        for entry in index.entries():
            path = entry.logical_path
            if path in seen or covered(path):
                continue
            if selection.matches_pattern(path):
                targets.append(path)
                seen.add(path)

    return targets
