"""Archive index model and segment selection."""

from cs2cdn.archive.index import ArchiveIndex, IndexEntry, load_index
from cs2cdn.archive.selection import (
    CATEGORY_CONFIGS,
    DEFAULT_REQUIRED_FILES,
    Category,
    CategoryConfig,
    FeatureSelection,
    dump_targets,
    required_segments,
)

__all__ = [
    # Index model
    "ArchiveIndex",
    "IndexEntry",
    "load_index",
    # Selection
    "Category",
    "CategoryConfig",
    "CATEGORY_CONFIGS",
    "DEFAULT_REQUIRED_FILES",
    "FeatureSelection",
    "dump_targets",
    "required_segments",
]
