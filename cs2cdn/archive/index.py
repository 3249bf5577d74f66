"""In-memory model of the package archive's directory index."""

import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import vpk

from cs2cdn.exceptions import IndexUnreadable


@dataclass(frozen=True)
class IndexEntry:
    """One logical file of the archive and the segment holding its data."""

    logical_path: str
    segment_id: int
    size: int


class ArchiveIndex:
    """Immutable, insertion-ordered collection of index entries.

    Iterating with entries() yields a fresh iterator every time, so the
    index can be walked any number of times during one update cycle.
    """

    def __init__(self, entries: Iterable[IndexEntry]) -> None:
        self._entries: dict[str, IndexEntry] = {}
        for entry in entries:
            if entry.logical_path in self._entries:
                raise IndexUnreadable(
                    f"Duplicate logical path in index: {entry.logical_path}"
                )
            if entry.segment_id < 0:
                raise IndexUnreadable(
                    f"Negative segment id {entry.segment_id} for {entry.logical_path}"
                )
            self._entries[entry.logical_path] = entry

    def entries(self) -> Iterator[IndexEntry]:
        """Return entries in the order the source index listed them."""
        return iter(self._entries.values())

    def __iter__(self) -> Iterator[IndexEntry]:
        return self.entries()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, logical_path: object) -> bool:
        return logical_path in self._entries

    def get(self, logical_path: str) -> IndexEntry | None:
        return self._entries.get(logical_path)

    @property
    def paths(self) -> list[str]:
        return list(self._entries)


def load_index(index_path: Path) -> ArchiveIndex:
    """Load the archive directory file at index_path.

    Args:
        index_path: Path to the downloaded ``pak01_dir.vpk``

    Returns:
        The parsed ArchiveIndex

    Raises:
        IndexUnreadable: If the file is missing or cannot be parsed
    """
    if not index_path.is_file():
        raise IndexUnreadable(f"Archive index not found: {index_path}")

    try:
        pak = vpk.open(str(index_path))
        entries = []
        for logical_path in pak:
            meta = pak.get_file_meta(logical_path)
            entries.append(
                IndexEntry(
                    logical_path=logical_path,
                    segment_id=meta["archive_index"],
                    size=meta.get("preload_length", 0) + meta.get("file_length", 0),
                )
            )
    # vpk signals truncated data with struct.error and bad v2 section sizes with AssertionError
    except (OSError, ValueError, KeyError, struct.error, AssertionError) as e:
        raise IndexUnreadable(f"Failed to read archive index {index_path}: {e}")

    return ArchiveIndex(entries)
