"""Tool acquisition and depot downloads."""

from cs2cdn.fetcher.depot import (
    fetch_files,
    fetch_index,
    fetch_segments,
    index_depot_path,
    manifest_file,
    segment_depot_path,
)
from cs2cdn.fetcher.platform import UNKNOWN_PLATFORM, platform_tag
from cs2cdn.fetcher.tools import (
    DEPOT_DOWNLOADER,
    SOURCE2_VIEWER,
    TOOL_SPECS,
    ToolSpec,
    ensure_tool,
    ensure_tools,
    executable_path,
    latest_release_tag,
)

__all__ = [
    # Platform naming
    "platform_tag",
    "UNKNOWN_PLATFORM",
    # Tools
    "ToolSpec",
    "TOOL_SPECS",
    "DEPOT_DOWNLOADER",
    "SOURCE2_VIEWER",
    "ensure_tool",
    "ensure_tools",
    "executable_path",
    "latest_release_tag",
    # Depot downloads
    "manifest_file",
    "fetch_files",
    "fetch_index",
    "fetch_segments",
    "index_depot_path",
    "segment_depot_path",
]
