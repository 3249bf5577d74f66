"""Centralized constants for the cs2cdn package."""

# Steam application and depot holding the game's packaged assets
APP_ID = 730
DEPOT_ID = 2347770

# Logical path prefix under which every economy image lives
ECON_PATH = "panorama/images/econ"

# Package archive layout, relative to the download directory
INDEX_FILE_NAME = "pak01_dir.vpk"
ARCHIVE_SUBDIR = ("game", "csgo")
SEGMENT_NAME_TEMPLATE = "pak01_{:03d}.vpk"

# Archive index value for entries stored inside the directory file itself
EMBEDDED_ARCHIVE_INDEX = 0x7FFF

CONFIG_FILENAME = "cs2cdn.toml"
LOGGER_NAME = "cs2cdn"
LOG_PREFIX = "[cs2cdn.com]"
