"""Configuration constants for pagetree."""

import os
from pathlib import Path

# Materialized path separator. The root page's path is the separator alone.
PATH_SEPARATOR: str = "/"
ROOT_PATH: str = PATH_SEPARATOR

# Parked fixtures created at bootstrap.
ROOT_TYPE: str = "home"
TRASH_SLUG: str = "trash"
TRASH_TYPE: str = "trash"

DB_FILENAME: str = "pages.db"

# Directory with the page database. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/pagetree").expanduser(),
    Path("~/.pagetree").expanduser(),
]


def resolve_data_directory() -> Path:
    """Return the data directory: $PAGETREE_DATA_DIR, else the first existing candidate.

    Falls back to the first candidate when none exists yet.
    """
    override = os.environ.get("PAGETREE_DATA_DIR")
    if override:
        return Path(override).expanduser()
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]

# Loguru formats for the terminal and for the optional --log-file sink.
LOG_FORMAT: str = "{level.icon} {message}"
LOG_FILE_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} | {message}"
