"""
arcsearch/paths.py -- Path resolution for bundled data and the cache.

Uses platformdirs for the per-user cache directory.
"""

from __future__ import annotations

import os

from platformdirs import user_cache_dir

_APP_NAME = "arc-item-search"
_APP_AUTHOR = "arcsearch"

# Where the aggregation step writes its per-collection JSON files.
DEFAULT_DATA_DIR = os.path.join("public", "data")


def get_cache_dir() -> str:
    """Return the platform-appropriate user cache directory."""
    path = user_cache_dir(_APP_NAME, _APP_AUTHOR)
    os.makedirs(path, exist_ok=True)
    return path


def get_data_dir(data_dir: str | None = None) -> str:
    """Return the absolute directory holding the bundled JSON documents.

    Relative paths are resolved against the current working directory.
    """
    return os.path.abspath(data_dir or DEFAULT_DATA_DIR)
