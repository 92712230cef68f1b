"""
JSON file helpers shared by the file transport and the cache backend.

Cache files go through ``safe_write_json`` (temp file, then
``os.replace()``), so a reader sees either the old entry or the new one.
"""

import contextlib
import json
import logging
import os
import tempfile

logger = logging.getLogger(__name__)


def load_json_file(path):
    """Parse the JSON file at *path*.  I/O and decode errors propagate."""
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def safe_read_json(path, default=None):
    """Like ``load_json_file``, but return *default* instead of raising.

    A missing file is the normal cache-miss case and is silent; a file
    that exists but cannot be parsed is logged at DEBUG.
    """
    try:
        return load_json_file(path)
    except FileNotFoundError:
        return default
    except (ValueError, OSError) as exc:
        logger.debug("Ignoring unreadable JSON file %s: %s", path, exc)
        return default


def safe_write_json(path, data, *, indent=None, default=None):
    """Replace *path* with *data* encoded as JSON, all at once.

    The document is serialised into a hidden sibling file which is then
    renamed over *path*.  Missing parent directories are created.
    ``default`` is handed to ``json.dump`` for values it cannot encode.
    Any ``OSError``, ``TypeError`` or ``ValueError`` reaches the caller
    and the sibling file is removed first.
    """
    target = os.fspath(path)
    directory = os.path.dirname(target) or os.curdir
    os.makedirs(directory, exist_ok=True)

    staging = tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=directory, prefix=".", suffix=".tmp", delete=False,
    )
    try:
        with staging:
            json.dump(data, staging, indent=indent, ensure_ascii=False, default=default)
        os.replace(staging.name, target)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(staging.name)
        raise
