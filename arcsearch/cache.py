"""
arcsearch/cache.py -- Time-boxed key/value cache for loaded collections.

``TTLCache`` enforces freshness at read time: an entry older than the TTL
is evicted and reported as a miss.  Storage is delegated to a backend:

    MemoryBackend     a plain dict, gone when the process exits
    JsonFileBackend   one JSON file per key under the user cache directory

Write failures never reach the caller.  A backend raises
``CacheWriteError``; the cache logs it and carries on, so the data that
was about to be cached is still returned, just not cached.

Usage::

    cache = TTLCache(ttl=300)
    value, fresh = cache.get("items")
    if not fresh:
        value = load()
        cache.set("items", value)
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from arcsearch.config import DEFAULT_CACHE_TTL
from arcsearch.errors import CacheWriteError
from arcsearch.paths import get_cache_dir
from arcsearch.utils import safe_read_json, safe_write_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    data: Any
    written_at: float


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class MemoryBackend:
    """In-process dict storage.  Values are stored by reference."""

    def __init__(self):
        self._store: dict[str, CacheEntry] = {}

    def read(self, key: str) -> CacheEntry | None:
        return self._store.get(key)

    def write(self, key: str, entry: CacheEntry) -> None:
        self._store[key] = entry

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


def _encode_model(obj: Any) -> Any:
    """``json.dump`` hook: serialize pydantic models by their JSON aliases."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class JsonFileBackend:
    """Store each entry as ``<directory>/<key>.json``.

    The file holds ``{"data": ..., "timestamp": ...}``.  Pydantic models
    are written in their JSON (alias) form, so values read back are plain
    JSON structures.  Unreadable or malformed files count as misses.
    """

    def __init__(self, directory: str | None = None):
        self.directory = directory or get_cache_dir()

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def read(self, key: str) -> CacheEntry | None:
        doc = safe_read_json(self._path(key))
        if not isinstance(doc, dict) or "data" not in doc:
            return None
        timestamp = doc.get("timestamp")
        if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
            return None
        return CacheEntry(data=doc["data"], written_at=float(timestamp))

    def write(self, key: str, entry: CacheEntry) -> None:
        doc = {"data": entry.data, "timestamp": entry.written_at}
        try:
            safe_write_json(self._path(key), doc, default=_encode_model)
        except (OSError, TypeError, ValueError) as exc:
            raise CacheWriteError(key, exc) from exc

    def delete(self, key: str) -> None:
        try:
            os.unlink(self._path(key))
        except FileNotFoundError:
            pass

    def clear(self) -> None:
        if not os.path.isdir(self.directory):
            return
        for name in os.listdir(self.directory):
            if name.endswith(".json"):
                self.delete(name[: -len(".json")])


# ---------------------------------------------------------------------------
# TTLCache
# ---------------------------------------------------------------------------

class TTLCache:
    """Key/value cache whose entries expire *ttl* seconds after writing.

    Parameters
    ----------
    backend : MemoryBackend | JsonFileBackend | None
        Where entries live (default: a fresh ``MemoryBackend``).
    ttl : float
        Entry lifetime in seconds.
    clock : callable
        Returns the current time in seconds (injectable for tests).
    """

    def __init__(
        self,
        backend=None,
        ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.backend = backend if backend is not None else MemoryBackend()
        self.ttl = ttl
        self._clock = clock

    def get(self, key: str) -> tuple[Any, bool]:
        """Return ``(value, is_fresh)``.  A stale entry is evicted."""
        entry = self.backend.read(key)
        if entry is None:
            return None, False
        age = self._clock() - entry.written_at
        if age > self.ttl:
            logger.debug("Cache entry '%s' expired (age %.1fs)", key, age)
            self.invalidate(key)
            return None, False
        return entry.data, True

    def set(self, key: str, value: Any, written_at: float | None = None) -> bool:
        """Store *value* under *key*.  Returns False if the write failed."""
        if written_at is None:
            written_at = self._clock()
        try:
            self.backend.write(key, CacheEntry(data=value, written_at=written_at))
        except CacheWriteError as exc:
            logger.warning("Failed to cache '%s': %s", key, exc.cause)
            return False
        return True

    def invalidate(self, key: str) -> None:
        try:
            self.backend.delete(key)
        except OSError as exc:
            logger.warning("Failed to evict cache entry '%s': %s", key, exc)

    def clear(self) -> None:
        self.backend.clear()
