"""
arcsearch/loader.py -- Load, validate and deduplicate the four collections.

Every collection goes through the same pipeline:

    1. cache lookup by collection name (a hit skips everything below)
    2. fetch the document, retrying transient failures
    3. normalize: a bare object becomes a one-element list; anything that
       is neither a list nor an object raises ``ShapeError``
    4. validate each record; invalid ones are logged with their index and
       dropped; if nothing survives a non-empty document,
       ``EmptyValidResultError`` is raised
    5. items only: drop duplicate ids, first occurrence wins
    6. store the result in the cache (write failures are non-fatal)

Collections are returned as tuples of frozen models.

Usage::

    loader = DataLoader(LoaderSettings(base_url="https://example.org/data"))
    dataset = await loader.load_all()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable

from pydantic import BaseModel, ValidationError

from arcsearch.cache import JsonFileBackend, MemoryBackend, TTLCache
from arcsearch.config import LoaderSettings
from arcsearch.errors import EmptyValidResultError, FetchError, ShapeError
from arcsearch.fetch import AiohttpTransport, FileTransport, Transport, fetch_with_retry
from arcsearch.models.entities import (
    DatasetMetadata,
    HideoutModule,
    Item,
    Project,
    Quest,
)
from arcsearch.models.validators import check_entity

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"


@dataclass(frozen=True)
class CollectionSpec:
    """How one collection is located, validated and labelled in logs."""
    name: str
    filename: str
    model: type[BaseModel]
    label: str
    dedupe: bool = False


ITEMS = CollectionSpec("items", "items.json", Item, "item", dedupe=True)
HIDEOUT_MODULES = CollectionSpec(
    "hideoutModules", "hideoutModules.json", HideoutModule, "hideout module",
)
PROJECTS = CollectionSpec("projects", "projects.json", Project, "project")
QUESTS = CollectionSpec("quests", "quests.json", Quest, "quest")

COLLECTIONS: dict[str, CollectionSpec] = {
    spec.name: spec for spec in (ITEMS, HIDEOUT_MODULES, PROJECTS, QUESTS)
}


@dataclass(frozen=True)
class Dataset:
    """All four validated collections, loaded together."""
    items: tuple[Item, ...]
    hideout_modules: tuple[HideoutModule, ...]
    projects: tuple[Project, ...]
    quests: tuple[Quest, ...]


# ---------------------------------------------------------------------------
# Pure processing
# ---------------------------------------------------------------------------

def _spec(collection: CollectionSpec | str) -> CollectionSpec:
    if isinstance(collection, CollectionSpec):
        return collection
    return COLLECTIONS[collection]


def normalize_document(data: Any, collection: CollectionSpec | str) -> list:
    """Return *data* as a list of records.

    Raises
    ------
    ShapeError
        If *data* is neither a list nor an object.
    """
    spec = _spec(collection)
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    raise ShapeError(spec.name, type(data).__name__ if data is not None else "null")


def deduplicate_by_id(records: Iterable[Any], collection: CollectionSpec | str = ITEMS) -> list:
    """Keep the first record for every ``id``; log each duplicate dropped."""
    spec = _spec(collection)
    seen: set[str] = set()
    unique = []
    for record in records:
        if record.id in seen:
            logger.warning(
                "Duplicate %s ID found: %s, skipping duplicate", spec.label, record.id,
            )
            continue
        seen.add(record.id)
        unique.append(record)
    return unique


def validate_collection(data: Any, collection: CollectionSpec | str) -> tuple:
    """Normalize, validate and (for items) deduplicate a raw document.

    Parameters
    ----------
    data
        The decoded JSON document.
    collection : CollectionSpec or str
        Which collection *data* holds (``"items"``, ``"hideoutModules"``,
        ``"projects"`` or ``"quests"``).

    Returns
    -------
    tuple
        The validated entities, in input order.

    Raises
    ------
    ShapeError
        The document is neither a list nor an object.
    EmptyValidResultError
        The document had records but none of them were valid.
    """
    spec = _spec(collection)
    records = normalize_document(data, spec)

    valid = []
    for index, record in enumerate(records):
        result = check_entity(spec.model, record)
        if not result.passed:
            logger.warning("Invalid %s at index %d: %s", spec.label, index, result.reason)
            continue
        valid.append(result.entity)

    if records and not valid:
        raise EmptyValidResultError(spec.name, len(records))

    if spec.dedupe:
        valid = deduplicate_by_id(valid, spec)

    skipped = len(records) - len(valid)
    if skipped:
        logger.info("Loaded %d %s record(s), skipped %d", len(valid), spec.name, skipped)
    return tuple(valid)


# ---------------------------------------------------------------------------
# DataLoader
# ---------------------------------------------------------------------------

class DataLoader:
    """Fetches and validates the dataset, with caching and retries.

    Parameters
    ----------
    settings : LoaderSettings | None
        Source location and tuning (default: ``LoaderSettings()``).
    transport : Transport | None
        Overrides the transport chosen from *settings* (HTTP when
        ``base_url`` is set, local files otherwise).
    cache : TTLCache | None
        Overrides the cache built from *settings*.
    """

    def __init__(
        self,
        settings: LoaderSettings | None = None,
        transport: Transport | None = None,
        cache: TTLCache | None = None,
    ):
        self.settings = settings or LoaderSettings()
        self.transport = transport or self._default_transport()
        self.cache = cache if cache is not None else self._default_cache()

    def _default_transport(self) -> Transport:
        if self.settings.uses_http:
            return AiohttpTransport(timeout=self.settings.request_timeout)
        return FileTransport()

    def _default_cache(self) -> TTLCache:
        if self.settings.cache_dir:
            backend = JsonFileBackend(self.settings.cache_dir)
        else:
            backend = MemoryBackend()
        return TTLCache(backend=backend, ttl=self.settings.cache_ttl)

    async def _fetch_document(self, filename: str) -> Any:
        return await fetch_with_retry(
            self.transport,
            self.settings.location(filename),
            max_retries=self.settings.max_retries,
            base_delay=self.settings.base_delay,
        )

    # ------------------------------------------------------------------
    # Per-collection loading
    # ------------------------------------------------------------------

    async def fetch_collection(self, collection: CollectionSpec | str) -> tuple:
        """Return one validated collection, from cache when fresh."""
        spec = _spec(collection)

        cached, fresh = self.cache.get(spec.name)
        if fresh:
            try:
                records = _from_cache(spec, cached)
            except (ValidationError, TypeError) as exc:
                logger.warning("Discarding unusable cache entry for %s: %s", spec.name, exc)
                self.cache.invalidate(spec.name)
            else:
                logger.debug("Cache hit for %s", spec.name)
                return records

        data = await self._fetch_document(spec.filename)
        records = validate_collection(data, spec)
        self.cache.set(spec.name, records)
        return records

    async def fetch_items(self) -> tuple[Item, ...]:
        return await self.fetch_collection(ITEMS)

    async def fetch_hideout_modules(self) -> tuple[HideoutModule, ...]:
        return await self.fetch_collection(HIDEOUT_MODULES)

    async def fetch_projects(self) -> tuple[Project, ...]:
        return await self.fetch_collection(PROJECTS)

    async def fetch_quests(self) -> tuple[Quest, ...]:
        return await self.fetch_collection(QUESTS)

    async def load_all(self) -> Dataset:
        """Load all four collections concurrently.

        If any collection fails, the others are cancelled and the first
        error propagates; no partial dataset is ever returned.
        """
        tasks = [
            asyncio.ensure_future(self.fetch_items()),
            asyncio.ensure_future(self.fetch_hideout_modules()),
            asyncio.ensure_future(self.fetch_projects()),
            asyncio.ensure_future(self.fetch_quests()),
        ]
        try:
            items, modules, projects, quests = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            logger.error("Error loading data", exc_info=True)
            raise
        return Dataset(
            items=items,
            hideout_modules=modules,
            projects=projects,
            quests=quests,
        )

    async def load_metadata(self) -> DatasetMetadata | None:
        """Read the aggregation step's ``metadata.json``.

        The file is written as a one-element array, but a bare object is
        accepted too.  Returns ``None`` if the file does not exist or its
        record is malformed; other fetch failures propagate.
        """
        try:
            data = await self._fetch_document(METADATA_FILENAME)
        except FetchError as exc:
            if exc.is_not_found:
                logger.info("No dataset metadata at %s", exc.url)
                return None
            raise

        if isinstance(data, list):
            data = data[0] if data else None
        result = check_entity(DatasetMetadata, data)
        if not result.passed:
            logger.warning("Invalid dataset metadata: %s", result.reason)
            return None
        return result.entity

    def invalidate(self, collection: CollectionSpec | str | None = None) -> None:
        """Drop one cached collection, or all of them."""
        if collection is None:
            for spec in COLLECTIONS.values():
                self.cache.invalidate(spec.name)
        else:
            self.cache.invalidate(_spec(collection).name)


def _from_cache(spec: CollectionSpec, cached: Any) -> tuple:
    """Return a cached collection as a tuple of models.

    The memory backend hands back the tuple that was stored.  The JSON
    file backend hands back plain dicts, which are rebuilt into models;
    an entry that no longer fits the model raises ``ValidationError``
    (or ``TypeError`` when ``data`` is not a list at all).
    """
    records = tuple(cached)
    if all(isinstance(record, spec.model) for record in records):
        return records
    return tuple(spec.model.model_validate(record) for record in records)


async def load_dataset(settings: LoaderSettings | None = None) -> Dataset:
    """Convenience: load every collection with a throwaway ``DataLoader``."""
    return await DataLoader(settings).load_all()
