"""
arcsearch -- Data aggregation and search layer for the ARC Raiders item lookup.

Loads the items, hideout modules, projects and quests documents, validates
them record by record, cross-references items against the structures that
require them, and provides fuzzy search over the result.

Submodules:
    models      Pydantic entity models and record validators.
    loader      Fetch, validate, deduplicate and cache the collections.
    fetch       HTTP/file transports and retry-with-backoff.
    cache       TTL cache with pluggable storage backends.
    references  Item -> requiring-structure reference counts.
    search      Fuzzy item search, direct and by requiring structure.
    config      LoaderSettings (environment-overridable).
"""

from arcsearch.config import LoaderSettings
from arcsearch.errors import (
    ArcSearchError,
    CacheWriteError,
    EmptyValidResultError,
    FetchError,
    HTTPStatusError,
    ShapeError,
)
from arcsearch.loader import DataLoader, Dataset, load_dataset
from arcsearch.references import ReferenceDetails, build_reference_count
from arcsearch.search import SearchEngine, filter_items_by_name, find_items_required_by_source

__all__ = [
    "LoaderSettings",
    "ArcSearchError",
    "CacheWriteError",
    "EmptyValidResultError",
    "FetchError",
    "HTTPStatusError",
    "ShapeError",
    "DataLoader",
    "Dataset",
    "load_dataset",
    "ReferenceDetails",
    "build_reference_count",
    "SearchEngine",
    "filter_items_by_name",
    "find_items_required_by_source",
]

__version__ = "1.0.0"
