"""
arcsearch/errors.py -- Exception taxonomy for the data layer.

Per-record problems never raise: a record that fails validation is
dropped and logged by the loader.  Per-collection problems raise one of
the exceptions below and propagate to whoever asked for the collection.

    ShapeError             top-level document is neither a list nor an object
    EmptyValidResultError  every record of a non-empty document was invalid
    HTTPStatusError        a transport got a non-2xx response
    FetchError             retries exhausted, or a terminal (4xx) failure
    CacheWriteError        a cache backend could not store an entry
"""

from __future__ import annotations


class ArcSearchError(Exception):
    """Base class for every error raised by the arcsearch package."""


class ShapeError(ArcSearchError):
    """The top-level JSON document has an unexpected type."""

    def __init__(self, collection: str, got_type: str):
        self.collection = collection
        self.got_type = got_type
        super().__init__(
            f"Invalid {collection} data: expected an array or object, got {got_type}"
        )


class EmptyValidResultError(ArcSearchError):
    """A non-empty document produced zero valid records.

    This almost always means the upstream schema changed, not that the
    collection is legitimately empty.
    """

    def __init__(self, collection: str, total: int):
        self.collection = collection
        self.total = total
        super().__init__(
            f"No valid {collection} found in response ({total} record(s) rejected)"
        )


class HTTPStatusError(ArcSearchError):
    """A response arrived with a non-success status code."""

    def __init__(self, url: str, status: int, reason: str = ""):
        self.url = url
        self.status = status
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {status} {reason}".rstrip())

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500


class FetchError(ArcSearchError):
    """A document could not be fetched.

    Attributes
    ----------
    url : str
        The location that was requested.
    last_error : BaseException | None
        The last error observed before giving up.
    attempts : int
        How many attempts were made.
    """

    def __init__(self, url: str, last_error: BaseException | None, attempts: int):
        self.url = url
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            f"Failed to fetch {url} after {attempts} attempt(s): {last_error}"
        )

    @property
    def is_not_found(self) -> bool:
        """True when the document simply does not exist at *url*."""
        err = self.last_error
        if isinstance(err, HTTPStatusError):
            return err.status == 404
        return isinstance(err, FileNotFoundError)


class CacheWriteError(ArcSearchError):
    """A cache backend could not persist an entry (storage unavailable/full)."""

    def __init__(self, key: str, cause: BaseException | None = None):
        self.key = key
        self.cause = cause
        super().__init__(f"Could not write cache entry '{key}': {cause}")
