"""
arcsearch/config.py -- Loader configuration.

``LoaderSettings`` decides where the four JSON documents come from (a
remote base URL or a local directory of static files) and tunes the
cache and retry layers.  Every field can be overridden from the
environment with the ``ARCSEARCH_`` prefix::

    ARCSEARCH_BASE_URL=https://example.org/data
    ARCSEARCH_CACHE_TTL=60
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from arcsearch.paths import DEFAULT_DATA_DIR, get_data_dir

ENV_PREFIX = "ARCSEARCH_"

DEFAULT_CACHE_TTL = 5 * 60
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0
DEFAULT_REQUEST_TIMEOUT = 30.0


class LoaderSettings(BaseModel):
    """Where to load data from and how hard to try.

    Attributes
    ----------
    base_url : str | None
        Remote location of the JSON documents.  When set, documents are
        fetched over HTTP(S); otherwise they are read from ``data_dir``.
    data_dir : str
        Directory holding the bundled JSON documents.
    cache_ttl : float
        Seconds a loaded collection stays fresh in the cache.
    max_retries : int
        Maximum number of fetch attempts per document.
    base_delay : float
        Backoff base in seconds; attempt ``n`` waits ``base_delay * 2**n``.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    cache_dir : str | None
        When set, cache entries are stored as JSON files in this directory
        instead of in process memory.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: Optional[str] = None
    data_dir: str = DEFAULT_DATA_DIR
    cache_ttl: float = Field(default=DEFAULT_CACHE_TTL, ge=0)
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=1)
    base_delay: float = Field(default=DEFAULT_BASE_DELAY, ge=0)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    cache_dir: Optional[str] = None

    @property
    def uses_http(self) -> bool:
        return bool(self.base_url)

    def location(self, filename: str) -> str:
        """Return the URL or file path of the document called *filename*."""
        if self.uses_http:
            return f"{self.base_url.rstrip('/')}/{filename}"
        return os.path.join(get_data_dir(self.data_dir), filename)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str = ENV_PREFIX,
    ) -> LoaderSettings:
        """Build settings from environment variables.

        Empty variables are ignored.  Values are coerced by pydantic, so
        ``ARCSEARCH_CACHE_TTL=60`` becomes ``60.0``; a value that cannot
        be coerced raises ``pydantic.ValidationError``.
        """
        if environ is None:
            environ = os.environ
        values: dict[str, str] = {}
        for field_name in cls.model_fields:
            raw = environ.get(prefix + field_name.upper())
            if raw:
                values[field_name] = raw
        return cls.model_validate(values)
