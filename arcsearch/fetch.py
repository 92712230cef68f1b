"""
arcsearch/fetch.py -- Transports and retry-with-backoff for JSON documents.

A transport turns a location into decoded JSON:

    AiohttpTransport   remote documents over HTTP(S)
    FileTransport      static files bundled next to the application

``fetch_with_retry`` wraps any transport:

    - server errors (5xx) and network failures are retried, waiting
      ``base_delay * 2**attempt`` seconds between attempts;
    - client errors (4xx) are terminal and raise immediately, as does a
      ``FetchError`` from the transport (missing file, undecodable body);
    - after ``max_retries`` attempts a ``FetchError`` carries the last
      error observed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Protocol

import aiohttp

from arcsearch.config import DEFAULT_BASE_DELAY, DEFAULT_MAX_RETRIES, DEFAULT_REQUEST_TIMEOUT
from arcsearch.errors import FetchError, HTTPStatusError
from arcsearch.utils import load_json_file

logger = logging.getLogger(__name__)

# Errors worth another attempt.  HTTPStatusError is handled separately
# because only the 5xx half of it is transient.
RETRYABLE_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


class Transport(Protocol):
    async def get_json(self, location: str) -> Any:
        ...


class AiohttpTransport:
    """Fetch JSON over HTTP(S) with aiohttp.

    Parameters
    ----------
    timeout : float
        Total timeout for one request, in seconds.
    session : aiohttp.ClientSession | None
        Optional shared session.  When omitted a short-lived session is
        opened per request, which keeps the transport usable from any
        event loop.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ):
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

    async def get_json(self, location: str) -> Any:
        if self._session is not None:
            return await self._get(self._session, location)
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            return await self._get(session, location)

    async def _get(self, session: aiohttp.ClientSession, url: str) -> Any:
        async with session.get(url) as response:
            if not 200 <= response.status < 300:
                raise HTTPStatusError(url, response.status, response.reason or "")
            body = await response.read()
        try:
            return json.loads(body)
        except ValueError as exc:
            # A garbled body will not get better on retry.
            raise FetchError(url, exc, 1) from exc


class FileTransport:
    """Read JSON documents from the local filesystem."""

    async def get_json(self, location: str) -> Any:
        try:
            return await asyncio.to_thread(load_json_file, location)
        except (FileNotFoundError, ValueError) as exc:
            # Neither a missing file nor bad JSON is transient.
            raise FetchError(location, exc, 1) from exc


async def fetch_with_retry(
    transport: Transport,
    url: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Any:
    """Fetch *url* through *transport*, retrying transient failures.

    Parameters
    ----------
    transport : Transport
        Anything with an ``async get_json(location)`` method.
    url : str
        Location of the document.
    max_retries : int
        Maximum number of attempts (at least one is always made).
    base_delay : float
        Delay before the second attempt; doubles on every retry.
    sleep : callable
        Awaitable used to wait between attempts (injectable for tests).

    Returns
    -------
    object
        The decoded JSON document.

    Raises
    ------
    FetchError
        On a client error, or once every attempt has failed.
    """
    attempts = max(1, max_retries)
    last_error: BaseException | None = None

    for attempt in range(attempts):
        try:
            return await transport.get_json(url)
        except FetchError as exc:
            # Terminal at the transport; re-raised with this loop's attempt count.
            logger.warning("Not retrying %s: %s", url, exc.last_error)
            raise FetchError(url, exc.last_error, attempt + 1) from exc.last_error
        except HTTPStatusError as exc:
            last_error = exc
            if not exc.is_server_error:
                logger.warning("Not retrying %s: %s", url, exc)
                raise FetchError(url, exc, attempt + 1) from exc
        except RETRYABLE_ERRORS as exc:
            last_error = exc

        if attempt < attempts - 1:
            delay = base_delay * (2 ** attempt)
            logger.info(
                "Fetch of %s failed (attempt %d/%d): %s -- retrying in %.1fs",
                url, attempt + 1, attempts, last_error, delay,
            )
            await sleep(delay)

    logger.warning("Giving up on %s after %d attempts: %s", url, attempts, last_error)
    raise FetchError(url, last_error, attempts) from last_error
