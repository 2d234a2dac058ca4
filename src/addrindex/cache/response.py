"""Time-windowed response cache.

Wraps request handlers so that a successful response body is replayed for
every identical request until its TTL runs out. The cache fails open: an
unparsable TTL or a storage error is logged and the handler's response is
served as if no cache existed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.responses import Response

from addrindex.cache.durations import parse_duration

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request

    from addrindex.cache.client import Storage
    from addrindex.metrics.collector import ExplorerMetrics

logger = logging.getLogger(__name__)


def request_key(request: Request) -> str:
    """Cache key of *request*: method, path and raw query string."""
    key = f"{request.method} {request.url.path}"
    query = request.url.query
    return f"{key}?{query}" if query else key


class ResponseCache:
    """Response body cache in front of a :class:`~addrindex.cache.client.Storage`.

    Usage::

        cache = ResponseCache(MemoryStorage())
        endpoint = cache.wrap("30s", endpoint)
    """

    def __init__(self, storage: Storage, *, metrics: ExplorerMetrics | None = None) -> None:
        self._storage = storage
        self._metrics = metrics

    @property
    def storage(self) -> Storage:
        """Return the underlying storage backend."""
        return self._storage

    async def get(self, key: str) -> bytes | None:
        """Stored body for *key*, or None on a miss or a storage failure."""
        try:
            return await self._storage.get(key)
        except Exception:
            logger.warning("Cache read failed for %s", key, exc_info=True)
            return None

    async def set(self, key: str, content: bytes, ttl: str | float | None) -> None:
        """Store *content* under *key* for *ttl* (duration string or seconds).

        A None ttl stores the body without expiry. Storage failures are logged
        and ignored.

        Raises:
            ValueError: If *ttl* is not a valid duration.
        """
        seconds = None if ttl is None else parse_duration(ttl)
        try:
            await self._storage.set(key, content, seconds)
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)

    async def fetch(
        self,
        key: str,
        ttl: str | float | None,
        produce: Callable[[], Awaitable[Response]],
    ) -> Response:
        """Serve *key* from the cache or from ``produce()``.

        On a hit only the stored body is replayed; status and headers of the
        original response are not kept. On a miss the produced response is
        returned unchanged and its body stored, provided the status is 2xx.

        Args:
            key: Cache key (see :func:`request_key`).
            ttl: Duration string, seconds, or None for no expiry.
            produce: Coroutine factory building the fresh response.
        """
        try:
            seconds = None if ttl is None else parse_duration(ttl)
        except ValueError as exc:
            logger.warning("Page not cached. err: %s", exc)
            self._record("bypass")
            return await produce()

        content = await self.get(key)
        if content is not None:
            self._record("hit")
            return Response(content)

        self._record("miss")
        response = await produce()

        body = getattr(response, "body", None)
        if 200 <= response.status_code < 300 and isinstance(body, bytes):
            try:
                await self._storage.set(key, body, seconds)
            except Exception:
                logger.warning("Cache write failed for %s", key, exc_info=True)
        return response

    def wrap(
        self,
        ttl: str | float | None,
        handler: Callable[[Request], Awaitable[Response]],
    ) -> Callable[[Request], Awaitable[Response]]:
        """Return a Starlette endpoint serving *handler* through the cache."""

        async def endpoint(request: Request) -> Response:
            return await self.fetch(request_key(request), ttl, lambda: handler(request))

        return endpoint

    def _record(self, result: str) -> None:
        if self._metrics is not None:
            self._metrics.record_cache(result)
