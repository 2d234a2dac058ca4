"""In-memory response storage with TTL and LRU bounds."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class MemoryStorage:
    """Thread-safe in-memory store of response bodies.

    Entries are ``(content, expires_at)``; ``expires_at`` of ``None`` never
    expires. Expired entries are removed lazily by the ``get`` that finds
    them. Once ``max_entries`` is exceeded the least recently used entry is
    evicted.

    All operations hold one ``threading.Lock`` for a constant amount of work
    and never await while holding it, so the store is safe to share between
    concurrent requests and worker threads alike.
    """

    def __init__(
        self,
        max_entries: int = 10000,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the store.

        Args:
            max_entries: Maximum number of keys kept before evicting LRU.
            clock: Monotonic time source in seconds (tests inject a fake).
        """
        self._max_entries = max_entries
        self._clock = clock
        self._items: OrderedDict[str, tuple[bytes, float | None]] = OrderedDict()
        self._lock = threading.Lock()

    async def connect(self) -> None:  # noqa: ASYNC910
        """Connect (no-op for in-memory)."""

    async def close(self) -> None:  # noqa: ASYNC910
        """Close and clear the store."""
        with self._lock:
            self._items.clear()

    async def get(self, key: str) -> bytes | None:  # noqa: ASYNC910
        """Return the content stored under *key*, or None if absent or expired."""
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            content, expires_at = item
            if expires_at is not None and self._clock() >= expires_at:
                del self._items[key]
                return None
            self._items.move_to_end(key)
            return content

    async def set(self, key: str, content: bytes, ttl: float | None = None) -> None:  # noqa: ASYNC910
        """Store *content* under *key*, replacing any previous entry.

        Args:
            key: Cache key.
            content: Response body.
            ttl: Time-to-live in seconds. None = no expiry; ``<= 0`` stores
                an entry that is already expired.
        """
        expires_at = None if ttl is None else self._clock() + ttl
        with self._lock:
            self._items[key] = (content, expires_at)
            self._items.move_to_end(key)
            while len(self._items) > self._max_entries:
                self._items.popitem(last=False)

    async def delete(self, key: str) -> None:  # noqa: ASYNC910
        """Delete a key from the store."""
        with self._lock:
            self._items.pop(key, None)

    async def flush(self) -> None:  # noqa: ASYNC910
        """Clear all keys from the store."""
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
