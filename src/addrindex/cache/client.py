"""Storage protocol and backend selection for the response cache."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from addrindex.config.settings import CacheEngine

if TYPE_CHECKING:
    from addrindex.config.settings import CacheConfig


class Storage(Protocol):
    """Protocol for response body storage backends."""

    async def connect(self) -> None: ...
    async def close(self) -> None: ...
    async def get(self, key: str) -> bytes | None: ...
    async def set(self, key: str, content: bytes, ttl: float | None = None) -> None: ...
    async def delete(self, key: str) -> None: ...
    async def flush(self) -> None: ...


def new_storage(config: CacheConfig) -> Storage:
    """Build the storage backend selected by ``config.engine``.

    Raises:
        ValueError: If the cache engine type is not supported.
    """
    from addrindex.cache.memory import MemoryStorage
    from addrindex.cache.redis import RedisStorage

    engine = CacheEngine(config.engine)
    if engine is CacheEngine.REDIS:
        return RedisStorage(config)
    if engine is CacheEngine.MEMORY:
        return MemoryStorage(config.max_entries)
    msg = f"Unsupported cache engine: {engine}"
    raise ValueError(msg)
