"""Response cache: TTL-bounded replay of successful response bodies."""

from addrindex.cache.client import Storage, new_storage
from addrindex.cache.durations import parse_duration
from addrindex.cache.memory import MemoryStorage
from addrindex.cache.redis import RedisStorage
from addrindex.cache.response import ResponseCache, request_key

__all__ = [
    "MemoryStorage",
    "RedisStorage",
    "ResponseCache",
    "Storage",
    "new_storage",
    "parse_duration",
    "request_key",
]
