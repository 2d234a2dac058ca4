"""Error types rendered by the API as ``{"message": ..., "error": ...}``."""

from addrindex.errors.addrindex_errors import (
    AddrIndexError,
    PageOutOfBoundsError,
    ValidationError,
)
from addrindex.errors.node_errors import NodeError, reraise_as

__all__ = [
    "AddrIndexError",
    "NodeError",
    "PageOutOfBoundsError",
    "ValidationError",
    "reraise_as",
]
