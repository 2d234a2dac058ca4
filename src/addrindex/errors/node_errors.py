"""Upstream full-node errors."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from addrindex.errors.addrindex_errors import AddrIndexError

if TYPE_CHECKING:
    from collections.abc import Iterator


class NodeError(AddrIndexError):
    """Error talking to the full node (transport, malformed reply, RPC error)."""

    def __init__(self, message: str, *, error: str = "", status_code: int = 400) -> None:
        super().__init__(message, error=error, status_code=status_code, code="node-error")


@contextmanager
def reraise_as(message: str) -> Iterator[None]:
    """Re-raise any ``NodeError`` from the block under a caller-facing message.

    The node's own text is preserved in ``error`` so clients see both the
    failed step and the reason; the HTTP status is kept as well::

        with reraise_as("error fetching mempool transactions for address"):
            deltas = await node.get_address_mempool([addr])
    """
    try:
        yield
    except NodeError as exc:
        raise NodeError(
            message, error=exc.error or exc.message, status_code=exc.status_code
        ) from exc
