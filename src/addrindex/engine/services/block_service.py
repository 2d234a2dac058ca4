"""Block service: block lookups, block transaction pages and the recent blocks snapshot."""

from __future__ import annotations

import asyncio
import logging
import re
import threading
import time
from typing import TYPE_CHECKING, Any

from addrindex.errors import ValidationError, reraise_as
from addrindex.ledger import paginate_strict

if TYPE_CHECKING:
    from collections.abc import Callable

    from addrindex.engine.client import ExplorerEngine

logger = logging.getLogger(__name__)

_BLOCK_HASH = re.compile(r"[0-9a-fA-F]{64}")

# Window searched by the recent blocks listing.
RECENT_WINDOW = 24 * 60 * 60


def validate_block_hash(block_hash: str) -> str:
    """Return *block_hash* if it is 64 hex characters.

    Raises:
        ValidationError: Otherwise; no node call is made.
    """
    if not _BLOCK_HASH.fullmatch(block_hash):
        raise ValidationError("error parsing blockhash", error=f"invalid block hash {block_hash!r}")
    return block_hash


class BlockService:
    """Business logic for ``/block``, ``/block-index``, ``/blocks`` and ``/txs?block=``.

    Holds the recent blocks snapshot written by the background refresh job.
    Readers copy the snapshot out under a lock; the lock is never held
    across a node call.
    """

    def __init__(self, engine: ExplorerEngine, *, clock: Callable[[], float] = time.time) -> None:
        self._engine = engine
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: list[dict[str, Any]] | None = None
        self._snapshot_limit = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def block(self, block_hash: str) -> dict[str, Any]:
        """Verbose block JSON as reported by the node."""
        validate_block_hash(block_hash)
        with reraise_as("error fetching block"):
            info = await self._engine.node.get_block(block_hash)
        return info.data

    async def block_hash(self, height: int) -> dict[str, str]:
        """Hash of the main-chain block at *height* as ``{"blockHash": ...}``."""
        if height < 0:
            raise ValidationError("error parsing blockheight", error=f"negative height {height}")
        with reraise_as("error fetching blockhash"):
            block_hash = await self._engine.node.get_block_hash(height)
        return {"blockHash": block_hash}

    async def transactions_page(self, block_hash: str, page: int) -> list[dict[str, Any]]:
        """One page of a block's transactions, in block order.

        Raises:
            PageOutOfBoundsError: If the page starts past the last transaction.
        """
        validate_block_hash(block_hash)
        with reraise_as("failed to fetch block transactions"):
            info = await self._engine.node.get_block(block_hash)
        txids = paginate_strict(info.tx, page)
        transactions = await self._engine.transaction_service.details(txids)
        return [tx.data for tx in transactions]

    async def recent_blocks(self, limit: int) -> dict[str, Any]:
        """Up to *limit* blocks of the last 24 hours, newest first.

        Served from the snapshot when it covers *limit*, fetched live otherwise.
        """
        blocks = self._covered_snapshot(limit)
        if blocks is None:
            blocks = await self.fetch_recent(limit)
        blocks = blocks[:limit]
        return {"blocks": blocks, "length": len(blocks)}

    async def fetch_recent(self, limit: int) -> list[dict[str, Any]]:
        """Query the node for the newest *limit* block summaries of the last 24 hours."""
        now = int(self._clock())
        with reraise_as("error fetching block hashes"):
            hashes = await self._engine.node.get_block_hashes(now, now - RECENT_WINDOW)
        newest = list(reversed(hashes))[:limit]

        node = self._engine.node

        async def summary(block_hash: str) -> dict[str, Any]:
            with reraise_as("error fetching block"):
                return (await node.get_block(block_hash)).summary()

        return list(await asyncio.gather(*(summary(h) for h in newest)))

    async def refresh(self) -> None:
        """Rebuild the recent blocks snapshot (background job handler)."""
        limit = self._engine.config.task.blocks_limit
        blocks = await self.fetch_recent(limit)
        with self._lock:
            self._snapshot = blocks
            self._snapshot_limit = limit
        logger.debug("Recent blocks snapshot refreshed with %d blocks", len(blocks))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _covered_snapshot(self, limit: int) -> list[dict[str, Any]] | None:
        with self._lock:
            if self._snapshot is None:
                return None
            # A short snapshot already holds every block of the window.
            if limit <= self._snapshot_limit or len(self._snapshot) < self._snapshot_limit:
                return list(self._snapshot)
            return None
