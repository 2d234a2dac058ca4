"""Transaction service: lookup, relay and message verification."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from addrindex.errors import ValidationError, reraise_as

if TYPE_CHECKING:
    from collections.abc import Iterable

    from addrindex.engine.client import ExplorerEngine
    from addrindex.node.models import RawTransaction


class TransactionService:
    """Single-transaction routes and the detail fetch shared by the listings."""

    def __init__(self, engine: ExplorerEngine) -> None:
        self._engine = engine

    async def transaction(self, txid: str) -> dict[str, Any]:
        """Verbose transaction JSON as reported by the node."""
        with reraise_as("error fetching transaction"):
            tx = await self._engine.node.get_raw_transaction(txid)
        return tx.data

    async def raw_transaction(self, txid: str) -> dict[str, str]:
        """Serialized transaction as ``{"rawtx": hex}``."""
        with reraise_as("error fetching raw transaction"):
            tx = await self._engine.node.get_raw_transaction(txid)
        return {"rawtx": tx.hex}

    async def details(self, txids: Iterable[str]) -> list[RawTransaction]:
        """Fetch every transaction in *txids*, preserving order.

        The first failing lookup aborts the whole batch.
        """
        node = self._engine.node

        async def fetch(txid: str) -> RawTransaction:
            with reraise_as(f"error fetching transaction details: {txid}"):
                return await node.get_raw_transaction(txid)

        return list(await asyncio.gather(*(fetch(txid) for txid in txids)))

    async def send(self, raw_tx: str) -> str:
        """Relay a signed transaction and return its txid.

        Raises:
            ValidationError: If *raw_tx* is not a non-empty hex string.
        """
        try:
            decoded = bytes.fromhex(raw_tx)
        except ValueError as exc:
            raise ValidationError("unable to decode hex string", error=str(exc)) from exc
        if not decoded:
            raise ValidationError("unable to decode hex string", error="empty transaction")

        with reraise_as("unable to post transaction to node"):
            return await self._engine.node.send_raw_transaction(raw_tx)

    async def verify_message(self, address: str, signature: str, message: str) -> bool:
        """Check a signed message against *address* using the node."""
        if not address.strip():
            raise ValidationError("unable to decode bitcoin address", error="empty address")
        with reraise_as("unable verify message"):
            return await self._engine.node.verify_message(address, signature, message)
