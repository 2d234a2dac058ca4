"""Address service: unspent outputs, balances and history of one address."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from addrindex.errors import reraise_as
from addrindex.ledger import (
    build_ledger_view,
    compute_unconfirmed_balance,
    compute_unspent,
    paginate,
    totals_from_node_balance,
)

if TYPE_CHECKING:
    from addrindex.engine.client import ExplorerEngine
    from addrindex.ledger.models import AddressLedgerView, LedgerTotals, UnspentOutput
    from addrindex.node.models import MempoolDelta

logger = logging.getLogger(__name__)


class AddressService:
    """Business logic for the ``/addr`` and ``/txs?address=`` routes.

    Every call reads fresh node state; caching happens at the HTTP layer.
    """

    def __init__(self, engine: ExplorerEngine) -> None:
        self._engine = engine

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def unspent(self, address: str) -> list[UnspentOutput]:
        """Unspent outputs of *address*, mempool included, confirmation-ascending.

        Confirmed outputs come from the node's UTXO index. Mempool receipts
        are added and anything a mempool spend consumes is removed.
        """
        height = await self._current_height()
        with reraise_as("error fetching all transactions for address"):
            utxos = await self._engine.node.get_address_utxos([address])
        mempool = await self._mempool(address)

        confirmed = [utxo.to_confirmed_output(height) for utxo in utxos]
        return compute_unspent(confirmed, [], [d.to_delta() for d in mempool])

    async def totals(self, address: str) -> LedgerTotals:
        """Confirmed received/sent totals from the node's balance index."""
        with reraise_as("error fetching balance for address"):
            balance = await self._engine.node.get_address_balance([address])
        return totals_from_node_balance(balance.balance, balance.received)

    async def unconfirmed_balance(self, address: str) -> int:
        """Signed sum of the address's mempool deltas."""
        mempool = await self._mempool(address)
        return compute_unconfirmed_balance(d.to_delta() for d in mempool)

    async def summary(self, address: str) -> AddressLedgerView:
        """Full reconciled view built from the confirmed history and the mempool."""
        txids = await self._txids(address)
        transactions = await self._engine.transaction_service.details(txids)
        mempool = await self._mempool(address)
        return build_ledger_view(
            address,
            [tx.to_confirmed() for tx in transactions],
            [d.to_delta() for d in mempool],
        )

    async def transactions_page(self, address: str, page: int) -> list[dict[str, Any]]:
        """One page of the address's confirmed transactions, oldest first.

        A history that fits in one page is returned whole for any page; a
        page past the end is empty.
        """
        txids = paginate(await self._txids(address), page)
        transactions = await self._engine.transaction_service.details(txids)
        return [tx.data for tx in transactions]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _current_height(self) -> int:
        with reraise_as("failed to fetch current block height"):
            return await self._engine.node.get_block_count()

    async def _mempool(self, address: str) -> list[MempoolDelta]:
        with reraise_as("error fetching mempool transactions for address"):
            return await self._engine.node.get_address_mempool([address])

    async def _txids(self, address: str) -> list[str]:
        height = await self._current_height()
        start = self._engine.config.node.address_start_height
        with reraise_as("error fetching page of transactions for address"):
            txids = await self._engine.node.get_address_txids([address], start, height)
        logger.debug("Address %s has %d confirmed transactions", address, len(txids))
        return txids
