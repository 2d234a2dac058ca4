"""Full node JSON-RPC client.

Async HTTP client for a node running with the address, spent and timestamp
indexes enabled (``getaddress*``, ``getspentinfo``, ``getblockhashes``) plus
the standard chain and transaction RPCs. Every request is built from a typed
request in :mod:`addrindex.node.requests`; replies are parsed into
:mod:`addrindex.node.models`.

Failures of any kind (transport, non-JSON reply, RPC ``error`` object,
unexpected result shape) raise :class:`~addrindex.errors.NodeError`. Nothing
is retried here.
"""

from __future__ import annotations

import itertools
import logging
from contextlib import nullcontext
from typing import TYPE_CHECKING, Any

import httpx

from addrindex.errors import NodeError
from addrindex.node import requests as rpc
from addrindex.node.models import (
    AddressBalance,
    AddressDelta,
    AddressUtxo,
    BlockchainInfo,
    BlockInfo,
    MempoolDelta,
    RawTransaction,
    SpentInfo,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from addrindex.config.settings import NodeConfig
    from addrindex.metrics.collector import ExplorerMetrics

logger = logging.getLogger(__name__)


class NodeClient:
    """Async JSON-RPC client for the full node.

    Usage::

        node = NodeClient(config.node)
        await node.connect()
        try:
            utxos = await node.get_address_utxos(["1Addr..."])
        finally:
            await node.close()
    """

    def __init__(
        self,
        config: NodeConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        metrics: ExplorerMetrics | None = None,
    ) -> None:
        """Initialize the node client.

        Args:
            config: Node connection settings.
            transport: Optional httpx transport (tests inject a mock here).
            metrics: Optional metrics sink for per-method RPC durations.
        """
        self._config = config
        self._transport = transport
        self._metrics = metrics
        self._client: httpx.AsyncClient | None = None
        self._ids = itertools.count(1)

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        auth = (self._config.user, self._config.password) if self._config.user else None
        self._client = httpx.AsyncClient(
            base_url=self._config.url,
            auth=auth,
            headers={"Content-Type": "text/plain"},
            timeout=self._config.timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Address index
    # ------------------------------------------------------------------

    async def get_address_txids(self, addresses: Sequence[str], start: int, end: int) -> list[str]:
        """Confirmed txids for *addresses* between heights *start* and *end*, oldest first."""
        result = await self.call(rpc.GetAddressTxIds(tuple(addresses), start, end))
        return [str(txid) for txid in _expect_list(result, rpc.GetAddressTxIds.method)]

    async def get_address_deltas(
        self, addresses: Sequence[str], start: int, end: int
    ) -> list[AddressDelta]:
        result = await self.call(rpc.GetAddressDeltas(tuple(addresses), start, end))
        return [
            AddressDelta.from_dict(d) for d in _expect_list(result, rpc.GetAddressDeltas.method)
        ]

    async def get_address_balance(self, addresses: Sequence[str]) -> AddressBalance:
        result = await self.call(rpc.GetAddressBalance(tuple(addresses)))
        return AddressBalance.from_dict(_expect_dict(result, rpc.GetAddressBalance.method))

    async def get_address_utxos(self, addresses: Sequence[str]) -> list[AddressUtxo]:
        result = await self.call(rpc.GetAddressUtxos(tuple(addresses)))
        return [AddressUtxo.from_dict(u) for u in _expect_list(result, rpc.GetAddressUtxos.method)]

    async def get_address_mempool(self, addresses: Sequence[str]) -> list[MempoolDelta]:
        result = await self.call(rpc.GetAddressMempool(tuple(addresses)))
        return [
            MempoolDelta.from_dict(d) for d in _expect_list(result, rpc.GetAddressMempool.method)
        ]

    async def get_spent_info(self, txid: str, index: int) -> SpentInfo:
        result = await self.call(rpc.GetSpentInfo(txid, index))
        return SpentInfo.from_dict(_expect_dict(result, rpc.GetSpentInfo.method))

    async def get_block_hashes(self, high: int, low: int) -> list[str]:
        """Hashes of blocks with timestamps between *low* and *high* (unix seconds)."""
        result = await self.call(rpc.GetBlockHashes(high, low))
        return [str(h) for h in _expect_list(result, rpc.GetBlockHashes.method)]

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def get_raw_transaction(self, txid: str) -> RawTransaction:
        """Verbose transaction, including per-input values when the spent index is on."""
        result = await self.call(rpc.GetRawTransaction(txid))
        return RawTransaction.from_dict(_expect_dict(result, rpc.GetRawTransaction.method))

    async def send_raw_transaction(self, raw_tx: str) -> str:
        """Relay a signed transaction; returns its txid."""
        return str(await self.call(rpc.SendRawTransaction(raw_tx)))

    async def verify_message(self, address: str, signature: str, message: str) -> bool:
        return bool(await self.call(rpc.VerifyMessage(address, signature, message)))

    # ------------------------------------------------------------------
    # Blocks and chain state
    # ------------------------------------------------------------------

    async def get_block(self, block_hash: str) -> BlockInfo:
        result = await self.call(rpc.GetBlock(block_hash))
        return BlockInfo.from_dict(_expect_dict(result, rpc.GetBlock.method))

    async def get_block_hash(self, height: int) -> str:
        return str(await self.call(rpc.GetBlockHash(height)))

    async def get_block_count(self) -> int:
        return int(await self.call(rpc.GetBlockCount()))

    async def get_info(self) -> dict[str, Any]:
        return _expect_dict(await self.call(rpc.GetInfo()), rpc.GetInfo.method)

    async def get_blockchain_info(self) -> BlockchainInfo:
        result = await self.call(rpc.GetBlockchainInfo())
        return BlockchainInfo.from_dict(_expect_dict(result, rpc.GetBlockchainInfo.method))

    async def get_difficulty(self) -> float:
        return float(await self.call(rpc.GetDifficulty()))

    async def get_best_block_hash(self) -> str:
        return str(await self.call(rpc.GetBestBlockHash()))

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def call(self, request: rpc.RPCRequest) -> Any:
        """Send *request* and return the ``result`` member of the reply.

        Raises:
            NodeError: On transport failure, a non-JSON reply or an RPC error.
        """
        client = self._ensure_connected()
        method = request.method
        tracker = self._metrics.track_rpc(method) if self._metrics else nullcontext()

        with tracker:
            return await self._send(client, request)

    async def _send(self, client: httpx.AsyncClient, request: rpc.RPCRequest) -> Any:
        method = request.method
        try:
            response = await client.post("/", json=request.payload(next(self._ids)))
        except httpx.HTTPError as exc:
            logger.debug("RPC %s transport failure: %s", method, exc)
            raise NodeError(f"{method} failed", error=str(exc) or type(exc).__name__) from exc

        # The node answers RPC errors with a non-2xx status and a JSON body,
        # so the body is parsed before the status is considered.
        try:
            body = response.json()
        except ValueError as exc:
            raise NodeError(
                f"{method} failed",
                error=f"HTTP {response.status_code}: {response.text[:200]}",
            ) from exc

        if not isinstance(body, dict):
            raise NodeError(f"{method} failed", error="malformed JSON-RPC reply")

        error = body.get("error")
        if error:
            text = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            logger.debug("RPC %s returned error: %s", method, text)
            raise NodeError(f"{method} failed", error=text)

        if response.is_error:
            raise NodeError(f"{method} failed", error=f"HTTP {response.status_code}")

        return body.get("result")

    def _ensure_connected(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "Node client not connected. Call connect() first."
            raise NodeError(msg, status_code=500)
        return self._client


def _expect_list(result: Any, method: str) -> list[Any]:
    if result is None:
        return []
    if not isinstance(result, list):
        raise NodeError(f"{method} failed", error="expected a list result")
    return result


def _expect_dict(result: Any, method: str) -> dict[str, Any]:
    if not isinstance(result, dict):
        raise NodeError(f"{method} failed", error="expected an object result")
    return result
