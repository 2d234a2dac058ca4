"""Node RPC response models.

Data classes for the address index and chain RPC replies, each with a
``from_dict`` constructor for the node's JSON and, where the ledger needs it,
a conversion into :mod:`addrindex.ledger.models` types. Amounts are converted
to integer minor units here, once, at ingestion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from addrindex.ledger.models import (
    ConfirmedOutput,
    ConfirmedTransaction,
    TxInput,
    TxOutput,
    TxOutputRef,
    UnconfirmedDelta,
)
from addrindex.ledger.reconciler import to_minor_units


def _amount(data: dict[str, Any], sat_key: str, coin_key: str) -> int:
    """Prefer the integer satoshi field, fall back to the coin-denominated float."""
    if data.get(sat_key) is not None:
        return int(data[sat_key])
    if data.get(coin_key) is not None:
        return to_minor_units(data[coin_key])
    return 0


# ---------------------------------------------------------------------------
# Address index
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AddressBalance:
    """``getaddressbalance`` result: confirmed balance and total received."""

    balance: int = 0
    received: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AddressBalance:
        return cls(balance=int(data.get("balance", 0)), received=int(data.get("received", 0)))


@dataclass(frozen=True)
class AddressUtxo:
    """One ``getaddressutxos`` entry (confirmed, unspent as of the node's tip)."""

    address: str
    txid: str
    output_index: int
    satoshis: int
    height: int
    script: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AddressUtxo:
        return cls(
            address=data.get("address", ""),
            txid=data["txid"],
            output_index=int(data["outputIndex"]),
            satoshis=int(data.get("satoshis", 0)),
            height=int(data.get("height", 0)),
            script=data.get("script", ""),
        )

    def to_confirmed_output(self, current_height: int) -> ConfirmedOutput:
        """Attach a confirmation count relative to the node's current height."""
        return ConfirmedOutput(
            ref=TxOutputRef(self.txid, self.output_index),
            address=self.address,
            value=self.satoshis,
            confirmations=max(current_height - self.height + 1, 0),
            height=self.height,
            script=self.script,
        )


@dataclass(frozen=True)
class MempoolDelta:
    """One ``getaddressmempool`` entry.

    Spends (negative ``satoshis``) carry ``prevtxid``/``prevout`` naming the
    output they consume.
    """

    address: str
    txid: str
    index: int
    satoshis: int
    timestamp: int = 0
    prevtxid: str = ""
    prevout: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MempoolDelta:
        return cls(
            address=data.get("address", ""),
            txid=data["txid"],
            index=int(data.get("index", 0)),
            satoshis=int(data.get("satoshis", 0)),
            timestamp=int(data.get("timestamp", 0)),
            prevtxid=data.get("prevtxid") or "",
            prevout=int(data.get("prevout") or 0),
        )

    def to_delta(self) -> UnconfirmedDelta:
        previous = TxOutputRef(self.prevtxid, self.prevout) if self.prevtxid else None
        return UnconfirmedDelta(
            address=self.address,
            txid=self.txid,
            index=self.index,
            value=self.satoshis,
            timestamp=self.timestamp,
            previous=previous,
        )


@dataclass(frozen=True)
class AddressDelta:
    """One ``getaddressdeltas`` entry (confirmed balance change)."""

    address: str
    txid: str
    index: int
    satoshis: int
    height: int = 0
    blockindex: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AddressDelta:
        return cls(
            address=data.get("address", ""),
            txid=data["txid"],
            index=int(data.get("index", 0)),
            satoshis=int(data.get("satoshis", 0)),
            height=int(data.get("height", 0)),
            blockindex=int(data.get("blockindex", 0)),
        )


@dataclass(frozen=True)
class SpentInfo:
    """``getspentinfo`` result: the input that spent an output."""

    txid: str
    index: int
    height: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpentInfo:
        return cls(
            txid=data.get("txid", ""),
            index=int(data.get("index", 0)),
            height=int(data.get("height", 0)),
        )


# ---------------------------------------------------------------------------
# Transactions and blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawTransaction:
    """Verbose ``getrawtransaction`` result.

    ``data`` keeps the node's JSON untouched for pass-through responses; the
    remaining fields are what the ledger needs.
    """

    txid: str
    hex: str = ""
    confirmations: int = 0
    height: int = 0
    block_time: int = 0
    data: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawTransaction:
        return cls(
            txid=data["txid"],
            hex=data.get("hex", ""),
            confirmations=int(data.get("confirmations", 0)),
            height=int(data.get("height", 0)),
            block_time=int(data.get("blocktime", data.get("time", 0)) or 0),
            data=data,
        )

    def to_confirmed(self) -> ConfirmedTransaction:
        """Ledger view of this transaction; coinbase inputs are skipped."""
        inputs = tuple(
            TxInput(
                previous=TxOutputRef(vin["txid"], int(vin.get("vout", 0))),
                address=vin.get("address", ""),
                value=_amount(vin, "valueSat", "value"),
            )
            for vin in self.data.get("vin", [])
            if vin.get("txid")
        )
        outputs = tuple(
            TxOutput(
                index=int(vout.get("n", i)),
                value=_amount(vout, "valueSat", "value"),
                addresses=_output_addresses(vout.get("scriptPubKey", {})),
                script=vout.get("scriptPubKey", {}).get("hex", ""),
            )
            for i, vout in enumerate(self.data.get("vout", []))
        )
        return ConfirmedTransaction(
            txid=self.txid,
            inputs=inputs,
            outputs=outputs,
            confirmations=self.confirmations,
            height=self.height,
            block_time=self.block_time,
        )


def _output_addresses(script_pub_key: dict[str, Any]) -> frozenset[str]:
    # Older nodes report a list, newer ones a single "address".
    addresses = set(script_pub_key.get("addresses") or [])
    if script_pub_key.get("address"):
        addresses.add(script_pub_key["address"])
    return frozenset(addresses)


@dataclass(frozen=True)
class BlockInfo:
    """Verbose ``getblock`` result."""

    hash: str
    height: int = 0
    size: int = 0
    time: int = 0
    tx: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BlockInfo:
        return cls(
            hash=data["hash"],
            height=int(data.get("height", 0)),
            size=int(data.get("size", 0)),
            time=int(data.get("time", 0)),
            tx=[t if isinstance(t, str) else t["txid"] for t in data.get("tx", [])],
            data=data,
        )

    def summary(self) -> dict[str, Any]:
        """Entry of the ``/blocks`` listing."""
        return {
            "height": self.height,
            "size": self.size,
            "hash": self.hash,
            "time": self.time,
            "txlength": len(self.tx),
            "poolInfo": {},
        }


@dataclass(frozen=True)
class BlockchainInfo:
    """Subset of ``getblockchaininfo`` used by ``/sync``."""

    blocks: int = 0
    headers: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BlockchainInfo:
        return cls(blocks=int(data.get("blocks", 0)), headers=int(data.get("headers", 0)))

    @property
    def synced(self) -> bool:
        return self.blocks >= self.headers

    @property
    def sync_percentage(self) -> int:
        if self.headers <= 0:
            return 0
        return min(self.blocks * 100 // self.headers, 100)
