"""Typed JSON-RPC request builders, one per node method.

Each request is a frozen dataclass carrying its method name and a fixed set
of fields; ``params()`` renders the positional parameter list the node
expects, so call sites never assemble heterogeneous lists by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

JSONRPC_VERSION = "1.0"


@dataclass(frozen=True)
class RPCRequest:
    """Base class; subclasses set ``method`` and override ``params``."""

    method: ClassVar[str] = ""

    def params(self) -> list[Any]:
        return []

    def payload(self, request_id: int) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": request_id,
            "method": self.method,
            "params": self.params(),
        }


# ---------------------------------------------------------------------------
# Address index
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GetAddressTxIds(RPCRequest):
    """Confirmed txids touching the addresses, oldest first."""

    method: ClassVar[str] = "getaddresstxids"
    addresses: tuple[str, ...]
    start: int
    end: int

    def params(self) -> list[Any]:
        return [{"addresses": list(self.addresses), "start": self.start, "end": self.end}]


@dataclass(frozen=True)
class GetAddressDeltas(RPCRequest):
    """Confirmed per-output balance changes (negative = input, positive = output)."""

    method: ClassVar[str] = "getaddressdeltas"
    addresses: tuple[str, ...]
    start: int
    end: int

    def params(self) -> list[Any]:
        return [{"addresses": list(self.addresses), "start": self.start, "end": self.end}]


@dataclass(frozen=True)
class GetAddressBalance(RPCRequest):
    method: ClassVar[str] = "getaddressbalance"
    addresses: tuple[str, ...]

    def params(self) -> list[Any]:
        return [{"addresses": list(self.addresses)}]


@dataclass(frozen=True)
class GetAddressUtxos(RPCRequest):
    method: ClassVar[str] = "getaddressutxos"
    addresses: tuple[str, ...]

    def params(self) -> list[Any]:
        return [{"addresses": list(self.addresses)}]


@dataclass(frozen=True)
class GetAddressMempool(RPCRequest):
    method: ClassVar[str] = "getaddressmempool"
    addresses: tuple[str, ...]

    def params(self) -> list[Any]:
        return [{"addresses": list(self.addresses)}]


@dataclass(frozen=True)
class GetSpentInfo(RPCRequest):
    """The input that spent output (txid, index)."""

    method: ClassVar[str] = "getspentinfo"
    txid: str
    index: int

    def params(self) -> list[Any]:
        return [{"txid": self.txid, "index": self.index}]


@dataclass(frozen=True)
class GetBlockHashes(RPCRequest):
    """Block hashes with timestamps in ``[low, high)`` (unix seconds)."""

    method: ClassVar[str] = "getblockhashes"
    high: int
    low: int

    def params(self) -> list[Any]:
        return [self.high, self.low]


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GetRawTransaction(RPCRequest):
    method: ClassVar[str] = "getrawtransaction"
    txid: str
    verbose: bool = True

    def params(self) -> list[Any]:
        return [self.txid, 1 if self.verbose else 0]


@dataclass(frozen=True)
class SendRawTransaction(RPCRequest):
    method: ClassVar[str] = "sendrawtransaction"
    hex: str

    def params(self) -> list[Any]:
        return [self.hex]


@dataclass(frozen=True)
class VerifyMessage(RPCRequest):
    method: ClassVar[str] = "verifymessage"
    address: str
    signature: str
    message: str

    def params(self) -> list[Any]:
        return [self.address, self.signature, self.message]


# ---------------------------------------------------------------------------
# Blocks and chain state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GetBlock(RPCRequest):
    method: ClassVar[str] = "getblock"
    block_hash: str
    verbose: bool = True

    def params(self) -> list[Any]:
        return [self.block_hash, self.verbose]


@dataclass(frozen=True)
class GetBlockHash(RPCRequest):
    method: ClassVar[str] = "getblockhash"
    height: int

    def params(self) -> list[Any]:
        return [self.height]


@dataclass(frozen=True)
class GetBlockCount(RPCRequest):
    method: ClassVar[str] = "getblockcount"


@dataclass(frozen=True)
class GetInfo(RPCRequest):
    method: ClassVar[str] = "getinfo"


@dataclass(frozen=True)
class GetBlockchainInfo(RPCRequest):
    method: ClassVar[str] = "getblockchaininfo"


@dataclass(frozen=True)
class GetDifficulty(RPCRequest):
    method: ClassVar[str] = "getdifficulty"


@dataclass(frozen=True)
class GetBestBlockHash(RPCRequest):
    method: ClassVar[str] = "getbestblockhash"
