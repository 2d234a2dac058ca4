"""Ledger data model: outputs, inputs, mempool deltas and derived views.

All monetary values are integer counts of the minor unit (1e-8 of a coin).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple


class TxOutputRef(NamedTuple):
    """(txid, output index): identifies one output across the whole system."""

    txid: str
    index: int


@dataclass(frozen=True)
class TxInput:
    """A transaction input spending a previous output."""

    previous: TxOutputRef
    address: str = ""
    value: int = 0


@dataclass(frozen=True)
class TxOutput:
    """A transaction output paying one or more addresses."""

    index: int
    value: int
    addresses: frozenset[str] = frozenset()
    script: str = ""

    def pays(self, address: str) -> bool:
        return address in self.addresses


@dataclass(frozen=True)
class ConfirmedTransaction:
    """A mined transaction with its ordered inputs and outputs."""

    txid: str
    inputs: tuple[TxInput, ...] = ()
    outputs: tuple[TxOutput, ...] = ()
    confirmations: int = 0
    height: int = 0
    block_time: int = 0


@dataclass(frozen=True)
class ConfirmedOutput:
    """A confirmed output paying the queried address."""

    ref: TxOutputRef
    address: str
    value: int
    confirmations: int
    height: int = 0
    script: str = ""


@dataclass(frozen=True)
class UnconfirmedDelta:
    """One mempool-visible effect on an address.

    Negative ``value`` is a spend and carries ``previous``, the output it
    consumes. Positive ``value`` is a receipt.
    """

    address: str
    txid: str
    index: int
    value: int
    timestamp: int = 0
    previous: TxOutputRef | None = None

    @property
    def ref(self) -> TxOutputRef:
        return TxOutputRef(self.txid, self.index)

    @property
    def is_receipt(self) -> bool:
        """Positive delta with no spend reference: a still-unspent mempool output."""
        return self.value > 0 and self.previous is None


@dataclass(frozen=True)
class UnspentOutput:
    """Derived unspent output; ``confirmations`` is 0 for mempool receipts."""

    address: str
    txid: str
    output_index: int
    value: int
    confirmations: int
    height: int = 0
    script: str = ""

    @property
    def ref(self) -> TxOutputRef:
        return TxOutputRef(self.txid, self.output_index)

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "txid": self.txid,
            "outputIndex": self.output_index,
            "script": self.script,
            "satoshis": self.value,
            "height": self.height,
            "confirmations": self.confirmations,
        }


@dataclass(frozen=True)
class LedgerTotals:
    """Confirmed received/sent totals; ``balance`` is always their difference."""

    received: int
    sent: int

    @property
    def balance(self) -> int:
        return self.received - self.sent


@dataclass(frozen=True)
class AddressLedgerView:
    """Everything the explorer reports about one address."""

    address: str
    totals: LedgerTotals
    unconfirmed_balance: int
    unspent: list[UnspentOutput] = field(default_factory=list)
    transaction_count: int = 0
    unconfirmed_count: int = 0

    @property
    def balance(self) -> int:
        return self.totals.balance

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "balance": self.totals.balance,
            "totalReceived": self.totals.received,
            "totalSent": self.totals.sent,
            "unconfirmedBalance": self.unconfirmed_balance,
            "txApperances": self.transaction_count,
            "unconfirmedTxApperances": self.unconfirmed_count,
            "utxo": [u.to_dict() for u in self.unspent],
        }
