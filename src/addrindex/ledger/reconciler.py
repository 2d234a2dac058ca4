"""Address ledger reconciliation.

Pure functions that merge confirmed outputs/inputs and mempool deltas into
one consistent view of an address: its unspent outputs, confirmed totals and
pending balance. Nothing here performs I/O, so every function is safe to call
concurrently from any number of requests.

Spend references that point at outputs the caller never supplied (for
example a mempool spend of an output from a block the node has not indexed
yet) are tolerated: they simply exclude nothing. The reconciler cannot tell
"not synced yet" from "invalid reference", so it does not try.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from addrindex.ledger.models import (
    AddressLedgerView,
    ConfirmedOutput,
    LedgerTotals,
    TxOutputRef,
    UnspentOutput,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from addrindex.ledger.models import ConfirmedTransaction, UnconfirmedDelta

# Minor units per coin.
COIN = 100_000_000


def to_minor_units(value: float | int | str | Decimal) -> int:
    """Convert a coin-denominated amount to integer minor units.

    Floats go through ``str`` first so ``0.1`` is read as written rather than
    as its binary approximation, then round half-up against the 1e8 scale.
    """
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    return int((amount * COIN).to_integral_value(rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Extraction from confirmed transactions
# ---------------------------------------------------------------------------


def outputs_paying(
    transactions: Iterable[ConfirmedTransaction], address: str
) -> list[ConfirmedOutput]:
    """Every output in *transactions* that pays *address*, in source order."""
    return [
        ConfirmedOutput(
            ref=TxOutputRef(tx.txid, out.index),
            address=address,
            value=out.value,
            confirmations=tx.confirmations,
            height=tx.height,
            script=out.script,
        )
        for tx in transactions
        for out in tx.outputs
        if out.pays(address)
    ]


def inputs_of(transactions: Iterable[ConfirmedTransaction]) -> list[TxOutputRef]:
    """The previous-output reference of every input in *transactions*."""
    return [vin.previous for tx in transactions for vin in tx.inputs]


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


def compute_unspent(
    confirmed_outputs: Iterable[ConfirmedOutput],
    confirmed_inputs: Iterable[TxOutputRef],
    pending_deltas: Sequence[UnconfirmedDelta],
) -> list[UnspentOutput]:
    """Derive the unspent output set of an address.

    Candidates are the confirmed outputs paying the address plus mempool
    receipts (positive deltas without a spend reference). A candidate is
    dropped when a confirmed input or a pending spend consumes its ref.

    The result is sorted by ascending confirmations; the sort is stable, so
    equal confirmation counts keep input order (confirmed outputs first, then
    mempool receipts). Calling twice with the same input yields the same list.
    """
    consumed = set(confirmed_inputs)
    consumed.update(d.previous for d in pending_deltas if d.previous is not None)

    candidates = [
        UnspentOutput(
            address=out.address,
            txid=out.ref.txid,
            output_index=out.ref.index,
            value=out.value,
            confirmations=out.confirmations,
            height=out.height,
            script=out.script,
        )
        for out in confirmed_outputs
    ]
    candidates.extend(
        UnspentOutput(
            address=d.address,
            txid=d.txid,
            output_index=d.index,
            value=d.value,
            confirmations=0,
        )
        for d in pending_deltas
        if d.is_receipt
    )

    unspent = [c for c in candidates if c.ref not in consumed]
    unspent.sort(key=lambda u: u.confirmations)
    return unspent


def compute_balance(
    confirmed_outputs: Iterable[ConfirmedOutput],
    confirmed_inputs: Iterable[TxOutputRef],
) -> LedgerTotals:
    """Confirmed received/sent totals.

    ``received`` sums every output paying the address; ``sent`` sums those of
    them consumed by any confirmed input, whoever signed it. Pending data is
    never consulted, so ``received - sent`` is the confirmed balance.
    """
    consumed = set(confirmed_inputs)
    received = 0
    sent = 0
    for out in confirmed_outputs:
        received += out.value
        if out.ref in consumed:
            sent += out.value
    return LedgerTotals(received=received, sent=sent)


def compute_unconfirmed_balance(pending_deltas: Iterable[UnconfirmedDelta]) -> int:
    """Sum of signed mempool deltas; every delta counts exactly once."""
    return sum(d.value for d in pending_deltas)


def totals_from_node_balance(balance: int, received: int) -> LedgerTotals:
    """Totals from the node's ``getaddressbalance`` aggregate."""
    return LedgerTotals(received=received, sent=received - balance)


def build_ledger_view(
    address: str,
    transactions: Sequence[ConfirmedTransaction],
    pending_deltas: Sequence[UnconfirmedDelta],
) -> AddressLedgerView:
    """Full reconciled view of *address* from its confirmed history and mempool."""
    outputs = outputs_paying(transactions, address)
    inputs = inputs_of(transactions)
    return AddressLedgerView(
        address=address,
        totals=compute_balance(outputs, inputs),
        unconfirmed_balance=compute_unconfirmed_balance(pending_deltas),
        unspent=compute_unspent(outputs, inputs, pending_deltas),
        transaction_count=len(transactions),
        unconfirmed_count=len({d.txid for d in pending_deltas}),
    )
