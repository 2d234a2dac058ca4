"""Ledger: reconciliation of confirmed and mempool data, and paging."""

from addrindex.ledger.models import (
    AddressLedgerView,
    LedgerTotals,
    TxOutputRef,
    UnspentOutput,
)
from addrindex.ledger.paginator import PAGE_SIZE, paginate, paginate_strict
from addrindex.ledger.reconciler import (
    build_ledger_view,
    compute_balance,
    compute_unconfirmed_balance,
    compute_unspent,
    inputs_of,
    outputs_paying,
    to_minor_units,
    totals_from_node_balance,
)

__all__ = [
    "PAGE_SIZE",
    "AddressLedgerView",
    "LedgerTotals",
    "TxOutputRef",
    "UnspentOutput",
    "build_ledger_view",
    "compute_balance",
    "compute_unconfirmed_balance",
    "compute_unspent",
    "inputs_of",
    "outputs_paying",
    "paginate",
    "paginate_strict",
    "to_minor_units",
    "totals_from_node_balance",
]
