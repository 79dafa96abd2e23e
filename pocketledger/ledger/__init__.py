"""
Ledger Package

The three entry collections and the balances derived from them.
"""

from pocketledger.ledger.balances import compute_balances, pool_balance
from pocketledger.ledger.store import (
    EntryNotFoundError,
    EntryStore,
    ExpenseStore,
    IncomeStore,
    TransferStore,
)

__all__ = [
    # Stores
    "EntryStore",
    "IncomeStore",
    "ExpenseStore",
    "TransferStore",
    "EntryNotFoundError",
    # Balances
    "compute_balances",
    "pool_balance",
]
