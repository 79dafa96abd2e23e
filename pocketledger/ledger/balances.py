"""
Pool balances.

balance(P) = income into P - expenses paid from P
           - transfers out of P + transfers into P

Balances are all-time and recomputed on demand. Transfers move money
between pools, so they cancel out of the combined total.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from pocketledger.models.entries import TransactionSource
from pocketledger.models.reports import BalanceSummary
from pocketledger.models.timestamps import entry_field
from pocketledger.queries.aggregator import calculate_total


def _in_pool(value: Any, pool: TransactionSource) -> bool:
    try:
        return TransactionSource(value) == pool
    except ValueError:
        return False


def _total_where(
    entries: Iterable[Any],
    fields: tuple[str, ...],
    pool: TransactionSource,
) -> Decimal:
    # Stored records use camelCase transfer fields, models use snake_case
    def pool_of(entry: Any) -> Any:
        for name in fields:
            value = entry_field(entry, name)
            if value is not None:
                return value
        return None

    return calculate_total([entry for entry in entries if _in_pool(pool_of(entry), pool)])


def pool_balance(
    pool: TransactionSource,
    income: Iterable[Any],
    expenses: Iterable[Any],
    transfers: Iterable[Any],
) -> Decimal:
    """Current balance of one pool."""
    pool = TransactionSource(pool)
    income, expenses, transfers = list(income), list(expenses), list(transfers)
    return (
        _total_where(income, ("source",), pool)
        - _total_where(expenses, ("source",), pool)
        - _total_where(transfers, ("from_source", "fromSource"), pool)
        + _total_where(transfers, ("to_source", "toSource"), pool)
    )


def compute_balances(
    income: Iterable[Any],
    expenses: Iterable[Any],
    transfers: Iterable[Any],
) -> BalanceSummary:
    """Wallet, bank and combined balances."""
    income, expenses, transfers = list(income), list(expenses), list(transfers)
    wallet = pool_balance(TransactionSource.WALLET, income, expenses, transfers)
    bank = pool_balance(TransactionSource.BANK, income, expenses, transfers)
    return BalanceSummary(wallet=wallet, bank=bank, total=wallet + bank)
