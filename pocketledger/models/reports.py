"""
Derived View Models for PocketLedger

Everything here is computed from the three collections on demand:
balances, period summaries, aggregate groups and import reports.
None of these are persisted.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pocketledger.models.entries import (
    LedgerEntry,
    TransactionSource,
    TransactionType,
    ValidationIssue,
)


class BalanceSummary(BaseModel):
    """All-time balance of each pool and of both combined."""

    wallet: Decimal = Field(default=Decimal("0"))
    bank: Decimal = Field(default=Decimal("0"))
    total: Decimal = Field(
        default=Decimal("0"),
        description="wallet + bank; transfers cancel out here"
    )

    def for_pool(self, pool: TransactionSource) -> Decimal:
        """Get the balance of one pool."""
        return self.wallet if TransactionSource(pool) == TransactionSource.WALLET else self.bank


class PeriodSummary(BaseModel):
    """Income vs. expenses for one period window."""

    total_income: Decimal = Field(default=Decimal("0"))
    total_expenses: Decimal = Field(default=Decimal("0"))
    net_balance: Decimal = Field(
        default=Decimal("0"),
        description="total_income - total_expenses"
    )


class AggregateGroup(BaseModel):
    """
    One slice of a breakdown chart.

    `entries` keeps the original entries behind the slice so a
    presentation layer can navigate from a slice back to its entries.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str
    total: Decimal
    entries: list[Any] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)


class ReplaceResult(BaseModel):
    """Outcome of replacing one collection wholesale."""

    kind: TransactionType
    accepted: list[LedgerEntry] = Field(default_factory=list)
    rejected_count: int = Field(default=0, ge=0)
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="Issues of every rejected record, in input order"
    )

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)


class ImportReport(BaseModel):
    """Outcome of restoring a backup into all three collections."""

    income: ReplaceResult
    expenses: ReplaceResult
    transfers: ReplaceResult

    @property
    def total_accepted(self) -> int:
        return (
            self.income.accepted_count
            + self.expenses.accepted_count
            + self.transfers.accepted_count
        )

    @property
    def total_rejected(self) -> int:
        return (
            self.income.rejected_count
            + self.expenses.rejected_count
            + self.transfers.rejected_count
        )

    @property
    def has_rejections(self) -> bool:
        return self.total_rejected > 0
