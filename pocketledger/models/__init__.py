"""
Data Models Package

This package contains all Pydantic models used by PocketLedger.
All data flowing through the ledger must conform to these schemas.
"""

from pocketledger.models.entries import (
    DATA_MODELS,
    ENTRY_MODELS,
    EntryData,
    ExpenseData,
    ExpenseEntry,
    IncomeData,
    IncomeEntry,
    LedgerEntry,
    TransactionSource,
    TransactionType,
    TransferData,
    TransferEntry,
    ValidationIssue,
    ValidationResult,
)
from pocketledger.models.notice import (
    Notice,
    NoticeBuilder,
    NoticeType,
    NoticeVariant,
)
from pocketledger.models.reports import (
    AggregateGroup,
    BalanceSummary,
    ImportReport,
    PeriodSummary,
    ReplaceResult,
)

__all__ = [
    # Entry models
    "DATA_MODELS",
    "ENTRY_MODELS",
    "EntryData",
    "ExpenseData",
    "ExpenseEntry",
    "IncomeData",
    "IncomeEntry",
    "LedgerEntry",
    "TransactionSource",
    "TransactionType",
    "TransferData",
    "TransferEntry",
    "ValidationIssue",
    "ValidationResult",
    # Derived views
    "AggregateGroup",
    "BalanceSummary",
    "ImportReport",
    "PeriodSummary",
    "ReplaceResult",
    # Notices
    "Notice",
    "NoticeBuilder",
    "NoticeType",
    "NoticeVariant",
]
