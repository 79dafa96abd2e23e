"""
Notice Models for PocketLedger

Every mutation of the ledger produces a short user-facing notice
("Income added", "Import Note", ...). A presentation layer shows them
as toasts; the notifier also writes them to the structured log.

DESIGN DECISION: Notices are transient. They are never persisted and do
not form an audit trail.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from pocketledger.config import get_settings
from pocketledger.models.entries import (
    ExpenseEntry,
    IncomeEntry,
    LedgerEntry,
    TransactionType,
    TransferEntry,
)
from pocketledger.models.timestamps import utc_now


class NoticeType(str, Enum):
    """Types of notices the ledger emits."""
    # Entry lifecycle
    ENTRY_ADDED = "entry_added"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"
    ENTRIES_REPLACED = "entries_replaced"

    # Import
    IMPORT_FILTERED = "import_filtered"
    IMPORT_SUCCEEDED = "import_succeeded"
    IMPORT_FAILED = "import_failed"

    # Persistence
    PERSISTENCE_FAILED = "persistence_failed"


class NoticeVariant(str, Enum):
    """How loudly a notice should be shown."""
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notice(BaseModel):
    """A single user-facing notice."""

    notice_id: UUID = Field(
        default_factory=uuid4,
        description="Unique notice identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the notice was raised (UTC)"
    )

    notice_type: NoticeType
    variant: NoticeVariant = Field(default=NoticeVariant.DEFAULT)

    # Which collection / entry this is about
    kind: Optional[TransactionType] = None
    entity_id: Optional[str] = None

    title: str = Field(
        ...,
        max_length=100,
        description="Short headline"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="One-line explanation"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "notice_id": str(self.notice_id),
            "timestamp": self.timestamp.isoformat(),
            "notice_type": self.notice_type.value,
            "variant": self.variant.value,
            "kind": self.kind.value if self.kind else None,
            "entity_id": self.entity_id,
            "title": self.title,
            "description": self.description,
            "details": self.details,
        }


def _money(amount: Decimal, symbol: str) -> str:
    if amount == amount.to_integral_value():
        return f"{symbol}{int(amount)}"
    return f"{symbol}{amount.normalize()}"


class NoticeBuilder:
    """
    Helper class to build notices with the standard wording.

    Usage:
        notice = NoticeBuilder.entry_added(entry)
        notice = NoticeBuilder.entry_deleted(TransactionType.INCOME, entry_id)
    """

    ADDED_TITLES = {
        TransactionType.INCOME: "Income added",
        TransactionType.EXPENSE: "Expense added",
        TransactionType.TRANSFER: "Transfer recorded",
    }

    @staticmethod
    def describe(entry: LedgerEntry, symbol: Optional[str] = None) -> str:
        """One-line description of an entry, e.g. '₹500 from wallet.'"""
        if symbol is None:
            symbol = get_settings().app.currency_symbol
        amount = _money(entry.amount, symbol)
        if isinstance(entry, IncomeEntry):
            return f"{amount} from {entry.source.value}."
        if isinstance(entry, ExpenseEntry):
            return f"{amount} for {entry.category} from {entry.source.value}."
        if isinstance(entry, TransferEntry):
            return f"{amount} from {entry.from_source.value} to {entry.to_source.value}."
        return f"{amount}."

    @staticmethod
    def entry_added(entry: LedgerEntry) -> Notice:
        return Notice(
            notice_type=NoticeType.ENTRY_ADDED,
            kind=entry.kind,
            entity_id=entry.id,
            title=NoticeBuilder.ADDED_TITLES[entry.kind],
            description=NoticeBuilder.describe(entry)[:500],
            details={"amount": str(entry.amount)},
        )

    @staticmethod
    def entry_updated(entry: LedgerEntry) -> Notice:
        return Notice(
            notice_type=NoticeType.ENTRY_UPDATED,
            kind=entry.kind,
            entity_id=entry.id,
            title=f"{entry.kind.value.capitalize()} updated",
            description=(NoticeBuilder.describe(entry).rstrip(".") + " has been updated.")[:500],
            details={"amount": str(entry.amount)},
        )

    @staticmethod
    def entry_deleted(kind: TransactionType, entry_id: str) -> Notice:
        return Notice(
            notice_type=NoticeType.ENTRY_DELETED,
            variant=NoticeVariant.DESTRUCTIVE,
            kind=kind,
            entity_id=entry_id,
            title=f"{kind.value.capitalize()} deleted",
        )

    @staticmethod
    def entries_replaced(
        kind: TransactionType,
        accepted: int,
        rejected: int,
    ) -> Notice:
        return Notice(
            notice_type=NoticeType.ENTRIES_REPLACED,
            kind=kind,
            title=f"{kind.value.capitalize()} entries replaced",
            description=f"{accepted} entries kept, {rejected} dropped.",
            details={"accepted": accepted, "rejected": rejected},
        )

    @staticmethod
    def import_filtered(kind: TransactionType, rejected: int) -> Notice:
        return Notice(
            notice_type=NoticeType.IMPORT_FILTERED,
            kind=kind,
            title="Import Note",
            description=(
                f"{rejected} {kind.value} "
                f"{'entry was' if rejected == 1 else 'entries were'} "
                "filtered out due to invalid data or date formats."
            ),
            details={"rejected": rejected},
        )

    @staticmethod
    def import_succeeded(accepted: int, rejected: int) -> Notice:
        return Notice(
            notice_type=NoticeType.IMPORT_SUCCEEDED,
            title="Import Successful",
            description="Your data has been imported and replaced the existing data.",
            details={"accepted": accepted, "rejected": rejected},
        )

    @staticmethod
    def import_failed(reason: str) -> Notice:
        return Notice(
            notice_type=NoticeType.IMPORT_FAILED,
            variant=NoticeVariant.DESTRUCTIVE,
            title="Import Failed",
            description=reason[:500],
        )

    @staticmethod
    def persistence_failed(
        kind: Optional[TransactionType],
        storage_key: str,
        error_message: str,
    ) -> Notice:
        return Notice(
            notice_type=NoticeType.PERSISTENCE_FAILED,
            variant=NoticeVariant.DESTRUCTIVE,
            kind=kind,
            title="Persistence failed",
            description="Changes are kept for this session but were not saved to disk.",
            details={"storage_key": storage_key, "error": error_message},
        )
