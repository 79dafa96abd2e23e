"""
Main Orchestrator for PocketLedger

This module ties together the components and defines the flows for:
1. Entry bookkeeping (add / update / delete through the three stores)
2. Backup (export all collections -> JSON; import JSON -> replace all)
3. Overview queries (balances, period summaries, breakdowns)

DESIGN DECISION: The orchestrator enforces the boundaries:
- A backup file is checked as a whole before any collection changes
- Every mutation goes through a store, so it is validated and persisted
- Every derived number is recomputed from the collections on demand

A presentation layer talks only to LedgerBook and subscribes to notices
through the notifier's sink.
"""

from datetime import datetime
from typing import Any, Optional, Union

import structlog

from pocketledger.config import Settings, get_settings
from pocketledger.ledger import (
    EntryStore,
    ExpenseStore,
    IncomeStore,
    TransferStore,
    compute_balances,
)
from pocketledger.models.entries import TransactionType
from pocketledger.models.reports import (
    AggregateGroup,
    BalanceSummary,
    ImportReport,
    PeriodSummary,
)
from pocketledger.notices import LedgerNotifier, NoticeSink, setup_logging
from pocketledger.queries import (
    AggregationKey,
    Period,
    aggregate_by,
    entries_in_category,
    filter_by_period,
    period_label,
    summarize,
    unique_months_with_data,
)
from pocketledger.services.backup import (
    MalformedImportFileError,
    backup_filename,
    dumps_backup,
    parse_backup,
)
from pocketledger.services.storage import JsonFileStore, KeyValueStore

logger = structlog.get_logger(__name__)


class LedgerBook:
    """
    The whole ledger: three collections plus the views derived from them.

    Usage:
        book = LedgerBook(InMemoryStore())
        book.income.add(IncomeData(amount=500, source="wallet", date="2024-01-05"))
        book.balances().wallet  # Decimal("500")
    """

    def __init__(
        self,
        storage: KeyValueStore,
        notifier: Optional[LedgerNotifier] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._notifier = notifier or LedgerNotifier()
        storage_settings = self._settings.storage

        self.income = IncomeStore(storage, storage_settings.income_key, self._notifier)
        self.expenses = ExpenseStore(storage, storage_settings.expense_key, self._notifier)
        self.transfers = TransferStore(storage, storage_settings.transfer_key, self._notifier)

    @property
    def notifier(self) -> LedgerNotifier:
        return self._notifier

    def store_for(self, kind: Union[TransactionType, str]) -> EntryStore:
        """Get the store holding one kind of entry."""
        return {
            TransactionType.INCOME: self.income,
            TransactionType.EXPENSE: self.expenses,
            TransactionType.TRANSFER: self.transfers,
        }[TransactionType(kind)]

    # =========================================================================
    # BALANCES
    # =========================================================================

    def balances(self) -> BalanceSummary:
        """All-time wallet, bank and total balances."""
        return compute_balances(
            self.income.entries,
            self.expenses.entries,
            self.transfers.entries,
        )

    # =========================================================================
    # BACKUP
    # =========================================================================

    def export_backup(self, exported_at: Optional[datetime] = None) -> str:
        """Serialize all three collections to backup JSON text."""
        text = dumps_backup(
            self.income.entries,
            self.expenses.entries,
            self.transfers.entries,
            exported_at=exported_at,
        )
        logger.info(
            "backup_exported",
            income=len(self.income),
            expenses=len(self.expenses),
            transfers=len(self.transfers),
        )
        return text

    def backup_filename(self, now: Optional[datetime] = None) -> str:
        """Suggested file name for an export."""
        return backup_filename(now, prefix=self._settings.app.backup_filename_prefix)

    def import_backup(self, source: Union[str, bytes, dict]) -> ImportReport:
        """
        Replace all three collections with the contents of a backup.

        The file structure is checked first; if it is malformed nothing
        changes. Individual invalid records are dropped and counted.

        Raises:
            MalformedImportFileError: If the file cannot be used at all
        """
        try:
            payload = parse_backup(source)
        except MalformedImportFileError as e:
            logger.warning("backup_import_rejected", error=str(e))
            self._notifier.import_failed(str(e))
            raise

        report = ImportReport(
            income=self.income.replace_all(payload.income_entries),
            expenses=self.expenses.replace_all(payload.expense_entries),
            transfers=self.transfers.replace_all(payload.transfer_entries),
        )

        logger.info(
            "backup_imported",
            accepted=report.total_accepted,
            rejected=report.total_rejected,
            exported_at=payload.exported_at,
        )
        self._notifier.import_succeeded(report)
        return report

    # =========================================================================
    # OVERVIEW QUERIES
    # =========================================================================

    def period_entries(
        self,
        kind: Union[TransactionType, str],
        period: Union[Period, str] = Period.ALL_TIME,
        reference: Any = None,
        custom_start: Any = None,
        custom_end: Any = None,
    ) -> list:
        """Entries of one kind inside a period window, newest first."""
        return filter_by_period(
            self.store_for(kind).entries,
            period,
            reference,
            custom_start,
            custom_end,
        )

    def summary(
        self,
        period: Union[Period, str] = Period.ALL_TIME,
        reference: Any = None,
        custom_start: Any = None,
        custom_end: Any = None,
    ) -> PeriodSummary:
        """Income, expenses and net balance for a period."""
        window = (period, reference, custom_start, custom_end)
        return summarize(
            self.period_entries(TransactionType.INCOME, *window),
            self.period_entries(TransactionType.EXPENSE, *window),
        )

    def expense_breakdown(
        self,
        period: Union[Period, str] = Period.ALL_TIME,
        reference: Any = None,
        custom_start: Any = None,
        custom_end: Any = None,
        category: Optional[str] = None,
    ) -> list[AggregateGroup]:
        """
        Expense totals for a period.

        Without `category`: one group per category.
        With `category`: that category's expenses, one group per subcategory.
        """
        expenses = self.period_entries(
            TransactionType.EXPENSE, period, reference, custom_start, custom_end
        )
        if category is None:
            return aggregate_by(expenses, AggregationKey.CATEGORY)
        return aggregate_by(entries_in_category(expenses, category), AggregationKey.SUBCATEGORY)

    def income_breakdown(
        self,
        period: Union[Period, str] = Period.ALL_TIME,
        reference: Any = None,
        custom_start: Any = None,
        custom_end: Any = None,
    ) -> list[AggregateGroup]:
        """Income totals for a period, one group per pool ("Wallet", "Bank")."""
        income = self.period_entries(
            TransactionType.INCOME, period, reference, custom_start, custom_end
        )
        return aggregate_by(income, AggregationKey.SOURCE)

    def period_label(
        self,
        period: Union[Period, str] = Period.ALL_TIME,
        reference: Any = None,
        custom_start: Any = None,
        custom_end: Any = None,
    ) -> str:
        return period_label(period, reference, custom_start, custom_end)

    def months_with_data(self) -> list[str]:
        """'YYYY-MM' months with income or expenses, newest first."""
        return unique_months_with_data(self.income.entries, self.expenses.entries)


def create_ledger_book(
    settings: Optional[Settings] = None,
    sink: Optional[NoticeSink] = None,
) -> LedgerBook:
    """
    Factory function to create a LedgerBook with file storage.

    Reads data from the configured data directory.
    """
    settings = settings or get_settings()
    setup_logging(settings.app)

    storage = JsonFileStore(settings.storage.data_dir)
    logger.info("ledger_opened", data_dir=str(storage.data_dir))
    return LedgerBook(storage, notifier=LedgerNotifier(sink), settings=settings)
