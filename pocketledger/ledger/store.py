"""
Ledger Stores

One store per collection (income, expenses, transfers). A store owns the
in-memory list, validates every mutation and writes the whole collection
back through the injected KeyValueStore after each change.

DESIGN DECISION: In-memory state is authoritative.
- A failed write is logged and announced, never rolled back
- There is no retry; the next successful mutation rewrites everything
- Reads never touch storage after construction

INVARIANT: `entries` is always sorted newest first and ids are unique
within the collection.
"""

from collections.abc import Iterable
from typing import Any, Callable, Generic, Optional, TypeVar
from uuid import uuid4

import structlog

from pocketledger.config import get_settings
from pocketledger.models.entries import (
    ExpenseEntry,
    IncomeEntry,
    TransactionType,
    TransferEntry,
    ValidationIssue,
)
from pocketledger.models.reports import ReplaceResult
from pocketledger.models.timestamps import sort_by_date_desc
from pocketledger.notices import LedgerNotifier
from pocketledger.services.storage import KeyValueStore, StorageError
from pocketledger.validation import EntryValidationError, EntryValidator

logger = structlog.get_logger(__name__)

E = TypeVar("E", IncomeEntry, ExpenseEntry, TransferEntry)


class EntryNotFoundError(LookupError):
    """No entry with the given id exists in the collection."""

    def __init__(self, kind: TransactionType, entry_id: str):
        self.kind = kind
        self.entry_id = entry_id
        super().__init__(f"No {kind.value} entry with id {entry_id!r}")


def _new_id() -> str:
    return str(uuid4())


class EntryStore(Generic[E]):
    """
    Holds one collection of entries.

    Usage:
        store = IncomeStore(InMemoryStore())
        entry = store.add(IncomeData(amount=500, source="wallet", date=...))
        store.update(entry.id, {...})
        store.delete(entry.id)
    """

    kind: TransactionType

    def __init__(
        self,
        storage: KeyValueStore,
        storage_key: str,
        notifier: Optional[LedgerNotifier] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._storage = storage
        self._storage_key = storage_key
        self._notifier = notifier or LedgerNotifier()
        self._id_factory = id_factory or _new_id
        self._validator = EntryValidator(self.kind)
        self._entries: list[E] = []
        self.load()

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def entries(self) -> list[E]:
        """Snapshot of the collection, newest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))

    # =========================================================================
    # LOADING
    # =========================================================================

    def load(self) -> None:
        """
        (Re)load the collection from storage.

        Records that fail validation are dropped and logged; a corrupt or
        missing key yields an empty collection.
        """
        stored = self._storage.load(self._storage_key, [])
        if not isinstance(stored, list):
            logger.warning(
                "stored_collection_invalid",
                kind=self.kind.value,
                key=self._storage_key,
                found=type(stored).__name__,
            )
            stored = []

        accepted, issues, rejected = self._validate_records(stored)
        if rejected:
            logger.warning(
                "stored_entries_dropped",
                kind=self.kind.value,
                key=self._storage_key,
                dropped=rejected,
                issues=[issue.message for issue in issues],
            )

        self._entries = sort_by_date_desc(accepted)
        logger.debug(
            "collection_loaded",
            kind=self.kind.value,
            key=self._storage_key,
            count=len(self._entries),
        )

    def _validate_records(
        self,
        records: Iterable[Any],
    ) -> tuple[list[E], list[ValidationIssue], int]:
        """Run the record validator over raw records; drop bad ones and duplicate ids."""
        accepted: list[E] = []
        issues: list[ValidationIssue] = []
        rejected = 0
        seen_ids: set[str] = set()

        for raw in records:
            result = self._validator.validate_record(raw)
            if not result.is_valid:
                rejected += 1
                issues.extend(result.issues)
                continue

            entry = result.entry
            if entry.id in seen_ids:
                rejected += 1
                issues.append(ValidationIssue(
                    field="id",
                    issue_type="duplicate",
                    message=f"Duplicate {self.kind.value} id: {entry.id}",
                ))
                continue

            seen_ids.add(entry.id)
            accepted.append(entry)

        return accepted, issues, rejected

    # =========================================================================
    # READS
    # =========================================================================

    def get(self, entry_id: str) -> Optional[E]:
        """Get an entry by id, or None."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def __contains__(self, entry_id: object) -> bool:
        return any(entry.id == entry_id for entry in self._entries)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def _validated(self, data: Any, entry_id: str) -> E:
        result = self._validator.validate_input(data, entry_id)
        if not result.is_valid:
            logger.info(
                "entry_rejected",
                kind=self.kind.value,
                entry_id=entry_id,
                issues=result.messages,
            )
            raise EntryValidationError(result)
        return result.entry

    def _fresh_id(self) -> str:
        entry_id = self._id_factory()
        while entry_id in self:
            entry_id = self._id_factory()
        return entry_id

    def add(self, data: Any) -> E:
        """
        Validate input data, assign a new id and insert the entry.

        Args:
            data: An input model (IncomeData, ...) or a mapping

        Returns:
            The stored entry

        Raises:
            EntryValidationError: If the data fails validation
        """
        entry = self._validated(data, self._fresh_id())
        self._commit(self._entries + [entry])

        logger.info("entry_added", kind=self.kind.value, entry_id=entry.id)
        self._notifier.entry_added(entry)
        return entry

    def update(self, entry_id: str, data: Any) -> E:
        """
        Replace every field of an existing entry except its id.

        Raises:
            EntryNotFoundError: If no entry has this id
            EntryValidationError: If the data fails validation
        """
        if entry_id not in self:
            raise EntryNotFoundError(self.kind, entry_id)

        entry = self._validated(data, entry_id)
        self._commit([
            entry if existing.id == entry_id else existing
            for existing in self._entries
        ])

        logger.info("entry_updated", kind=self.kind.value, entry_id=entry_id)
        self._notifier.entry_updated(entry)
        return entry

    def delete(self, entry_id: str) -> None:
        """Remove an entry. Deleting an unknown id does nothing."""
        if entry_id not in self:
            logger.debug("delete_missing_entry", kind=self.kind.value, entry_id=entry_id)
            return

        self._commit([entry for entry in self._entries if entry.id != entry_id])

        logger.info("entry_deleted", kind=self.kind.value, entry_id=entry_id)
        self._notifier.entry_deleted(self.kind, entry_id)

    def replace_all(self, records: Iterable[Any]) -> ReplaceResult:
        """
        Replace the whole collection with the valid subset of `records`.

        Invalid records are dropped and counted rather than failing the
        whole batch.
        """
        accepted, issues, rejected = self._validate_records(records)
        self._commit(accepted)

        logger.info(
            "entries_replaced",
            kind=self.kind.value,
            accepted=len(accepted),
            rejected=rejected,
        )
        if rejected:
            self._notifier.import_filtered(self.kind, rejected)
        self._notifier.entries_replaced(self.kind, len(accepted), rejected)

        return ReplaceResult(
            kind=self.kind,
            accepted=self.entries,
            rejected_count=rejected,
            issues=issues,
        )

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _commit(self, entries: list[E]) -> None:
        """Swap in a new (re-sorted) collection and persist it."""
        self._entries = sort_by_date_desc(entries)
        self._persist()

    def _persist(self) -> bool:
        records = [entry.to_record() for entry in self._entries]
        try:
            saved = self._storage.save(self._storage_key, records)
            error_message = "" if saved else "storage rejected the write"
        except StorageError as e:
            saved = False
            error_message = str(e)
        except Exception as e:
            # Backends outside this package may raise their own errors
            saved = False
            error_message = f"{type(e).__name__}: {e}"

        if not saved:
            logger.error(
                "persist_failed",
                kind=self.kind.value,
                key=self._storage_key,
                error=error_message,
            )
            self._notifier.persistence_failed(self.kind, self._storage_key, error_message)
        return saved


class IncomeStore(EntryStore[IncomeEntry]):
    """Income collection."""
    kind = TransactionType.INCOME

    def __init__(
        self,
        storage: KeyValueStore,
        storage_key: Optional[str] = None,
        notifier: Optional[LedgerNotifier] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        super().__init__(
            storage,
            storage_key or get_settings().storage.income_key,
            notifier,
            id_factory,
        )


class ExpenseStore(EntryStore[ExpenseEntry]):
    """Expense collection."""
    kind = TransactionType.EXPENSE

    def __init__(
        self,
        storage: KeyValueStore,
        storage_key: Optional[str] = None,
        notifier: Optional[LedgerNotifier] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        super().__init__(
            storage,
            storage_key or get_settings().storage.expense_key,
            notifier,
            id_factory,
        )


class TransferStore(EntryStore[TransferEntry]):
    """Transfer collection."""
    kind = TransactionType.TRANSFER

    def __init__(
        self,
        storage: KeyValueStore,
        storage_key: Optional[str] = None,
        notifier: Optional[LedgerNotifier] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        super().__init__(
            storage,
            storage_key or get_settings().storage.transfer_key,
            notifier,
            id_factory,
        )
