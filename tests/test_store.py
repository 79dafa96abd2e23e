"""Tests for the ledger entry stores."""

from decimal import Decimal
from typing import Any

import pytest

from pocketledger.ledger import (
    EntryNotFoundError,
    ExpenseStore,
    IncomeStore,
    TransferStore,
)
from pocketledger.models import (
    ExpenseData,
    IncomeData,
    NoticeType,
    TransactionSource,
    TransferData,
)
from pocketledger.services.storage import InMemoryStore, PersistenceWriteError
from pocketledger.validation import EntryValidationError
from records import expense_record, income_record, transfer_record


class FailingStore(InMemoryStore):
    """Store whose writes fail, either by returning False or raising."""

    def __init__(self, initial=None, raise_error: bool = False):
        super().__init__(initial)
        self.raise_error = raise_error

    def save(self, key: str, value: Any) -> bool:
        if self.raise_error:
            raise PersistenceWriteError("disk on fire")
        return False


class TestLoading:
    """Tests for loading a collection from storage."""

    def test_empty_storage(self, storage):
        """Test that a missing key yields an empty collection."""
        store = IncomeStore(storage)
        assert store.entries == []
        assert store.storage_key == "pocketledger-income"

    def test_loads_sorted_and_drops_invalid(self, notifier):
        """Test that stored records are validated and ordered newest first."""
        storage = InMemoryStore({
            "pocketledger-expenses": [
                expense_record("e1", 10, "2024-01-05"),
                expense_record("e2", -1, "2024-01-06"),
                expense_record("e3", 20, "2024-01-09"),
                "junk",
            ],
        })
        store = ExpenseStore(storage, notifier=notifier)
        assert [e.id for e in store.entries] == ["e3", "e1"]

    def test_non_list_value_is_ignored(self, notifier):
        """Test that a stored non-list is treated as empty."""
        storage = InMemoryStore({"pocketledger-income": {"oops": True}})
        assert IncomeStore(storage, notifier=notifier).entries == []

    def test_custom_key(self, storage, notifier):
        """Test that a store reads and writes its own key."""
        store = TransferStore(storage, storage_key="my-transfers", notifier=notifier)
        store.add(TransferData(amount=1, fromSource="bank", toSource="wallet", date="2024-01-01"))
        assert len(storage.raw("my-transfers")) == 1


class TestAdd:
    """Tests for adding entries."""

    def test_add_assigns_id_and_persists(self, storage, notifier, sequential_ids):
        """Test that add stores, persists and returns the entry."""
        store = IncomeStore(storage, notifier=notifier, id_factory=sequential_ids)
        entry = store.add(IncomeData(amount=1000, source="wallet", date="2024-01-05"))
        assert entry.id == "id-1"
        assert store.get("id-1") == entry
        assert storage.raw("pocketledger-income") == [entry.to_record()]

    def test_stored_entry_matches_input(self, storage, notifier):
        """Test that only the id and normalized optional fields are added."""
        store = ExpenseStore(storage, notifier=notifier)
        data = ExpenseData(amount=300, category="Food", source="wallet", date="2024-01-06")
        entry = store.add(data)
        stored = entry.model_dump(exclude={"id"})
        assert stored == data.model_dump()
        assert entry.subcategory == ""
        assert entry.description == ""

    def test_text_fields_kept_verbatim(self, storage, notifier):
        """Test that surrounding whitespace in text fields is preserved."""
        store = ExpenseStore(storage, notifier=notifier)
        entry = store.add({
            "amount": 40,
            "category": " Food ",
            "subcategory": " Snacks ",
            "description": " lunch ",
            "source": "wallet",
            "date": "2024-01-06",
        })
        assert (entry.category, entry.subcategory, entry.description) == (" Food ", " Snacks ", " lunch ")
        assert store.get(entry.id).category == " Food "

    def test_add_accepts_mapping(self, storage, notifier):
        """Test adding from a plain dict."""
        store = TransferStore(storage, notifier=notifier)
        entry = store.add({"amount": 200, "fromSource": "wallet", "toSource": "bank", "date": "2024-01-07"})
        assert entry.from_source == TransactionSource.WALLET

    def test_add_keeps_newest_first(self, storage, notifier):
        """Test ordering after inserts."""
        store = IncomeStore(storage, notifier=notifier)
        old = store.add({"amount": 1, "source": "bank", "date": "2024-01-01"})
        new = store.add({"amount": 2, "source": "bank", "date": "2024-02-01"})
        mid = store.add({"amount": 3, "source": "bank", "date": "2024-01-15"})
        assert [e.id for e in store.entries] == [new.id, mid.id, old.id]

    def test_invalid_input_raises_and_changes_nothing(self, storage, notifier):
        """Test that rejected input raises with issues and is not stored."""
        store = ExpenseStore(storage, notifier=notifier)
        with pytest.raises(EntryValidationError) as exc_info:
            store.add({"amount": -5, "category": "Food", "source": "wallet", "date": "2024-01-06"})
        assert exc_info.value.issues[0].field == "amount"
        assert store.entries == []
        assert storage.save_count == 0

    def test_transfer_between_same_pool_rejected(self, storage, notifier):
        """Test that add enforces from != to."""
        store = TransferStore(storage, notifier=notifier)
        with pytest.raises(EntryValidationError):
            store.add({"amount": 5, "fromSource": "bank", "toSource": "bank", "date": "2024-01-07"})

    def test_id_factory_collisions_are_skipped(self, storage, notifier):
        """Test that a repeated id from the factory is not reused."""
        ids = iter(["same", "same", "other"])
        store = IncomeStore(storage, notifier=notifier, id_factory=lambda: next(ids))
        first = store.add({"amount": 1, "source": "bank", "date": "2024-01-01"})
        second = store.add({"amount": 1, "source": "bank", "date": "2024-01-01"})
        assert (first.id, second.id) == ("same", "other")

    def test_add_emits_notice(self, storage, notifier, notices):
        """Test that every successful add is announced."""
        store = IncomeStore(storage, notifier=notifier)
        entry = store.add({"amount": 500, "source": "wallet", "date": "2024-01-05"})
        assert notices[-1].notice_type == NoticeType.ENTRY_ADDED
        assert notices[-1].entity_id == entry.id
        assert notices[-1].title == "Income added"


class TestUpdate:
    """Tests for updating entries."""

    def test_update_is_full_overwrite(self, storage, notifier):
        """Test that every field except the id is replaced."""
        store = ExpenseStore(storage, notifier=notifier)
        entry = store.add(ExpenseData(
            amount=300,
            category="Food",
            subcategory="Groceries",
            description="weekly shop",
            source="wallet",
            date="2024-01-06",
        ))
        new_data = ExpenseData(amount=120, category="Transport", source="bank", date="2024-01-08")
        updated = store.update(entry.id, new_data)

        assert updated.id == entry.id
        assert store.get(entry.id).model_dump(exclude={"id"}) == new_data.model_dump()
        assert store.get(entry.id).subcategory == ""

    def test_update_resorts(self, storage, notifier):
        """Test that changing a date moves the entry."""
        store = IncomeStore(storage, notifier=notifier)
        a = store.add({"amount": 1, "source": "bank", "date": "2024-01-01"})
        b = store.add({"amount": 1, "source": "bank", "date": "2024-01-02"})
        store.update(a.id, {"amount": 1, "source": "bank", "date": "2024-01-03"})
        assert [e.id for e in store.entries] == [a.id, b.id]

    def test_update_missing_id(self, storage, notifier):
        """Test that updating an unknown id raises."""
        store = IncomeStore(storage, notifier=notifier)
        with pytest.raises(EntryNotFoundError):
            store.update("nope", {"amount": 1, "source": "bank", "date": "2024-01-01"})

    def test_update_invalid_keeps_original(self, storage, notifier):
        """Test that a rejected update leaves the entry untouched."""
        store = IncomeStore(storage, notifier=notifier)
        entry = store.add({"amount": 10, "source": "bank", "date": "2024-01-01"})
        with pytest.raises(EntryValidationError):
            store.update(entry.id, {"amount": 0, "source": "bank", "date": "2024-01-01"})
        assert store.get(entry.id) == entry

    def test_update_emits_notice(self, storage, notifier, notices):
        """Test the update notice."""
        store = IncomeStore(storage, notifier=notifier)
        entry = store.add({"amount": 10, "source": "bank", "date": "2024-01-01"})
        store.update(entry.id, {"amount": 20, "source": "bank", "date": "2024-01-01"})
        assert notices[-1].notice_type == NoticeType.ENTRY_UPDATED


class TestDelete:
    """Tests for deleting entries."""

    def test_delete(self, storage, notifier, notices):
        """Test that delete removes, persists and notifies."""
        store = IncomeStore(storage, notifier=notifier)
        entry = store.add({"amount": 10, "source": "bank", "date": "2024-01-01"})
        store.delete(entry.id)
        assert store.entries == []
        assert storage.raw("pocketledger-income") == []
        assert notices[-1].notice_type == NoticeType.ENTRY_DELETED

    def test_delete_missing_is_noop(self, storage, notifier, notices):
        """Test that deleting an unknown id changes nothing and raises nothing."""
        store = IncomeStore(storage, notifier=notifier)
        store.add({"amount": 10, "source": "bank", "date": "2024-01-01"})
        before = store.entries
        saves = storage.save_count
        count = len(notices)

        store.delete("does-not-exist")

        assert store.entries == before
        assert storage.save_count == saves
        assert len(notices) == count


class TestReplaceAll:
    """Tests for wholesale replacement."""

    def test_keeps_valid_subset_sorted(self, storage, notifier):
        """Test that invalid records are dropped and the rest sorted."""
        store = ExpenseStore(storage, notifier=notifier)
        result = store.replace_all([
            expense_record("e1", 10, "2024-01-01"),
            expense_record("e2", 20, "2024-01-03"),
            expense_record("e3", -5, "2024-01-02"),
            expense_record("e4", 30, "2024-01-02"),
            expense_record("e5", 40, "2024-01-04", category=""),
        ])
        assert result.accepted_count == 3
        assert result.rejected_count == 2
        assert [e.id for e in store.entries] == ["e2", "e4", "e1"]
        assert [e.id for e in result.accepted] == ["e2", "e4", "e1"]

    def test_replaces_existing_entries(self, storage, notifier):
        """Test that previous entries are discarded."""
        store = IncomeStore(storage, notifier=notifier)
        store.add({"amount": 10, "source": "bank", "date": "2024-01-01"})
        store.replace_all([income_record("i9", 5, "2024-03-01")])
        assert [e.id for e in store.entries] == ["i9"]
        assert [r["id"] for r in storage.raw("pocketledger-income")] == ["i9"]

    def test_idempotent(self, storage, notifier):
        """Test that replacing with the accepted set yields the same set."""
        store = TransferStore(storage, notifier=notifier)
        first = store.replace_all([
            transfer_record("t1", 200, "2024-01-07"),
            transfer_record("t2", 50, "2024-01-08", from_source="bank", to_source="wallet"),
            transfer_record("t3", 50, "2024-01-09", to_source="wallet"),
        ])
        second = store.replace_all(first.accepted)
        assert second.accepted == first.accepted
        assert second.rejected_count == 0
        assert store.entries == first.accepted

    def test_accepts_entry_models(self, storage, notifier):
        """Test replacing with entry models rather than raw mappings."""
        store = IncomeStore(storage, notifier=notifier)
        first = store.replace_all([
            income_record("i1", 5, "2024-01-01"),
            income_record("i2", Decimal("7.25"), "2024-01-02", source="bank"),
        ])
        again = store.replace_all(first.accepted)
        assert again.accepted_count == 2
        assert store.entries == first.accepted
        assert storage.raw("pocketledger-income") == [e.to_record() for e in first.accepted]

    def test_duplicate_ids_rejected(self, storage, notifier):
        """Test that a repeated id is counted as rejected."""
        store = IncomeStore(storage, notifier=notifier)
        result = store.replace_all([
            income_record("i1", 5, "2024-01-01"),
            income_record("i1", 6, "2024-01-02"),
        ])
        assert result.accepted_count == 1
        assert result.rejected_count == 1
        assert result.issues[0].issue_type == "duplicate"

    def test_dates_normalized(self, storage, notifier):
        """Test that accepted dates are stored in canonical form."""
        store = IncomeStore(storage, notifier=notifier)
        store.replace_all([income_record("i1", 5, "2024-01-01T10:00:00+02:00")])
        assert storage.raw("pocketledger-income")[0]["date"] == "2024-01-01T08:00:00.000Z"

    def test_import_note_when_filtered(self, storage, notifier, notices):
        """Test that dropped records produce an import note."""
        store = ExpenseStore(storage, notifier=notifier)
        store.replace_all([expense_record("e1", -5, "2024-01-01")])
        types = [notice.notice_type for notice in notices]
        assert NoticeType.IMPORT_FILTERED in types
        note = next(n for n in notices if n.notice_type == NoticeType.IMPORT_FILTERED)
        assert note.details["rejected"] == 1

    def test_no_import_note_when_clean(self, storage, notifier, notices):
        """Test that a clean replace does not produce an import note."""
        store = ExpenseStore(storage, notifier=notifier)
        store.replace_all([expense_record("e1", 5, "2024-01-01")])
        assert all(n.notice_type != NoticeType.IMPORT_FILTERED for n in notices)


class TestPersistenceFailures:
    """Tests for failed writes."""

    @pytest.mark.parametrize("raise_error", [False, True])
    def test_memory_state_survives_failed_write(self, notifier, notices, raise_error):
        """Test that in-memory state stays authoritative when saving fails."""
        store = IncomeStore(FailingStore(raise_error=raise_error), notifier=notifier)
        entry = store.add({"amount": 10, "source": "wallet", "date": "2024-01-01"})

        assert store.get(entry.id) == entry
        types = [notice.notice_type for notice in notices]
        assert NoticeType.PERSISTENCE_FAILED in types
        assert NoticeType.ENTRY_ADDED in types

    def test_failure_details(self, notifier, notices):
        """Test that the failure notice names the key and error."""
        store = IncomeStore(FailingStore(raise_error=True), notifier=notifier)
        store.add({"amount": 10, "source": "wallet", "date": "2024-01-01"})
        failure = next(n for n in notices if n.notice_type == NoticeType.PERSISTENCE_FAILED)
        assert failure.details == {"storage_key": "pocketledger-income", "error": "disk on fire"}

    def test_unexpected_backend_error(self, notifier, notices):
        """Test that a foreign exception from a backend is reported, not raised."""
        class BrokenDiskStore(InMemoryStore):
            def save(self, key: str, value: Any) -> bool:
                raise OSError("read-only file system")

        store = IncomeStore(BrokenDiskStore(), notifier=notifier)
        entry = store.add({"amount": 10, "source": "wallet", "date": "2024-01-01"})

        assert store.get(entry.id) == entry
        failure = next(n for n in notices if n.notice_type == NoticeType.PERSISTENCE_FAILED)
        assert failure.details["error"] == "OSError: read-only file system"

    def test_reload_from_successful_store(self, storage, notifier):
        """Test that a second store sees what the first persisted."""
        IncomeStore(storage, notifier=notifier).add(
            {"amount": Decimal("12.5"), "source": "bank", "date": "2024-01-01"}
        )
        reloaded = IncomeStore(storage, notifier=notifier)
        assert reloaded.entries[0].amount == Decimal("12.5")
