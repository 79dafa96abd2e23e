"""
Backup File Format

A backup is one JSON object:

    {
      "incomeEntries":   [...],
      "expenseEntries":  [...],
      "transferEntries": [...],
      "exportedAt":      "2024-01-31T18:00:00.000Z"
    }

DESIGN DECISION: Parsing a backup only checks the file structure.
All three arrays must be present (possibly empty) or the whole file is
rejected before any entry is looked at. Per-entry validation belongs to
the ledger stores, which drop and count bad records.
"""

import json
from collections.abc import Iterable, Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from pocketledger.models.entries import ExpenseEntry, IncomeEntry, TransferEntry
from pocketledger.models.timestamps import to_iso_timestamp, utc_now

BACKUP_ARRAY_FIELDS = ("incomeEntries", "expenseEntries", "transferEntries")


class MalformedImportFileError(ValueError):
    """The backup file is not valid JSON or lacks the required arrays."""
    pass


class BackupPayload(BaseModel):
    """Structurally valid backup contents; entries are still raw dicts."""
    model_config = ConfigDict(populate_by_name=True)

    income_entries: list[Any] = Field(..., alias="incomeEntries")
    expense_entries: list[Any] = Field(..., alias="expenseEntries")
    transfer_entries: list[Any] = Field(..., alias="transferEntries")
    exported_at: Optional[str] = Field(default=None, alias="exportedAt")

    @property
    def record_count(self) -> int:
        return (
            len(self.income_entries)
            + len(self.expense_entries)
            + len(self.transfer_entries)
        )


def build_backup(
    income: Iterable[IncomeEntry],
    expenses: Iterable[ExpenseEntry],
    transfers: Iterable[TransferEntry],
    exported_at: Optional[datetime] = None,
) -> dict:
    """Build the backup object for the three collections."""
    return {
        "incomeEntries": [entry.to_record() for entry in income],
        "expenseEntries": [entry.to_record() for entry in expenses],
        "transferEntries": [entry.to_record() for entry in transfers],
        "exportedAt": to_iso_timestamp(exported_at or utc_now()),
    }


def dumps_backup(
    income: Iterable[IncomeEntry],
    expenses: Iterable[ExpenseEntry],
    transfers: Iterable[TransferEntry],
    exported_at: Optional[datetime] = None,
) -> str:
    """Render a backup as pretty-printed JSON text."""
    payload = build_backup(income, expenses, transfers, exported_at)
    return json.dumps(payload, indent=2, ensure_ascii=False)


def parse_backup(source: Union[str, bytes, Mapping]) -> BackupPayload:
    """
    Parse backup text (or an already-decoded object).

    Raises:
        MalformedImportFileError: Unparsable JSON, a non-object top
            level, or a missing/non-array entry collection
    """
    if isinstance(source, (str, bytes)):
        try:
            # Decimal keeps amounts like 0.1 exact
            data = json.loads(source, parse_float=Decimal)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedImportFileError(f"The file is not valid JSON: {e}") from e
    else:
        data = source

    if not isinstance(data, Mapping):
        raise MalformedImportFileError(
            "Invalid file structure. Expected a JSON object at the top level."
        )

    missing = [
        name for name in BACKUP_ARRAY_FIELDS
        if not isinstance(data.get(name), list)
    ]
    if missing:
        raise MalformedImportFileError(
            "Invalid file structure. Expected 'incomeEntries', 'expenseEntries', "
            f"and 'transferEntries' arrays (missing or invalid: {', '.join(missing)})."
        )

    exported_at = data.get("exportedAt")
    try:
        return BackupPayload.model_validate({
            "incomeEntries": data["incomeEntries"],
            "expenseEntries": data["expenseEntries"],
            "transferEntries": data["transferEntries"],
            "exportedAt": exported_at if isinstance(exported_at, str) else None,
        })
    except PydanticValidationError as e:
        raise MalformedImportFileError(f"Invalid file structure: {e}") from e


def backup_filename(
    now: Optional[datetime] = None,
    prefix: str = "pocketledger_backup",
) -> str:
    """Suggested download name, e.g. pocketledger_backup_20240131_180000.json"""
    moment = now or utc_now()
    return f"{prefix}_{moment:%Y%m%d_%H%M%S}.json"
