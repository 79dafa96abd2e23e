"""Entry validation package."""

from pocketledger.validation.validator import (
    ENTRY_SCHEMAS,
    EntrySchema,
    EntryValidationError,
    EntryValidator,
    FieldSpec,
    get_user_friendly_summary,
)

__all__ = [
    "ENTRY_SCHEMAS",
    "EntrySchema",
    "EntryValidationError",
    "EntryValidator",
    "FieldSpec",
    "get_user_friendly_summary",
]
