"""
Core Data Models for PocketLedger

These models define the schemas for every record held by the ledger.
They are designed to:
1. Enforce the ledger invariants at construction time
2. Normalize optional text fields to "" rather than None
3. Serialize to the exact JSON shape used by storage and backups

DESIGN DECISION: Each entry model extends its input model with an `id`.
The input models (IncomeData, ...) are what callers hand to `add` and
`update`; the store assigns the id. Transfer fields use camelCase
aliases so stored JSON and backups keep the `fromSource`/`toSource`
names, while Python code uses snake_case.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from pocketledger.models.timestamps import (
    parse_timestamp,
    to_iso_timestamp,
    utc_now,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionSource(str, Enum):
    """
    The two money pools tracked by the ledger.

    DESIGN DECISION: Exactly two pools. Anything else is rejected.
    """
    WALLET = "wallet"
    BANK = "bank"


class TransactionType(str, Enum):
    """Which collection an entry belongs to."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


# =============================================================================
# INPUT MODELS - What callers hand to add/update
# =============================================================================

class EntryData(BaseModel):
    """
    Fields shared by every entry kind.

    `date` accepts a datetime, a date or an ISO-8601 string and is stored
    as an aware UTC datetime.
    """
    model_config = ConfigDict(populate_by_name=True)

    kind: ClassVar[TransactionType]

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount, always positive"
    )
    date: datetime = Field(
        ...,
        description="When the money moved (UTC)"
    )
    description: str = Field(
        default="",
        description="Free-form note"
    )

    @field_validator('date', mode='before')
    @classmethod
    def coerce_date(cls, v: Any) -> datetime:
        """Parse any supported date representation to aware UTC."""
        parsed = parse_timestamp(v)
        if parsed is None:
            raise ValueError(f"Date could not be parsed: {v!r}")
        return parsed

    @field_validator('description', mode='before')
    @classmethod
    def blank_description(cls, v: Any) -> Any:
        """Absent descriptions are stored as empty strings."""
        return "" if v is None else v

    @field_serializer('date')
    def serialize_date(self, v: datetime) -> str:
        return to_iso_timestamp(v)

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, v: Decimal) -> Union[int, float]:
        # Backups and storage carry amounts as JSON numbers
        if v == v.to_integral_value():
            return int(v)
        return float(v)


class IncomeData(EntryData):
    """Money entering a pool."""
    kind: ClassVar[TransactionType] = TransactionType.INCOME

    source: TransactionSource = Field(
        ...,
        description="Pool receiving the money"
    )
    subcategory: str = Field(
        default="",
        description="Optional income subcategory (e.g., salary, gift)"
    )

    @field_validator('subcategory', mode='before')
    @classmethod
    def blank_subcategory(cls, v: Any) -> Any:
        return "" if v is None else v


class ExpenseData(EntryData):
    """
    Money leaving a pool, tagged with a two-level category.

    The category is required; the subcategory is optional and is
    stored as "" when absent.
    """
    kind: ClassVar[TransactionType] = TransactionType.EXPENSE

    category: str = Field(
        ...,
        min_length=1,
        description="Top-level expense category"
    )
    subcategory: str = Field(
        default="",
        description="Optional second-level category"
    )
    source: TransactionSource = Field(
        ...,
        description="Pool the money was paid from"
    )

    @field_validator('category')
    @classmethod
    def category_not_blank(cls, v: str) -> str:
        # Kept as given; only all-whitespace is refused
        if not v.strip():
            raise ValueError("category cannot be blank")
        return v

    @field_validator('subcategory', mode='before')
    @classmethod
    def blank_subcategory(cls, v: Any) -> Any:
        return "" if v is None else v


class TransferData(EntryData):
    """
    Money moving between the two pools.

    Transfers change each pool's balance but never the combined total.
    """
    kind: ClassVar[TransactionType] = TransactionType.TRANSFER

    from_source: TransactionSource = Field(
        ...,
        alias="fromSource",
        description="Pool the money leaves"
    )
    to_source: TransactionSource = Field(
        ...,
        alias="toSource",
        description="Pool the money arrives in"
    )

    @model_validator(mode='after')
    def validate_direction(self) -> 'TransferData':
        """A transfer must move money between two different pools."""
        if self.from_source == self.to_source:
            raise ValueError("Transfer source and destination must differ")
        return self


# =============================================================================
# STORED ENTRIES - Input data plus an id assigned by the store
# =============================================================================

class _Identified(BaseModel):
    id: str = Field(
        ...,
        min_length=1,
        description="Unique within its own collection; never changes"
    )

    def to_record(self) -> dict:
        """Convert to the JSON-ready dict used by storage and backups."""
        return self.model_dump(mode="json", by_alias=True)


class IncomeEntry(IncomeData, _Identified):
    """A recorded income event."""


class ExpenseEntry(ExpenseData, _Identified):
    """A recorded expense event."""


class TransferEntry(TransferData, _Identified):
    """A recorded transfer between pools."""


LedgerEntry = Union[IncomeEntry, ExpenseEntry, TransferEntry]

ENTRY_MODELS: dict[TransactionType, type] = {
    TransactionType.INCOME: IncomeEntry,
    TransactionType.EXPENSE: ExpenseEntry,
    TransactionType.TRANSFER: TransferEntry,
}

DATA_MODELS: dict[TransactionType, type] = {
    TransactionType.INCOME: IncomeData,
    TransactionType.EXPENSE: ExpenseData,
    TransactionType.TRANSFER: TransferData,
}


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_type', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation of one record.

    Stage 1: Schema validation (presence, types, enum values)
    Stage 2: Semantic validation (positive amount, parseable date, ...)

    When valid, `entry` holds the normalized model.
    """

    kind: TransactionType
    record_id: Optional[str] = Field(
        default=None,
        description="Id of the record, when it had a usable one"
    )
    validated_at: datetime = Field(
        default_factory=utc_now
    )

    # Stage results
    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    entry: Optional[LedgerEntry] = Field(
        default=None,
        description="The normalized entry, present only when valid"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]
