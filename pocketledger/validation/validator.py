"""
Two-Stage Entry Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- The record is a mapping
- Required field presence
- Type checking (string id, numeric amount, string/datetime date)
- Enum membership (wallet/bank)

STAGE 2 - SEMANTIC VALIDATION:
- Amount strictly positive
- Date parses to a real calendar date
- Expense category not blank
- Transfer moves money between two different pools

Stage 2 only runs when stage 1 passes. Each kind has an explicit
EntrySchema listing its fields, so import, load and add/update all
share one definition of "valid".

IMPORTANT: Validation never fixes values beyond the documented
normalization (absent optional text -> "", dates -> canonical UTC).
"""

import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from pocketledger.models.entries import (
    ENTRY_MODELS,
    TransactionSource,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from pocketledger.models.timestamps import parse_timestamp

VALID_SOURCES = frozenset(source.value for source in TransactionSource)


class FieldSpec(BaseModel):
    """One field of an entry schema."""
    model_config = ConfigDict(frozen=True)

    name: str
    field_type: str  # "string" | "number" | "date" | "source"
    required: bool = True
    alias: Optional[str] = None
    non_empty: bool = False

    @property
    def label(self) -> str:
        """Name as it appears in stored JSON."""
        return self.alias or self.name


class EntrySchema(BaseModel):
    """Enumerated fields and constraints for one entry kind."""
    model_config = ConfigDict(frozen=True)

    kind: TransactionType
    fields: tuple[FieldSpec, ...]

    @property
    def required_fields(self) -> list[str]:
        return [spec.label for spec in self.fields if spec.required]

    @property
    def optional_fields(self) -> list[str]:
        return [spec.label for spec in self.fields if not spec.required]


ID_FIELD = FieldSpec(name="id", field_type="string", non_empty=True)

ENTRY_SCHEMAS: dict[TransactionType, EntrySchema] = {
    TransactionType.INCOME: EntrySchema(
        kind=TransactionType.INCOME,
        fields=(
            FieldSpec(name="amount", field_type="number"),
            FieldSpec(name="source", field_type="source"),
            FieldSpec(name="subcategory", field_type="string", required=False),
            FieldSpec(name="description", field_type="string", required=False),
            FieldSpec(name="date", field_type="date"),
        ),
    ),
    TransactionType.EXPENSE: EntrySchema(
        kind=TransactionType.EXPENSE,
        fields=(
            FieldSpec(name="amount", field_type="number"),
            FieldSpec(name="category", field_type="string", non_empty=True),
            FieldSpec(name="subcategory", field_type="string", required=False),
            FieldSpec(name="description", field_type="string", required=False),
            FieldSpec(name="date", field_type="date"),
            FieldSpec(name="source", field_type="source"),
        ),
    ),
    TransactionType.TRANSFER: EntrySchema(
        kind=TransactionType.TRANSFER,
        fields=(
            FieldSpec(name="amount", field_type="number"),
            FieldSpec(name="from_source", alias="fromSource", field_type="source"),
            FieldSpec(name="to_source", alias="toSource", field_type="source"),
            FieldSpec(name="date", field_type="date"),
            FieldSpec(name="description", field_type="string", required=False),
        ),
    ),
}


class EntryValidationError(ValueError):
    """An entry failed validation at an add/update boundary."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(get_user_friendly_summary(result))

    @property
    def issues(self) -> list[ValidationIssue]:
        return self.result.issues


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _is_finite(value: Any) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


class EntryValidator:
    """
    Validates raw records and input data for one entry kind.

    validate_record: for import/load; the record must carry its own id.
    validate_input:  for add/update; the caller supplies the id.
    """

    def __init__(self, kind: TransactionType):
        self.kind = TransactionType(kind)
        self.schema = ENTRY_SCHEMAS[self.kind]
        self._model = ENTRY_MODELS[self.kind]

    def _lookup(self, raw: Mapping, spec: FieldSpec) -> tuple[bool, Any]:
        """Find a field by its alias first, then by its Python name."""
        for key in (spec.alias, spec.name):
            if key is not None and key in raw:
                return True, raw[key]
        return False, None

    def _check_type(self, spec: FieldSpec, value: Any) -> Optional[ValidationIssue]:
        if spec.field_type == "string":
            ok = isinstance(value, str)
            expected = "text"
        elif spec.field_type == "number":
            ok = _is_number(value)
            expected = "a number"
        elif spec.field_type == "date":
            ok = isinstance(value, str) or parse_timestamp(value) is not None
            expected = "an ISO-8601 date"
        elif spec.field_type == "source":
            candidate = value.value if isinstance(value, TransactionSource) else value
            ok = isinstance(candidate, str) and candidate in VALID_SOURCES
            expected = "'wallet' or 'bank'"
        else:
            raise ValueError(f"Unknown field type: {spec.field_type}")

        if ok:
            return None
        return ValidationIssue(
            field=spec.label,
            issue_type="invalid_type",
            message=f"{spec.label} must be {expected} (got {value!r})",
            suggested_fix=f"Provide {expected} for {spec.label}",
        )

    def _validate_schema(
        self,
        raw: Any,
        require_id: bool,
    ) -> tuple[bool, list[ValidationIssue], dict[str, Any]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues, values_by_python_name)
        """
        if not isinstance(raw, Mapping):
            issue = ValidationIssue(
                field="record",
                issue_type="invalid_type",
                message=f"{self.kind.value} record must be an object (got {type(raw).__name__})",
            )
            return False, [issue], {}

        issues = []
        values: dict[str, Any] = {}
        specs = (ID_FIELD,) + self.schema.fields if require_id else self.schema.fields

        for spec in specs:
            present, value = self._lookup(raw, spec)

            # Optional fields may be absent or null
            if not spec.required and (not present or value is None):
                continue

            if not present or value is None:
                issues.append(ValidationIssue(
                    field=spec.label,
                    issue_type="missing",
                    message=f"{spec.label} is required",
                    suggested_fix=f"Add a {spec.label} to the {self.kind.value} entry",
                ))
                continue

            type_issue = self._check_type(spec, value)
            if type_issue:
                issues.append(type_issue)
                continue

            values[spec.name] = value

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues, values

    def _validate_semantic(
        self,
        values: dict[str, Any],
    ) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Expects values that already passed stage 1.
        """
        issues = []

        amount = values["amount"]
        if not _is_finite(amount) or amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message=f"Amount must be greater than zero (got {amount})",
                suggested_fix="Enter a positive amount",
            ))

        if parse_timestamp(values["date"]) is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_value",
                message=f"Date could not be parsed: {values['date']!r}",
                suggested_fix="Use an ISO-8601 date such as 2024-01-05",
            ))

        for spec in self.schema.fields:
            if spec.non_empty and spec.name in values and not values[spec.name].strip():
                issues.append(ValidationIssue(
                    field=spec.label,
                    issue_type="invalid_value",
                    message=f"{spec.label} cannot be blank",
                ))

        if self.kind == TransactionType.TRANSFER:
            if TransactionSource(values["from_source"]) == TransactionSource(values["to_source"]):
                issues.append(ValidationIssue(
                    field="toSource",
                    issue_type="invalid_value",
                    message="Transfer source and destination must differ",
                    suggested_fix="Pick the other pool as destination",
                ))

        return issues

    def _build(
        self,
        values: dict[str, Any],
        entry_id: str,
    ) -> tuple[Optional[Any], list[ValidationIssue]]:
        """Construct the normalized entry model from checked values."""
        data = dict(values)
        data["id"] = entry_id
        data["date"] = parse_timestamp(values["date"])
        if isinstance(values["amount"], float):
            data["amount"] = Decimal(str(values["amount"]))

        try:
            return self._model.model_validate(data), []
        except PydanticValidationError as e:
            issues = [
                ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or "record",
                    issue_type="invalid_value",
                    message=error["msg"],
                )
                for error in e.errors()
            ]
            return None, issues

    def _run(
        self,
        raw: Any,
        entry_id: Optional[str],
    ) -> ValidationResult:
        require_id = entry_id is None
        schema_valid, issues, values = self._validate_schema(raw, require_id)

        semantic_valid = False
        entry = None
        if schema_valid:
            semantic_issues = self._validate_semantic(values)
            issues.extend(semantic_issues)
            semantic_valid = not semantic_issues

            if semantic_valid:
                entry, build_issues = self._build(
                    values,
                    values["id"] if require_id else entry_id,
                )
                issues.extend(build_issues)
                semantic_valid = entry is not None

        record_id = entry_id
        if require_id and isinstance(raw, Mapping) and isinstance(raw.get("id"), str):
            record_id = raw["id"]

        return ValidationResult(
            kind=self.kind,
            record_id=record_id,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=issues,
            entry=entry,
        )

    def validate_record(self, raw: Any) -> ValidationResult:
        """
        Validate a stored or imported record that carries its own id.

        Args:
            raw: A mapping as found in storage or a backup file, or an
                entry model such as those in ReplaceResult.accepted

        Returns:
            ValidationResult; `entry` is set when valid
        """
        if isinstance(raw, BaseModel):
            raw = raw.model_dump(by_alias=True)
        return self._run(raw, entry_id=None)

    def validate_input(self, data: Any, entry_id: str) -> ValidationResult:
        """
        Validate add/update input and build the entry with `entry_id`.

        Any id present in `data` is ignored.
        """
        if isinstance(data, BaseModel):
            data = data.model_dump()
        return self._run(data, entry_id=entry_id)


def get_user_friendly_summary(result: ValidationResult) -> str:
    """
    Generate a short summary of validation results.

    This is what a form or import dialog shows to the user.
    """
    if result.is_valid:
        return f"{result.kind.value.capitalize()} entry is valid."

    lines = [f"Invalid {result.kind.value} entry:"]
    for issue in result.issues:
        if issue.severity == "error":
            lines.append(f"  - {issue.message}")
    return "\n".join(lines)
