"""
Aggregation Engine

Reduces a (usually period-filtered) list of entries into per-group
totals for charts and summary cards.

DESIGN DECISION: The aggregator only ever groups one level deep.
The expense drill-down (category -> subcategory) is navigation state
owned by the caller, who hands in the subset for level 2 via
`entries_in_category`.

Groups keep the entries behind them so a chart slice can lead back
to its entries.
"""

import math
from collections.abc import Iterable
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Union

from pocketledger.models.reports import AggregateGroup, PeriodSummary
from pocketledger.models.timestamps import entry_field, sort_by_date_desc

NO_SUBCATEGORY_LABEL = "(No Subcategory)"

ZERO = Decimal("0")

KeyFunction = Callable[[Any], str]


class AggregationKey(str, Enum):
    """Categorical dimensions entries can be grouped by."""
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    SOURCE = "source"


def to_decimal(value: Any) -> Decimal:
    """Numeric value as Decimal; anything non-numeric counts as zero."""
    if isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else ZERO
    return ZERO


def entry_amount(entry: Any) -> Decimal:
    """An entry's amount as Decimal (zero when missing or non-numeric)."""
    return to_decimal(entry_field(entry, "amount") if entry is not None else None)


def calculate_total(entries: Any) -> Decimal:
    """
    Sum of `amount` over a list of entries.

    Returns 0 for an empty list or for anything that is not a list.
    """
    if not isinstance(entries, (list, tuple)):
        return ZERO
    return sum((entry_amount(entry) for entry in entries), ZERO)


def category_key(entry: Any) -> str:
    return str(entry_field(entry, "category") or "")


def subcategory_key(entry: Any) -> str:
    # Empty string and None both mean "no subcategory"
    return str(entry_field(entry, "subcategory") or NO_SUBCATEGORY_LABEL)


def source_key(entry: Any) -> str:
    """Capitalized pool name: 'Wallet' or 'Bank'."""
    source = entry_field(entry, "source")
    value = source.value if isinstance(source, Enum) else str(source or "")
    return value[:1].upper() + value[1:]


KEY_FUNCTIONS: dict[AggregationKey, KeyFunction] = {
    AggregationKey.CATEGORY: category_key,
    AggregationKey.SUBCATEGORY: subcategory_key,
    AggregationKey.SOURCE: source_key,
}


def resolve_key(key: Union[AggregationKey, str, KeyFunction]) -> KeyFunction:
    """Turn an AggregationKey (or its value) into a key function."""
    if callable(key):
        return key
    return KEY_FUNCTIONS[AggregationKey(key)]


def aggregate_by(
    entries: Iterable[Any],
    key: Union[AggregationKey, str, KeyFunction],
) -> list[AggregateGroup]:
    """
    Group entries by `key` and sum their amounts.

    Args:
        entries: Entries to group (models or mappings)
        key: An AggregationKey or a function entry -> group label

    Returns:
        Groups ordered by total, largest first. Equal totals keep the
        order in which their groups were first seen.
    """
    key_fn = resolve_key(key)

    members: dict[str, list[Any]] = {}
    totals: dict[str, Decimal] = {}
    for entry in entries:
        group = str(key_fn(entry))
        if group not in members:
            members[group] = []
            totals[group] = ZERO
        members[group].append(entry)
        totals[group] += entry_amount(entry)

    groups = [
        AggregateGroup(key=group, total=totals[group], entries=items)
        for group, items in members.items()
    ]
    # sorted() is stable with reverse=True too
    return sorted(groups, key=lambda g: g.total, reverse=True)


def entries_in_category(expenses: Iterable[Any], category: str) -> list[Any]:
    """The level-2 drill-down subset: expenses of one category."""
    return [entry for entry in expenses if entry_field(entry, "category") == category]


def entries_in_group(
    entries: Iterable[Any],
    key: Union[AggregationKey, str, KeyFunction],
    group: str,
) -> list[Any]:
    """Entries behind one chart slice, newest first."""
    key_fn = resolve_key(key)
    return sort_by_date_desc(entry for entry in entries if key_fn(entry) == group)


def summarize(income: Any, expenses: Any) -> PeriodSummary:
    """Totals for a summary card."""
    total_income = calculate_total(income)
    total_expenses = calculate_total(expenses)
    return PeriodSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_balance=total_income - total_expenses,
    )
