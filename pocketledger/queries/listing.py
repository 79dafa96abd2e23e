"""
Transaction list ordering and grouping.

Sorting never mutates the input. Grouping is only defined for the
combinations a transaction list offers; anything else yields {}.
"""

from collections.abc import Iterable
from enum import Enum
from functools import cmp_to_key
from typing import Any, Optional, Union

from pocketledger.models.entries import TransactionType
from pocketledger.models.timestamps import (
    compare_date_desc,
    entry_field,
    sort_by_date_desc,
)
from pocketledger.queries.aggregator import entry_amount


class SortOption(str, Enum):
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    AMOUNT_DESC = "amount_desc"
    AMOUNT_ASC = "amount_asc"


class GroupByOption(str, Enum):
    NONE = "none"
    SOURCE = "source"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"


# (kind, group_by) -> field names to read, first present wins
_GROUP_FIELDS: dict[tuple[TransactionType, GroupByOption], tuple[str, ...]] = {
    (TransactionType.INCOME, GroupByOption.SOURCE): ("source",),
    (TransactionType.EXPENSE, GroupByOption.CATEGORY): ("category",),
    (TransactionType.EXPENSE, GroupByOption.SUBCATEGORY): ("subcategory",),
    (TransactionType.TRANSFER, GroupByOption.SOURCE): ("from_source", "fromSource"),
}


def sort_entries(
    entries: Iterable[Any],
    option: Union[SortOption, str] = SortOption.DATE_DESC,
) -> list[Any]:
    """Return a new list in the requested order. All sorts are stable."""
    option = SortOption(option)
    if option == SortOption.DATE_DESC:
        return sort_by_date_desc(entries)
    if option == SortOption.DATE_ASC:
        return sorted(entries, key=cmp_to_key(lambda a, b: compare_date_desc(b, a)))
    return sorted(entries, key=entry_amount, reverse=option == SortOption.AMOUNT_DESC)


def _group_value(entry: Any, fields: tuple[str, ...]) -> Optional[str]:
    for name in fields:
        value = entry_field(entry, name)
        if value is not None:
            return value.value if isinstance(value, Enum) else str(value)
    return None


def group_entries(
    entries: Iterable[Any],
    kind: Union[TransactionType, str],
    group_by: Union[GroupByOption, str],
) -> dict[str, list[Any]]:
    """
    Group a transaction list under raw field values.

    Supported: income by source, expense by category or subcategory,
    transfer by source (the pool the money left).

    Returns:
        Group label -> entries in input order, labels sorted
        alphabetically. Unsupported combinations return {}.
    """
    fields = _GROUP_FIELDS.get((TransactionType(kind), GroupByOption(group_by)))
    if fields is None:
        return {}

    grouped: dict[str, list[Any]] = {}
    for entry in entries:
        label = _group_value(entry, fields)
        if label is None:
            continue
        grouped.setdefault(label, []).append(entry)

    return {label: grouped[label] for label in sorted(grouped)}
