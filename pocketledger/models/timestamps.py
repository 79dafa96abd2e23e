"""
Timestamp helpers shared by models, stores and queries.

All timestamps inside the ledger are timezone-aware UTC datetimes.
Naive inputs are taken to be UTC. Calendar questions (same day, same
month, ...) are answered on the UTC calendar date.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime, timezone
from functools import cmp_to_key
from typing import Any, Optional, TypeVar

T = TypeVar("T")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a datetime, date or ISO-8601 string into an aware UTC datetime.

    Returns None for anything that cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso_timestamp(value: datetime) -> str:
    """Render a datetime as `YYYY-MM-DDTHH:MM:SS.mmmZ` in UTC."""
    moment = parse_timestamp(value)
    if moment is None:
        raise ValueError(f"Not a timestamp: {value!r}")
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def calendar_date(value: Any) -> Optional[date]:
    """
    Get the calendar date a value refers to.

    Plain dates are returned as-is; everything else goes through
    parse_timestamp and is read on the UTC calendar.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    moment = parse_timestamp(value)
    return moment.date() if moment else None


def entry_field(entry: Any, name: str, default: Any = None) -> Any:
    """Read a field from a model or a plain mapping."""
    if isinstance(entry, Mapping):
        return entry.get(name, default)
    return getattr(entry, name, default)


def entry_timestamp(entry: Any) -> Optional[datetime]:
    """Get an entry's date as an aware UTC datetime, or None if unparsable."""
    if entry is None:
        return None
    return parse_timestamp(entry_field(entry, "date"))


def compare_date_desc(a: Any, b: Any) -> int:
    """
    Comparator ordering entries newest first.

    If either date fails to parse the pair compares equal.
    """
    time_a = entry_timestamp(a)
    time_b = entry_timestamp(b)
    if time_a is None or time_b is None:
        return 0
    if time_a > time_b:
        return -1
    if time_a < time_b:
        return 1
    return 0


def sort_by_date_desc(entries: Iterable[T]) -> list[T]:
    """Return a new list sorted newest first (stable)."""
    return sorted(entries, key=cmp_to_key(compare_date_desc))
