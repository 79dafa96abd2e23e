"""
Period Filters

Select the entries that fall inside a time window.

DESIGN DECISION: Windows are whole calendar days on the UTC calendar.
A window is an inclusive (first_day, last_day) pair of dates, and an
entry matches when the UTC date of its timestamp lies inside it. This
makes "end of day" exact without fiddling with 23:59:59.999.

All filters:
- Preserve input order and never mutate the input
- Accept entry models or plain mappings
- Never match entries whose date cannot be parsed
"""

import calendar
from collections.abc import Iterable
from datetime import date, timedelta
from enum import Enum
from typing import Any, Optional, Union

from pocketledger.models.timestamps import calendar_date, entry_field

DateLike = Union[date, str, None]
Window = tuple[date, date]


class Period(str, Enum):
    """Reporting windows offered by the overview."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"
    ALL_TIME = "allTime"


# =============================================================================
# WINDOWS
# =============================================================================

def week_start(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def month_window(day: date) -> Window:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def year_window(day: date) -> Window:
    return date(day.year, 1, 1), date(day.year, 12, 31)


def custom_window(start: DateLike, end: DateLike) -> Optional[Window]:
    """Inclusive window between two dates; None if either is invalid or start > end."""
    first = calendar_date(start)
    last = calendar_date(end)
    if first is None or last is None or first > last:
        return None
    return first, last


def period_window(
    period: Union[Period, str],
    reference: DateLike = None,
    custom_start: DateLike = None,
    custom_end: DateLike = None,
) -> Optional[Window]:
    """
    Calendar window for a period.

    Returns:
        (first_day, last_day), both inclusive. None for ALL_TIME, and
        None when the reference or custom bounds do not define a window.
    """
    period = Period(period)
    if period == Period.ALL_TIME:
        return None
    if period == Period.CUSTOM:
        return custom_window(custom_start, custom_end)

    day = calendar_date(reference)
    if day is None:
        return None

    if period == Period.DAILY:
        return day, day
    if period == Period.WEEKLY:
        first = week_start(day)
        return first, first + timedelta(days=6)
    if period == Period.MONTHLY:
        return month_window(day)
    return year_window(day)


# =============================================================================
# FILTERS
# =============================================================================

def _within(entries: Iterable[Any], window: Optional[Window]) -> list[Any]:
    if window is None:
        return []

    first, last = window
    selected = []
    for entry in entries:
        day = calendar_date(entry_field(entry, "date")) if entry is not None else None
        if day is not None and first <= day <= last:
            selected.append(entry)
    return selected


def filter_by_period(
    entries: Iterable[Any],
    period: Union[Period, str],
    reference: DateLike = None,
    custom_start: DateLike = None,
    custom_end: DateLike = None,
) -> list[Any]:
    """
    Entries inside the window for `period`.

    Args:
        entries: Entries to filter
        period: Which window to use
        reference: Any date inside the wanted day/week/month/year
        custom_start: First day of a CUSTOM window
        custom_end: Last day of a CUSTOM window

    Returns:
        Matching entries in input order. ALL_TIME returns every entry;
        a missing or invalid reference (or custom bound) returns [].
    """
    period = Period(period)
    if period == Period.ALL_TIME:
        return list(entries)
    return _within(entries, period_window(period, reference, custom_start, custom_end))


def filter_by_custom_range(
    entries: Iterable[Any],
    start: DateLike,
    end: DateLike,
) -> list[Any]:
    """Entries from the start of `start` to the end of `end`, inclusive."""
    return _within(entries, custom_window(start, end))


def filter_by_specific_month(entries: Iterable[Any], anchor: DateLike) -> list[Any]:
    """Entries in the same year and month as `anchor`."""
    day = calendar_date(anchor)
    return _within(entries, month_window(day) if day else None)


def filter_by_specific_year(entries: Iterable[Any], anchor: DateLike) -> list[Any]:
    """Entries in the same year as `anchor`."""
    day = calendar_date(anchor)
    return _within(entries, year_window(day) if day else None)


# =============================================================================
# LABELS AND INDEXES
# =============================================================================

def _long(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def _short(day: date) -> str:
    return f"{day:%b} {day.day}, {day.year}"


def period_label(
    period: Union[Period, str],
    reference: DateLike = None,
    custom_start: DateLike = None,
    custom_end: DateLike = None,
) -> str:
    """
    Caption for an overview card, e.g. "for January 2024".

    Returns "" when a day/week/month/year reference is missing.
    """
    period = Period(period)
    if period == Period.ALL_TIME:
        return "for All Time"

    if period == Period.CUSTOM:
        window = custom_window(custom_start, custom_end)
        if window is None:
            return "for Custom Range (select dates)"
        return f"for {_short(window[0])} - {_short(window[1])}"

    day = calendar_date(reference)
    if day is None:
        return ""

    if period == Period.DAILY:
        return f"for {_long(day)}"
    if period == Period.WEEKLY:
        first = week_start(day)
        return f"for Week of {first:%B} {first.day}"
    if period == Period.MONTHLY:
        return f"for {day:%B} {day.year}"
    return f"for {day.year}"


def unique_months_with_data(*collections: Iterable[Any]) -> list[str]:
    """Distinct 'YYYY-MM' months that have at least one entry, newest first."""
    months = set()
    for entries in collections:
        for entry in entries:
            day = calendar_date(entry_field(entry, "date")) if entry is not None else None
            if day is not None:
                months.add(f"{day.year:04d}-{day.month:02d}")
    return sorted(months, reverse=True)
