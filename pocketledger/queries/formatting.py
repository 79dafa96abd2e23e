"""Display formatting for amounts and dates."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pocketledger.config import get_settings
from pocketledger.models.timestamps import calendar_date
from pocketledger.queries.aggregator import to_decimal

CENTS = Decimal("0.01")


def _group_indian(digits: str) -> str:
    """Lakh/crore grouping: last three digits, then pairs (1,00,000)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    parts = []
    while len(head) > 2:
        parts.insert(0, head[-2:])
        head = head[:-2]
    if head:
        parts.insert(0, head)
    return ",".join(parts + [tail])


def format_currency(amount: Any, symbol: Optional[str] = None) -> str:
    """
    Format an amount with two decimals and Indian digit grouping.

    format_currency(100000) -> "₹1,00,000.00"
    Non-numeric input formats as zero.
    """
    if symbol is None:
        symbol = get_settings().app.currency_symbol

    value = to_decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, fraction = f"{abs(value):.2f}".split(".")
    return f"{sign}{symbol}{_group_indian(whole)}.{fraction}"


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_date(value: Any) -> str:
    """Long display date, e.g. "Jun 20th, 2023"; "Invalid Date" if unparsable."""
    day = calendar_date(value)
    if day is None:
        return "Invalid Date"
    return f"{day:%b} {_ordinal(day.day)}, {day.year}"
