"""Tests for period filters and labels."""

from datetime import date, datetime, timedelta, timezone

import pytest

from pocketledger.models import IncomeEntry
from pocketledger.queries import (
    Period,
    filter_by_custom_range,
    filter_by_period,
    filter_by_specific_month,
    filter_by_specific_year,
    period_label,
    period_window,
    unique_months_with_data,
    week_start,
)
from records import income_record

# Wednesday 2024-01-10 is the reference day
REFERENCE = date(2024, 1, 10)

ENTRIES = [
    income_record("same-day", 1, "2024-01-10T23:59:59.999Z"),
    income_record("monday", 1, "2024-01-08T00:00:00.000Z"),
    income_record("sunday", 1, "2024-01-14T12:00:00.000Z"),
    income_record("prev-sunday", 1, "2024-01-07T12:00:00.000Z"),
    income_record("month-end", 1, "2024-01-31"),
    income_record("february", 1, "2024-02-01"),
    income_record("last-year", 1, "2023-12-31"),
    income_record("broken", 1, "garbage"),
]


def ids(entries):
    return [entry["id"] for entry in entries]


class TestFilterByPeriod:
    """Tests for the named period windows."""

    def test_daily(self):
        """Test the same UTC calendar day."""
        assert ids(filter_by_period(ENTRIES, Period.DAILY, REFERENCE)) == ["same-day"]

    def test_weekly_starts_monday(self):
        """Test Monday through Sunday."""
        assert ids(filter_by_period(ENTRIES, "weekly", REFERENCE)) == ["same-day", "monday", "sunday"]

    def test_monthly(self):
        """Test same year and month."""
        assert ids(filter_by_period(ENTRIES, Period.MONTHLY, REFERENCE)) == [
            "same-day", "monday", "sunday", "prev-sunday", "month-end",
        ]

    def test_yearly(self):
        """Test same year."""
        assert "february" in ids(filter_by_period(ENTRIES, Period.YEARLY, REFERENCE))
        assert "last-year" not in ids(filter_by_period(ENTRIES, Period.YEARLY, REFERENCE))

    def test_all_time_returns_everything(self):
        """Test that allTime does not filter, even unparsable dates."""
        assert filter_by_period(ENTRIES, "allTime") == ENTRIES

    def test_nesting(self):
        """Test daily within weekly within monthly within yearly."""
        for reference in (REFERENCE, date(2024, 1, 1), date(2024, 2, 29), date(2023, 12, 31)):
            daily = ids(filter_by_period(ENTRIES, Period.DAILY, reference))
            weekly = ids(filter_by_period(ENTRIES, Period.WEEKLY, reference))
            monthly = ids(filter_by_period(ENTRIES, Period.MONTHLY, reference))
            yearly = ids(filter_by_period(ENTRIES, Period.YEARLY, reference))
            assert set(daily) <= set(weekly)
            # A week can straddle months, so compare the in-month part only
            in_month = [i for i in weekly if i in ids(filter_by_specific_month(ENTRIES, reference))]
            assert set(daily) <= set(in_month) <= set(monthly) <= set(yearly)

    def test_missing_reference(self):
        """Test that bounded periods need a reference."""
        assert filter_by_period(ENTRIES, Period.MONTHLY) == []
        assert filter_by_period(ENTRIES, Period.DAILY, "not a date") == []

    def test_unparsable_dates_never_match(self):
        """Test that broken dates are skipped by bounded filters."""
        assert "broken" not in ids(filter_by_period(ENTRIES, Period.YEARLY, REFERENCE))

    def test_input_not_mutated(self):
        """Test that filtering copies rather than mutates."""
        entries = list(ENTRIES)
        filter_by_period(entries, Period.DAILY, REFERENCE)
        assert entries == ENTRIES

    def test_models_accepted(self):
        """Test that entry models filter the same as mappings."""
        entry = IncomeEntry(id="m", amount=1, source="bank", date="2024-01-10T08:00:00Z")
        assert filter_by_period([entry], Period.DAILY, REFERENCE) == [entry]

    def test_reference_datetime_in_other_zone(self):
        """Test that an aware reference is read on the UTC calendar."""
        reference = datetime(2024, 1, 11, 2, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        assert ids(filter_by_period(ENTRIES, Period.DAILY, reference)) == ["same-day"]


class TestCustomRange:
    """Tests for custom date ranges."""

    def test_inclusive_whole_days(self):
        """Test that both end days are fully included."""
        result = filter_by_custom_range(ENTRIES, "2024-01-08", date(2024, 1, 10))
        assert ids(result) == ["same-day", "monday"]

    def test_period_delegates(self):
        """Test that Period.CUSTOM uses the custom bounds."""
        assert filter_by_period(
            ENTRIES, Period.CUSTOM, custom_start="2024-01-31", custom_end="2024-02-01"
        ) == filter_by_custom_range(ENTRIES, "2024-01-31", "2024-02-01")

    def test_inverted_range_is_empty(self):
        """Test that end before start selects nothing."""
        assert filter_by_custom_range(ENTRIES, "2024-02-01", "2024-01-01") == []

    def test_missing_bound_is_empty(self):
        """Test that a missing bound selects nothing."""
        assert filter_by_custom_range(ENTRIES, None, "2024-01-01") == []
        assert filter_by_period(ENTRIES, Period.CUSTOM, custom_start="2024-01-01") == []


class TestSpecificFilters:
    """Tests for month and year anchors."""

    def test_month_across_new_year(self):
        """Test that Dec 31 and Jan 1 land in different months."""
        entries = [income_record("dec", 1, "2023-12-31"), income_record("jan", 1, "2024-01-01")]
        assert ids(filter_by_specific_month(entries, date(2024, 1, 15))) == ["jan"]

    def test_same_as_monthly_and_yearly(self):
        """Test agreement with the named periods."""
        assert filter_by_specific_month(ENTRIES, REFERENCE) == filter_by_period(
            ENTRIES, Period.MONTHLY, REFERENCE
        )
        assert filter_by_specific_year(ENTRIES, REFERENCE) == filter_by_period(
            ENTRIES, Period.YEARLY, REFERENCE
        )

    def test_invalid_anchor(self):
        """Test that an invalid anchor selects nothing."""
        assert filter_by_specific_year(ENTRIES, None) == []


class TestWindowsAndLabels:
    """Tests for windows, captions and month indexes."""

    def test_week_start(self):
        """Test that weeks start on Monday."""
        assert week_start(date(2024, 1, 14)) == date(2024, 1, 8)
        assert week_start(date(2024, 1, 8)) == date(2024, 1, 8)

    def test_windows(self):
        """Test the calendar window of each period."""
        assert period_window(Period.WEEKLY, REFERENCE) == (date(2024, 1, 8), date(2024, 1, 14))
        assert period_window(Period.MONTHLY, date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
        assert period_window(Period.YEARLY, REFERENCE) == (date(2024, 1, 1), date(2024, 12, 31))
        assert period_window(Period.ALL_TIME) is None

    @pytest.mark.parametrize("period, expected", [
        (Period.DAILY, "for January 5, 2024"),
        (Period.WEEKLY, "for Week of January 1"),
        (Period.MONTHLY, "for January 2024"),
        (Period.YEARLY, "for 2024"),
        (Period.ALL_TIME, "for All Time"),
    ])
    def test_labels(self, period, expected):
        """Test overview captions."""
        assert period_label(period, date(2024, 1, 5)) == expected

    def test_custom_labels(self):
        """Test captions for custom ranges."""
        assert period_label(Period.CUSTOM, custom_start="2024-01-01", custom_end="2024-01-31") == (
            "for Jan 1, 2024 - Jan 31, 2024"
        )
        assert period_label(Period.CUSTOM) == "for Custom Range (select dates)"

    def test_unique_months(self):
        """Test distinct months across collections, newest first."""
        months = unique_months_with_data(
            ENTRIES,
            [income_record("x", 1, "2022-06-01")],
        )
        assert months == ["2024-02", "2024-01", "2023-12", "2022-06"]
