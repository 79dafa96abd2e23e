"""Tests for aggregation and totals."""

from decimal import Decimal

import pytest

from pocketledger.models import ExpenseEntry, IncomeEntry
from pocketledger.queries import (
    NO_SUBCATEGORY_LABEL,
    AggregationKey,
    aggregate_by,
    calculate_total,
    entries_in_category,
    entries_in_group,
    source_key,
    subcategory_key,
    summarize,
)
from records import expense_record, income_record

EXPENSES = [
    expense_record("e1", 120, "2024-01-01", category="Food", subcategory="Groceries"),
    expense_record("e2", 300, "2024-01-02", category="Rent"),
    expense_record("e3", 80, "2024-01-03", category="Food", subcategory="Dining"),
    expense_record("e4", 100, "2024-01-04", category="Fun", source="bank"),
    expense_record("e5", 100, "2024-01-05", category="Books", source="bank"),
    expense_record("e6", 40, "2024-01-06", category="Food", subcategory=""),
]


class TestCalculateTotal:
    """Tests for calculate_total."""

    def test_sum(self):
        """Test summing amounts."""
        assert calculate_total(EXPENSES) == Decimal("740")

    def test_empty_and_non_list(self):
        """Test that empty or non-list input totals zero."""
        assert calculate_total([]) == Decimal("0")
        assert calculate_total(None) == Decimal("0")
        assert calculate_total("oops") == Decimal("0")

    def test_bad_amounts_count_as_zero(self):
        """Test that missing, textual and boolean amounts count as zero."""
        entries = [{"amount": 5}, {"amount": "7"}, {"amount": True}, {}, {"amount": 2.5}]
        assert calculate_total(entries) == Decimal("7.5")

    def test_models(self):
        """Test totals over entry models."""
        entries = [
            IncomeEntry(id="a", amount=Decimal("0.1"), source="bank", date="2024-01-01"),
            IncomeEntry(id="b", amount=Decimal("0.2"), source="bank", date="2024-01-01"),
        ]
        assert calculate_total(entries) == Decimal("0.3")


class TestAggregateBy:
    """Tests for grouping and summing."""

    def test_by_category_sorted_by_total(self):
        """Test category totals, largest first, ties in first-seen order."""
        groups = aggregate_by(EXPENSES, AggregationKey.CATEGORY)
        assert [(g.key, g.total) for g in groups] == [
            ("Rent", Decimal("300")),
            ("Food", Decimal("240")),
            ("Fun", Decimal("100")),
            ("Books", Decimal("100")),
        ]

    def test_groups_keep_entries(self):
        """Test that each group retains the entries behind it."""
        food = aggregate_by(EXPENSES, "category")[1]
        assert [e["id"] for e in food.entries] == ["e1", "e3", "e6"]
        assert food.count == 3

    @pytest.mark.parametrize("key", list(AggregationKey) + [lambda e: e["source"]])
    def test_conservation_of_total(self, key):
        """Test that group totals add up to the overall total."""
        groups = aggregate_by(EXPENSES, key)
        assert sum((g.total for g in groups), Decimal("0")) == calculate_total(EXPENSES)

    def test_empty(self):
        """Test that no entries give no groups."""
        assert aggregate_by([], AggregationKey.SOURCE) == []

    def test_subcategory_drill_down(self):
        """Test the category -> subcategory drill-down."""
        food = entries_in_category(EXPENSES, "Food")
        groups = aggregate_by(food, AggregationKey.SUBCATEGORY)
        assert [(g.key, g.total) for g in groups] == [
            ("Groceries", Decimal("120")),
            ("Dining", Decimal("80")),
            (NO_SUBCATEGORY_LABEL, Decimal("40")),
        ]

    def test_entries_in_group_newest_first(self):
        """Test the entries behind one chart slice."""
        result = entries_in_group(EXPENSES, AggregationKey.CATEGORY, "Food")
        assert [e["id"] for e in result] == ["e6", "e3", "e1"]


class TestKeys:
    """Tests for key functions."""

    def test_source_is_capitalized(self):
        """Test 'Wallet'/'Bank' labels for models and mappings."""
        entry = ExpenseEntry(id="x", amount=1, category="Food", source="bank", date="2024-01-01")
        assert source_key(entry) == "Bank"
        assert source_key({"source": "wallet"}) == "Wallet"

    def test_missing_subcategory(self):
        """Test the no-subcategory label for empty and absent values."""
        assert subcategory_key({"subcategory": ""}) == NO_SUBCATEGORY_LABEL
        assert subcategory_key({}) == NO_SUBCATEGORY_LABEL


class TestSummarize:
    """Tests for period summaries."""

    def test_net_balance(self):
        """Test income minus expenses."""
        summary = summarize([income_record("i1", 1000, "2024-01-01")], EXPENSES)
        assert summary.total_income == Decimal("1000")
        assert summary.total_expenses == Decimal("740")
        assert summary.net_balance == Decimal("260")
