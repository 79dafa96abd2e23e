"""Read-side queries: period filters, aggregation, listing and formatting."""

from pocketledger.queries.aggregator import (
    NO_SUBCATEGORY_LABEL,
    AggregationKey,
    aggregate_by,
    calculate_total,
    category_key,
    entries_in_category,
    entries_in_group,
    source_key,
    subcategory_key,
    summarize,
)
from pocketledger.queries.formatting import format_currency, format_date
from pocketledger.queries.listing import (
    GroupByOption,
    SortOption,
    group_entries,
    sort_entries,
)
from pocketledger.queries.periods import (
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

__all__ = [
    # Periods
    "Period",
    "filter_by_custom_range",
    "filter_by_period",
    "filter_by_specific_month",
    "filter_by_specific_year",
    "period_label",
    "period_window",
    "unique_months_with_data",
    "week_start",
    # Aggregation
    "NO_SUBCATEGORY_LABEL",
    "AggregationKey",
    "aggregate_by",
    "calculate_total",
    "category_key",
    "entries_in_category",
    "entries_in_group",
    "source_key",
    "subcategory_key",
    "summarize",
    # Listing
    "GroupByOption",
    "SortOption",
    "group_entries",
    "sort_entries",
    # Formatting
    "format_currency",
    "format_date",
]
