"""Filtering and aggregation over the expense mirror."""

from fintrax.queries.aggregates import (
    average,
    by_category,
    category_series,
    dashboard_summary,
    insights,
    largest,
    monthly_series,
    recent,
    top_category,
    total,
    total_for_month,
    weekly_series,
)
from fintrax.queries.filters import (
    NO_DATA,
    NO_MATCHES,
    available_categories,
    available_months,
    describe_empty_state,
    filter_expenses,
    month_label,
)

__all__ = [
    # Filters
    "NO_DATA",
    "NO_MATCHES",
    "available_categories",
    "available_months",
    "describe_empty_state",
    "filter_expenses",
    "month_label",
    # Aggregates
    "average",
    "by_category",
    "category_series",
    "dashboard_summary",
    "insights",
    "largest",
    "monthly_series",
    "recent",
    "top_category",
    "total",
    "total_for_month",
    "weekly_series",
]
