"""Spending summaries package."""

from subtracker.summaries.spending import (
    MonthTotals,
    SortOption,
    SpendingSummarizer,
    SpendingSummary,
    UpcomingRenewal,
    days_since,
    days_until,
    describe_cadence,
    group_by_category,
    month_totals,
    monthly_cost,
    sort_subscriptions,
    total_monthly,
    total_spent,
)

__all__ = [
    "MonthTotals",
    "SortOption",
    "SpendingSummarizer",
    "SpendingSummary",
    "UpcomingRenewal",
    "days_since",
    "days_until",
    "describe_cadence",
    "group_by_category",
    "month_totals",
    "monthly_cost",
    "sort_subscriptions",
    "total_monthly",
    "total_spent",
]
