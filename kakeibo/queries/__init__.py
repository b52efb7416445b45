"""Ledger aggregation package."""

from kakeibo.queries.aggregator import (
    available_categories,
    available_months,
    category_monthly_matrix,
    category_statistics,
    category_totals_for_month,
    latest_month,
    month_key,
    month_total,
    monthly_totals,
    records_for_month,
)

__all__ = [
    "available_categories",
    "available_months",
    "category_monthly_matrix",
    "category_statistics",
    "category_totals_for_month",
    "latest_month",
    "month_key",
    "month_total",
    "monthly_totals",
    "records_for_month",
]
