"""
Ledger Aggregation

DESIGN DECISION: Aggregation is a pure function of the record list.
Nothing is cached or updated incrementally; every view is recomputed
from the full collection on each call. A household ledger holds at most
a few thousand records, so this stays fast and can never go stale.

Months are YYYY-MM strings. Their lexical order is chronological, so
plain string sorting is used throughout.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from kakeibo.models.record import Category, Record
from kakeibo.models.summary import (
    CategoryMatrix,
    CategoryMonthRow,
    CategoryStatistics,
    CategoryTotal,
    MonthlyTotal,
)


def month_key(date: Optional[str]) -> str:
    """YYYY-MM prefix of a canonical date; empty string for no date."""
    if not date:
        return ""
    return date[:7]


def _round_half_up(numerator: int, denominator: int) -> int:
    """numerator / denominator rounded to the nearest int, halves up."""
    if denominator == 0:
        return 0
    return int(
        (Decimal(numerator) / Decimal(denominator)).quantize(
            Decimal(1), rounding=ROUND_HALF_UP
        )
    )


def monthly_totals(records: Iterable[Record]) -> list[MonthlyTotal]:
    """Total per month, oldest month first. Records without a month are left out."""
    groups: dict[str, int] = {}
    for record in records:
        key = month_key(record.date)
        if not key:
            continue
        groups[key] = groups.get(key, 0) + record.amount

    return [
        MonthlyTotal(month=month, total=total)
        for month, total in sorted(groups.items())
    ]


def records_for_month(records: Iterable[Record], month: str) -> list[Record]:
    """Records of one month, in collection order."""
    return [record for record in records if month_key(record.date) == month]


def month_total(records: Iterable[Record], month: str) -> int:
    return sum(record.amount for record in records_for_month(records, month))


def category_totals_for_month(
    records: Iterable[Record],
    month: str,
) -> list[CategoryTotal]:
    """
    Per-category totals and rounded percentage shares for one month.

    Categories appear in the order they are first met in the records.
    Percentages are 0 when the month has no spending; because each share
    is rounded on its own the shares may not add up to exactly 100.
    """
    groups: dict[Category, int] = {}
    for record in records_for_month(records, month):
        groups[record.category] = groups.get(record.category, 0) + record.amount

    grand_total = sum(groups.values())
    return [
        CategoryTotal(
            category=category,
            total=total,
            percentage=_round_half_up(total * 100, grand_total),
        )
        for category, total in groups.items()
    ]


def available_months(records: Iterable[Record]) -> list[str]:
    """Distinct non-empty months, newest first."""
    months = {month_key(record.date) for record in records}
    months.discard("")
    return sorted(months, reverse=True)


def latest_month(records: Iterable[Record]) -> Optional[str]:
    months = available_months(records)
    return months[0] if months else None


def available_categories(records: Iterable[Record]) -> list[Category]:
    """Distinct categories that occur in the records, sorted by label."""
    return sorted({record.category for record in records}, key=lambda c: c.value)


def category_monthly_matrix(
    records: Iterable[Record],
    categories: Optional[Iterable[Category]] = None,
    months: Optional[Iterable[str]] = None,
) -> CategoryMatrix:
    """
    Dense month x category grid of totals.

    Both axes are deduplicated and sorted ascending. When an axis is not
    given it is taken from the records. Every (month, category) cell is
    present, 0 where nothing matches.
    """
    records = list(records)

    if months is None:
        month_axis = sorted({month_key(r.date) for r in records} - {""})
    else:
        month_axis = sorted(set(months))

    if categories is None:
        category_axis = available_categories(records)
    else:
        category_axis = sorted({Category(c) for c in categories}, key=lambda c: c.value)

    cells: dict[tuple[str, Category], int] = {}
    for record in records:
        key = (month_key(record.date), record.category)
        cells[key] = cells.get(key, 0) + record.amount

    rows = [
        CategoryMonthRow(
            month=month,
            totals={category: cells.get((month, category), 0) for category in category_axis},
        )
        for month in month_axis
    ]

    return CategoryMatrix(months=month_axis, categories=category_axis, rows=rows)


def category_statistics(
    records: Iterable[Record],
    categories: Optional[Iterable[Category]] = None,
) -> list[CategoryStatistics]:
    """
    All-time total per category and its average per recorded month.

    The average divides by the number of distinct months in the whole
    ledger, not only the months the category was used in.
    """
    records = list(records)
    month_count = len(available_months(records))

    if categories is None:
        wanted = available_categories(records)
    else:
        wanted = [Category(c) for c in categories]

    totals: dict[Category, int] = {}
    for record in records:
        totals[record.category] = totals.get(record.category, 0) + record.amount

    return [
        CategoryStatistics(
            category=category,
            total=totals.get(category, 0),
            monthly_average=_round_half_up(totals.get(category, 0), month_count),
        )
        for category in wanted
    ]
