"""
Summary View Models

Read-only shapes produced by the aggregation functions in kakeibo.queries.
Consumers (tables, charts) key everything by month string and category.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kakeibo.models.record import Category


class MonthlyTotal(BaseModel):
    """Total spending for one YYYY-MM month."""
    model_config = ConfigDict(frozen=True)

    month: str
    total: int = Field(ge=0)


class CategoryTotal(BaseModel):
    """Spending for one category within a month."""
    model_config = ConfigDict(frozen=True)

    category: Category
    total: int = Field(ge=0)
    percentage: int = Field(
        ge=0,
        le=100,
        description="Rounded share of the month's total"
    )


class CategoryStatistics(BaseModel):
    """All-time total of a category and its average per recorded month."""
    model_config = ConfigDict(frozen=True)

    category: Category
    total: int = Field(ge=0)
    monthly_average: int = Field(ge=0)


class CategoryMonthRow(BaseModel):
    """One month of the category trend grid."""

    month: str
    totals: dict[Category, int] = Field(default_factory=dict)


class CategoryMatrix(BaseModel):
    """
    Dense month x category grid.

    Every row carries every category column, zero where nothing was
    spent, so chart code never has to deal with a missing series.
    """

    months: list[str] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    rows: list[CategoryMonthRow] = Field(default_factory=list)

    def value(self, month: str, category: Category) -> int:
        for row in self.rows:
            if row.month == month:
                return row.totals.get(Category(category), 0)
        raise KeyError(month)

    def series(self, category: Category) -> list[int]:
        """Totals of one category across all months, in month order."""
        category = Category(category)
        return [row.totals[category] for row in self.rows]

    def to_chart_rows(self) -> list[dict[str, Any]]:
        """Flatten to [{"month": ..., "<category>": total, ...}, ...]."""
        chart_rows = []
        for row in self.rows:
            flat: dict[str, Any] = {"month": row.month}
            for category in self.categories:
                flat[category.value] = row.totals[category]
            chart_rows.append(flat)
        return chart_rows
