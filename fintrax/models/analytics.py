"""
Filter and aggregation models.

These are the shapes the list view, summary cards and chart panels consume.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fintrax.models.expense import Expense


# Reserved filter value meaning "no constraint on this dimension"
ALL = "All"


class FilterCriteria(BaseModel):
    """Search box, category dropdown and month dropdown of the list view."""
    model_config = ConfigDict(frozen=True)

    text: str = ""
    category: str = ALL
    month: str = ALL

    @property
    def is_identity(self) -> bool:
        """True when no predicate constrains anything."""
        return not self.text.strip() and self.category == ALL and self.month == ALL


class DailyTotal(BaseModel):
    """One bar of the weekly chart."""

    date: dt.date
    label: str = Field(..., description="Short weekday name, e.g. 'Mon'")
    amount: Decimal = Decimal("0")


class MonthlyTotal(BaseModel):
    """One point of the monthly trend line."""

    month: str = Field(..., description="'Mon YYYY' label")
    amount: Decimal = Decimal("0")


class CategoryTotal(BaseModel):
    """Summed amount for one category."""

    category: str
    amount: Decimal = Decimal("0")


class SpendingInsights(BaseModel):
    """Insight cards on the analytics page."""

    total: Decimal
    average: Decimal
    largest: Expense
    top_category: CategoryTotal


class DashboardSummary(BaseModel):
    """Summary cards on the dashboard."""

    total: Decimal = Decimal("0")
    this_month: Decimal = Decimal("0")
    transaction_count: int = Field(default=0, ge=0)
    average: Decimal = Decimal("0")
    highest: Decimal = Decimal("0")
    largest: Optional[Expense] = None
