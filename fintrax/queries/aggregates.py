"""
Aggregation Engine

DESIGN DECISION: Every figure on the dashboard and analytics pages is
computed here, from the mirror, with exact Decimal arithmetic. Nothing is
estimated and nothing is rounded until it is formatted for display.

All functions are pure and treat an empty collection as a normal case:
zero, an empty series or None, never an exception.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional, Sequence

from fintrax.models.analytics import (
    CategoryTotal,
    DailyTotal,
    DashboardSummary,
    MonthlyTotal,
    SpendingInsights,
)
from fintrax.models.expense import Expense
from fintrax.queries.filters import month_label


WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

ZERO = Decimal("0")


def total(expenses: Sequence[Expense]) -> Decimal:
    """Sum of every amount."""
    return sum((e.amount for e in expenses), ZERO)


def total_for_month(expenses: Sequence[Expense], year: int, month: int) -> Decimal:
    """Sum of amounts dated within the given calendar month."""
    return total([e for e in expenses if e.date.year == year and e.date.month == month])


def by_category(expenses: Sequence[Expense]) -> dict[str, Decimal]:
    """Sum per category, in first-encountered category order."""
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
    return totals


def category_series(expenses: Sequence[Expense]) -> list[CategoryTotal]:
    """Per-category totals, largest first (ties keep first-seen order)."""
    series = [
        CategoryTotal(category=category, amount=amount)
        for category, amount in by_category(expenses).items()
    ]
    series.sort(key=lambda c: c.amount, reverse=True)
    return series


def weekly_series(expenses: Sequence[Expense], reference_date: dt.date) -> list[DailyTotal]:
    """
    Daily totals for the 7 days ending at ``reference_date`` (inclusive).

    Always exactly 7 entries, oldest to newest; days without spending are 0.
    """
    days = [reference_date - dt.timedelta(days=offset) for offset in range(6, -1, -1)]
    per_day = {day: ZERO for day in days}
    for expense in expenses:
        if expense.date in per_day:
            per_day[expense.date] += expense.amount

    return [
        DailyTotal(date=day, label=WEEKDAY_LABELS[day.weekday()], amount=per_day[day])
        for day in days
    ]


def monthly_series(expenses: Sequence[Expense]) -> list[MonthlyTotal]:
    """One entry per month present in the data, chronological."""
    per_month: dict[tuple[int, int], Decimal] = {}
    labels: dict[tuple[int, int], str] = {}
    for expense in expenses:
        key = (expense.date.year, expense.date.month)
        per_month[key] = per_month.get(key, ZERO) + expense.amount
        labels.setdefault(key, month_label(expense.date))

    return [
        MonthlyTotal(month=labels[key], amount=per_month[key])
        for key in sorted(per_month)
    ]


def average(expenses: Sequence[Expense]) -> Decimal:
    """Mean amount; 0 when there are no expenses."""
    if not expenses:
        return ZERO
    return total(expenses) / len(expenses)


def largest(expenses: Sequence[Expense]) -> Optional[Expense]:
    """The expense with the highest amount (first one wins a tie)."""
    best: Optional[Expense] = None
    for expense in expenses:
        if best is None or expense.amount > best.amount:
            best = expense
    return best


def top_category(expenses: Sequence[Expense]) -> Optional[CategoryTotal]:
    """The category with the highest summed amount (first one wins a tie)."""
    best: Optional[CategoryTotal] = None
    for category, amount in by_category(expenses).items():
        if best is None or amount > best.amount:
            best = CategoryTotal(category=category, amount=amount)
    return best


def recent(expenses: Sequence[Expense], limit: int = 5) -> list[Expense]:
    """Most recent expenses by date (ties keep input order)."""
    return sorted(expenses, key=lambda e: e.date, reverse=True)[:limit]


def insights(expenses: Sequence[Expense]) -> Optional[SpendingInsights]:
    """Insight cards for the analytics page, or None with nothing to analyse."""
    if not expenses:
        return None
    return SpendingInsights(
        total=total(expenses),
        average=average(expenses),
        largest=largest(expenses),
        top_category=top_category(expenses),
    )


def dashboard_summary(expenses: Sequence[Expense], today: dt.date) -> DashboardSummary:
    """Summary cards: overall total, this month, count, average, highest."""
    biggest = largest(expenses)
    return DashboardSummary(
        total=total(expenses),
        this_month=total_for_month(expenses, today.year, today.month),
        transaction_count=len(expenses),
        average=average(expenses),
        highest=biggest.amount if biggest else ZERO,
        largest=biggest,
    )
