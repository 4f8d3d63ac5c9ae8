"""
Filter and search over the expense mirror.

All predicates are ANDed together. Filtering is stable: the result keeps the
relative order of the input and is never re-sorted.
"""

import datetime as dt
from typing import Iterable, Optional, Sequence

from fintrax.models.analytics import ALL, FilterCriteria
from fintrax.models.expense import Expense


# Fixed English abbreviations; month labels never depend on the host locale
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

NO_DATA = "no_data"
NO_MATCHES = "no_matches"


def month_label(day: dt.date) -> str:
    """2024-01-10 -> 'Jan 2024'."""
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.year}"


def matches_text(expense: Expense, text: str, match_category_text: bool = True) -> bool:
    """Case-insensitive substring match on title (and category)."""
    needle = text.strip().lower()
    if not needle:
        return True
    if needle in expense.title.lower():
        return True
    return match_category_text and needle in expense.category.lower()


def filter_expenses(
    expenses: Iterable[Expense],
    criteria: Optional[FilterCriteria] = None,
    *,
    match_category_text: bool = True,
) -> list[Expense]:
    """
    Apply search text, category and month predicates.

    Args:
        expenses: Source collection (typically the store mirror)
        criteria: Predicates; None means no filtering
        match_category_text: Also match the search text against the category

    Returns:
        The matching expenses, in input order
    """
    criteria = criteria or FilterCriteria()
    result = []
    for expense in expenses:
        if not matches_text(expense, criteria.text, match_category_text):
            continue
        if criteria.category != ALL and expense.category != criteria.category:
            continue
        if criteria.month != ALL and month_label(expense.date) != criteria.month:
            continue
        result.append(expense)
    return result


def available_months(expenses: Iterable[Expense]) -> list[str]:
    """Distinct month labels present in the data, newest first."""
    months = {(e.date.year, e.date.month) for e in expenses}
    return [
        f"{MONTH_ABBREVIATIONS[month - 1]} {year}"
        for year, month in sorted(months, reverse=True)
    ]


def available_categories(expenses: Sequence[Expense]) -> list[str]:
    """Distinct categories present in the data, first-seen order."""
    return list(dict.fromkeys(e.category for e in expenses))


def describe_empty_state(all_count: int, filtered_count: int) -> Optional[str]:
    """
    Tell apart "nothing recorded yet" from "nothing matches the filters".

    Returns NO_DATA, NO_MATCHES, or None when there is something to show.
    """
    if all_count == 0:
        return NO_DATA
    if filtered_count == 0:
        return NO_MATCHES
    return None
