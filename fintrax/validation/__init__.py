"""Expense validation package."""

from fintrax.validation.validator import (
    ExpenseValidator,
    parse_amount,
    parse_date,
    years_before,
)

__all__ = ["ExpenseValidator", "parse_amount", "parse_date", "years_before"]
