"""
Expense Validation

Turns an untrusted ExpenseInput into a ValidExpense, or reports why not.

Rules are evaluated independently and every failure is collected; the form
shows only the first, but callers (and the audit log) see them all:

- title:    sanitized length in [1, max_title_length]
- amount:   a finite number, > 0, <= max_amount
- date:     a calendar date, not in the future, not older than the
            retention horizon
- notes:    sanitized length in [0, max_notes_length]
- category: one of the configured categories

IMPORTANT: Validation never persists anything and never fixes values
silently. Sanitization happens here, exactly once per field.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Sequence

from fintrax.config import AppSettings, get_settings
from fintrax.errors import ExpenseValidationError
from fintrax.formatting import format_currency
from fintrax.models.expense import (
    ExpenseInput,
    ValidExpense,
    ValidationIssue,
    ValidationResult,
)
from fintrax.security.sanitizer import sanitize


def years_before(day: date, years: int) -> date:
    """Same calendar day ``years`` earlier (Feb 29 falls back to Feb 28)."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse a form amount into a finite Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    return amount if amount.is_finite() else None


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO calendar date (YYYY-MM-DD), or None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


class ExpenseValidator:
    """
    Validates candidate expenses against the configured limits.

    Pure apart from reading "today" from the injected clock.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        categories: Optional[Sequence[str]] = None,
        clock: Callable[[], date] = date.today,
    ):
        """
        Initialize validator.

        Args:
            settings: Limits to enforce. Defaults to the app settings.
            categories: Override the configured category list.
            clock: Source of "today" for the date rules.
        """
        self._settings = settings or get_settings().app
        self._categories = tuple(categories) if categories else self._settings.categories
        self._clock = clock

    @property
    def categories(self) -> tuple[str, ...]:
        return self._categories

    def _check_title(self, raw: Optional[str]) -> tuple[str, list[ValidationIssue]]:
        title = sanitize(raw, strip_sql=self._settings.strip_sql_keywords)
        max_len = self._settings.max_title_length
        if not title:
            return title, [ValidationIssue(
                field="title",
                issue_type="missing",
                message="Please enter a title",
            )]
        if len(title) > max_len:
            return title, [ValidationIssue(
                field="title",
                issue_type="too_long",
                message=f"Title must be {max_len} characters or fewer",
            )]
        return title, []

    def _check_amount(self, raw: Any) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None, [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Please enter an amount",
            )]

        amount = parse_amount(raw)
        if amount is None:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Please enter a valid amount",
            )]
        if amount <= 0:
            return amount, [ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message="Amount must be greater than zero",
            )]

        max_amount = Decimal(str(self._settings.max_amount))
        if amount > max_amount:
            return amount, [ValidationIssue(
                field="amount",
                issue_type="too_large",
                message=(
                    f"Amount seems unusually high "
                    f"(maximum {format_currency(max_amount, self._settings.currency_symbol)})"
                ),
            )]
        return amount, []

    def _check_date(self, raw: Any, today: date) -> tuple[Optional[date], list[ValidationIssue]]:
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return None, [ValidationIssue(
                field="date",
                issue_type="missing",
                message="Please select a date",
            )]

        parsed = parse_date(raw)
        if parsed is None:
            return None, [ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message="Please enter a valid date (YYYY-MM-DD)",
            )]
        if parsed > today:
            return parsed, [ValidationIssue(
                field="date",
                issue_type="future_date",
                message="Date cannot be in the future",
            )]

        years = self._settings.retention_years
        if parsed < years_before(today, years):
            return parsed, [ValidationIssue(
                field="date",
                issue_type="too_old",
                message=f"Date cannot be more than {years} years ago",
            )]
        return parsed, []

    def _check_notes(self, raw: Optional[str]) -> tuple[str, list[ValidationIssue]]:
        notes = sanitize(raw, strip_sql=self._settings.strip_sql_keywords)
        max_len = self._settings.max_notes_length
        if len(notes) > max_len:
            return notes, [ValidationIssue(
                field="notes",
                issue_type="too_long",
                message=f"Notes must be {max_len} characters or fewer",
            )]
        return notes, []

    def _check_category(self, raw: Optional[str]) -> tuple[Optional[str], list[ValidationIssue]]:
        if raw not in self._categories:
            return None, [ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message="Please choose a category",
            )]
        return raw, []

    def validate(
        self,
        candidate: ExpenseInput,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Validate a candidate expense.

        Args:
            candidate: The raw form input
            today: Override "today" (defaults to the injected clock)

        Returns:
            ValidationResult with either the ValidExpense or every issue found
        """
        today = today or self._clock()

        title, issues = self._check_title(candidate.title)
        amount, amount_issues = self._check_amount(candidate.amount)
        expense_date, date_issues = self._check_date(candidate.date, today)
        notes, notes_issues = self._check_notes(candidate.notes)
        category, category_issues = self._check_category(candidate.category)

        issues = issues + amount_issues + date_issues + notes_issues + category_issues
        if issues:
            return ValidationResult(issues=issues)

        return ValidationResult(
            expense=ValidExpense(
                title=title,
                amount=amount,
                category=category,
                date=expense_date,
                notes=notes,
            )
        )

    def validate_or_raise(
        self,
        candidate: ExpenseInput,
        today: Optional[date] = None,
    ) -> ValidExpense:
        """Validate and return the ValidExpense, raising ExpenseValidationError on failure."""
        result = self.validate(candidate, today=today)
        if not result.is_valid:
            raise ExpenseValidationError(result.issues)
        return result.expense

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
        first_only: bool = True,
    ) -> str:
        """
        Generate the message shown above the form.

        The form surfaces only the first failure by default.
        """
        if result.is_valid:
            return ""
        if first_only:
            return result.first_message or ""
        return "\n".join(f"• {issue.message}" for issue in result.issues)
