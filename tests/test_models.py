"""
Tests for Fintrax

Test strategy:
1. Unit tests for individual components (models, sanitizer, validator, queries)
2. Integration tests for flows (with in-memory backends)
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from fintrax.config import CATEGORY_SETS, AppSettings
from fintrax.errors import ExpenseValidationError
from fintrax.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Expense,
    ExpensePatch,
    Identity,
    ValidExpense,
    ValidationIssue,
    ValidationResult,
)


def make_expense(**overrides) -> Expense:
    data = {
        "id": "exp-1",
        "owner_id": "user-a",
        "created_at": datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc),
        "title": "Lunch",
        "amount": Decimal("15.00"),
        "category": "Food",
        "date": date(2024, 1, 10),
    }
    data.update(overrides)
    return Expense(**data)


class TestExpenseModels:
    """Tests for expense-related Pydantic models."""

    def test_expense_creation(self):
        """Test Expense model creation."""
        expense = make_expense()
        assert expense.title == "Lunch"
        assert expense.amount == Decimal("15.00")
        assert expense.notes == ""

    def test_expense_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            make_expense(amount=Decimal("0"))
        with pytest.raises(ValueError):
            make_expense(amount=Decimal("-100"))

    def test_expense_rejects_empty_title(self):
        """Test that a persisted expense always has a title."""
        with pytest.raises(ValueError):
            make_expense(title="")

    def test_expense_is_immutable(self):
        """Test that Expense is frozen."""
        expense = make_expense()
        with pytest.raises(ValueError):
            expense.title = "Changed"

    def test_expense_apply_patch(self):
        """Test that a patch changes only editable fields."""
        expense = make_expense()
        patched = expense.apply(ExpensePatch(title="Brunch", amount=Decimal("20.00")))
        assert patched.title == "Brunch"
        assert patched.amount == Decimal("20.00")
        assert patched.category == "Food"
        assert (patched.id, patched.owner_id, patched.created_at) == (
            expense.id, expense.owner_id, expense.created_at,
        )
        assert expense.title == "Lunch"

    def test_expense_ownership(self):
        expense = make_expense()
        assert expense.is_owned_by("user-a")
        assert not expense.is_owned_by("user-b")

    def test_patch_has_no_identity_fields(self):
        """Test that unknown fields never make it into a patch."""
        patch = ExpensePatch(title="x")
        assert patch.to_fields() == {"title": "x"}
        assert ExpensePatch().is_empty

    def test_patch_from_valid(self):
        valid = ValidExpense(
            title="Lunch",
            amount=Decimal("15.00"),
            category="Food",
            date=date(2024, 1, 10),
        )
        patch = ExpensePatch.from_valid(valid)
        assert patch.to_fields() == valid.to_fields()
        assert set(valid.to_fields()) == {"title", "amount", "category", "date", "notes"}

    def test_identity_requires_uid(self):
        with pytest.raises(ValueError):
            Identity(uid="")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            description="Expense created",
        )
        assert event.event_type == AuditEventType.EXPENSE_CREATED
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            description="Expense updated",
            details={"fields": ["title"]},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_updated"
        assert log_dict["details"]["fields"] == ["title"]

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            description="Expense deleted",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 11  # Expected number of columns
        assert row[2] == "expense_deleted"  # event_type
        assert row[10] == "True"  # is_user_action

    def test_audit_event_builder_authorization_denied(self):
        """Test AuditEventBuilder.authorization_denied."""
        event = AuditEventBuilder.authorization_denied("user-b", "exp-1", "delete")
        assert event.event_type == AuditEventType.AUTHORIZATION_DENIED
        assert event.severity == AuditSeverity.WARNING
        assert event.actor_id == "user-b"
        assert event.entity_id == "exp-1"
        assert event.is_user_action is True

    def test_audit_event_builder_expense_created(self):
        """Test AuditEventBuilder.expense_created."""
        event = AuditEventBuilder.expense_created("exp-1", "user-a", "15.00")
        assert event.event_type == AuditEventType.EXPENSE_CREATED
        assert event.details == {"amount": "15.00"}


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_with_issues(self):
        result = ValidationResult(
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="not_positive",
                    message="Amount must be greater than zero",
                ),
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date cannot be in the future",
                ),
            ],
        )
        assert result.is_valid is False
        assert result.failed_fields == ["amount", "date"]
        assert result.first_message == "Amount must be greater than zero"

    def test_validation_result_valid(self):
        result = ValidationResult(
            expense=ValidExpense(
                title="Lunch",
                amount=Decimal("15"),
                category="Food",
                date=date(2024, 1, 10),
            ),
        )
        assert result.is_valid is True
        assert result.first_message is None

    def test_validation_error_carries_issues(self):
        issue = ValidationIssue(field="title", issue_type="missing", message="Please enter a title")
        error = ExpenseValidationError([issue])
        assert error.fields == ["title"]
        assert error.user_message == "Please enter a title"


class TestCategorySets:
    """Tests for the configured category lists."""

    def test_standard_is_default(self):
        settings = AppSettings()
        assert settings.categories == CATEGORY_SETS["standard"]
        assert settings.default_category == "Food"

    def test_compact(self):
        assert "Transport" in AppSettings(category_set="compact").categories

    def test_custom_list(self):
        settings = AppSettings(category_set="Rent, Fuel ,Food")
        assert settings.categories == ("Rent", "Fuel", "Food")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
