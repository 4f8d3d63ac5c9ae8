"""
Data Models Package

This package contains all Pydantic models used in Fintrax.
All data flowing through the system must conform to these schemas.
"""

from fintrax.models.account import Identity, PasswordStrength
from fintrax.models.analytics import (
    ALL,
    CategoryTotal,
    DailyTotal,
    DashboardSummary,
    FilterCriteria,
    MonthlyTotal,
    SpendingInsights,
)
from fintrax.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from fintrax.models.expense import (
    EDITABLE_FIELDS,
    Expense,
    ExpenseInput,
    ExpensePatch,
    ValidExpense,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Account models
    "Identity",
    "PasswordStrength",
    # Expense models
    "EDITABLE_FIELDS",
    "Expense",
    "ExpenseInput",
    "ExpensePatch",
    "ValidExpense",
    "ValidationIssue",
    "ValidationResult",
    # Filter / aggregate models
    "ALL",
    "CategoryTotal",
    "DailyTotal",
    "DashboardSummary",
    "FilterCriteria",
    "MonthlyTotal",
    "SpendingInsights",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
