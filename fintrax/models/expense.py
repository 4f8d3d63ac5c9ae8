"""
Core Data Models for Fintrax

These models define the schemas for every expense flowing through the system:

1. ExpenseInput  - what the user typed (untrusted, loosely typed)
2. ValidExpense  - sanitized and validated, ready to persist
3. ExpensePatch  - the editable subset applied by an update
4. Expense       - a persisted record, owned by exactly one identity

DESIGN DECISION: Only ValidExpense objects are handed to the store, and only
Expense objects (decoded from backend documents) live in the mirror.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# Fields the user is allowed to edit. id, owner_id and created_at are never
# part of a write.
EDITABLE_FIELDS = ("title", "amount", "category", "date", "notes")


# =============================================================================
# INPUT MODELS
# =============================================================================

class ExpenseInput(BaseModel):
    """
    Candidate expense as entered in the form.

    CRITICAL: Nothing here is trusted. Every field may be missing, empty or
    of the wrong shape; the validator decides what survives.
    """
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = ""
    amount: Union[Decimal, int, float, str, None] = None
    date: Union[dt.date, str, None] = None
    category: Optional[str] = None
    notes: Optional[str] = ""


class ValidExpense(BaseModel):
    """
    A sanitized, validated expense.

    Produced only by ExpenseValidator. Text fields are already sanitized
    (and therefore HTML-escaped) and must not be sanitized again.
    """
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    date: dt.date
    notes: str = ""

    def to_fields(self) -> dict[str, Any]:
        """Fields handed to the persistence backend on insert."""
        return {field: getattr(self, field) for field in EDITABLE_FIELDS}


class ExpensePatch(BaseModel):
    """Partial update of an expense. Unset fields are left untouched."""
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    category: Optional[str] = Field(default=None, min_length=1)
    date: Optional[dt.date] = None
    notes: Optional[str] = None

    @classmethod
    def from_valid(cls, valid: ValidExpense) -> "ExpensePatch":
        """Full-record patch, as produced by the edit form."""
        return cls(**valid.to_fields())

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @property
    def is_empty(self) -> bool:
        return not self.to_fields()


# =============================================================================
# PERSISTED MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A persisted expense.

    id and created_at are assigned by the backend; owner_id is set once at
    creation. None of the three ever change.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Backend-assigned identifier")
    owner_id: str = Field(..., min_length=1, description="Identity that created the record")
    created_at: dt.datetime = Field(..., description="Backend-assigned creation time")

    title: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    date: dt.date
    notes: str = ""

    def apply(self, patch: ExpensePatch) -> "Expense":
        """Return a copy with the patch applied. Identity fields are untouched."""
        return self.model_copy(update=patch.to_fields())

    def is_owned_by(self, uid: str) -> bool:
        return self.owner_id == uid


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation failure."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'too_long', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationResult(BaseModel):
    """
    Result of validating an ExpenseInput.

    Either ``expense`` is set and ``issues`` is empty, or ``expense`` is None
    and ``issues`` lists every rule that failed.
    """

    expense: Optional[ValidExpense] = None
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.expense is not None and not self.issues

    @property
    def failed_fields(self) -> list[str]:
        return [issue.field for issue in self.issues]

    @property
    def first_message(self) -> Optional[str]:
        """The message the form shows (it surfaces only the first failure)."""
        return self.issues[0].message if self.issues else None
