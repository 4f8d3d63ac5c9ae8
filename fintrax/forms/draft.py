"""
Expense form state.

The add/edit form is an immutable Draft plus a pure reducer. Every user
interaction becomes an action; ``reduce_draft`` returns the next Draft and
never touches the store. Submitting is the orchestrator's job; the reducer
only records that a submit is in flight and how it ended.

Draft values are kept as the text the user typed. They only become typed
values when the validator reads ``draft.to_input()``.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from fintrax.models.expense import EDITABLE_FIELDS, Expense, ExpenseInput
from fintrax.security.sanitizer import unescape_for_display


FieldValue = Union[str, dt.date, Decimal, int, float, None]


def _as_text(value: FieldValue) -> str:
    if value is None:
        return ""
    if isinstance(value, dt.date):
        return value.isoformat()
    return str(value)


class Draft(BaseModel):
    """What the expense form currently shows."""
    model_config = ConfigDict(frozen=True)

    title: str = ""
    amount: str = ""
    date: str = ""
    category: str = ""
    notes: str = ""

    editing_id: Optional[str] = None
    is_submitting: bool = False
    error: Optional[str] = None

    # What a reset goes back to
    default_category: str = ""
    default_date: str = ""

    @classmethod
    def blank(cls, category: str = "", today: Optional[dt.date] = None) -> "Draft":
        """An empty form with the date preset to today."""
        default_date = _as_text(today or dt.date.today())
        return cls(
            category=category,
            date=default_date,
            default_category=category,
            default_date=default_date,
        )

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def reset(self) -> "Draft":
        return Draft(
            category=self.default_category,
            date=self.default_date,
            default_category=self.default_category,
            default_date=self.default_date,
        )

    def to_input(self) -> ExpenseInput:
        """The candidate handed to the validator."""
        return ExpenseInput(
            title=self.title,
            amount=self.amount,
            date=self.date,
            category=self.category or None,
            notes=self.notes,
        )


# =============================================================================
# ACTIONS
# =============================================================================

class FieldChanged(BaseModel):
    """The user edited one form field."""
    model_config = ConfigDict(frozen=True)

    field: str
    value: FieldValue = None


class EditStarted(BaseModel):
    """The user clicked 'edit' on an existing expense."""
    model_config = ConfigDict(frozen=True)

    expense: Expense


class FormReset(BaseModel):
    """Cancel editing / clear the form."""
    model_config = ConfigDict(frozen=True)


class SubmitStarted(BaseModel):
    """The submit button was pressed."""
    model_config = ConfigDict(frozen=True)


class SubmitSucceeded(BaseModel):
    """The store confirmed the write."""
    model_config = ConfigDict(frozen=True)


class SubmitFailed(BaseModel):
    """Validation or persistence failed; the entered values stay."""
    model_config = ConfigDict(frozen=True)

    error: str


DraftAction = Union[FieldChanged, EditStarted, FormReset, SubmitStarted, SubmitSucceeded, SubmitFailed]


def reduce_draft(draft: Draft, action: DraftAction) -> Draft:
    """
    Compute the next form state.

    Raises:
        ValueError: For a FieldChanged on a field the form doesn't have,
            or an unknown action
    """
    if isinstance(action, FieldChanged):
        if action.field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown form field: {action.field}")
        return draft.model_copy(update={action.field: _as_text(action.value), "error": None})

    if isinstance(action, EditStarted):
        expense = action.expense
        # Stored text is escaped; the form shows what the user originally typed
        return draft.model_copy(update={
            "title": unescape_for_display(expense.title),
            "amount": str(expense.amount),
            "date": expense.date.isoformat(),
            "category": expense.category,
            "notes": unescape_for_display(expense.notes),
            "editing_id": expense.id,
            "is_submitting": False,
            "error": None,
        })

    if isinstance(action, FormReset):
        return draft.reset()

    if isinstance(action, SubmitStarted):
        if draft.is_submitting:
            return draft
        return draft.model_copy(update={"is_submitting": True, "error": None})

    if isinstance(action, SubmitSucceeded):
        return draft.reset()

    if isinstance(action, SubmitFailed):
        return draft.model_copy(update={"is_submitting": False, "error": action.error})

    raise ValueError(f"Unknown draft action: {type(action).__name__}")
