"""Expense form state and reducer."""

from fintrax.forms.draft import (
    Draft,
    DraftAction,
    EditStarted,
    FieldChanged,
    FormReset,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    reduce_draft,
)

__all__ = [
    "Draft",
    "DraftAction",
    "EditStarted",
    "FieldChanged",
    "FormReset",
    "SubmitFailed",
    "SubmitStarted",
    "SubmitSucceeded",
    "reduce_draft",
]
