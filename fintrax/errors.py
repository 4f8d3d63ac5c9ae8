"""
Error taxonomy for Fintrax.

Every error carries a ``user_message`` - the single, non-blocking line the
interface shows when the operation fails. The technical detail stays in
``str(error)`` and goes to the log.
"""

from typing import Optional


class FintraxError(Exception):
    """Base exception for all Fintrax errors."""

    default_user_message = "Something went wrong. Please try again."

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or self.default_user_message


class ExpenseValidationError(FintraxError):
    """
    Candidate expense failed validation.

    Always recoverable: nothing was persisted and the form keeps its values.
    """

    def __init__(self, issues: list):
        self.issues = list(issues)
        fields = ", ".join(issue.field for issue in self.issues) or "unknown"
        first = self.issues[0].message if self.issues else "Invalid expense"
        super().__init__(
            f"Expense validation failed on: {fields}",
            user_message=first,
        )

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]


class AuthorizationError(FintraxError):
    """The acting identity does not own the record it tried to change."""

    default_user_message = "You can only change your own expenses."


class NotAuthenticatedError(FintraxError):
    """The operation needs a signed-in identity and there is none."""

    default_user_message = "Please sign in to continue."


class NotFoundError(FintraxError):
    """Update or delete referenced an id that does not exist."""

    default_user_message = "That expense no longer exists."


class CollaboratorError(FintraxError):
    """Base for failures reported by an external backend."""

    default_user_message = "We couldn't reach the server. Please try again."


class AccountInputError(FintraxError):
    """Credentials entered on an account form fail the local checks."""

    def __init__(self, message: str):
        super().__init__(message, user_message=message)
