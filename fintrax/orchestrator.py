"""
Main Orchestrator for Fintrax

This module ties together all the components and defines the
end-to-end flows for:
1. Expenses (draft -> sanitize -> validate -> ownership check -> persist -> mirror)
2. Accounts (sign-in/up/out, password reset and change, data deletion)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing the validator
- No update or delete without checking the record's owner on the backend
- The mirror is only touched after the backend confirmed the write
- Every step is audited

The store trusts its caller; this is the caller.
"""

import datetime as dt
from typing import Optional

from fintrax.audit import AuditLogger, get_logger
from fintrax.config import get_settings
from fintrax.errors import (
    AccountInputError,
    AuthorizationError,
    ExpenseValidationError,
    FintraxError,
    NotFoundError,
)
from fintrax.forms.draft import (
    Draft,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    reduce_draft,
)
from fintrax.models.account import Identity
from fintrax.models.analytics import DashboardSummary, FilterCriteria
from fintrax.models.audit import AuditEventType
from fintrax.models.expense import Expense, ExpenseInput, ExpensePatch, ValidExpense
from fintrax.queries import dashboard_summary, filter_expenses
from fintrax.security.passwords import check_credentials, check_new_password
from fintrax.services.identity import (
    FirebaseIdentityProvider,
    IdentityProviderInterface,
    InMemoryIdentityProvider,
)
from fintrax.services.storage import (
    ExpenseRepositoryInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseRepository,
    InMemoryAuditStorage,
    InMemoryExpenseRepository,
    StorageError,
)
from fintrax.session import SessionGate
from fintrax.store import ExpenseStore
from fintrax.validation import ExpenseValidator


logger = get_logger("fintrax.orchestrator")


class ExpenseFlow:
    """
    Orchestrates reads and writes of the signed-in user's expenses.

    Write flow:
    1. Require a signed-in identity
    2. Sanitize + validate the candidate (failures never reach the store)
    3. For edits and deletes: fetch the record and check its owner
    4. Persist, then update the mirror
    """

    def __init__(
        self,
        session: SessionGate,
        store: ExpenseStore,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._session = session
        self._store = store
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = get_settings().app

    @property
    def store(self) -> ExpenseStore:
        return self._store

    @property
    def validator(self) -> ExpenseValidator:
        return self._validator

    async def refresh(self) -> list[Expense]:
        """Reload the mirror for the signed-in identity."""
        identity = self._session.require_identity()
        return await self._store.load(identity.uid)

    async def _validate(self, identity: Identity, candidate: ExpenseInput) -> ValidExpense:
        result = self._validator.validate(candidate)
        if not result.is_valid:
            await self._audit_logger.log_validation_failed(
                identity.uid,
                [issue.model_dump() for issue in result.issues],
            )
            raise ExpenseValidationError(result.issues)
        return result.expense

    async def _fetch_owned(self, identity: Identity, expense_id: str, operation: str) -> Expense:
        """Read the record from the backend and check who owns it."""
        existing = await self._store.fetch(expense_id)
        if existing is None:
            raise NotFoundError(f"Expense not found: {expense_id}")
        try:
            self._session.authorize(identity, existing, operation)
        except AuthorizationError:
            await self._audit_logger.log_authorization_denied(identity.uid, expense_id, operation)
            raise
        return existing

    async def add_expense(self, candidate: ExpenseInput) -> Expense:
        """
        Validate and persist a new expense.

        Raises:
            NotAuthenticatedError: Nobody is signed in
            ExpenseValidationError: Any rule failed (nothing persisted)
            StorageError: The backend rejected the write (mirror unchanged)
        """
        identity = self._session.require_identity()
        valid = await self._validate(identity, candidate)
        try:
            return await self._store.create(identity.uid, valid)
        except StorageError as e:
            await self._audit_logger.log_save_failed(identity.uid, "create", str(e))
            raise

    async def edit_expense(self, expense_id: str, candidate: ExpenseInput) -> Expense:
        """
        Validate a full edit and apply it to an owned expense.

        Raises:
            AuthorizationError: The record belongs to another identity
            NotFoundError: The record doesn't exist
        """
        identity = self._session.require_identity()
        valid = await self._validate(identity, candidate)
        await self._fetch_owned(identity, expense_id, "update")
        try:
            return await self._store.update(expense_id, ExpensePatch.from_valid(valid))
        except StorageError as e:
            await self._audit_logger.log_save_failed(identity.uid, "update", str(e))
            raise

    async def remove_expense(self, expense_id: str) -> None:
        """Delete an owned expense."""
        identity = self._session.require_identity()
        await self._fetch_owned(identity, expense_id, "delete")
        try:
            await self._store.delete(expense_id)
        except StorageError as e:
            await self._audit_logger.log_save_failed(identity.uid, "delete", str(e))
            raise

    async def delete_all(self) -> int:
        """Delete every expense of the signed-in identity."""
        identity = self._session.require_identity()
        return await self._store.clear_all(identity.uid)

    async def submit(self, draft: Draft) -> tuple[Draft, Optional[Expense]]:
        """
        Submit the expense form.

        Creates or edits depending on ``draft.editing_id``. Returns the next
        form state and the saved expense (None when the submit failed or a
        submit was already in flight).
        """
        if draft.is_submitting:
            return draft, None
        draft = reduce_draft(draft, SubmitStarted())
        try:
            if draft.is_editing:
                saved = await self.edit_expense(draft.editing_id, draft.to_input())
            else:
                saved = await self.add_expense(draft.to_input())
        except FintraxError as e:
            logger.info("expense_submit_failed", error=str(e))
            return reduce_draft(draft, SubmitFailed(error=e.user_message)), None
        return reduce_draft(draft, SubmitSucceeded()), saved

    def view(self, criteria: Optional[FilterCriteria] = None) -> list[Expense]:
        """The mirror, filtered for the list view."""
        return filter_expenses(
            self._store.expenses,
            criteria,
            match_category_text=self._settings.search_includes_category,
        )

    def summary(self, today: Optional[dt.date] = None) -> DashboardSummary:
        """Dashboard summary cards for the mirror."""
        return dashboard_summary(self._store.expenses, today or dt.date.today())


class AccountFlow:
    """
    Orchestrates the account screens.

    Local input checks run first so obviously bad input never reaches the
    identity provider. Provider failures surface as IdentityError with a
    friendly ``user_message``.
    """

    def __init__(
        self,
        session: SessionGate,
        identity_provider: IdentityProviderInterface,
        store: ExpenseStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._session = session
        self._provider = identity_provider
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._min_length = get_settings().app.min_password_length

    async def sign_in(self, email: str, password: str) -> Identity:
        problem = check_credentials(email, password, min_length=self._min_length)
        if problem:
            raise AccountInputError(problem)
        return await self._session.sign_in(email.strip(), password)

    async def sign_up(self, email: str, password: str, confirm_password: str) -> Identity:
        problem = check_credentials(
            email,
            password,
            confirm_password,
            signing_up=True,
            min_length=self._min_length,
        )
        if problem:
            raise AccountInputError(problem)
        return await self._session.sign_up(email.strip(), password)

    async def send_password_reset(self, email: str) -> None:
        if not email or not email.strip():
            raise AccountInputError("Please enter your email address")
        await self._session.send_password_reset(email.strip())

    async def sign_out(self) -> None:
        await self._session.sign_out()

    async def change_password(
        self,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> None:
        """
        Change the signed-in user's password.

        The current password is re-checked with the provider first.
        """
        identity = self._session.require_identity()
        problem = check_new_password(new_password, confirm_password, self._min_length)
        if problem:
            raise AccountInputError(problem)
        if not current_password:
            raise AccountInputError("Please enter your current password")

        await self._provider.reauthenticate(current_password)
        await self._provider.change_password(new_password)
        await self._audit_logger.log_session(
            AuditEventType.PASSWORD_CHANGED, identity.uid, identity.email
        )

    async def delete_account(self, password: str) -> int:
        """
        Delete every expense, then the account itself.

        If deleting the expenses fails the account is kept, so the user can
        retry. Returns the number of expenses deleted.
        """
        identity = self._session.require_identity()
        if not password:
            raise AccountInputError("Please enter your password")

        await self._provider.reauthenticate(password)
        deleted = await self._store.clear_all(identity.uid)
        await self._provider.delete_identity()
        await self._audit_logger.log_session(
            AuditEventType.ACCOUNT_DELETED, identity.uid, identity.email
        )
        await self._session.end_session()
        return deleted


def create_app_components(
    use_storage: bool = True,
) -> tuple[ExpenseFlow, AccountFlow, SessionGate]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured Google Sheets and Firebase
                    backends. Set to False for testing; in-memory backends
                    are used instead (and whenever a backend isn't configured).

    Returns:
        (expense_flow, account_flow, session)
    """
    repository: Optional[ExpenseRepositoryInterface] = None
    identity_provider: Optional[IdentityProviderInterface] = None
    audit_logger = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            repository = GoogleSheetsExpenseRepository(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            repository = None

        try:
            identity_provider = FirebaseIdentityProvider()
        except Exception as e:
            logger.warning("identity_provider_not_configured", error=str(e))
            identity_provider = None

    if repository is None:
        repository = InMemoryExpenseRepository()
        audit_logger = AuditLogger(InMemoryAuditStorage())
    if identity_provider is None:
        identity_provider = InMemoryIdentityProvider()

    store = ExpenseStore(repository, audit_logger)
    session = SessionGate(identity_provider, store, audit_logger)
    validator = ExpenseValidator()

    expense_flow = ExpenseFlow(
        session=session,
        store=store,
        validator=validator,
        audit_logger=audit_logger,
    )
    account_flow = AccountFlow(
        session=session,
        identity_provider=identity_provider,
        store=store,
        audit_logger=audit_logger,
    )

    return expense_flow, account_flow, session
