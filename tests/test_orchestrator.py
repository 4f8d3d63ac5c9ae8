"""Integration tests for the expense and account flows (in-memory backends)."""

import datetime as dt
from decimal import Decimal

import pytest

from fintrax.errors import (
    AccountInputError,
    AuthorizationError,
    ExpenseValidationError,
    NotAuthenticatedError,
    NotFoundError,
)
from fintrax.forms import Draft, EditStarted, FieldChanged, reduce_draft
from fintrax.models import AuditEventType, ExpenseInput, FilterCriteria
from fintrax.orchestrator import create_app_components
from fintrax.services.identity import IdentityError
from fintrax.services.storage import ClearAllError


def candidate(**overrides) -> ExpenseInput:
    data = {
        "title": "Lunch",
        "amount": "15.00",
        "date": "2024-01-10",
        "category": "Food",
        "notes": "",
    }
    data.update(overrides)
    return ExpenseInput(**data)


@pytest.fixture
async def alice(session):
    return await session.sign_up("alice@example.com", "Secret#123")


class TestExpenseFlow:
    """Tests for ExpenseFlow."""

    async def test_requires_sign_in(self, expense_flow):
        with pytest.raises(NotAuthenticatedError):
            await expense_flow.add_expense(candidate())

    async def test_round_trip(self, expense_flow, alice):
        """sanitize -> validate -> create -> load returns the sanitized record."""
        created = await expense_flow.add_expense(
            candidate(title=" <b>Fish</b> & Chips ", notes="with <i>extra</i> salt")
        )
        loaded = await expense_flow.refresh()

        assert len(loaded) == 1
        stored = loaded[0]
        assert stored.id == created.id
        assert stored.title == "Fish &amp; Chips"
        assert stored.notes == "with extra salt"
        assert stored.amount == Decimal("15.00")
        assert stored.date == dt.date(2024, 1, 10)
        assert stored.owner_id == alice.uid

    async def test_invalid_candidate_never_reaches_store(self, expense_flow, repository, audit_storage, alice):
        with pytest.raises(ExpenseValidationError) as exc_info:
            await expense_flow.add_expense(
                ExpenseInput(title="<script>x</script>", amount="-5", date="2099-01-01")
            )
        assert {"title", "amount", "date"} <= set(exc_info.value.fields)
        assert len(repository) == 0
        assert audit_storage.events_of_type(AuditEventType.VALIDATION_FAILED)

    async def test_edit(self, expense_flow, alice):
        created = await expense_flow.add_expense(candidate())
        updated = await expense_flow.edit_expense(created.id, candidate(title="Brunch", amount="22.50"))

        assert updated.id == created.id
        assert updated.created_at == created.created_at
        reloaded = await expense_flow.refresh()
        assert reloaded[0].title == "Brunch"
        assert reloaded[0].amount == Decimal("22.50")

    async def test_edit_unknown(self, expense_flow, alice):
        with pytest.raises(NotFoundError):
            await expense_flow.edit_expense("missing", candidate())

    async def test_remove(self, expense_flow, alice):
        keep = await expense_flow.add_expense(candidate(title="Keep"))
        drop = await expense_flow.add_expense(candidate(title="Drop"))
        await expense_flow.remove_expense(drop.id)

        assert [e.id for e in expense_flow.store.expenses] == [keep.id]
        assert [e.id for e in await expense_flow.refresh()] == [keep.id]

    async def test_cross_identity_update_and_delete_denied(
        self, expense_flow, session, repository, audit_storage, alice
    ):
        created = await expense_flow.add_expense(candidate())
        await session.sign_out()
        await session.sign_up("bob@example.com", "Secret#456")

        with pytest.raises(AuthorizationError):
            await expense_flow.edit_expense(created.id, candidate(title="Hijacked"))
        with pytest.raises(AuthorizationError):
            await expense_flow.remove_expense(created.id)

        document = await repository.get(created.id)
        assert document["title"] == "Lunch"
        assert document["owner_id"] == alice.uid
        assert len(audit_storage.events_of_type(AuditEventType.AUTHORIZATION_DENIED)) == 2

    async def test_view_filters_mirror(self, expense_flow, alice):
        await expense_flow.add_expense(candidate(title="Lunch"))
        await expense_flow.add_expense(candidate(title="Bus", amount="5", category="Transportation"))

        assert len(expense_flow.view()) == 2
        assert [e.title for e in expense_flow.view(FilterCriteria(text="trans"))] == ["Bus"]
        assert [e.title for e in expense_flow.view(FilterCriteria(category="Food"))] == ["Lunch"]

    async def test_summary(self, expense_flow, alice):
        await expense_flow.add_expense(candidate(title="Lunch"))
        await expense_flow.add_expense(candidate(title="Bus", amount="5", category="Transportation"))
        summary = expense_flow.summary(dt.date(2024, 1, 31))
        assert summary.total == Decimal("20.00")
        assert summary.this_month == Decimal("20.00")
        assert summary.transaction_count == 2

    async def test_delete_all(self, expense_flow, alice):
        for title in ("a", "b", "c"):
            await expense_flow.add_expense(candidate(title=title))
        assert await expense_flow.delete_all() == 3
        assert expense_flow.store.expenses == ()

    async def test_delete_all_failure(self, expense_flow, repository, alice):
        for title in ("a", "b"):
            await expense_flow.add_expense(candidate(title=title))
        repository.fail_deletes_after = 0
        with pytest.raises(ClearAllError):
            await expense_flow.delete_all()
        assert len(expense_flow.store.expenses) == 2


class TestSubmitDraft:
    """Tests for submitting the expense form."""

    def filled(self, draft: Draft, **values) -> Draft:
        for field, value in values.items():
            draft = reduce_draft(draft, FieldChanged(field=field, value=value))
        return draft

    async def test_add_success_resets_form(self, expense_flow, alice):
        draft = self.filled(
            Draft.blank(category="Food", today=dt.date(2024, 1, 10)),
            title="Lunch",
            amount="15",
        )
        next_draft, saved = await expense_flow.submit(draft)

        assert saved.title == "Lunch"
        assert next_draft.title == ""
        assert next_draft.date == "2024-01-10"
        assert not next_draft.is_submitting

    async def test_failure_keeps_values(self, expense_flow, alice):
        draft = self.filled(Draft.blank(category="Food", today=dt.date(2024, 1, 10)), amount="-5")
        next_draft, saved = await expense_flow.submit(draft)

        assert saved is None
        assert next_draft.amount == "-5"
        assert next_draft.error == "Please enter a title"
        assert not next_draft.is_submitting

    async def test_edit_via_draft_does_not_double_escape(self, expense_flow, alice):
        created = await expense_flow.add_expense(candidate(title="Fish & Chips"))
        draft = reduce_draft(Draft.blank(category="Food"), EditStarted(expense=created))
        assert draft.title == "Fish & Chips"

        _, saved = await expense_flow.submit(draft)
        assert saved.id == created.id
        assert saved.title == "Fish &amp; Chips"

    async def test_in_flight_submit_ignored(self, expense_flow, alice):
        draft = Draft.blank(category="Food").model_copy(update={"is_submitting": True})
        next_draft, saved = await expense_flow.submit(draft)
        assert saved is None
        assert next_draft is draft


class TestAccountFlow:
    """Tests for AccountFlow."""

    async def test_sign_up_checks_input_first(self, account_flow, identity_provider):
        with pytest.raises(AccountInputError) as exc_info:
            await account_flow.sign_up("ada@example.com", "Secret#123", "Different#123")
        assert exc_info.value.user_message == "Passwords do not match"
        assert identity_provider.current_identity() is None

    async def test_sign_up_and_sign_in(self, account_flow, session):
        await account_flow.sign_up(" ada@example.com ", "Secret#123", "Secret#123")
        await account_flow.sign_out()
        assert not session.is_authenticated
        identity = await account_flow.sign_in("ada@example.com", "Secret#123")
        assert session.current == identity

    async def test_sign_in_invalid_email(self, account_flow):
        with pytest.raises(AccountInputError):
            await account_flow.sign_in("not-an-email", "Secret#123")

    async def test_change_password(self, account_flow, audit_storage, alice):
        await account_flow.change_password("Secret#123", "Better#456", "Better#456")
        await account_flow.sign_out()
        await account_flow.sign_in("alice@example.com", "Better#456")
        assert audit_storage.events_of_type(AuditEventType.PASSWORD_CHANGED)

    async def test_change_password_checks(self, account_flow, alice):
        with pytest.raises(AccountInputError) as exc_info:
            await account_flow.change_password("Secret#123", "short", "short")
        assert exc_info.value.user_message == "Password must be at least 6 characters"

        with pytest.raises(AccountInputError):
            await account_flow.change_password("Secret#123", "Better#456", "Better#789")

        with pytest.raises(IdentityError):
            await account_flow.change_password("wrong-one", "Better#456", "Better#456")

    async def test_delete_account(self, account_flow, expense_flow, session, repository, identity_provider, alice):
        await expense_flow.add_expense(candidate())
        deleted = await account_flow.delete_account("Secret#123")

        assert deleted == 1
        assert not session.is_authenticated
        assert len(repository) == 0
        with pytest.raises(IdentityError):
            await identity_provider.sign_in("alice@example.com", "Secret#123")

    async def test_delete_account_keeps_identity_when_clear_fails(
        self, account_flow, expense_flow, session, repository, alice
    ):
        await expense_flow.add_expense(candidate())
        repository.fail_deletes_after = 0
        with pytest.raises(ClearAllError):
            await account_flow.delete_account("Secret#123")
        assert session.is_authenticated


class TestCreateAppComponents:
    """Tests for the component factory."""

    async def test_in_memory_wiring(self):
        expense_flow, account_flow, session = create_app_components(use_storage=False)
        await account_flow.sign_up("ada@example.com", "Secret#123", "Secret#123")
        await expense_flow.add_expense(
            ExpenseInput(title="Lunch", amount="15", date=dt.date.today(), category="Food")
        )
        assert len(expense_flow.view()) == 1
        assert session.current.email == "ada@example.com"
