"""
Shared fixtures.

Every test runs against the in-memory backends; nothing talks to Google
Sheets or Firebase.
"""

import datetime as dt
from decimal import Decimal
from itertools import count

import pytest

from fintrax.audit import AuditLogger
from fintrax.models import Expense
from fintrax.orchestrator import AccountFlow, ExpenseFlow
from fintrax.services.identity import InMemoryIdentityProvider
from fintrax.services.storage import (
    InMemoryAuditStorage,
    InMemoryExpenseRepository,
    StorageError,
)
from fintrax.session import SessionGate
from fintrax.store import ExpenseStore
from fintrax.validation import ExpenseValidator


TODAY = dt.date(2024, 6, 15)


class TickingClock:
    """Each call is one second later than the previous one."""

    def __init__(self, start: dt.datetime = dt.datetime(2024, 1, 1, 9, 0, tzinfo=dt.timezone.utc)):
        self._now = start

    def __call__(self) -> dt.datetime:
        self._now += dt.timedelta(seconds=1)
        return self._now


class FlakyRepository(InMemoryExpenseRepository):
    """In-memory repository whose reads and deletes can be made to fail."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.fail_queries = False
        self.fail_deletes_after = None
        self.deletes = 0

    async def query_by_owner(self, owner_id):
        if self.fail_queries:
            raise StorageError("backend unavailable")
        return await super().query_by_owner(owner_id)

    async def delete(self, expense_id):
        if self.fail_deletes_after is not None and self.deletes >= self.fail_deletes_after:
            raise StorageError("backend unavailable")
        await super().delete(expense_id)
        self.deletes += 1


_ids = count(1)


def build_expense(
    title: str = "Lunch",
    amount: str = "15.00",
    category: str = "Food",
    date: dt.date = dt.date(2024, 1, 10),
    owner_id: str = "user-a",
    notes: str = "",
    **overrides,
) -> Expense:
    n = next(_ids)
    data = {
        "id": f"exp-{n}",
        "owner_id": owner_id,
        "created_at": dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc) + dt.timedelta(minutes=n),
        "title": title,
        "amount": Decimal(amount),
        "category": category,
        "date": date,
        "notes": notes,
    }
    data.update(overrides)
    return Expense(**data)


@pytest.fixture
def make_expense():
    """Factory for Expense objects (no backend involved)."""
    return build_expense


@pytest.fixture
def repository():
    return FlakyRepository(clock=TickingClock())


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def store(repository, audit_logger):
    return ExpenseStore(repository, audit_logger)


@pytest.fixture
def identity_provider():
    return InMemoryIdentityProvider()


@pytest.fixture
def session(identity_provider, store, audit_logger):
    return SessionGate(identity_provider, store, audit_logger)


@pytest.fixture
def validator():
    return ExpenseValidator(clock=lambda: TODAY)


@pytest.fixture
def expense_flow(session, store, validator, audit_logger):
    return ExpenseFlow(session, store, validator, audit_logger)


@pytest.fixture
def account_flow(session, identity_provider, store, audit_logger):
    return AccountFlow(session, identity_provider, store, audit_logger)
