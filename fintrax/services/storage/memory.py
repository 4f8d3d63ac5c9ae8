"""
In-memory storage backends.

Used by the test suite and for running the app without Google credentials.
Behaves like the document database: assigns ids and creation timestamps,
filters by owner, returns copies so callers can't mutate stored documents.
"""

from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

from fintrax.errors import NotFoundError
from fintrax.models.audit import AuditEvent, AuditEventType
from fintrax.services.storage.interface import (
    AuditStorageInterface,
    Document,
    ExpenseRepositoryInterface,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryExpenseRepository(ExpenseRepositoryInterface):
    """In-memory expense collection for testing."""

    # Fields a write may never change
    PROTECTED_FIELDS = ("id", "owner_id", "created_at")

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = lambda: uuid4().hex,
    ):
        self._data: dict[str, Document] = {}
        self._clock = clock
        self._id_factory = id_factory

    async def insert(self, owner_id: str, fields: dict[str, Any]) -> Document:
        document = {
            **{k: v for k, v in fields.items() if k not in self.PROTECTED_FIELDS},
            "id": self._id_factory(),
            "owner_id": owner_id,
            "created_at": self._clock(),
        }
        self._data[document["id"]] = document
        return dict(document)

    async def query_by_owner(self, owner_id: str) -> list[Document]:
        return [dict(d) for d in self._data.values() if d.get("owner_id") == owner_id]

    async def get(self, expense_id: str) -> Optional[Document]:
        document = self._data.get(expense_id)
        return dict(document) if document is not None else None

    async def update(self, expense_id: str, fields: dict[str, Any]) -> Document:
        if expense_id not in self._data:
            raise NotFoundError(f"Expense not found: {expense_id}")
        document = self._data[expense_id]
        document.update({k: v for k, v in fields.items() if k not in self.PROTECTED_FIELDS})
        return dict(document)

    async def delete(self, expense_id: str) -> None:
        if self._data.pop(expense_id, None) is None:
            raise NotFoundError(f"Expense not found: {expense_id}")

    def put_raw(self, document: Document) -> None:
        """Store a document as-is (tests use this to plant malformed data)."""
        self._data[str(document.get("id") or self._id_factory())] = dict(document)

    def __len__(self) -> int:
        return len(self._data)


class InMemoryAuditStorage(AuditStorageInterface):
    """
    In-memory, append-only audit log.

    Keeps the most recent ``max_events`` events; older ones fall off.
    """

    def __init__(self, max_events: int = 1000):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return sorted(self._events, key=lambda e: e.timestamp, reverse=True)[:limit]

    def events_of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        """Retained events of one type, oldest first."""
        return [e for e in self._events if e.event_type == event_type]
