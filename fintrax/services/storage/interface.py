"""
Abstract Storage Interface

The expense collection lives in an external document store. Fintrax only
relies on four things from it:

1. Inserted records get a backend-assigned id and creation timestamp
2. Queries filtered by owner return only that owner's records
3. Updates and deletes target a single record by id
4. Everything it returns is a plain document (dict)

Documents are never trusted: decode_expense() validates each one into an
Expense at this boundary, before it can reach the store.

Implementations: Google Sheets (production), in-memory (tests, local dev).
"""

from abc import ABC, abstractmethod
from datetime import timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import ValidationError

from fintrax.errors import CollaboratorError, NotFoundError
from fintrax.models.audit import AuditEvent
from fintrax.models.expense import Expense


Document = dict[str, Any]


class ExpenseRepositoryInterface(ABC):
    """
    Abstract interface for the expense document collection.

    Any backend (Google Sheets, Firestore, SQL, ...) must implement these
    methods. All of them may raise StorageError.
    """

    @abstractmethod
    async def insert(self, owner_id: str, fields: dict[str, Any]) -> Document:
        """
        Insert a new expense document.

        Args:
            owner_id: Identity the record belongs to
            fields: title, amount, category, date, notes

        Returns:
            The stored document, including the assigned ``id`` and
            ``created_at``
        """
        pass

    @abstractmethod
    async def query_by_owner(self, owner_id: str) -> list[Document]:
        """
        Return every document owned by ``owner_id``, in backend order.
        """
        pass

    @abstractmethod
    async def get(self, expense_id: str) -> Optional[Document]:
        """
        Retrieve a single document by id.

        Returns:
            The document if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, expense_id: str, fields: dict[str, Any]) -> Document:
        """
        Apply a partial update to one document.

        Returns:
            The updated document

        Raises:
            NotFoundError: If the document doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, expense_id: str) -> None:
        """
        Delete one document.

        Raises:
            NotFoundError: If the document doesn't exist
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(CollaboratorError):
    """Base exception for storage operations."""

    default_user_message = "We couldn't reach your saved expenses. Please try again."


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class MalformedDocumentError(StorageError):
    """A backend document does not decode into a valid Expense."""

    def __init__(self, message: str, document_id: Optional[str] = None):
        super().__init__(message)
        self.document_id = document_id


class ClearAllError(StorageError):
    """Bulk delete stopped part-way. Nothing may be assumed deleted."""

    default_user_message = "Error deleting data. Please try again."

    def __init__(self, message: str, deleted: int, total: int):
        super().__init__(message)
        self.deleted = deleted
        self.total = total


# Alternative key spellings seen in stored documents
_KEY_ALIASES = {
    "userId": "owner_id",
    "ownerId": "owner_id",
    "createdAt": "created_at",
}


def decode_expense(document: Document) -> Expense:
    """
    Validate a backend document into an Expense.

    Raises:
        MalformedDocumentError: If required fields are missing or invalid
    """
    if not isinstance(document, dict):
        raise MalformedDocumentError(f"Expected a document, got {type(document).__name__}")

    data = {_KEY_ALIASES.get(key, key): value for key, value in document.items()}
    document_id = str(data["id"]) if data.get("id") else None

    if isinstance(data.get("amount"), float):
        data["amount"] = Decimal(str(data["amount"]))
    if data.get("notes") is None:
        data["notes"] = ""

    try:
        expense = Expense.model_validate(data)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise MalformedDocumentError(
            f"Malformed expense document {document_id or '<no id>'}: invalid {', '.join(fields)}",
            document_id=document_id,
        ) from e

    if expense.created_at.tzinfo is None:
        expense = expense.model_copy(
            update={"created_at": expense.created_at.replace(tzinfo=timezone.utc)}
        )
    return expense


__all__ = [
    "AuditStorageInterface",
    "ClearAllError",
    "ConnectionError",
    "Document",
    "ExpenseRepositoryInterface",
    "MalformedDocumentError",
    "NotFoundError",
    "StorageError",
    "decode_expense",
]
