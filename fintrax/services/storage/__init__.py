"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the production backend; the in-memory backend serves tests
and local development.
"""

from fintrax.services.storage.interface import (
    AuditStorageInterface,
    ClearAllError,
    ConnectionError,
    Document,
    ExpenseRepositoryInterface,
    MalformedDocumentError,
    NotFoundError,
    StorageError,
    decode_expense,
)
from fintrax.services.storage.google_sheets import (
    EXPENSE_COLUMNS,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseRepository,
)
from fintrax.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryExpenseRepository,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "Document",
    "ExpenseRepositoryInterface",
    "decode_expense",
    # Exceptions
    "ClearAllError",
    "ConnectionError",
    "MalformedDocumentError",
    "NotFoundError",
    "StorageError",
    # Google Sheets implementation
    "EXPENSE_COLUMNS",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseRepository",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryExpenseRepository",
]
