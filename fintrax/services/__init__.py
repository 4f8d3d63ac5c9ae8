"""External collaborators: persistence and identity."""

from fintrax.services.identity import (
    FirebaseIdentityProvider,
    IdentityError,
    IdentityProviderInterface,
    InMemoryIdentityProvider,
)
from fintrax.services.storage import (
    AuditStorageInterface,
    ClearAllError,
    ConnectionError,
    ExpenseRepositoryInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseRepository,
    InMemoryAuditStorage,
    InMemoryExpenseRepository,
    MalformedDocumentError,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Identity services
    "FirebaseIdentityProvider",
    "IdentityError",
    "IdentityProviderInterface",
    "InMemoryIdentityProvider",
    # Storage services
    "AuditStorageInterface",
    "ClearAllError",
    "ConnectionError",
    "ExpenseRepositoryInterface",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseRepository",
    "InMemoryAuditStorage",
    "InMemoryExpenseRepository",
    "MalformedDocumentError",
    "NotFoundError",
    "StorageError",
]
