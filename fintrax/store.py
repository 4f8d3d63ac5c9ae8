"""
Expense Store

Owns the in-memory mirror of the signed-in owner's expenses and keeps it
consistent with the persistence backend.

GUARANTEES:
- The mirror holds one owner's records only
- The mirror changes only after the backend confirmed the write
- A failed load leaves the previous mirror in place (stale but consistent)
- Malformed documents are logged and skipped, never shown

The store trusts its caller to have checked ownership; that is the job of
the session gate and the orchestrator.
"""

from typing import Optional

from fintrax.audit import AuditLogger, get_logger
from fintrax.errors import NotFoundError
from fintrax.models.expense import Expense, ExpensePatch, ValidExpense
from fintrax.services.storage.interface import (
    ClearAllError,
    ExpenseRepositoryInterface,
    MalformedDocumentError,
    StorageError,
    decode_expense,
)


logger = get_logger("fintrax.store")


class ExpenseStore:
    """
    In-memory mirror of one owner's expenses, newest first.

    All writes go to the repository first; the mirror follows on success.
    """

    def __init__(
        self,
        repository: ExpenseRepositoryInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._audit = audit_logger or AuditLogger()
        self._expenses: list[Expense] = []
        self._owner_id: Optional[str] = None
        self._loaded = False
        self.last_error: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """Snapshot of the mirror (newest first)."""
        return tuple(self._expenses)

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._expenses)

    def _index_of(self, expense_id: str) -> Optional[int]:
        for idx, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return idx
        return None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def load(self, owner_id: str) -> list[Expense]:
        """
        Replace the mirror with every record owned by ``owner_id``.

        Raises:
            StorageError: If the backend query fails. The previous mirror is
                kept and ``last_error`` is set.
        """
        try:
            documents = await self._repository.query_by_owner(owner_id)
        except StorageError as e:
            self.last_error = e
            logger.warning("expenses_load_failed", owner_id=owner_id, error=str(e))
            await self._audit.log_expenses_load_failed(owner_id, str(e))
            raise

        expenses: list[Expense] = []
        skipped = 0
        for document in documents:
            try:
                expense = decode_expense(document)
            except MalformedDocumentError as e:
                skipped += 1
                await self._audit.log_malformed_document(e.document_id, str(e))
                continue
            # The backend filters by owner; anything else never enters the mirror
            if expense.owner_id != owner_id:
                skipped += 1
                await self._audit.log_malformed_document(
                    expense.id, "Document owned by another identity"
                )
                continue
            expenses.append(expense)

        # Stable: records sharing a timestamp keep arrival order
        expenses.sort(key=lambda e: e.created_at, reverse=True)

        self._expenses = expenses
        self._owner_id = owner_id
        self._loaded = True
        self.last_error = None
        await self._audit.log_expenses_loaded(owner_id, len(expenses), skipped)
        return list(expenses)

    async def create(self, owner_id: str, valid: ValidExpense) -> Expense:
        """
        Persist a new expense and put it at the head of the mirror.

        The backend assigns ``id`` and ``created_at``.
        """
        document = await self._repository.insert(owner_id, valid.to_fields())
        expense = decode_expense(document)

        if self._owner_id == owner_id:
            self._expenses.insert(0, expense)

        await self._audit.log_expense_created(expense.id, owner_id, str(expense.amount))
        return expense

    async def update(self, expense_id: str, patch: ExpensePatch) -> Expense:
        """
        Persist a patch and apply it to the mirror entry in place.

        Raises:
            NotFoundError: If the backend has no such record
        """
        document = await self._repository.update(expense_id, patch.to_fields())
        stored = decode_expense(document)

        idx = self._index_of(expense_id)
        if idx is not None:
            # Position and identity fields are kept; only the patch lands
            updated = self._expenses[idx].apply(patch)
            self._expenses[idx] = updated
        else:
            updated = stored

        await self._audit.log_expense_updated(
            expense_id, updated.owner_id, sorted(patch.to_fields())
        )
        return updated

    async def delete(self, expense_id: str) -> None:
        """
        Persist removal of one record and drop it from the mirror.

        Raises:
            NotFoundError: If the backend has no such record
        """
        await self._repository.delete(expense_id)

        idx = self._index_of(expense_id)
        owner_id = self._owner_id
        if idx is not None:
            owner_id = self._expenses.pop(idx).owner_id

        await self._audit.log_expense_deleted(expense_id, owner_id)

    async def clear_all(self, owner_id: str) -> int:
        """
        Delete every record owned by ``owner_id``, one at a time.

        Returns:
            Number of records deleted

        Raises:
            ClearAllError: If any delete fails. Deletes that already
                succeeded are not rolled back, and the mirror is left as it
                was; reload to see what remains.
        """
        try:
            documents = await self._repository.query_by_owner(owner_id)
        except StorageError as e:
            raise ClearAllError(f"Could not list expenses to delete: {e}", 0, 0) from e

        ids = [str(d.get("id")) for d in documents if d.get("id")]
        deleted = 0
        for expense_id in ids:
            try:
                await self._repository.delete(expense_id)
            except (StorageError, NotFoundError) as e:
                logger.warning(
                    "clear_all_interrupted",
                    owner_id=owner_id,
                    deleted=deleted,
                    total=len(ids),
                    error=str(e),
                )
                await self._audit.log_save_failed(owner_id, "clear_all", str(e))
                raise ClearAllError(
                    f"Deleted {deleted} of {len(ids)} expenses before failing: {e}",
                    deleted,
                    len(ids),
                ) from e
            deleted += 1

        if self._owner_id == owner_id:
            self._expenses = []

        await self._audit.log_all_expenses_deleted(owner_id, deleted)
        return deleted

    async def fetch(self, expense_id: str) -> Optional[Expense]:
        """
        Read a single record straight from the backend.

        Used for ownership checks, so it never consults the mirror.
        """
        document = await self._repository.get(expense_id)
        if document is None:
            return None
        return decode_expense(document)

    def reset(self) -> None:
        """Discard the mirror (sign-out or identity change)."""
        self._expenses = []
        self._owner_id = None
        self._loaded = False
        self.last_error = None
