"""
Audit Logger

Every significant action in the system is logged:
- Always to the structured local log (structlog, JSON)
- Optionally to an audit storage backend (Google Sheets in production)

A failing audit backend never breaks the operation being audited.
"""

from typing import Optional

from fintrax.audit.structured import get_logger
from fintrax.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from fintrax.services.storage.interface import AuditStorageInterface


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = get_logger("fintrax.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_session(
        self,
        event_type: AuditEventType,
        actor_id: Optional[str],
        email: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.session_event(event_type, actor_id, email))

    async def log_sign_in_failed(self, email: str, error_code: str) -> None:
        await self.log(AuditEventBuilder.sign_in_failed(email, error_code))

    async def log_expenses_loaded(self, actor_id: str, count: int, skipped: int = 0) -> None:
        await self.log(AuditEventBuilder.expenses_loaded(actor_id, count, skipped))

    async def log_expenses_load_failed(self, actor_id: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.expenses_load_failed(actor_id, error_message))

    async def log_malformed_document(self, document_id: Optional[str], reason: str) -> None:
        await self.log(AuditEventBuilder.malformed_document(document_id, reason))

    async def log_validation_failed(self, actor_id: Optional[str], issues: list[dict]) -> None:
        await self.log(AuditEventBuilder.validation_failed(actor_id, issues))

    async def log_expense_created(self, expense_id: str, actor_id: str, amount: str) -> None:
        await self.log(AuditEventBuilder.expense_created(expense_id, actor_id, amount))

    async def log_expense_updated(
        self,
        expense_id: str,
        actor_id: Optional[str],
        fields: list[str],
    ) -> None:
        await self.log(AuditEventBuilder.expense_updated(expense_id, actor_id, fields))

    async def log_expense_deleted(self, expense_id: str, actor_id: Optional[str]) -> None:
        await self.log(AuditEventBuilder.expense_deleted(expense_id, actor_id))

    async def log_all_expenses_deleted(self, actor_id: str, count: int) -> None:
        await self.log(AuditEventBuilder.all_expenses_deleted(actor_id, count))

    async def log_save_failed(
        self,
        actor_id: Optional[str],
        operation: str,
        error_message: str,
    ) -> None:
        await self.log(AuditEventBuilder.save_failed(actor_id, operation, error_message))

    async def log_authorization_denied(
        self,
        actor_id: str,
        expense_id: str,
        operation: str,
    ) -> None:
        await self.log(AuditEventBuilder.authorization_denied(actor_id, expense_id, operation))
