"""
Audit Models for Fintrax

Every significant action in the system is logged for audit purposes:
sign-ins, expense writes, validation and authorization failures, and
backend errors.

Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    SIGNED_UP = "signed_up"
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    SIGN_IN_FAILED = "sign_in_failed"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_CHANGED = "password_changed"
    ACCOUNT_DELETED = "account_deleted"

    # Expense reads
    EXPENSES_LOADED = "expenses_loaded"
    EXPENSES_LOAD_FAILED = "expenses_load_failed"
    MALFORMED_DOCUMENT_SKIPPED = "malformed_document_skipped"

    # Expense writes
    VALIDATION_FAILED = "validation_failed"
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    ALL_EXPENSES_DELETED = "all_expenses_deleted"
    SAVE_FAILED = "save_failed"

    # Access control
    AUTHORIZATION_DENIED = "authorization_denied"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Column order used by to_sheets_row() and the audit worksheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "actor_id",
    "entity_type",
    "entity_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who did it, and to what
    actor_id: Optional[str] = Field(
        default=None,
        description="uid of the identity that triggered the event"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'account')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "actor_id": self.actor_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in AUDIT_COLUMNS order.
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.actor_id or "",
            self.entity_type or "",
            self.entity_id or "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_created(expense_id, actor_id, amount)
        event = AuditEventBuilder.authorization_denied(actor_id, expense_id, "delete")
    """

    @staticmethod
    def session_event(
        event_type: AuditEventType,
        actor_id: Optional[str],
        email: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            actor_id=actor_id,
            entity_type="account",
            entity_id=actor_id,
            description=f"Account event: {event_type.value.replace('_', ' ')}",
            details={"email": email} if email else {},
            is_user_action=True,
        )

    @staticmethod
    def sign_in_failed(email: str, error_code: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            description="Sign-in attempt failed",
            details={"email": email},
            error_code=error_code,
            is_user_action=True,
        )

    @staticmethod
    def expenses_loaded(actor_id: str, count: int, skipped: int = 0) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            actor_id=actor_id,
            entity_type="expense",
            description=f"Loaded {count} expenses",
            details={"count": count, "skipped_malformed": skipped},
        )

    @staticmethod
    def expenses_load_failed(actor_id: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            actor_id=actor_id,
            entity_type="expense",
            description="Loading expenses failed; keeping previous data",
            error_message=error_message,
        )

    @staticmethod
    def malformed_document(document_id: Optional[str], reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MALFORMED_DOCUMENT_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=document_id,
            description="Skipped malformed expense document",
            error_message=reason,
        )

    @staticmethod
    def validation_failed(actor_id: Optional[str], issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            actor_id=actor_id,
            entity_type="expense",
            description=f"Expense validation failed with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def expense_created(expense_id: str, actor_id: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            actor_id=actor_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense created: {amount}",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(expense_id: str, actor_id: Optional[str], fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            actor_id=actor_id,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense updated",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(expense_id: str, actor_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            actor_id=actor_id,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
            is_user_action=True,
        )

    @staticmethod
    def all_expenses_deleted(actor_id: str, count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALL_EXPENSES_DELETED,
            severity=AuditSeverity.WARNING,
            actor_id=actor_id,
            entity_type="expense",
            description=f"All expenses deleted ({count})",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def save_failed(actor_id: Optional[str], operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            actor_id=actor_id,
            entity_type="expense",
            description=f"Expense {operation} failed",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def authorization_denied(actor_id: str, expense_id: str, operation: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTHORIZATION_DENIED,
            severity=AuditSeverity.WARNING,
            actor_id=actor_id,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Denied {operation} on an expense owned by another identity",
            details={"operation": operation},
            is_user_action=True,
        )
