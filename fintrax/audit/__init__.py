"""Audit logging package."""

from fintrax.audit.structured import get_logger
from fintrax.audit.logger import AuditLogger

__all__ = ["AuditLogger", "get_logger"]
