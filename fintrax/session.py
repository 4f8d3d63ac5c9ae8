"""
Session Gate

Everything the user sees or changes sits behind a signed-in identity. The
gate tracks that identity and enforces the scoping rule: a user may only
see and change records tagged with their own uid.

Whenever the identity changes (sign-in, sign-up, sign-out, account
deletion) the store's mirror is discarded and, if someone is signed in,
reloaded for them. Mirrors of two identities are never merged.
"""

from typing import Optional

from fintrax.audit import AuditLogger, get_logger
from fintrax.errors import AuthorizationError, NotAuthenticatedError
from fintrax.models.account import Identity
from fintrax.models.audit import AuditEventType
from fintrax.models.expense import Expense
from fintrax.services.identity.interface import (
    IdentityError,
    IdentityProviderInterface,
)
from fintrax.services.storage.interface import StorageError
from fintrax.store import ExpenseStore


logger = get_logger("fintrax.session")


class SessionGate:
    """Holds the current identity and keeps the store scoped to it."""

    def __init__(
        self,
        identity_provider: IdentityProviderInterface,
        store: ExpenseStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._provider = identity_provider
        self._store = store
        self._audit = audit_logger or AuditLogger()
        self._current: Optional[Identity] = identity_provider.current_identity()

    @property
    def current(self) -> Optional[Identity]:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def require_identity(self) -> Identity:
        """The signed-in identity, or NotAuthenticatedError."""
        if self._current is None:
            raise NotAuthenticatedError("No signed-in identity")
        return self._current

    def authorize(self, identity: Identity, expense: Expense, operation: str = "modify") -> None:
        """
        Raise AuthorizationError unless ``identity`` owns ``expense``.

        Callers log the denial; this check itself is pure.
        """
        if not expense.is_owned_by(identity.uid):
            raise AuthorizationError(
                f"Identity {identity.uid} may not {operation} expense {expense.id} "
                f"owned by {expense.owner_id}"
            )

    async def _switch_to(self, identity: Optional[Identity]) -> None:
        """Drop the old mirror and load the new identity's records."""
        self._current = identity
        self._store.reset()
        if identity is None:
            return
        try:
            await self._store.load(identity.uid)
        except StorageError as e:
            # Signed in, but the list shows the load error until a refresh works
            logger.warning("initial_load_failed", uid=identity.uid, error=str(e))

    async def sign_in(self, email: str, password: str) -> Identity:
        try:
            identity = await self._provider.sign_in(email, password)
        except IdentityError as e:
            await self._audit.log_sign_in_failed(email, e.code)
            raise
        await self._audit.log_session(AuditEventType.SIGNED_IN, identity.uid, identity.email)
        await self._switch_to(identity)
        return identity

    async def sign_up(self, email: str, password: str) -> Identity:
        identity = await self._provider.sign_up(email, password)
        await self._audit.log_session(AuditEventType.SIGNED_UP, identity.uid, identity.email)
        await self._switch_to(identity)
        return identity

    async def sign_out(self) -> None:
        previous = self._current
        await self._provider.sign_out()
        await self._switch_to(None)
        if previous is not None:
            await self._audit.log_session(AuditEventType.SIGNED_OUT, previous.uid, previous.email)

    async def send_password_reset(self, email: str) -> None:
        await self._provider.send_password_reset(email)
        await self._audit.log_session(AuditEventType.PASSWORD_RESET_REQUESTED, None, email)

    async def sync(self) -> Optional[Identity]:
        """
        Pick up an identity change made directly on the provider.

        Reloads the store only when the uid actually changed.
        """
        identity = self._provider.current_identity()
        current_uid = self._current.uid if self._current else None
        new_uid = identity.uid if identity else None
        if new_uid != current_uid:
            await self._switch_to(identity)
        return self._current

    async def end_session(self) -> None:
        """Forget the identity locally (after the provider deleted it)."""
        await self._switch_to(None)
