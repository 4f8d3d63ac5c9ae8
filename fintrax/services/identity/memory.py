"""
In-memory identity provider.

Used by the test suite and for running the app without Firebase. Passwords
are kept as salted SHA-256 digests.
"""

import hashlib
import secrets
from typing import Optional
from uuid import uuid4

from fintrax.models.account import Identity
from fintrax.security.passwords import MIN_PASSWORD_LENGTH, is_valid_email
from fintrax.services.identity.interface import (
    IdentityError,
    IdentityProviderInterface,
)


def _digest(salt: str, password: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


class InMemoryIdentityProvider(IdentityProviderInterface):
    """Email/password accounts held in a dict."""

    def __init__(self, min_password_length: int = MIN_PASSWORD_LENGTH):
        self._min_password_length = min_password_length
        # email -> (uid, salt, digest)
        self._accounts: dict[str, tuple[str, str, str]] = {}
        self._current: Optional[Identity] = None
        self.reset_requests: list[str] = []

    @staticmethod
    def _normalize(email: str) -> str:
        return (email or "").strip().lower()

    def _check_password(self, email: str, password: str) -> Identity:
        account = self._accounts.get(email)
        if account is None:
            raise IdentityError("invalid-credential", f"No account for {email}")
        uid, salt, digest = account
        if _digest(salt, password or "") != digest:
            raise IdentityError("invalid-credential", f"Wrong password for {email}")
        return Identity(uid=uid, email=email)

    def _require_current(self) -> Identity:
        if self._current is None:
            raise IdentityError("requires-recent-login", "No signed-in user")
        return self._current

    async def sign_up(self, email: str, password: str) -> Identity:
        email = self._normalize(email)
        if not is_valid_email(email):
            raise IdentityError("invalid-email", f"Invalid email: {email!r}")
        if email in self._accounts:
            raise IdentityError("email-already-in-use", f"Account exists: {email}")
        if not password or len(password) < self._min_password_length:
            raise IdentityError("weak-password", "Password too short")

        salt = secrets.token_hex(8)
        self._accounts[email] = (uuid4().hex, salt, _digest(salt, password))
        self._current = self._check_password(email, password)
        return self._current

    async def sign_in(self, email: str, password: str) -> Identity:
        self._current = self._check_password(self._normalize(email), password)
        return self._current

    async def sign_out(self) -> None:
        self._current = None

    async def send_password_reset(self, email: str) -> None:
        email = self._normalize(email)
        if not is_valid_email(email):
            raise IdentityError("invalid-email", f"Invalid email: {email!r}")
        # Unknown addresses succeed silently, like the real service
        self.reset_requests.append(email)

    async def reauthenticate(self, password: str) -> Identity:
        current = self._require_current()
        return self._check_password(current.email, password)

    async def change_password(self, new_password: str) -> None:
        current = self._require_current()
        if not new_password or len(new_password) < self._min_password_length:
            raise IdentityError("weak-password", "Password too short")
        uid, _, _ = self._accounts[current.email]
        salt = secrets.token_hex(8)
        self._accounts[current.email] = (uid, salt, _digest(salt, new_password))

    async def delete_identity(self) -> None:
        current = self._require_current()
        self._accounts.pop(current.email, None)
        self._current = None

    def current_identity(self) -> Optional[Identity]:
        return self._current
