"""
Abstract Identity Provider Interface

Authentication is delegated to an external identity service. Every call is
an atomic, fallible remote call: it either succeeds or raises IdentityError
carrying a provider error code.

The rest of Fintrax only ever consumes "current identity or none".
"""

from abc import ABC, abstractmethod
from typing import Optional

from fintrax.errors import CollaboratorError
from fintrax.models.account import Identity
from fintrax.security.passwords import friendly_auth_message


class IdentityError(CollaboratorError):
    """
    The identity provider rejected a request or could not be reached.

    ``code`` uses the SDK-style names (e.g. 'wrong-password',
    'email-already-in-use', 'network-request-failed').
    """

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        super().__init__(
            message or f"Identity provider error: {code}",
            user_message=friendly_auth_message(code),
        )


class IdentityProviderInterface(ABC):
    """
    Abstract interface for the identity service.

    Implementations keep the signed-in session (tokens etc.) internally.
    """

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Identity:
        """Create an account and sign it in."""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Identity:
        """Sign in with email and password."""
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """Drop the current session. Never fails."""
        pass

    @abstractmethod
    async def send_password_reset(self, email: str) -> None:
        """Send a password reset email."""
        pass

    @abstractmethod
    async def reauthenticate(self, password: str) -> Identity:
        """Confirm the current user's password (required before sensitive changes)."""
        pass

    @abstractmethod
    async def change_password(self, new_password: str) -> None:
        """Change the current user's password."""
        pass

    @abstractmethod
    async def delete_identity(self) -> None:
        """Delete the current user's account and sign out."""
        pass

    @abstractmethod
    def current_identity(self) -> Optional[Identity]:
        """The signed-in identity, or None."""
        pass
