"""Identity provider adapters."""

from fintrax.services.identity.firebase import FirebaseIdentityProvider
from fintrax.services.identity.interface import (
    IdentityError,
    IdentityProviderInterface,
)
from fintrax.services.identity.memory import InMemoryIdentityProvider

__all__ = [
    "FirebaseIdentityProvider",
    "IdentityError",
    "IdentityProviderInterface",
    "InMemoryIdentityProvider",
]
