"""Account models: the signed-in identity and password strength."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """
    The authenticated user as the core sees it.

    Opaque uid plus email. Every ownership check compares against ``uid``.
    """
    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1)
    email: str = ""


class PasswordStrength(str, Enum):
    """Strength bands shown under the sign-up password field."""
    EMPTY = ""
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"

    @property
    def label(self) -> str:
        return self.value.capitalize()
