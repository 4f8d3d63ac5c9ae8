"""
Account input rules for the sign-in, sign-up and settings forms.

These checks run before any call to the identity provider. The provider
stays the authority on credentials; this module only turns obviously bad
input and provider error codes into plain-language messages.
"""

import re
from typing import Optional

from fintrax.models.account import PasswordStrength


MIN_PASSWORD_LENGTH = 6

# Provider error codes (Firebase style, with or without the "auth/" prefix)
# mapped to what the user sees.
AUTH_ERROR_MESSAGES: dict[str, str] = {
    "invalid-credential": "Invalid email or password",
    "invalid-login-credentials": "Invalid email or password",
    "user-not-found": "Invalid email or password",
    "wrong-password": "Invalid email or password",
    "email-already-in-use": "An account with this email already exists",
    "weak-password": "Password is too weak. Use at least 6 characters",
    "invalid-email": "Please enter a valid email address",
    "too-many-requests": "Too many failed attempts. Please try again later.",
    "network-request-failed": "Network error. Check your internet connection.",
    "requires-recent-login": "Please sign in again before changing this",
}
DEFAULT_AUTH_MESSAGE = "An error occurred. Please try again."


def is_valid_email(email: Optional[str]) -> bool:
    """Loose shape check; the provider does the real validation."""
    return bool(email) and "@" in email and "." in email


def password_strength(password: Optional[str]) -> PasswordStrength:
    """
    Score a password the way the sign-up meter does.

    One point each for: length >= 8, length >= 12, mixed case, a digit,
    a non-alphanumeric character. 0-2 is weak, 3 medium, 4-5 strong.
    """
    if not password:
        return PasswordStrength.EMPTY

    score = 0
    if len(password) >= 8:
        score += 1
    if len(password) >= 12:
        score += 1
    if re.search(r"[a-z]", password) and re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"\d", password):
        score += 1
    if re.search(r"[^A-Za-z0-9]", password):
        score += 1

    if score <= 2:
        return PasswordStrength.WEAK
    if score <= 3:
        return PasswordStrength.MEDIUM
    return PasswordStrength.STRONG


def check_credentials(
    email: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str] = None,
    signing_up: bool = False,
    min_length: int = MIN_PASSWORD_LENGTH,
) -> Optional[str]:
    """
    Return the first problem with the entered credentials, or None.

    Sign-up additionally rejects weak passwords and a mismatched
    confirmation.
    """
    if not is_valid_email(email):
        return "Please enter a valid email"
    if not password or len(password) < min_length:
        return f"Password must be at least {min_length} characters"
    if signing_up:
        if password_strength(password) == PasswordStrength.WEAK:
            return "Please use a stronger password for better security"
        if password != confirm_password:
            return "Passwords do not match"
    return None


def check_new_password(
    new_password: Optional[str],
    confirm_password: Optional[str],
    min_length: int = MIN_PASSWORD_LENGTH,
) -> Optional[str]:
    """Checks for the settings page 'change password' form."""
    if not new_password or len(new_password) < min_length:
        return f"Password must be at least {min_length} characters"
    if new_password != confirm_password:
        return "Passwords do not match"
    return None


def friendly_auth_message(code: Optional[str]) -> str:
    """Map a provider error code to the message shown on the form."""
    if not code:
        return DEFAULT_AUTH_MESSAGE
    key = code.lower().removeprefix("auth/").replace("_", "-")
    return AUTH_ERROR_MESSAGES.get(key, DEFAULT_AUTH_MESSAGE)
