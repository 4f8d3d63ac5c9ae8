"""Input sanitization and account input rules."""

from fintrax.security.passwords import (
    check_credentials,
    check_new_password,
    friendly_auth_message,
    is_valid_email,
    password_strength,
)
from fintrax.security.sanitizer import (
    escape_html,
    sanitize,
    sanitize_fields,
    strip_sql_keywords,
    strip_tags,
    unescape_for_display,
)

__all__ = [
    "check_credentials",
    "check_new_password",
    "escape_html",
    "friendly_auth_message",
    "is_valid_email",
    "password_strength",
    "sanitize",
    "sanitize_fields",
    "strip_sql_keywords",
    "strip_tags",
    "unescape_for_display",
]
