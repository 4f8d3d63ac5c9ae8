"""
Free-text sanitization.

Every free-text field (title, notes) passes through ``sanitize`` exactly
once before it enters the data model:

1. Decode entities already present, so a stored value coming back through
   the edit form is canonicalised instead of escaped a second time
2. Drop <script>/<style> elements together with their content
3. Drop every remaining <...> tag
4. Drop SQL keywords (SELECT, INSERT, DELETE, DROP, UPDATE, UNION)
5. Escape & < > " ' to entities
6. Trim surrounding whitespace

The result is idempotent: sanitize(sanitize(x)) == sanitize(x).
"""

import html
import re
from typing import Iterable, Mapping, Optional


_SCRIPT_BLOCK = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]*>")
_SQL_KEYWORDS = re.compile(r"\b(SELECT|INSERT|DELETE|DROP|UPDATE|UNION)\b", re.IGNORECASE)


def strip_tags(text: str) -> str:
    """Remove script/style blocks and any tag-like substring."""
    text = _SCRIPT_BLOCK.sub("", text)
    return _TAG.sub("", text)


def strip_sql_keywords(text: str) -> str:
    return _SQL_KEYWORDS.sub("", text)


def escape_html(text: str) -> str:
    """Escape the five HTML-significant characters."""
    return html.escape(text, quote=True)


def sanitize(text: Optional[str], strip_sql: bool = True) -> str:
    """
    Sanitize a free-text field.

    Args:
        text: Raw user input. None is treated as empty.
        strip_sql: Also remove SQL keywords.

    Returns:
        The sanitized, HTML-escaped, trimmed text.
    """
    if not text:
        return ""

    cleaned = html.unescape(str(text))
    cleaned = strip_tags(cleaned)
    if strip_sql:
        cleaned = strip_sql_keywords(cleaned)
    cleaned = escape_html(cleaned)
    return cleaned.strip()


def unescape_for_display(text: Optional[str]) -> str:
    """Turn a stored (escaped) value back into what the user typed, for form fields."""
    return html.unescape(text or "")


def sanitize_fields(
    values: Mapping[str, Optional[str]],
    fields: Iterable[str],
    strip_sql: bool = True,
) -> dict[str, str]:
    """Sanitize the named text fields of a mapping; other keys pass through."""
    wanted = set(fields)
    return {
        key: sanitize(value, strip_sql=strip_sql) if key in wanted else value
        for key, value in values.items()
    }
