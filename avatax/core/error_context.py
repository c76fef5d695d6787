"""Sensitive data sanitization for call logging.

Call log records can carry request and response bodies, and some AvaTax
endpoints return secrets (license keys, passwords on account creation).
This module redacts those values before a record reaches the logger.

Key features:
- **Pattern matching**: Regex-based detection of sensitive field names
- **Configurable fields**: Additional sensitive fields from each client's LogConfig
- **Deep sanitization**: Recursive handling of nested data structures
- **Header protection**: Special handling for sensitive HTTP headers

Sanitization is applied to logged copies only; the data returned to the
caller is never modified.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache
from re import Pattern
from typing import Any, Final

from avatax.core.config import LogConfig
from avatax.core.constants import REDACTED

# Type alias for values we can sanitize
SanitizableValue = (
    str | int | float | bool | None | dict[str, Any] | list[Any] | tuple[Any, ...]
)

SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "proxy-authorization",
    "set-cookie",
}

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|authorization|"
    r"credential|private[_-]?key|license[_-]?key|licensekey|access[_-]?key)",
    re.IGNORECASE,
)

# Maximum depth for nested structure sanitization
MAX_DEPTH: Final[int] = 10


@lru_cache(maxsize=1)
def _default_sensitive_fields() -> tuple[str, ...]:
    """Get the sensitive field names a default log configuration carries.

    Returns:
        tuple[str, ...]: Sensitive field names used when a caller passes none.
    """
    return tuple(LogConfig().sensitive_fields)


def is_sensitive_field(
    field_name: str, sensitive_fields: Iterable[str] | None = None
) -> bool:
    """Check if a field name indicates sensitive data.

    Checks against both the default regex pattern and the
    configured sensitive fields list.

    Args:
        field_name: The field name to check.
        sensitive_fields: Configured names to match as substrings. The
            defaults of ``LogConfig`` are used when omitted.

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True

    if sensitive_fields is None:
        sensitive_fields = _default_sensitive_fields()
    field_lower = field_name.lower()
    return any(
        sensitive_field.lower() in field_lower for sensitive_field in sensitive_fields
    )


def is_sensitive_header(header_name: str) -> bool:
    """Check if a header name is sensitive (case-insensitive)."""
    return header_name.lower() in SENSITIVE_HEADERS


def sanitize_value(
    value: SanitizableValue,
    field_name: str = "",
    depth: int = 0,
    sensitive_fields: Iterable[str] | None = None,
) -> SanitizableValue:
    """Sanitize a value if it appears to be sensitive.

    This function recursively sanitizes nested structures (dicts and lists)
    up to MAX_DEPTH to prevent infinite recursion.

    Args:
        value: The value to potentially sanitize.
        field_name: The field name for context.
        depth: Current recursion depth.
        sensitive_fields: Configured sensitive names, see ``is_sensitive_field``.

    Returns:
        SanitizableValue: Sanitized value or original if not sensitive.
    """
    if depth > MAX_DEPTH:
        return REDACTED

    if field_name and is_sensitive_field(field_name, sensitive_fields):
        return REDACTED

    if isinstance(value, dict):
        return {
            k: sanitize_value(v, k, depth + 1, sensitive_fields)
            for k, v in value.items()
        }

    if isinstance(value, list):
        return [sanitize_value(item, "", depth + 1, sensitive_fields) for item in value]

    if isinstance(value, tuple):
        return tuple(
            sanitize_value(item, "", depth + 1, sensitive_fields) for item in value
        )

    return value


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Sanitize HTTP headers.

    Args:
        headers: Headers dictionary.

    Returns:
        dict[str, str]: Sanitized headers.
    """
    return {k: REDACTED if is_sensitive_header(k) else v for k, v in headers.items()}
