"""
Input sanitization utilities for user-provided data.

Column names and project names come straight from uploaded datasets and
clients, so they are cleaned before being logged or stored.
"""
import re
from typing import Any

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_for_logging(value: Any, max_length: int = 500) -> str:
    """
    Sanitize value for safe logging (prevents log injection).

    Args:
        value: Value to sanitize; non-strings are converted with str()
        max_length: Maximum length before truncation

    Returns:
        Single-line value safe for logging
    """
    if value is None:
        return ""
    value = str(value)
    if not value:
        return ""

    value = re.sub(r'[\r\n]', ' ', value)
    value = _CONTROL_CHARS.sub('', value)

    if len(value) > max_length:
        value = value[:max_length] + "..."

    return value


def sanitize_project_name(name: str, max_length: int = 200) -> str:
    """Strip control characters and surrounding whitespace from a project name."""
    if not name:
        return ""
    name = _CONTROL_CHARS.sub('', name).strip()
    return name[:max_length]


def validate_column_name(name: str) -> bool:
    """
    Check that a column name is usable as a data binding field.

    Newlines and tabs are allowed since spreadsheet headers often wrap; other
    control characters are not.
    """
    if not isinstance(name, str) or not name or len(name) > 1000:
        return False
    return re.search(r'[\x00-\x08\x0b\x0c\x0e-\x1f]', name) is None
