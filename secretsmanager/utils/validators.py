"""
Validation Utilities
====================

Input validation functions with security focus.
"""

from __future__ import annotations

import re
from typing import Final

from secretsmanager.core.errors import InvalidProjectName, ValidationError
from secretsmanager.security.constants import MAX_PROJECT_NAME_LENGTH

# Characters not allowed in filenames across all platforms
_UNSAFE_CHARS: Final[re.Pattern[str]] = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')

# Secret keys become shell and .env variable names
_SECRET_KEY_PATTERN: Final[re.Pattern[str]] = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def validate_project_name(name: str) -> str:
    """
    Validate a project name is safe to use as a file name.

    Args:
        name: The project name

    Returns:
        The unchanged name

    Raises:
        InvalidProjectName: For empty, overlong, hidden, path-traversing
            or filesystem-unsafe names
    """
    if not isinstance(name, str) or not name:
        raise InvalidProjectName(str(name), "name cannot be empty")

    if len(name) > MAX_PROJECT_NAME_LENGTH:
        raise InvalidProjectName(
            name, f"must be at most {MAX_PROJECT_NAME_LENGTH} characters"
        )

    if ".." in name:
        raise InvalidProjectName(name, "path traversal detected")

    if _UNSAFE_CHARS.search(name):
        raise InvalidProjectName(name, "contains filesystem-unsafe characters")

    if name.startswith(".") or name != name.strip():
        raise InvalidProjectName(
            name, "cannot start with a dot or have surrounding whitespace"
        )

    return name


def validate_string_safe(
    value: str,
    min_length: int = 0,
    max_length: int = 1000,
    allow_empty: bool = False,
    field_name: str = "value",
) -> str:
    """
    Validate a string value for safety.

    Args:
        value: The string to validate
        min_length: Minimum allowed length
        max_length: Maximum allowed length
        allow_empty: If False, empty strings are rejected
        field_name: Name of the field for error messages

    Returns:
        Validated string

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    if not allow_empty and not value:
        raise ValidationError(f"{field_name} cannot be empty")

    if len(value) < min_length:
        raise ValidationError(
            f"{field_name} must be at least {min_length} characters"
        )

    if len(value) > max_length:
        raise ValidationError(
            f"{field_name} must be at most {max_length} characters"
        )

    # Check for null bytes (security risk)
    if "\x00" in value:
        raise ValidationError(f"{field_name} contains invalid characters")

    return value


def validate_secret_key(key: str, max_length: int = 256) -> str:
    """
    Validate a secret key is usable as an environment variable name.

    Raises:
        ValidationError: Unless the key matches ``[A-Za-z_][A-Za-z0-9_]*``
    """
    validate_string_safe(key, max_length=max_length, field_name="Secret key")
    if not _SECRET_KEY_PATTERN.fullmatch(key):
        raise ValidationError(
            f"Secret key {key!r} must contain only letters, digits and "
            "underscores, and cannot start with a digit"
        )
    return key
