"""
Utils module - Utility functions and helpers.

This module contains utility functions used throughout the secrets manager.
"""

from secretsmanager.utils.paths import (
    atomic_write_bytes,
    ensure_private_dir,
    get_default_storage_dir,
    is_path_within_directory,
)
from secretsmanager.utils.validators import (
    validate_project_name,
    validate_secret_key,
    validate_string_safe,
)

__all__ = [
    "atomic_write_bytes",
    "ensure_private_dir",
    "get_default_storage_dir",
    "is_path_within_directory",
    "validate_project_name",
    "validate_secret_key",
    "validate_string_safe",
]
