"""
Core module - Contains errors, configuration, logging, and the encrypted project store.
"""

from secretsmanager.core.errors import VaultError
from secretsmanager.core.config import SecureConfig
from secretsmanager.core.logging import get_secure_logger, configure_logging, SecureLogFilter

__all__ = [
    "VaultError",
    "SecureConfig",
    "get_secure_logger",
    "configure_logging",
    "SecureLogFilter",
]
