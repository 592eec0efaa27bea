"""
Secrets Manager - A Local Encrypted Secrets Vault
=================================================

Stores named key/value secrets grouped into projects, each project
persisted as one password-encrypted file.

Security Notice:
- No secrets are logged
- Fail-closed design pattern
- Saves never truncate the previous file
"""

__version__ = "0.1.0"
__author__ = "Secrets Manager Team"

from secretsmanager.core.config import SecureConfig
from secretsmanager.core.errors import VaultError
from secretsmanager.core.vault import ProjectRegistry, ProjectSession, ProjectStore

__all__ = [
    "ProjectRegistry",
    "ProjectSession",
    "ProjectStore",
    "SecureConfig",
    "VaultError",
    "__version__",
]
