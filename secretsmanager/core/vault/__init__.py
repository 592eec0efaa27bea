"""
Secrets Manager Project Vault
=============================

Encrypted project storage: one password-encrypted envelope file per
project, rewritten atomically on every save.

Components:
- models.py: ProjectSession (decrypted, mutable) and ProjectSummary
- registry.py: locating and listing envelope files
- store.py: create / open / save / delete
"""

from secretsmanager.core.vault.models import ProjectSession, ProjectSummary
from secretsmanager.core.vault.registry import ProjectRegistry
from secretsmanager.core.vault.store import ProjectStore

__all__ = [
    "ProjectRegistry",
    "ProjectSession",
    "ProjectStore",
    "ProjectSummary",
]
