"""
Vault Errors
============

Typed failures raised by the encrypted project store.

Every error is recovered at the CLI boundary and rendered as a single
user-facing line. Messages never contain secret values or key material.
"""

from __future__ import annotations


class VaultError(Exception):
    """Base class for all secrets manager failures."""
    pass


class ValidationError(VaultError, ValueError):
    """Raised when caller-supplied input fails validation."""
    pass


class InvalidProjectName(ValidationError):
    """Raised for empty, unsafe or path-traversing project names."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid project name {name!r}: {reason}")
        self.name = name
        self.reason = reason


class ProjectAlreadyExists(VaultError):
    """Raised when creating a project whose file is already present."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Project '{name}' already exists")
        self.name = name


class ProjectNotFound(VaultError):
    """Raised when a project file does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Project '{name}' not found")
        self.name = name


class SecretNotFound(VaultError):
    """Raised when updating or removing a key that is not in the project."""

    def __init__(self, project: str, key: str) -> None:
        super().__init__(f"Secret '{key}' not found in project '{project}'")
        self.project = project
        self.key = key


class AuthenticationFailed(VaultError):
    """
    Raised when the AEAD tag does not verify.

    Either the key is wrong or the envelope was corrupted or tampered
    with. No plaintext is ever returned alongside this error.
    """
    pass


class WrongPassword(AuthenticationFailed):
    """Raised by the store when a project cannot be opened with the given password."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Could not decrypt project '{name}': wrong password or corrupted data"
        )
        self.name = name


class MalformedEnvelope(VaultError):
    """Raised when a project file is not a valid envelope (corrupted or foreign)."""
    pass


class InvalidSalt(VaultError):
    """Raised when a salt has the wrong length for key derivation."""
    pass


class KeyDerivationFailed(VaultError):
    """Raised when the key derivation backend rejects its parameters."""
    pass


class IOFailure(VaultError):
    """Raised when reading or writing a project file fails at the OS level."""
    pass


class PasswordMismatch(VaultError):
    """Raised when a new password and its confirmation differ."""

    def __init__(self) -> None:
        super().__init__("Passwords do not match")


class EmptyPassword(ValidationError):
    """Raised when an empty master password is supplied."""

    def __init__(self) -> None:
        super().__init__("Password cannot be empty")


class SessionClosed(VaultError):
    """Raised when a closed project session is used."""
    pass
