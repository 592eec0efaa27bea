"""
Project Models
==============

In-memory representations of a project: the password-free summary read
from an envelope header, and the decrypted session a caller mutates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from secretsmanager.core.crypto.envelope import EnvelopeMetadata, utc_now
from secretsmanager.core.crypto.kdf import KdfParams
from secretsmanager.core.errors import SecretNotFound, SessionClosed, ValidationError
from secretsmanager.core.memory.zeroization import secure_zero
from secretsmanager.utils.validators import validate_secret_key

MAX_SECRET_KEY_LENGTH = 256


@dataclass(frozen=True, slots=True)
class ProjectSummary:
    """Project listing entry built from the unencrypted header only."""

    name: str
    created_at: datetime
    updated_at: datetime
    path: Path


class ProjectSession:
    """
    A decrypted project held open for one operation.

    The session owns the derived key until ``close()``, which zeroes it.
    Mutations only touch the in-memory mapping; nothing reaches disk
    until ``ProjectStore.save(session)``.

    Usage:
        with store.open("api", password) as session:
            session.add("API_KEY", "sk-123")
            store.save(session)
        # key is zeroed here
    """

    __slots__ = (
        "_name", "_created_at", "_updated_at", "_kdf", "_salt",
        "_key", "_secrets", "_dirty",
    )

    def __init__(
        self,
        name: str,
        created_at: datetime,
        updated_at: datetime,
        kdf: KdfParams,
        salt: bytes,
        key: bytearray,
        secrets: Optional[dict[str, str]] = None,
    ) -> None:
        self._name = name
        self._created_at = created_at
        self._updated_at = updated_at
        self._kdf = kdf
        self._salt = bytes(salt)
        self._key: Optional[bytearray] = key
        self._secrets: dict[str, str] = dict(secrets or {})
        self._dirty = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def salt(self) -> bytes:
        return self._salt

    @property
    def kdf(self) -> KdfParams:
        return self._kdf

    @property
    def closed(self) -> bool:
        return self._key is None

    @property
    def dirty(self) -> bool:
        """True if the mapping changed since it was last loaded or saved."""
        return self._dirty

    @property
    def secrets(self) -> dict[str, str]:
        """A copy of the decrypted secret mapping."""
        self._check_open()
        return dict(self._secrets)

    @property
    def metadata(self) -> EnvelopeMetadata:
        return EnvelopeMetadata(
            name=self._name,
            created_at=self._created_at,
            updated_at=self._updated_at,
            kdf=self._kdf,
        )

    def key(self) -> bytearray:
        """The live derived key; only the store should call this."""
        self._check_open()
        assert self._key is not None
        return self._key

    def keys(self) -> list[str]:
        """Secret names, sorted."""
        self._check_open()
        return sorted(self._secrets)

    def get(self, key: str) -> str:
        """
        Return one secret value.

        Raises:
            SecretNotFound: If the key is absent
        """
        self._check_open()
        try:
            return self._secrets[key]
        except KeyError:
            raise SecretNotFound(self._name, key) from None

    def add(self, key: str, value: str) -> None:
        """Insert a secret, overwriting any existing value for ``key``."""
        self._check_open()
        self._validate(key, value)
        self._secrets[key] = value
        self._touch()

    def update(self, key: str, value: str) -> None:
        """
        Change the value of an existing secret.

        Raises:
            SecretNotFound: If the key is absent
        """
        self._check_open()
        self._validate(key, value)
        if key not in self._secrets:
            raise SecretNotFound(self._name, key)
        self._secrets[key] = value
        self._touch()

    def remove(self, key: str) -> str:
        """
        Delete a secret and return its old value.

        Raises:
            SecretNotFound: If the key is absent
        """
        self._check_open()
        if key not in self._secrets:
            raise SecretNotFound(self._name, key)
        value = self._secrets.pop(key)
        self._touch()
        return value

    def mark_saved(self) -> None:
        self._dirty = False

    def close(self) -> None:
        """Zero the derived key and drop the decrypted mapping."""
        if self._key is not None:
            secure_zero(self._key)
            self._key = None
        self._secrets.clear()

    def _touch(self) -> None:
        self._updated_at = max(utc_now(), self._updated_at)
        self._dirty = True

    def _check_open(self) -> None:
        if self._key is None:
            raise SessionClosed(f"Session for project '{self._name}' is closed")

    @staticmethod
    def _validate(key: str, value: str) -> None:
        validate_secret_key(key, max_length=MAX_SECRET_KEY_LENGTH)
        if not isinstance(value, str):
            raise ValidationError("Secret value must be a string")

    def __contains__(self, key: object) -> bool:
        return key in self._secrets

    def __len__(self) -> int:
        return len(self._secrets)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __enter__(self) -> "ProjectSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        """Safe representation without values or key material."""
        state = "closed" if self.closed else f"secrets={len(self._secrets)}"
        return f"ProjectSession(name={self._name!r}, {state})"
