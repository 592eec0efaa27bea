"""
Key Derivation Functions
========================

Turns a master password and a per-project salt into an AES-256 key.

Implements:
    - PBKDF2-HMAC-SHA256 (default, >= 100,000 iterations)
    - Argon2id for memory-hard derivation

The parameters used for a project are recorded in its envelope, so a
project keeps decrypting after the configured defaults change.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Any, Final, Mapping

from argon2.exceptions import HashingError
from argon2.low_level import hash_secret_raw, Type
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from secretsmanager.core.errors import InvalidSalt, KeyDerivationFailed
from secretsmanager.security.constants import (
    ARGON2_MEMORY_COST,
    ARGON2_PARALLELISM,
    ARGON2_TIME_COST,
    KDF_ARGON2ID,
    KDF_ITERATIONS,
    KDF_PBKDF2_SHA256,
    KEY_LENGTH_BYTES,
    MAX_ARGON2_MEMORY_COST,
    MAX_ARGON2_PARALLELISM,
    MAX_ARGON2_TIME_COST,
    MAX_KDF_ITERATIONS,
    MIN_ARGON2_MEMORY_COST,
    MIN_KDF_ITERATIONS,
    SALT_LENGTH_BYTES,
    SUPPORTED_KDF_ALGORITHMS,
)

_PASSWORD_ENCODING: Final[str] = "utf-8"


def _check_range(label: str, value: int, minimum: int, maximum: int) -> None:
    if value < minimum:
        raise ValueError(f"{label} must be at least {minimum:,}")
    if value > maximum:
        raise ValueError(f"{label} must be at most {maximum:,}")


@dataclass(frozen=True, slots=True)
class KdfParams:
    """
    Immutable key derivation parameters.

    Only the fields relevant to ``algorithm`` are serialized.
    """

    algorithm: str = KDF_PBKDF2_SHA256
    iterations: int = KDF_ITERATIONS
    time_cost: int = ARGON2_TIME_COST
    memory_cost: int = ARGON2_MEMORY_COST
    parallelism: int = ARGON2_PARALLELISM

    def __post_init__(self) -> None:
        """Validate derivation strength and cost limits."""
        if self.algorithm not in SUPPORTED_KDF_ALGORITHMS:
            raise ValueError(f"Unsupported KDF algorithm: {self.algorithm}")
        if self.algorithm == KDF_PBKDF2_SHA256:
            _check_range(
                "Key derivation iterations", self.iterations, MIN_KDF_ITERATIONS, MAX_KDF_ITERATIONS
            )
            return

        _check_range("Argon2 time cost", self.time_cost, 1, MAX_ARGON2_TIME_COST)
        _check_range("Argon2 parallelism", self.parallelism, 1, MAX_ARGON2_PARALLELISM)
        _check_range(
            "Argon2 memory cost", self.memory_cost, MIN_ARGON2_MEMORY_COST, MAX_ARGON2_MEMORY_COST
        )
    def to_dict(self) -> dict[str, Any]:
        """Serialize the parameters for the envelope header."""
        if self.algorithm == KDF_PBKDF2_SHA256:
            return {"algorithm": self.algorithm, "iterations": self.iterations}
        return {
            "algorithm": self.algorithm,
            "time_cost": self.time_cost,
            "memory_cost": self.memory_cost,
            "parallelism": self.parallelism,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KdfParams":
        """
        Parse parameters from an envelope header.

        Raises:
            ValueError: If the algorithm is unknown or a field is missing,
                mistyped or too weak
        """
        algorithm = data.get("algorithm")
        if algorithm == KDF_PBKDF2_SHA256:
            fields = ("iterations",)
        elif algorithm == KDF_ARGON2ID:
            fields = ("time_cost", "memory_cost", "parallelism")
        else:
            raise ValueError(f"Unsupported KDF algorithm: {algorithm!r}")

        kwargs: dict[str, int] = {}
        for name in fields:
            value = data.get(name)
            # bool is an int subclass; reject it explicitly
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"KDF field '{name}' must be an integer")
            kwargs[name] = value
        return cls(algorithm=algorithm, **kwargs)


def generate_salt() -> bytes:
    """
    Generate a fresh random project salt.

    Returns:
        32 bytes from the OS CSPRNG
    """
    return secrets.token_bytes(SALT_LENGTH_BYTES)


def derive_key(
    password: str | bytes,
    salt: bytes,
    params: KdfParams | None = None,
) -> bytearray:
    """
    Derive a 256-bit key from a password and salt.

    Args:
        password: Master password (str is encoded as UTF-8)
        salt: Project salt, exactly 32 bytes
        params: Derivation parameters (defaults to PBKDF2, 600,000 iterations)

    Returns:
        Mutable 32-byte key; the caller must zero it after use

    Raises:
        InvalidSalt: If the salt has the wrong length
        KeyDerivationFailed: If argon2 rejects the parameters

    Security:
        - Deterministic: same password + salt + params = same key
        - No I/O
    """
    if params is None:
        params = KdfParams()
    if not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_LENGTH_BYTES:
        raise InvalidSalt(f"Salt must be exactly {SALT_LENGTH_BYTES} bytes")

    secret = password.encode(_PASSWORD_ENCODING) if isinstance(password, str) else bytes(password)

    if params.algorithm == KDF_ARGON2ID:
        try:
            derived = hash_secret_raw(
                secret=secret,
                salt=bytes(salt),
                time_cost=params.time_cost,
                memory_cost=params.memory_cost,
                parallelism=params.parallelism,
                hash_len=KEY_LENGTH_BYTES,
                type=Type.ID,
            )
        except HashingError as e:
            raise KeyDerivationFailed(f"Argon2 key derivation failed: {e}") from e
    else:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH_BYTES,
            salt=bytes(salt),
            iterations=params.iterations,
        )
        derived = kdf.derive(secret)

    return bytearray(derived)
