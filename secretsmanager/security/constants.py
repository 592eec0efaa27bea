"""
Security Constants
==================

Defines security-related constants used throughout the application.
These values are part of the on-disk envelope format and should not be
modified without bumping ENVELOPE_VERSION.
"""

from typing import Final

# Encryption Settings
ENCRYPTION_ALGORITHM: Final[str] = "AES-256-GCM"
KEY_LENGTH_BYTES: Final[int] = 32  # 256 bits
NONCE_LENGTH_BYTES: Final[int] = 12  # 96 bits for GCM
TAG_LENGTH_BYTES: Final[int] = 16  # 128 bits

# Key Derivation
KDF_PBKDF2_SHA256: Final[str] = "pbkdf2-sha256"
KDF_ARGON2ID: Final[str] = "argon2id"
SUPPORTED_KDF_ALGORITHMS: Final[frozenset[str]] = frozenset({KDF_PBKDF2_SHA256, KDF_ARGON2ID})
KDF_ITERATIONS: Final[int] = 600_000  # OWASP 2023 recommendation
MIN_KDF_ITERATIONS: Final[int] = 100_000
MAX_KDF_ITERATIONS: Final[int] = 10_000_000
SALT_LENGTH_BYTES: Final[int] = 32

# Argon2id defaults (OWASP recommended)
ARGON2_TIME_COST: Final[int] = 3
ARGON2_MEMORY_COST: Final[int] = 65536  # 64 MB
ARGON2_PARALLELISM: Final[int] = 4
MIN_ARGON2_MEMORY_COST: Final[int] = 8192  # 8 MB
MAX_ARGON2_MEMORY_COST: Final[int] = 1_048_576  # 1 GB
MAX_ARGON2_TIME_COST: Final[int] = 16
MAX_ARGON2_PARALLELISM: Final[int] = 64  # argon2 requires memory_cost >= 8 * parallelism

# Envelope format
ENVELOPE_VERSION: Final[int] = 1
ENVELOPE_SUFFIX: Final[str] = ".encrypted"

# Project names
MAX_PROJECT_NAME_LENGTH: Final[int] = 128

# File permissions
PRIVATE_DIR_MODE: Final[int] = 0o700
PRIVATE_FILE_MODE: Final[int] = 0o600
