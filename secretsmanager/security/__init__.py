"""
Security module - format and strength constants shared by the crypto core.
"""

from secretsmanager.security.constants import (
    ENVELOPE_SUFFIX,
    ENVELOPE_VERSION,
    KDF_ITERATIONS,
    SALT_LENGTH_BYTES,
)

__all__ = [
    "ENVELOPE_SUFFIX",
    "ENVELOPE_VERSION",
    "KDF_ITERATIONS",
    "SALT_LENGTH_BYTES",
]
