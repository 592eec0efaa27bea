"""
Secrets Manager Cryptographic Core
==================================

Password-based authenticated encryption of project envelopes.

Architecture:
    1. PBKDF2-HMAC-SHA256 / Argon2id: password + salt -> 256-bit key
    2. AES-256-GCM: authenticated encryption of the secret payload
    3. Envelope codec: JSON record with base64 binary fields

Security Properties:
    - All encryption is authenticated (AEAD)
    - Keys never touch disk (memory-only)
    - Fresh random nonce on every save
    - Header bound to ciphertext as associated data

WARNING: This module handles sensitive cryptographic material.
         Incorrect usage can compromise security.
"""

from secretsmanager.core.crypto.aes_gcm import AesGcmCipher, AesGcmResult
from secretsmanager.core.crypto.envelope import (
    DecodedEnvelope,
    EnvelopeCodec,
    EnvelopeMetadata,
    decode_secrets,
    encode_secrets,
)
from secretsmanager.core.crypto.kdf import KdfParams, derive_key, generate_salt

__all__ = [
    "AesGcmCipher",
    "AesGcmResult",
    "DecodedEnvelope",
    "EnvelopeCodec",
    "EnvelopeMetadata",
    "KdfParams",
    "decode_secrets",
    "derive_key",
    "encode_secrets",
    "generate_salt",
]
