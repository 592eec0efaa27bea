"""
AES-256-GCM Authenticated Encryption
====================================

Implements AES-256-GCM with a caller-supplied key and a fresh random
nonce for every encryption.

Security Properties:
    - 256-bit key
    - 96-bit nonce (NIST recommended)
    - 128-bit authentication tag appended to the ciphertext
    - Authenticated Additional Data (AAD) support

WARNING:
    - Never reuse (key, nonce) pairs
    - Always verify tag before using plaintext
    - Keys should be wiped from memory after use
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from secretsmanager.core.errors import AuthenticationFailed
from secretsmanager.security.constants import (
    KEY_LENGTH_BYTES,
    NONCE_LENGTH_BYTES,
    TAG_LENGTH_BYTES,
)

RandomSource = Callable[[int], bytes]


@dataclass(frozen=True, slots=True)
class AesGcmResult:
    """
    Immutable result of AES-GCM encryption.

    Attributes:
        ciphertext: Encrypted data with appended authentication tag
        nonce: Unique nonce used for this encryption (must be stored with ciphertext)
    """

    ciphertext: bytes
    nonce: bytes

    def __repr__(self) -> str:
        return f"AesGcmResult(ciphertext_len={len(self.ciphertext)}, nonce_len={len(self.nonce)})"


class AesGcmCipher:
    """
    AES-256-GCM Authenticated Encryption with Associated Data (AEAD).

    Usage:
        cipher = AesGcmCipher()
        result = cipher.encrypt(plaintext, key, aad=header)
        plaintext = cipher.decrypt(result.ciphertext, result.nonce, key, aad=header)

    The random source is injectable so nonce generation can be observed
    in tests; it defaults to the OS CSPRNG.
    """

    __slots__ = ("_rng",)

    def __init__(self, rng: Optional[RandomSource] = None) -> None:
        self._rng = rng or secrets.token_bytes

    def generate_nonce(self) -> bytes:
        """
        Generate a random 96-bit nonce.

        Raises:
            ValueError: If the random source returns the wrong number of bytes
        """
        nonce = self._rng(NONCE_LENGTH_BYTES)
        if len(nonce) != NONCE_LENGTH_BYTES:
            raise ValueError(f"Nonce must be exactly {NONCE_LENGTH_BYTES} bytes")
        return nonce

    def encrypt(
        self,
        plaintext: bytes | bytearray,
        key: bytes | bytearray,
        aad: Optional[bytes] = None,
    ) -> AesGcmResult:
        """
        Encrypt plaintext using AES-256-GCM.

        Args:
            plaintext: Data to encrypt (can be empty)
            key: 32-byte key
            aad: Additional Authenticated Data (authenticated but not encrypted)

        Returns:
            AesGcmResult containing ciphertext (with tag) and nonce

        Raises:
            ValueError: If key is the wrong size
        """
        if len(key) != KEY_LENGTH_BYTES:
            raise ValueError(f"Key must be exactly {KEY_LENGTH_BYTES} bytes")

        nonce = self.generate_nonce()
        ciphertext = AESGCM(bytes(key)).encrypt(nonce, plaintext, aad)
        return AesGcmResult(ciphertext=ciphertext, nonce=nonce)

    @staticmethod
    def decrypt(
        ciphertext: bytes,
        nonce: bytes,
        key: bytes | bytearray,
        aad: Optional[bytes] = None,
    ) -> bytes:
        """
        Decrypt ciphertext using AES-256-GCM with integrity verification.

        Args:
            ciphertext: Encrypted data with authentication tag
            nonce: The nonce used during encryption
            key: The 32-byte encryption key
            aad: Additional Authenticated Data (must match encryption AAD)

        Returns:
            Decrypted plaintext bytes

        Raises:
            ValueError: If parameters are invalid
            AuthenticationFailed: If the tag does not verify

        Security Notes:
            - Integrity is verified BEFORE any plaintext is returned
        """
        if len(key) != KEY_LENGTH_BYTES:
            raise ValueError(f"Key must be exactly {KEY_LENGTH_BYTES} bytes")
        if len(nonce) != NONCE_LENGTH_BYTES:
            raise ValueError(f"Nonce must be exactly {NONCE_LENGTH_BYTES} bytes")
        if len(ciphertext) < TAG_LENGTH_BYTES:
            raise ValueError("Ciphertext too short (missing authentication tag)")

        try:
            return AESGCM(bytes(key)).decrypt(nonce, ciphertext, aad)
        except InvalidTag:
            raise AuthenticationFailed("Authentication tag verification failed") from None
