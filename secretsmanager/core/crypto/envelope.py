"""
Project Envelope Codec
======================

Serializes one project to the on-disk envelope and back.

File Format:
    A UTF-8 JSON object:

        {
          "version": 1,
          "name": "api",
          "created_at": "<ISO-8601 UTC>",
          "updated_at": "<ISO-8601 UTC>",
          "kdf": {"algorithm": "pbkdf2-sha256", "iterations": 600000},
          "salt": "<base64>",
          "nonce": "<base64>",
          "ciphertext": "<base64, includes GCM tag>"
        }

    Everything except ``nonce`` and ``ciphertext`` is the header. The
    header is readable without a password and is bound to the ciphertext
    as AEAD associated data, so editing it breaks authentication.

Plaintext Payload:
    A JSON object mapping secret keys to secret values, keys sorted.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Final, Mapping, Optional

from secretsmanager.core.crypto.aes_gcm import AesGcmCipher, RandomSource
from secretsmanager.core.crypto.kdf import KdfParams
from secretsmanager.core.errors import MalformedEnvelope
from secretsmanager.security.constants import (
    ENVELOPE_VERSION,
    NONCE_LENGTH_BYTES,
    SALT_LENGTH_BYTES,
    TAG_LENGTH_BYTES,
)

_HEADER_FIELDS: Final[tuple[str, ...]] = (
    "version", "name", "created_at", "updated_at", "kdf", "salt",
)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as ISO-8601 in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, slots=True)
class EnvelopeMetadata:
    """
    Unencrypted project header.

    Attributes:
        name: Project name
        created_at: Creation time (UTC)
        updated_at: Last modification time (UTC)
        kdf: Key derivation parameters used for this project
        version: Envelope format version
    """

    name: str
    created_at: datetime
    updated_at: datetime
    kdf: KdfParams
    version: int = ENVELOPE_VERSION


@dataclass(frozen=True, slots=True)
class DecodedEnvelope:
    """
    Parsed envelope, still encrypted.

    ``aad`` is rebuilt from the header exactly as it was read, so
    decryption authenticates the bytes on disk rather than a
    re-serialization of them.
    """

    metadata: EnvelopeMetadata
    salt: bytes
    nonce: bytes
    ciphertext: bytes
    aad: bytes

    def __repr__(self) -> str:
        return (
            f"DecodedEnvelope(name={self.metadata.name!r}, "
            f"ciphertext_len={len(self.ciphertext)})"
        )


def _canonical_aad(header: Mapping[str, Any]) -> bytes:
    """Deterministic byte form of the header used as associated data."""
    return json.dumps(
        {field: header[field] for field in _HEADER_FIELDS},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
    ).encode("utf-8")


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(record: Mapping[str, Any], field: str) -> bytes:
    value = record.get(field)
    if not isinstance(value, str):
        raise MalformedEnvelope(f"Envelope field '{field}' must be a base64 string")
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise MalformedEnvelope(f"Envelope field '{field}' is not valid base64") from e


def _require_str(record: Mapping[str, Any], field: str) -> str:
    value = record.get(field)
    if not isinstance(value, str) or not value:
        raise MalformedEnvelope(f"Envelope field '{field}' must be a non-empty string")
    return value


class EnvelopeCodec:
    """
    Encodes, decodes and decrypts project envelopes.

    Usage:
        codec = EnvelopeCodec()
        data = codec.encode(metadata, salt, encode_secrets(secrets), key)
        decoded = codec.decode(data)
        secrets = decode_secrets(codec.decrypt(decoded, key))

    Security Notes:
        - A fresh nonce is generated on every encode
        - decode() never needs the key
        - decrypt() verifies the tag before returning anything
    """

    __slots__ = ("_cipher",)

    def __init__(self, rng: Optional[RandomSource] = None) -> None:
        self._cipher = AesGcmCipher(rng=rng)

    def encode(
        self,
        metadata: EnvelopeMetadata,
        salt: bytes,
        plaintext: bytes | bytearray,
        key: bytes | bytearray,
    ) -> bytes:
        """
        Encrypt a payload and serialize the full envelope.

        Args:
            metadata: Project header
            salt: Project salt (stored, never changed)
            plaintext: Serialized secret mapping
            key: 32-byte key derived from the password and ``salt``

        Returns:
            UTF-8 JSON envelope bytes
        """
        if len(salt) != SALT_LENGTH_BYTES:
            raise MalformedEnvelope(f"Salt must be exactly {SALT_LENGTH_BYTES} bytes")

        header: dict[str, Any] = {
            "version": metadata.version,
            "name": metadata.name,
            "created_at": format_timestamp(metadata.created_at),
            "updated_at": format_timestamp(metadata.updated_at),
            "kdf": metadata.kdf.to_dict(),
            "salt": _b64encode(bytes(salt)),
        }
        result = self._cipher.encrypt(plaintext, key, aad=_canonical_aad(header))

        record = dict(header)
        record["nonce"] = _b64encode(result.nonce)
        record["ciphertext"] = _b64encode(result.ciphertext)
        return (json.dumps(record, indent=2) + "\n").encode("utf-8")

    @staticmethod
    def decode(data: bytes | str) -> DecodedEnvelope:
        """
        Parse an envelope without decrypting it.

        Raises:
            MalformedEnvelope: If the structure, version, or field
                lengths are invalid
        """
        try:
            record = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedEnvelope("Project file is not valid JSON") from e

        if not isinstance(record, dict):
            raise MalformedEnvelope("Envelope must be a JSON object")

        version = record.get("version")
        if not isinstance(version, int) or isinstance(version, bool):
            raise MalformedEnvelope("Envelope field 'version' must be an integer")
        if version != ENVELOPE_VERSION:
            raise MalformedEnvelope(
                f"Unsupported envelope version {version} (supported: {ENVELOPE_VERSION})"
            )

        name = _require_str(record, "name")
        try:
            created_at = parse_timestamp(_require_str(record, "created_at"))
            updated_at = parse_timestamp(_require_str(record, "updated_at"))
        except ValueError as e:
            raise MalformedEnvelope(f"Invalid envelope timestamp: {e}") from e

        kdf_data = record.get("kdf")
        if not isinstance(kdf_data, dict):
            raise MalformedEnvelope("Envelope field 'kdf' must be an object")
        try:
            kdf = KdfParams.from_dict(kdf_data)
        except ValueError as e:
            raise MalformedEnvelope(f"Invalid key derivation parameters: {e}") from e

        salt = _b64decode(record, "salt")
        nonce = _b64decode(record, "nonce")
        ciphertext = _b64decode(record, "ciphertext")

        if len(salt) != SALT_LENGTH_BYTES:
            raise MalformedEnvelope(f"Salt must be {SALT_LENGTH_BYTES} bytes, got {len(salt)}")
        if len(nonce) != NONCE_LENGTH_BYTES:
            raise MalformedEnvelope(f"Nonce must be {NONCE_LENGTH_BYTES} bytes, got {len(nonce)}")
        if len(ciphertext) < TAG_LENGTH_BYTES:
            raise MalformedEnvelope("Ciphertext too short (missing authentication tag)")

        return DecodedEnvelope(
            metadata=EnvelopeMetadata(
                name=name,
                created_at=created_at,
                updated_at=updated_at,
                kdf=kdf,
                version=version,
            ),
            salt=salt,
            nonce=nonce,
            ciphertext=ciphertext,
            aad=_canonical_aad(record),
        )

    def decrypt(self, envelope: DecodedEnvelope, key: bytes | bytearray) -> bytes:
        """
        Verify and decrypt an envelope's ciphertext.

        Raises:
            AuthenticationFailed: If the tag does not verify (wrong key,
                corrupted or tampered file)
        """
        return self._cipher.decrypt(
            ciphertext=envelope.ciphertext,
            nonce=envelope.nonce,
            key=key,
            aad=envelope.aad,
        )


def encode_secrets(secrets: Mapping[str, str]) -> bytes:
    """Serialize a secret mapping to the plaintext payload."""
    return json.dumps(
        dict(secrets),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def decode_secrets(plaintext: bytes) -> dict[str, str]:
    """
    Parse the plaintext payload back to a secret mapping.

    Raises:
        MalformedEnvelope: If the payload is not a string-to-string object
    """
    try:
        data = json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedEnvelope("Decrypted payload is not valid JSON") from e

    if not isinstance(data, dict):
        raise MalformedEnvelope("Decrypted payload must be a JSON object")
    for key, value in data.items():
        if not isinstance(value, str):
            raise MalformedEnvelope(f"Secret '{key}' must have a string value")
    return data
