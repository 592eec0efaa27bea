"""
Encrypted Project Store
=======================

Create, open, save and delete password-encrypted projects.

Operation Flow:
    open:   read file -> decode envelope -> derive key (stored salt)
            -> verify + decrypt -> ProjectSession
    save:   encode mapping (fresh nonce, same salt) -> temp file
            -> fsync -> rename over the old file

Security Properties:
- The salt is generated once at create and reused on every save
- A new nonce is drawn for every save
- Wrong passwords and tampered files both surface as WrongPassword,
  and no plaintext is produced before the tag verifies
- Derived keys live only inside a session and are zeroed on close
- A failed save never truncates or corrupts the previous file
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from secretsmanager.core.config import SecureConfig, SecurityConfig
from secretsmanager.core.crypto.aes_gcm import RandomSource
from secretsmanager.core.crypto.envelope import (
    EnvelopeCodec,
    EnvelopeMetadata,
    decode_secrets,
    encode_secrets,
    utc_now,
)
from secretsmanager.core.crypto.kdf import derive_key, generate_salt
from secretsmanager.core.errors import (
    AuthenticationFailed,
    EmptyPassword,
    KeyDerivationFailed,
    MalformedEnvelope,
    ProjectAlreadyExists,
    WrongPassword,
)
from secretsmanager.core.memory.zeroization import secure_zero, zeroize
from secretsmanager.core.vault.models import ProjectSession, ProjectSummary
from secretsmanager.core.vault.registry import ProjectRegistry

logger = logging.getLogger(__name__)


class ProjectStore:
    """
    Orchestrates the encrypted lifecycle of project files.

    Usage:
        store = ProjectStore.from_config(SecureConfig.load())
        store.create("api", "pw1").close()

        with store.open("api", "pw1") as session:
            session.add("API_KEY", "sk-123")
            store.save(session)

    The store caches no keys between calls; every open derives the key
    again from the supplied password.
    """

    __slots__ = ("_registry", "_security", "_codec")

    def __init__(
        self,
        registry: ProjectRegistry,
        security: Optional[SecurityConfig] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        """
        Args:
            registry: Storage directory access
            security: KDF settings for newly created projects
            rng: Random source for nonces (defaults to the OS CSPRNG)
        """
        self._registry = registry
        self._security = security or SecurityConfig()
        self._codec = EnvelopeCodec(rng=rng)

    @classmethod
    def from_config(cls, config: SecureConfig) -> "ProjectStore":
        return cls(
            ProjectRegistry(config.paths.storage_dir),
            security=config.security,
        )

    @property
    def registry(self) -> ProjectRegistry:
        return self._registry

    def list_projects(self) -> list[ProjectSummary]:
        """Summaries of all projects; needs no password."""
        return self._registry.list()

    def exists(self, name: str) -> bool:
        return self._registry.exists(name)

    def create(self, name: str, password: str) -> ProjectSession:
        """
        Create a new, empty project.

        Returns:
            An open session on the new project

        Raises:
            InvalidProjectName: If the name is unsafe
            EmptyPassword: If ``password`` is empty
            ProjectAlreadyExists: If the project file is present
            IOFailure: If the file cannot be written
            KeyDerivationFailed: If argon2 rejects the configured parameters
        """
        if self._registry.exists(name):
            raise ProjectAlreadyExists(name)
        if not password:
            raise EmptyPassword()

        params = self._security.kdf_params()
        salt = generate_salt()
        key = derive_key(password, salt, params)
        now = utc_now()
        session = ProjectSession(
            name=name,
            created_at=now,
            updated_at=now,
            kdf=params,
            salt=salt,
            key=key,
        )
        try:
            self._write(session, exclusive=True)
        except BaseException:
            session.close()
            raise

        logger.info("Created project '%s' (%s)", name, params.algorithm)
        return session

    def open(self, name: str, password: str) -> ProjectSession:
        """
        Decrypt a project into a session.

        Raises:
            InvalidProjectName: If the name is unsafe
            ProjectNotFound: If the project file is absent
            MalformedEnvelope: If the file is not a valid envelope
            WrongPassword: If authentication fails
            IOFailure: If the file cannot be read
        """
        envelope = self._codec.decode(self._registry.read(name))
        metadata = envelope.metadata
        if metadata.name != name:
            raise MalformedEnvelope(
                f"Project file for '{name}' belongs to project '{metadata.name}'"
            )

        try:
            key = derive_key(password, envelope.salt, metadata.kdf)
        except KeyDerivationFailed as e:
            raise MalformedEnvelope(
                f"Project file for '{name}' has unusable key derivation parameters"
            ) from e

        try:
            plaintext = self._codec.decrypt(envelope, key)
        except AuthenticationFailed:
            secure_zero(key)
            logger.warning("Authentication failed for project '%s'", name)
            raise WrongPassword(name) from None

        try:
            secrets = decode_secrets(plaintext)
        except MalformedEnvelope:
            secure_zero(key)
            raise

        logger.debug("Opened project '%s' with %d secret(s)", name, len(secrets))
        return ProjectSession(
            name=metadata.name,
            created_at=metadata.created_at,
            updated_at=metadata.updated_at,
            kdf=metadata.kdf,
            salt=envelope.salt,
            key=key,
            secrets=secrets,
        )

    def save(self, session: ProjectSession) -> None:
        """
        Re-encrypt a session's mapping and atomically replace its file.

        Raises:
            SessionClosed: If the session was closed
            IOFailure: If the write fails; the previous file is unchanged
        """
        self._write(session, exclusive=False)
        session.mark_saved()
        logger.info("Saved project '%s' (%d secret(s))", session.name, len(session))

    def delete(self, name: str) -> None:
        """
        Remove a project file. Irreversible.

        Raises:
            ProjectNotFound: If the project file is absent
        """
        self._registry.remove(name)
        logger.info("Deleted project '%s'", name)

    def add_secret(self, name: str, password: str, key: str, value: str) -> None:
        """Open, insert or overwrite one secret, save."""
        self._mutate(name, password, lambda session: session.add(key, value))

    def update_secret(self, name: str, password: str, key: str, value: str) -> None:
        """Open, change one existing secret, save."""
        self._mutate(name, password, lambda session: session.update(key, value))

    def remove_secret(self, name: str, password: str, key: str) -> None:
        """Open, delete one existing secret, save."""
        self._mutate(name, password, lambda session: session.remove(key))

    def read_secrets(self, name: str, password: str) -> dict[str, str]:
        """Decrypt a project and return a copy of its mapping."""
        with self.open(name, password) as session:
            return session.secrets

    def _mutate(
        self,
        name: str,
        password: str,
        change: Callable[[ProjectSession], object],
    ) -> None:
        with self.open(name, password) as session:
            change(session)
            self.save(session)

    def _write(self, session: ProjectSession, exclusive: bool) -> None:
        payload = bytearray(encode_secrets(session.secrets))
        with zeroize(payload):
            data = self._codec.encode(
                EnvelopeMetadata(
                    name=session.name,
                    created_at=session.created_at,
                    updated_at=session.updated_at,
                    kdf=session.kdf,
                ),
                session.salt,
                payload,
                session.key(),
            )
        self._registry.write(session.name, data, exclusive=exclusive)
