"""
Project Registry
================

Locates project envelope files in the storage directory and lists them
from their unencrypted headers. Never decrypts and never needs a password.
"""

from __future__ import annotations

import logging
from pathlib import Path

from secretsmanager.core.crypto.envelope import EnvelopeCodec
from secretsmanager.core.errors import (
    InvalidProjectName,
    IOFailure,
    MalformedEnvelope,
    ProjectAlreadyExists,
    ProjectNotFound,
)
from secretsmanager.core.vault.models import ProjectSummary
from secretsmanager.security.constants import ENVELOPE_SUFFIX
from secretsmanager.utils.paths import (
    atomic_write_bytes,
    ensure_private_dir,
    is_path_within_directory,
)
from secretsmanager.utils.validators import validate_project_name

logger = logging.getLogger(__name__)


class ProjectRegistry:
    """
    File-level access to the project storage directory.

    One file per project, named ``<name>.encrypted``.
    """

    __slots__ = ("_storage_dir",)

    def __init__(self, storage_dir: Path | str) -> None:
        self._storage_dir = Path(storage_dir)

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    def path_for(self, name: str) -> Path:
        """
        Map a project name to its envelope file.

        Raises:
            InvalidProjectName: If the name is unsafe as a file name
        """
        validate_project_name(name)
        path = self._storage_dir / f"{name}{ENVELOPE_SUFFIX}"
        if not is_path_within_directory(path, self._storage_dir):
            raise InvalidProjectName(name, "resolves outside the storage directory")
        return path

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def list(self) -> list[ProjectSummary]:
        """
        Summaries of every readable project, sorted by name.

        Files that cannot be decoded are skipped with a warning. A
        missing or empty storage directory yields an empty list.
        """
        if not self._storage_dir.is_dir():
            return []

        summaries: list[ProjectSummary] = []
        for path in sorted(self._storage_dir.glob(f"*{ENVELOPE_SUFFIX}")):
            if not path.is_file():
                continue
            stem = path.name[: -len(ENVELOPE_SUFFIX)]
            try:
                envelope = EnvelopeCodec.decode(path.read_bytes())
            except (MalformedEnvelope, OSError) as e:
                logger.warning("Skipping unreadable project file %s: %s", path.name, e)
                continue

            metadata = envelope.metadata
            if metadata.name != stem:
                logger.warning(
                    "Skipping %s: header names project '%s'", path.name, metadata.name
                )
                continue

            summaries.append(
                ProjectSummary(
                    name=metadata.name,
                    created_at=metadata.created_at,
                    updated_at=metadata.updated_at,
                    path=path,
                )
            )

        logger.debug("Found %d project(s) in %s", len(summaries), self._storage_dir)
        return summaries

    def read(self, name: str) -> bytes:
        """
        Read a project's raw envelope bytes.

        Raises:
            ProjectNotFound: If no file exists for ``name``
            IOFailure: On any other OS error
        """
        path = self.path_for(name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise ProjectNotFound(name) from None
        except IsADirectoryError as e:
            raise IOFailure(f"Project path for '{name}' is a directory") from e
        except OSError as e:
            raise IOFailure(f"Could not read project '{name}': {e.strerror or e}") from e

    def write(self, name: str, data: bytes, exclusive: bool = False) -> Path:
        """
        Atomically write a project's envelope.

        Args:
            name: Project name
            data: Complete envelope bytes
            exclusive: Fail instead of replacing an existing file

        Raises:
            ProjectAlreadyExists: If ``exclusive`` and the project exists
            IOFailure: If the write fails; the previous file is intact
        """
        path = self.path_for(name)
        try:
            ensure_private_dir(self._storage_dir)
            atomic_write_bytes(path, data, exclusive=exclusive)
        except FileExistsError:
            raise ProjectAlreadyExists(name) from None
        except OSError as e:
            raise IOFailure(f"Could not write project '{name}': {e.strerror or e}") from e
        return path

    def remove(self, name: str) -> None:
        """
        Delete a project's envelope file. Irreversible.

        Raises:
            ProjectNotFound: If no file exists for ``name``
            IOFailure: On any other OS error
        """
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise ProjectNotFound(name) from None
        except OSError as e:
            raise IOFailure(f"Could not delete project '{name}': {e.strerror or e}") from e

    def __repr__(self) -> str:
        return f"ProjectRegistry(storage_dir={str(self._storage_dir)!r})"
