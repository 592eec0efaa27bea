"""
Path Utilities
==============

OS-aware path handling utilities with security considerations.
"""

from __future__ import annotations

import logging
import os
import platform
import tempfile
from pathlib import Path

from secretsmanager.security.constants import PRIVATE_DIR_MODE, PRIVATE_FILE_MODE

_IS_WINDOWS = platform.system().lower() == "windows"

logger = logging.getLogger(__name__)


def get_default_storage_dir() -> Path:
    """
    Get the default project storage directory.

    Returns:
        ``~/.secrets_manager``
    """
    return Path.home() / ".secrets_manager"


def ensure_private_dir(directory: Path) -> Path:
    """
    Create a directory readable only by its owner.

    Args:
        directory: Directory to create (parents included)

    Returns:
        The directory path
    """
    directory.mkdir(mode=PRIVATE_DIR_MODE, parents=True, exist_ok=True)

    # On Windows, permissions work differently
    if not _IS_WINDOWS:
        directory.chmod(PRIVATE_DIR_MODE)

    return directory


def is_path_within_directory(path: Path, directory: Path) -> bool:
    """
    Check if a path is safely within a directory (prevents path traversal).

    Args:
        path: The path to check
        directory: The containing directory

    Returns:
        True if path is safely within directory
    """
    try:
        resolved_path = path.resolve()
        resolved_dir = directory.resolve()
        return resolved_path.is_relative_to(resolved_dir)
    except (ValueError, RuntimeError):
        return False


def _fsync_directory(directory: Path) -> None:
    """Flush a directory entry so a completed rename survives a crash."""
    if _IS_WINDOWS:
        return
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def atomic_write_bytes(path: Path, data: bytes, exclusive: bool = False) -> None:
    """
    Replace ``path`` with ``data`` without ever truncating it in place.

    The data is written to a temporary file in the same directory,
    flushed to disk, then renamed over the target. If anything fails
    before the rename, the previous file is untouched and the temporary
    file is removed.

    Args:
        path: Target file
        data: Complete new file contents
        exclusive: If True, fail with FileExistsError when ``path``
            already exists instead of replacing it

    Raises:
        OSError: If the write or rename fails
        FileExistsError: If ``exclusive`` and the target exists
    """
    directory = path.parent
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=directory
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        if not _IS_WINDOWS:
            os.chmod(tmp_path, PRIVATE_FILE_MODE)

        if exclusive:
            # link() fails if the target exists, unlike replace()
            os.link(tmp_path, path)
            tmp_path.unlink()
        else:
            os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    # the new file is already in place
    try:
        _fsync_directory(directory)
    except OSError as e:
        logger.warning("Could not flush directory %s after writing %s: %s", directory, path.name, e)
