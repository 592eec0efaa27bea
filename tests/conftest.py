"""
Shared pytest fixtures for the secrets manager test suite.

Key derivation uses the minimum accepted PBKDF2 iteration count so the
suite stays fast; every test gets its own storage directory.
"""

import logging

import pytest

from secretsmanager.core.config import SecurityConfig
from secretsmanager.core.logging import PACKAGE_LOGGER
from secretsmanager.core.vault import ProjectRegistry, ProjectStore

FAST_ITERATIONS = 100_000


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Drop handlers the CLI attaches so each test starts with a clean logger."""
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture(autouse=True)
def _fast_cli_kdf(monkeypatch):
    """Make CLI-created projects use the fast iteration count too."""
    monkeypatch.setenv("SECRETS_MANAGER_SECURITY__KDF_ITERATIONS", str(FAST_ITERATIONS))
    monkeypatch.delenv("SECRETS_MANAGER_SECURITY__KDF_ALGORITHM", raising=False)
    monkeypatch.delenv("SECRETS_MANAGER_PATHS__STORAGE_DIR", raising=False)


@pytest.fixture
def storage_dir(tmp_path):
    return tmp_path / "vault"


@pytest.fixture
def security():
    return SecurityConfig(kdf_iterations=FAST_ITERATIONS)


@pytest.fixture
def registry(storage_dir):
    return ProjectRegistry(storage_dir)


@pytest.fixture
def store(registry, security):
    return ProjectStore(registry, security=security)


@pytest.fixture
def api_project(store):
    """Project 'api' (password 'pw1') holding API_KEY=sk-123."""
    with store.create("api", "pw1") as session:
        session.add("API_KEY", "sk-123")
        store.save(session)
    return "api"
