"""
Secure Configuration Module
===========================

Provides immutable, environment-aware configuration with security-first defaults.

Security Features:
- Immutable configuration after initialization
- Environment variable override support
- No secrets in default values (sensitive keys are never read from env)
- OS-aware path handling

There is no process-wide instance: callers build a config and hand it to
the store and registry explicitly.
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Optional

from secretsmanager.core.crypto.kdf import KdfParams
from secretsmanager.security.constants import (
    ARGON2_MEMORY_COST,
    ARGON2_PARALLELISM,
    ARGON2_TIME_COST,
    KDF_ITERATIONS,
    KDF_PBKDF2_SHA256,
)
from secretsmanager.utils.paths import ensure_private_dir, get_default_storage_dir

DEFAULT_ENV_PREFIX: Final[str] = "SECRETS_MANAGER"

# Security Constants
_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "key", "token", "api_key",
    "private", "credential", "auth", "salt",
})


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


def _get_default_log_dir() -> Path:
    """Get OS-appropriate default log directory."""
    system = platform.system().lower()

    if system == "windows":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return base / "SecretsManager" / "Logs"
    elif system == "darwin":
        return Path.home() / "Library" / "Logs" / "SecretsManager"
    else:  # Linux and others
        return Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state")) / "secrets_manager" / "logs"


@dataclass(frozen=True, slots=True)
class PathConfig:
    """Immutable path configuration with OS-aware defaults."""

    storage_dir: Path = field(default_factory=get_default_storage_dir)
    log_dir: Path = field(default_factory=_get_default_log_dir)

    def __post_init__(self) -> None:
        """Validate paths after initialization."""
        for field_name in ["storage_dir", "log_dir"]:
            path = getattr(self, field_name)
            if not path.is_absolute():
                raise ValueError(f"{field_name} must be an absolute path: {path}")


@dataclass(frozen=True, slots=True)
class SecurityConfig:
    """Immutable key derivation settings applied to newly created projects."""

    kdf_algorithm: str = KDF_PBKDF2_SHA256
    kdf_iterations: int = KDF_ITERATIONS
    argon2_time_cost: int = ARGON2_TIME_COST
    argon2_memory_cost: int = ARGON2_MEMORY_COST
    argon2_parallelism: int = ARGON2_PARALLELISM

    def __post_init__(self) -> None:
        """Validate security settings."""
        # KdfParams enforces the minimums
        self.kdf_params()

    def kdf_params(self) -> KdfParams:
        """Key derivation parameters for a new project."""
        return KdfParams(
            algorithm=self.kdf_algorithm,
            iterations=self.kdf_iterations,
            time_cost=self.argon2_time_cost,
            memory_cost=self.argon2_memory_cost,
            parallelism=self.argon2_parallelism,
        )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "WARNING"
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5
    enable_console: bool = True
    enable_file: bool = False
    enable_json: bool = False

    def __post_init__(self) -> None:
        """Validate logging settings."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")


class SecureConfig:
    """
    Immutable configuration holder with environment variable overrides.

    Usage:
        config = SecureConfig.load()
        storage_dir = config.paths.storage_dir
        params = config.security.kdf_params()
    """

    __slots__ = ("_paths", "_security", "_logging", "_frozen")

    def __init__(
        self,
        paths: Optional[PathConfig] = None,
        security: Optional[SecurityConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        """Initialize configuration. Use SecureConfig.load() for standard initialization."""
        # Use object.__setattr__ to bypass our immutability check during init
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_paths", paths or PathConfig())
        object.__setattr__(self, "_security", security or SecurityConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_frozen", True)

    @property
    def paths(self) -> PathConfig:
        """Get path configuration."""
        return self._paths

    @property
    def security(self) -> SecurityConfig:
        """Get security configuration."""
        return self._security

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        return self._logging

    @classmethod
    def load(
        cls,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        storage_dir: Optional[Path] = None,
    ) -> SecureConfig:
        """
        Load configuration with environment variable overrides.

        Environment variables are prefixed with SECRETS_MANAGER_ and use
        double underscores for nested values.

        Examples:
            SECRETS_MANAGER_PATHS__STORAGE_DIR=/custom/path
            SECRETS_MANAGER_SECURITY__KDF_ALGORITHM=argon2id
            SECRETS_MANAGER_LOGGING__LEVEL=DEBUG

        Args:
            env_prefix: Prefix for environment variables
            storage_dir: Explicit storage directory; wins over the environment

        Returns:
            Configured SecureConfig instance
        """
        env_overrides = cls._parse_env_overrides(env_prefix)

        paths_kwargs: dict[str, Any] = {}
        if "paths.storage_dir" in env_overrides:
            paths_kwargs["storage_dir"] = Path(env_overrides["paths.storage_dir"]).expanduser()
        if "paths.log_dir" in env_overrides:
            paths_kwargs["log_dir"] = Path(env_overrides["paths.log_dir"]).expanduser()
        if storage_dir is not None:
            paths_kwargs["storage_dir"] = Path(storage_dir).expanduser().resolve()

        security_kwargs: dict[str, Any] = {}
        if "security.kdf_algorithm" in env_overrides:
            security_kwargs["kdf_algorithm"] = env_overrides["security.kdf_algorithm"]
        for int_key in (
            "kdf_iterations",
            "argon2_time_cost",
            "argon2_memory_cost",
            "argon2_parallelism",
        ):
            env_key = f"security.{int_key}"
            if env_key in env_overrides:
                security_kwargs[int_key] = int(env_overrides[env_key])

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env_overrides:
            logging_kwargs["level"] = env_overrides["logging.level"]
        if "logging.enable_console" in env_overrides:
            logging_kwargs["enable_console"] = env_overrides["logging.enable_console"].lower() == "true"
        if "logging.enable_file" in env_overrides:
            logging_kwargs["enable_file"] = env_overrides["logging.enable_file"].lower() == "true"
        if "logging.enable_json" in env_overrides:
            logging_kwargs["enable_json"] = env_overrides["logging.enable_json"].lower() == "true"

        return cls(
            paths=PathConfig(**paths_kwargs) if paths_kwargs else None,
            security=SecurityConfig(**security_kwargs) if security_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # Convert SECRETS_MANAGER_SECTION__KEY to section.key
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                # SECURITY: Skip sensitive keys from environment
                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    def ensure_directories(self) -> None:
        """Create the storage (and, when file logging is on, log) directories owner-only."""
        ensure_private_dir(self._paths.storage_dir)
        if self._logging.enable_file:
            ensure_private_dir(self._paths.log_dir)

    def __repr__(self) -> str:
        """Safe string representation without sensitive data."""
        return (
            f"SecureConfig(storage_dir={self._paths.storage_dir}, "
            f"kdf={self._security.kdf_algorithm})"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if hasattr(self, "_frozen") and self._frozen:
            raise AttributeError("SecureConfig is immutable after initialization")
        super().__setattr__(name, value)
