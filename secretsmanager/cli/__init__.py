"""
CLI module - argparse front end and password providers.
"""

from secretsmanager.cli.main import SecretsManagerCLI, build_parser, main, run
from secretsmanager.cli.passwords import (
    GetpassPasswordProvider,
    PasswordProvider,
    StaticPasswordProvider,
)

__all__ = [
    "GetpassPasswordProvider",
    "PasswordProvider",
    "SecretsManagerCLI",
    "StaticPasswordProvider",
    "build_parser",
    "main",
    "run",
]
