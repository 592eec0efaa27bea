"""
Export Renderers
================

Render a decrypted secret mapping as shell exports, a .env file, or JSON.

Renderers only ever see the plain mapping; they have no access to keys,
salts, or envelopes.
"""

from __future__ import annotations

import json
import re
import shlex
from enum import Enum
from typing import Callable, Final, Mapping

from secretsmanager.utils.validators import validate_secret_key

_ENV_NEEDS_QUOTES: Final[re.Pattern[str]] = re.compile(r'[\s"\'#$\\`=]')


class ExportFormat(Enum):
    """Supported export formats."""

    SHELL = "shell"
    ENV = "env"
    JSON = "json"

    @classmethod
    def parse(cls, value: str) -> "ExportFormat":
        """
        Look up a format by name, case-insensitively.

        Raises:
            ValueError: For unknown names
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ValueError(f"Invalid format '{value}'. Use: {choices}") from None


def _variable_names(secrets: Mapping[str, str]) -> list[str]:
    """Sorted keys; raises ValidationError for names a shell would not parse."""
    return [validate_secret_key(key) for key in sorted(secrets)]


def render_shell(secrets: Mapping[str, str]) -> str:
    """``export KEY='value'`` lines, values quoted for POSIX shells."""
    return "".join(
        f"export {key}={shlex.quote(secrets[key])}\n" for key in _variable_names(secrets)
    )


def _env_value(value: str) -> str:
    if value and not _ENV_NEEDS_QUOTES.search(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("`", "\\`")
        .replace("\n", "\\n")
    )
    return f'"{escaped}"'


def render_env(secrets: Mapping[str, str]) -> str:
    """``KEY=value`` lines; values with special characters are double-quoted."""
    return "".join(f"{key}={_env_value(secrets[key])}\n" for key in _variable_names(secrets))


def render_json(secrets: Mapping[str, str]) -> str:
    """Pretty-printed JSON object with sorted keys."""
    return json.dumps(dict(secrets), indent=2, sort_keys=True, ensure_ascii=False) + "\n"


_RENDERERS: Final[dict[ExportFormat, Callable[[Mapping[str, str]], str]]] = {
    ExportFormat.SHELL: render_shell,
    ExportFormat.ENV: render_env,
    ExportFormat.JSON: render_json,
}


def render(secrets: Mapping[str, str], fmt: ExportFormat | str) -> str:
    """Render ``secrets`` in the given format."""
    if isinstance(fmt, str):
        fmt = ExportFormat.parse(fmt)
    return _RENDERERS[fmt](secrets)
