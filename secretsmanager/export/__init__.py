"""
Export module - renders decrypted secrets for shells, .env files and JSON.
"""

from secretsmanager.export.renderers import (
    ExportFormat,
    render,
    render_env,
    render_json,
    render_shell,
)

__all__ = [
    "ExportFormat",
    "render",
    "render_env",
    "render_json",
    "render_shell",
]
