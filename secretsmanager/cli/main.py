"""
Command Line Interface
======================

``secrets-manager`` front end over the encrypted project store.

Every command that touches secret values asks for the master password;
nothing is cached between invocations. All VaultError failures are
caught here and rendered as one line on stderr with exit status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from secretsmanager import __version__
from secretsmanager.cli.passwords import GetpassPasswordProvider, PasswordProvider
from secretsmanager.core.config import SecureConfig
from secretsmanager.core.errors import ProjectAlreadyExists, ProjectNotFound, VaultError
from secretsmanager.core.logging import configure_logging
from secretsmanager.core.vault.store import ProjectStore
from secretsmanager.export.renderers import ExportFormat, render
from secretsmanager.utils.paths import atomic_write_bytes

logger = logging.getLogger(__name__)

PROG = "secrets-manager"
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="A secure local secrets manager for development",
    )
    parser.add_argument(
        "--storage-dir",
        type=Path,
        default=None,
        help="Directory holding encrypted project files (default: ~/.secrets_manager)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{PROG} {__version__}",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    create = commands.add_parser("create", help="Create a new project")
    create.add_argument("project_name", help="Name of the project")

    commands.add_parser("list", help="List all projects")

    add = commands.add_parser("add", help="Add (or overwrite) a secret")
    add.add_argument("project_name", help="Name of the project")
    add.add_argument("key", help="Secret key")
    add.add_argument("value", nargs="?", help="Secret value (prompted if omitted)")

    update = commands.add_parser("update", help="Change an existing secret")
    update.add_argument("project_name", help="Name of the project")
    update.add_argument("key", help="Secret key")
    update.add_argument("value", nargs="?", help="Secret value (prompted if omitted)")

    remove = commands.add_parser("remove", help="Remove a secret from a project")
    remove.add_argument("project_name", help="Name of the project")
    remove.add_argument("key", help="Secret key to remove")

    show = commands.add_parser("show", help="List secret names in a project")
    show.add_argument("project_name", help="Name of the project")

    export = commands.add_parser("export", help="Export secrets in various formats")
    export.add_argument("project_name", help="Name of the project")
    export.add_argument(
        "-f", "--format",
        type=ExportFormat.parse,
        default=ExportFormat.SHELL,
        help="Export format: shell, env, or json (default: shell)",
    )
    export.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file (defaults to stdout)",
    )

    delete = commands.add_parser("delete", help="Delete a project")
    delete.add_argument("project_name", help="Name of the project")
    delete.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )

    return parser


class SecretsManagerCLI:
    """Executes parsed commands against a ProjectStore."""

    def __init__(
        self,
        store: ProjectStore,
        passwords: PasswordProvider,
        stdin: TextIO,
        stdout: TextIO,
    ) -> None:
        self._store = store
        self._passwords = passwords
        self._stdin = stdin
        self._stdout = stdout

    def run(self, args: argparse.Namespace) -> int:
        handler = getattr(self, f"cmd_{args.command}")
        handler(args)
        return 0

    def _print(self, message: str = "") -> None:
        print(message, file=self._stdout)

    def cmd_create(self, args: argparse.Namespace) -> None:
        name = args.project_name
        if self._store.exists(name):
            raise ProjectAlreadyExists(name)

        password = self._passwords.get_new_password()
        self._store.create(name, password).close()
        self._print(f"Project '{name}' created successfully!")

    def cmd_list(self, args: argparse.Namespace) -> None:
        projects = self._store.list_projects()
        if not projects:
            self._print(f"No projects found. Create one with: {PROG} create <project-name>")
            return

        self._print("Available projects:")
        for project in projects:
            updated = project.updated_at.strftime(_TIMESTAMP_FORMAT)
            self._print(f"  • {project.name} (updated {updated})")

    def cmd_add(self, args: argparse.Namespace) -> None:
        name = args.project_name
        self._require_project(name)
        password = self._passwords.get_password()
        value = args.value if args.value is not None else self._passwords.get_secret_value(args.key)
        self._store.add_secret(name, password, args.key, value)
        self._print(f"Secret '{args.key}' added to project '{name}'")

    def cmd_update(self, args: argparse.Namespace) -> None:
        name = args.project_name
        self._require_project(name)
        password = self._passwords.get_password()
        with self._store.open(name, password) as session:
            # check before prompting for a value
            session.get(args.key)
            value = args.value if args.value is not None else self._passwords.get_secret_value(args.key)
            session.update(args.key, value)
            self._store.save(session)
        self._print(f"Secret '{args.key}' updated in project '{name}'")

    def cmd_remove(self, args: argparse.Namespace) -> None:
        name = args.project_name
        self._require_project(name)
        password = self._passwords.get_password()
        self._store.remove_secret(name, password, args.key)
        self._print(f"Secret '{args.key}' removed from project '{name}'")

    def cmd_show(self, args: argparse.Namespace) -> None:
        name = args.project_name
        self._require_project(name)
        password = self._passwords.get_password()
        with self._store.open(name, password) as session:
            self._print(f"Project: {session.name}")
            self._print(f"Created: {session.created_at.strftime(_TIMESTAMP_FORMAT)}")
            self._print(f"Updated: {session.updated_at.strftime(_TIMESTAMP_FORMAT)}")
            self._print()
            keys = session.keys()

        if not keys:
            self._print(f"No secrets found. Add one with: {PROG} add {name} <key>")
            return
        self._print("Secrets:")
        for key in keys:
            self._print(f"  • {key}")

    def cmd_export(self, args: argparse.Namespace) -> None:
        name = args.project_name
        self._require_project(name)
        password = self._passwords.get_password()
        content = render(self._store.read_secrets(name, password), args.format)

        if args.output is None:
            self._stdout.write(content)
            return

        try:
            atomic_write_bytes(args.output, content.encode("utf-8"))
        except OSError as e:
            raise VaultError(f"Could not write {args.output}: {e.strerror or e}") from e
        self._print(f"Exported to: {args.output}")

    def cmd_delete(self, args: argparse.Namespace) -> None:
        name = args.project_name
        self._require_project(name)

        if not args.yes:
            self._stdout.write(f"Are you sure you want to delete project '{name}'? (y/N): ")
            self._stdout.flush()
            answer = self._stdin.readline().strip().lower()
            if answer not in ("y", "yes"):
                self._print("Deletion cancelled")
                return

        self._store.delete(name)
        self._print(f"Project '{name}' deleted successfully!")

    def _require_project(self, name: str) -> None:
        if not self._store.exists(name):
            raise ProjectNotFound(name)


def main(
    argv: Optional[Sequence[str]] = None,
    passwords: Optional[PasswordProvider] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """
    Run the CLI and return the process exit status.

    The streams and password provider are injectable so the CLI can be
    driven without a terminal.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    args = build_parser().parse_args(argv)

    try:
        config = SecureConfig.load(storage_dir=args.storage_dir)
        configure_logging(
            level=config.logging.level,
            log_dir=config.paths.log_dir,
            enable_console=config.logging.enable_console,
            enable_file=config.logging.enable_file,
            enable_json=config.logging.enable_json,
            max_file_size=config.logging.max_file_size_bytes,
            backup_count=config.logging.backup_count,
            verbose=args.verbose,
        )
        cli = SecretsManagerCLI(
            store=ProjectStore.from_config(config),
            passwords=passwords or GetpassPasswordProvider(),
            stdin=stdin,
            stdout=stdout,
        )
        return cli.run(args)
    except (VaultError, ValueError) as e:
        # ValueError covers invalid configuration overrides
        logger.debug("Command '%s' failed: %s", args.command, type(e).__name__)
        print(f"Error: {e}", file=stderr)
        return 1
    except EOFError:
        print("Error: input aborted", file=stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=stderr)
        return 130


def run() -> None:
    """Console script entry point."""
    sys.exit(main())
