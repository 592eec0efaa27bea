"""
Password Providers
==================

Injected capability for obtaining master passwords and hidden secret
values, so the store and CLI can run without a real terminal.
"""

from __future__ import annotations

import getpass
from collections import deque
from typing import Iterable, Optional, Protocol

from secretsmanager.core.errors import EmptyPassword, PasswordMismatch


class PasswordProvider(Protocol):
    """Source of master passwords and hidden input."""

    def get_password(self, prompt: str = "Enter master password: ") -> str:
        ...

    def get_new_password(self) -> str:
        ...

    def get_secret_value(self, key: str) -> str:
        ...


class GetpassPasswordProvider:
    """Reads passwords from the controlling terminal without echo."""

    def get_password(self, prompt: str = "Enter master password: ") -> str:
        password = getpass.getpass(prompt)
        if not password:
            raise EmptyPassword()
        return password

    def get_new_password(self) -> str:
        """
        Ask for a new password twice.

        Raises:
            EmptyPassword: If the first entry is empty
            PasswordMismatch: If the confirmation differs
        """
        password = self.get_password("Enter master password: ")
        confirm = getpass.getpass("Confirm master password: ")
        if password != confirm:
            raise PasswordMismatch()
        return password

    def get_secret_value(self, key: str) -> str:
        return getpass.getpass(f"Enter value for '{key}': ")


class StaticPasswordProvider:
    """
    Serves fixed answers in order; the last password repeats.

    Usage:
        provider = StaticPasswordProvider("pw1")
        provider = StaticPasswordProvider("pw1", confirmation="other")
    """

    def __init__(
        self,
        *passwords: str,
        confirmation: Optional[str] = None,
        secret_values: Iterable[str] = (),
    ) -> None:
        if not passwords:
            raise ValueError("At least one password is required")
        self._passwords = deque(passwords)
        self._confirmation = confirmation
        self._secret_values = deque(secret_values)

    def get_password(self, prompt: str = "Enter master password: ") -> str:
        password = self._passwords.popleft() if len(self._passwords) > 1 else self._passwords[0]
        if not password:
            raise EmptyPassword()
        return password

    def get_new_password(self) -> str:
        password = self.get_password()
        confirm = self._confirmation if self._confirmation is not None else password
        if password != confirm:
            raise PasswordMismatch()
        return password

    def get_secret_value(self, key: str) -> str:
        if not self._secret_values:
            raise LookupError(f"No value queued for '{key}'")
        return self._secret_values.popleft()
