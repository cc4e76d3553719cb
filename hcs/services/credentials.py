"""Access key resolution.

The operator's access key id and secret live in the OS keyring under the
``hcs-cli`` service. Resolution goes:

    stored pairs == 1  -> use it
    otherwise          -> ask for the key id, look up its secret
    secret missing     -> ask for the secret, store it, use it
    nothing entered    -> CredentialAbort

``CredentialResolver`` memoizes its answer, so the operator is asked at most
once per invocation no matter how many steps need credentials.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from hcs.core.result import Err, Ok, Result
from hcs.output.console import ConsoleProtocol, Style
from hcs.services.errors import CredentialAbort, CredentialError, CredentialStoreError

__all__ = [
    "Credentials",
    "CredentialStore",
    "KeyringCredentialStore",
    "MemoryCredentialStore",
    "Prompter",
    "ScriptedPrompter",
    "CredentialResolver",
    "logout",
]

# Keyring backends cannot enumerate entries, so the known account names are
# kept as a JSON list under this reserved account.
ACCOUNT_INDEX = "__hcs_accounts__"

_KEYRING_HINT = "check that a keyring backend is available (see `keyring --list-backends`)"


@dataclass(frozen=True, slots=True)
class Credentials:
    key_id: str
    secret: str = field(repr=False)


@runtime_checkable
class CredentialStore(Protocol):
    """Persistent secret storage, namespaced to one service."""

    def get(self, account: str) -> Result[str | None, CredentialStoreError]:
        """Return the secret for account, Ok(None) when nothing is stored."""
        ...

    def set(self, account: str, secret: str) -> Result[None, CredentialStoreError]: ...

    def list_all(self) -> Result[list[Credentials], CredentialStoreError]: ...

    def delete(self, account: str) -> Result[None, CredentialStoreError]: ...


class KeyringCredentialStore:
    """CredentialStore backed by the ``keyring`` library."""

    def __init__(self, service: str) -> None:
        self.service = service

    def _error(self, action: str, e: Exception) -> Err[CredentialStoreError]:
        return Err(CredentialStoreError(f"keyring {action} failed: {e}", hint=_KEYRING_HINT))

    def _read_index(self) -> list[str]:
        raw = keyring.get_password(self.service, ACCOUNT_INDEX)
        if not raw:
            return []
        try:
            data: object = json.loads(raw)
        except json.JSONDecodeError:
            return []
        if not isinstance(data, list):
            return []
        return [a for a in data if isinstance(a, str)]

    def _write_index(self, accounts: list[str]) -> None:
        if accounts:
            keyring.set_password(self.service, ACCOUNT_INDEX, json.dumps(sorted(set(accounts))))
            return
        try:
            keyring.delete_password(self.service, ACCOUNT_INDEX)
        except PasswordDeleteError:
            pass

    def get(self, account: str) -> Result[str | None, CredentialStoreError]:
        try:
            return Ok(keyring.get_password(self.service, account))
        except KeyringError as e:
            return self._error("read", e)

    def set(self, account: str, secret: str) -> Result[None, CredentialStoreError]:
        try:
            keyring.set_password(self.service, account, secret)
            accounts = self._read_index()
            if account not in accounts:
                self._write_index([*accounts, account])
        except KeyringError as e:
            return self._error("write", e)
        return Ok(None)

    def list_all(self) -> Result[list[Credentials], CredentialStoreError]:
        try:
            found: list[Credentials] = []
            for account in self._read_index():
                secret = keyring.get_password(self.service, account)
                if secret:
                    found.append(Credentials(account, secret))
        except KeyringError as e:
            return self._error("read", e)
        return Ok(found)

    def delete(self, account: str) -> Result[None, CredentialStoreError]:
        try:
            try:
                keyring.delete_password(self.service, account)
            except PasswordDeleteError:
                pass
            self._write_index([a for a in self._read_index() if a != account])
        except KeyringError as e:
            return self._error("delete", e)
        return Ok(None)


class MemoryCredentialStore:
    """In-memory CredentialStore for tests.

    Records every call in ``calls`` as ``(method, account)``.
    """

    def __init__(self, secrets: dict[str, str] | None = None) -> None:
        self.secrets: dict[str, str] = dict(secrets or {})
        self.calls: list[tuple[str, str]] = []
        self.fail_with: CredentialStoreError | None = None

    def get(self, account: str) -> Result[str | None, CredentialStoreError]:
        self.calls.append(("get", account))
        if self.fail_with is not None:
            return Err(self.fail_with)
        return Ok(self.secrets.get(account))

    def set(self, account: str, secret: str) -> Result[None, CredentialStoreError]:
        self.calls.append(("set", account))
        if self.fail_with is not None:
            return Err(self.fail_with)
        self.secrets[account] = secret
        return Ok(None)

    def list_all(self) -> Result[list[Credentials], CredentialStoreError]:
        self.calls.append(("list_all", ""))
        if self.fail_with is not None:
            return Err(self.fail_with)
        return Ok([Credentials(a, s) for a, s in sorted(self.secrets.items())])

    def delete(self, account: str) -> Result[None, CredentialStoreError]:
        self.calls.append(("delete", account))
        if self.fail_with is not None:
            return Err(self.fail_with)
        self.secrets.pop(account, None)
        return Ok(None)


class Prompter(Protocol):
    def ask(self, message: str, *, secret: bool = False) -> str:
        """Ask the operator for a value; an empty string means declined."""
        ...


class ScriptedPrompter:
    """Prompter replaying canned answers, for tests."""

    def __init__(self, answers: list[str] | None = None) -> None:
        self.answers = list(answers or [])
        self.questions: list[str] = []

    def ask(self, message: str, *, secret: bool = False) -> str:
        self.questions.append(message)
        if not self.answers:
            return ""
        return self.answers.pop(0)


class CredentialResolver:
    """Resolves one credential pair per invocation."""

    def __init__(
        self,
        store: CredentialStore,
        prompter: Prompter,
        console: ConsoleProtocol,
    ) -> None:
        self._store = store
        self._prompter = prompter
        self._console = console
        self._result: Result[Credentials, CredentialError] | None = None

    def resolve(self) -> Result[Credentials, CredentialError]:
        if self._result is None:
            self._result = self._resolve()
        return self._result

    def _resolve(self) -> Result[Credentials, CredentialError]:
        self._console.print("Looking for credentials", Style.DIM)
        stored = self._store.list_all()
        if isinstance(stored, Err):
            return stored
        if len(stored.value) == 1:
            return Ok(stored.value[0])

        if stored.value:
            self._console.info("Multiple accounts stored, please pick one")
        else:
            self._console.info("Credentials not found, please sign in")

        key_id = self._prompter.ask("Please provide your access key id").strip()
        if not key_id:
            return Err(CredentialAbort("no access key id provided, publish cancelled"))

        existing = self._store.get(key_id)
        if isinstance(existing, Err):
            return existing
        if existing.value:
            return Ok(Credentials(key_id, existing.value))

        self._console.info("Secret not found, please sign in")
        secret = self._prompter.ask("Please provide your access key secret", secret=True)
        if not secret.strip():
            return Err(CredentialAbort())

        saved = self._store.set(key_id, secret)
        if isinstance(saved, Err):
            return Err(
                CredentialStoreError(
                    "Something went wrong storing your credentials", hint=saved.error.message
                )
            )
        return Ok(Credentials(key_id, secret))


def logout(store: CredentialStore) -> Result[int, CredentialStoreError]:
    """Forget every stored credential pair; returns how many were removed."""
    stored = store.list_all()
    if isinstance(stored, Err):
        return stored
    for creds in stored.value:
        deleted = store.delete(creds.key_id)
        if isinstance(deleted, Err):
            return deleted
    return Ok(len(stored.value))
