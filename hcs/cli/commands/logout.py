from __future__ import annotations

from hcs.cli.commands._helpers import exit_on_error
from hcs.cli.context import build_context
from hcs.services.credentials import KeyringCredentialStore, logout as forget_all


def logout() -> None:
    """Remove all stored credentials."""
    ctx = build_context()
    removed = exit_on_error(forget_all(KeyringCredentialStore(ctx.config.keyring_service)), ctx)
    ctx.console.success(f"You have been signed out ({removed} stored key(s) removed)")
