"""Login command implementation."""

from __future__ import annotations

import sys
import threading
from pathlib import Path

import click

from vaulttoken.core.broadcast import Topic
from vaulttoken.core.errors import LoginError
from vaulttoken.core.manager import VaultTokenManager
from vaulttoken.models.login import LoginOutcome
from vaulttoken.ui.console import err_console
from vaulttoken.ui.notify import LoginStateNotifier, Severity, classify_login_error, notify
from vaulttoken.utils.locks import LoginLockError, login_process_lock

# Conventional shell status for a run ended by the user.
CANCELED_EXIT_STATUS = 130
_JOIN_POLL_SECONDS = 0.2


def _ensure_token_in_worker(manager: VaultTokenManager) -> LoginOutcome | LoginError:
    """Run ensure_token on a worker thread so Ctrl-C here can cancel it.

    Login failures are returned; any other exception is re-raised here.
    """
    result: list[LoginOutcome | BaseException] = []

    def _target() -> None:
        try:
            result.append(manager.ensure_token())
        except BaseException as exc:
            result.append(exc)

    worker = threading.Thread(target=_target, name="vault-login", daemon=True)
    worker.start()
    while worker.is_alive():
        try:
            worker.join(_JOIN_POLL_SECONDS)
        except KeyboardInterrupt:
            err_console.print("[warning]Canceling vault login...[/warning]")
            manager.cancel()

    [outcome] = result
    if isinstance(outcome, (LoginOutcome, LoginError)):
        return outcome
    raise outcome


def run_login(*, manager: VaultTokenManager, root: Path) -> None:
    """Obtain a fresh token, reporting the outcome like a desktop notification."""
    if not manager.executable_available():
        path = manager.config_store.config.vault_executable_path
        notify(f"Vault executable not found at: {path}", Severity.ERROR)
        err_console.print("Configure it with: [bold]vtm config set --executable PATH[/bold]")
        sys.exit(1)

    notifier = LoginStateNotifier()
    subscription = manager.broadcaster.subscribe(Topic.LOGIN_STATE, notifier)
    try:
        with login_process_lock(root, "login"):
            result = _ensure_token_in_worker(manager)
    except LoginLockError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    finally:
        manager.broadcaster.unsubscribe(subscription)

    if isinstance(result, LoginError):
        message, severity = classify_login_error(result)
        notify(message, severity)
        sys.exit(CANCELED_EXIT_STATUS if severity is Severity.WARNING else 1)

    if result is LoginOutcome.ALREADY_VALID:
        notify("Token is still valid; no login needed", Severity.INFO)
    else:
        notify("Vault token generated successfully", Severity.SUCCESS)
