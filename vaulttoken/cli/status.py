"""Status command implementation."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

import click
from rich.console import Console
from rich.live import Live

from vaulttoken.core.broadcast import Topic
from vaulttoken.core.errors import ConfigError, InvalidConfigurationError
from vaulttoken.core.manager import VaultTokenManager
from vaulttoken.ui.console import err_console
from vaulttoken.ui.tables import status_table

logger = logging.getLogger(__name__)


def run_status(*, manager: VaultTokenManager, as_json: bool) -> None:
    """Print the token status; exit 1 unless the token is valid."""
    try:
        status = manager.status()
    except InvalidConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(status.model_dump_json(indent=2))
    else:
        err_console.print(status_table(status))

    if not status.valid:
        sys.exit(1)


def _settings_mtime(path: Path) -> float | None:
    try:
        return path.stat().st_mtime
    except OSError:
        return None


def watch_status(
    *,
    manager: VaultTokenManager,
    interval: float = 1.0,
    console: Console | None = None,
    stop: threading.Event | None = None,
) -> None:
    """Redraw the status table every *interval* seconds until Ctrl-C or *stop*.

    Login-state and settings-changed events redraw immediately. Edits to the
    settings file made by another process are picked up on the next tick.
    """
    stop = stop or threading.Event()
    wake = threading.Event()
    subscriptions = [
        manager.broadcaster.subscribe(Topic.LOGIN_STATE, lambda _in_progress: wake.set()),
        manager.broadcaster.subscribe(Topic.SETTINGS_CHANGED, wake.set),
    ]
    store = manager.config_store
    seen_mtime = _settings_mtime(store.path)

    try:
        with Live(
            status_table(manager.status()),
            console=console or err_console,
            auto_refresh=False,
            redirect_stdout=False,
            redirect_stderr=False,
        ) as live:
            try:
                while not stop.is_set():
                    wake.wait(interval)
                    wake.clear()
                    mtime = _settings_mtime(store.path)
                    if mtime != seen_mtime:
                        seen_mtime = mtime
                        try:
                            store.reload()
                        except ConfigError as exc:
                            logger.warning("Keeping previous settings: %s", exc)
                    live.update(status_table(manager.status()), refresh=True)
            except KeyboardInterrupt:
                pass
            live.update(status_table(manager.status()), refresh=True)
    finally:
        for subscription in subscriptions:
            manager.broadcaster.unsubscribe(subscription)
