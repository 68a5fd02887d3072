"""Config command group for viewing and editing settings."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable

import click
import yaml

from vaulttoken.core.broadcast import Topic
from vaulttoken.core.errors import ConfigError
from vaulttoken.core.manager import VaultTokenManager
from vaulttoken.ui.console import err_console


def register_config_commands(
    *,
    cli: click.Group,
    build_manager: Callable[[click.Context], VaultTokenManager],
) -> None:
    """Register the config command group on the provided CLI group."""

    @cli.group()
    def config() -> None:
        """Show or change the vault address, token lifetime and CLI path."""

    @config.command("show")
    @click.option(
        "--format", "fmt",
        type=click.Choice(["yaml", "json"]),
        default="yaml",
        show_default=True,
        help="Output format",
    )
    @click.pass_context
    def config_show(ctx: click.Context, fmt: str) -> None:
        """Print the effective settings on stdout."""
        payload = build_manager(ctx).config_store.config.model_dump()
        if fmt == "json":
            click.echo(json.dumps(payload, indent=2, sort_keys=True))
        else:
            click.echo(yaml.safe_dump(payload, sort_keys=True), nl=False)

    @config.command("set")
    @click.option("--address", help="Vault server address (exported as VAULT_ADDR)")
    @click.option("--validity-hours", type=int, help="Hours a fresh token stays valid")
    @click.option("--timeout-seconds", type=int, help="Seconds to wait for the browser login")
    @click.option("--executable", help="Path to the vault CLI")
    @click.pass_context
    def config_set(
        ctx: click.Context,
        address: str | None,
        validity_hours: int | None,
        timeout_seconds: int | None,
        executable: str | None,
    ) -> None:
        """Update and persist one or more settings."""
        if all(value is None for value in (address, validity_hours, timeout_seconds, executable)):
            click.echo("Error: nothing to update; pass at least one option", err=True)
            sys.exit(1)

        manager = build_manager(ctx)
        store = manager.config_store

        def _on_settings_changed() -> None:
            err_console.print(f"[success]Settings saved to {store.path}[/success]")

        subscription = manager.broadcaster.subscribe(Topic.SETTINGS_CHANGED, _on_settings_changed)
        try:
            updated = store.update(
                vault_address=address,
                token_validity_hours=validity_hours,
                login_timeout_seconds=timeout_seconds,
                vault_executable_path=executable,
            )
        except ConfigError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(1)
        finally:
            manager.broadcaster.unsubscribe(subscription)

        if not store.executable_exists(updated.vault_executable_path):
            err_console.print(
                f"[warning]Warning: vault executable not found at {updated.vault_executable_path}[/warning]"
            )

    @config.command("path")
    @click.pass_context
    def config_path(ctx: click.Context) -> None:
        """Print the settings file location."""
        click.echo(str(ctx.obj["config_path"]))
