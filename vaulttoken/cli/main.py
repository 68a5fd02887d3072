"""Main CLI entry point for vtm."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.logging import RichHandler

from vaulttoken import __version__
from vaulttoken.branding import CLI_PRIMARY_COMMAND, PRODUCT_NAME
from vaulttoken.cli.commands_config import register_config_commands
from vaulttoken.core.errors import ConfigError
from vaulttoken.core.manager import VaultTokenManager
from vaulttoken.ui.console import err_console
from vaulttoken.utils.locks import LoginLockError, clear_login_lock
from vaulttoken.utils.state import CONFIG_ENV_VAR, resolve_root, settings_path


def _configure_logging(verbose: bool) -> None:
    """Route package logs through Rich on stderr; DEBUG with -v, else WARNING."""
    package_logger = logging.getLogger("vaulttoken")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    package_logger.addHandler(
        RichHandler(console=err_console, show_path=False, show_time=verbose)
    )
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(version=__version__, prog_name=CLI_PRIMARY_COMMAND)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="State root for settings and the login lock (default: ~/.vaulttoken)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV_VAR,
    default=None,
    help=f"Settings file (default: <root>/settings.yaml, or ${CONFIG_ENV_VAR})",
)
@click.option(
    "--token-path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="VTM_TOKEN_PATH",
    default=None,
    help="Token file written by vault login (default: ~/.vault-token)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    root: Path | None,
    config_path: Path | None,
    token_path: Path | None,
) -> None:
    """Keep a fresh Vault token around by driving `vault login -method oidc`."""
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    resolved_root = resolve_root(root)
    ctx.obj["verbose"] = verbose
    ctx.obj["root"] = resolved_root
    ctx.obj["config_path"] = config_path or (
        settings_path(resolved_root) if root is not None else settings_path()
    )
    ctx.obj["token_path"] = token_path
    ctx.obj["product"] = PRODUCT_NAME


def build_manager(ctx: click.Context) -> VaultTokenManager:
    """Create the manager for this invocation, exiting cleanly on bad settings."""
    try:
        return VaultTokenManager(
            config_path=ctx.obj["config_path"],
            token_path=ctx.obj.get("token_path"),
        )
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Token Commands
# ---------------------------------------------------------------------------


@cli.command("status")
@click.option("--json", "as_json", is_flag=True, help="Print status as JSON on stdout")
@click.option("--watch", is_flag=True, help="Keep redrawing the status until Ctrl-C")
@click.option(
    "--interval",
    type=click.FloatRange(min=0.1),
    default=1.0,
    show_default=True,
    help="Seconds between redraws with --watch",
)
@click.pass_context
def status_cmd(ctx: click.Context, as_json: bool, watch: bool, interval: float) -> None:
    """Show whether the current token is valid and for how long.

    Exits 1 when the token is missing or expired (not with --watch).
    """
    from vaulttoken.cli.status import run_status, watch_status

    if watch and as_json:
        click.echo("Error: --watch cannot be combined with --json", err=True)
        sys.exit(1)
    if watch:
        watch_status(manager=build_manager(ctx), interval=interval)
        return
    run_status(manager=build_manager(ctx), as_json=as_json)


@cli.command("login")
@click.pass_context
def login_cmd(ctx: click.Context) -> None:
    """Run the browser-based OIDC login unless the token is still valid.

    Press Ctrl-C to cancel a login in progress.
    """
    from vaulttoken.cli.login import run_login

    run_login(manager=build_manager(ctx), root=ctx.obj["root"])


@cli.command("unlock")
@click.option(
    "--force",
    is_flag=True,
    help="Force remove lock even if process appears active",
)
@click.pass_context
def unlock_cmd(ctx: click.Context, force: bool) -> None:
    """Clear a login lock left behind by another vtm process."""
    root = ctx.obj["root"]
    try:
        removed = clear_login_lock(root, force=force)
    except LoginLockError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    if removed:
        click.echo(f"Cleared login lock for root: {root}")
    else:
        click.echo(f"No login lock held for root: {root}")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

register_config_commands(cli=cli, build_manager=build_manager)


if __name__ == "__main__":
    cli()
