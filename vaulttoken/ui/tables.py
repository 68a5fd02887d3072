"""Rich table for the token status view."""

from __future__ import annotations

from datetime import timedelta

from rich.table import Table

from vaulttoken.core.manager import format_duration
from vaulttoken.models.login import TokenStatus


def status_rows(status: TokenStatus) -> list[tuple[str, bool, str]]:
    """Build (label, ok, detail) rows mirroring the token status panel."""
    rows: list[tuple[str, bool, str]] = []
    if not status.executable_available:
        rows.append((
            "Vault executable not found",
            False,
            f"Please configure vault executable in settings: {status.executable_path}",
        ))
    else:
        rows.append(("Vault executable", True, status.executable_path))

    if status.valid:
        remaining = format_duration(timedelta(seconds=status.remaining_seconds))
        rows.append(("Token is valid", True, f"Valid for: {remaining}"))
    else:
        rows.append(("Token is invalid or not found", False, status.token_path))

    if status.login_in_progress:
        rows.append(("Login process ongoing...", False, status.vault_address))
    return rows


def status_table(status: TokenStatus) -> Table:
    """Checklist table: green check or red cross, label and detail."""
    table = Table(show_header=False, show_lines=False, pad_edge=False, box=None)
    table.add_column("", width=3)
    table.add_column("Check", style="bold")
    table.add_column("Detail")

    for label, ok, detail in status_rows(status):
        icon = "[success]✓[/success]" if ok else "[error]✗[/error]"
        style = "token.valid" if ok else "token.invalid"
        table.add_row(icon, f"[{style}]{label}[/{style}]", detail)
    return table
