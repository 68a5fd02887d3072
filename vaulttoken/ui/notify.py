"""Notification rendering for login results and state changes."""

from __future__ import annotations

from enum import StrEnum

from rich.console import Console

from vaulttoken.core.errors import LoginError
from vaulttoken.ui.console import err_console


class Severity(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


def classify_login_error(exc: LoginError) -> tuple[str, Severity]:
    """Return the message and severity to show for a failed login.

    Cancellations (including vault exiting with 137) are warnings; everything
    else is an error.
    """
    if exc.is_cancellation:
        return "Vault login process was canceled", Severity.WARNING
    return str(exc) or "Unknown login error", Severity.ERROR


def notify(message: str, severity: Severity = Severity.INFO, *, console: Console | None = None) -> None:
    con = console or err_console
    style = severity.value
    con.print(f"[{style}]{message}[/{style}]")


class LoginStateNotifier:
    """Broadcaster observer that prints login-state transitions."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or err_console
        self.transitions: list[bool] = []

    def __call__(self, in_progress: bool) -> None:
        self.transitions.append(in_progress)
        if in_progress:
            self.console.print("[login.ongoing]Login process ongoing...[/login.ongoing]")
        else:
            self.console.print("[muted]Login process finished.[/muted]")
