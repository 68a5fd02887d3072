"""Shared Rich Console and style definitions."""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

VTM_THEME = Theme(
    {
        "info": "cyan",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "heading": "bold cyan",
        "muted": "dim",
        "token.valid": "green",
        "token.invalid": "red",
        "login.ongoing": "dark_orange",
    }
)

err_console = Console(stderr=True, theme=VTM_THEME)
