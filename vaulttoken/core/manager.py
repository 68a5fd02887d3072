"""Wiring of settings, validity tracking, login supervision and broadcasting."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from vaulttoken.core.broadcast import StateBroadcaster
from vaulttoken.core.config_store import ConfigStore
from vaulttoken.core.supervisor import LoginProcessSupervisor
from vaulttoken.core.validity import ValidityTracker
from vaulttoken.models.login import LoginOutcome, TokenStatus


def format_duration(duration: timedelta) -> str:
    """Render *duration* as ``HHh MMm SSs``; negative durations read as zero."""
    total = max(0, int(duration.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}h {minutes:02d}m {seconds:02d}s"


class VaultTokenManager:
    """One broadcaster shared by the store and the supervisor."""

    def __init__(
        self,
        *,
        config_path: str | Path | None = None,
        token_path: str | Path | None = None,
        broadcaster: StateBroadcaster | None = None,
    ) -> None:
        self.broadcaster = broadcaster or StateBroadcaster()
        self.config_store = ConfigStore(config_path, broadcaster=self.broadcaster)
        self.tracker = ValidityTracker(self.config_store, token_path=token_path)
        self.supervisor = LoginProcessSupervisor(self.config_store, self.tracker, self.broadcaster)

    def ensure_token(self) -> LoginOutcome:
        return self.supervisor.ensure_token()

    def cancel(self) -> bool:
        return self.supervisor.cancel()

    def executable_available(self) -> bool:
        return self.config_store.executable_exists(self.config_store.config.vault_executable_path)

    def status(self) -> TokenStatus:
        config = self.config_store.config
        remaining = self.tracker.remaining_validity()
        return TokenStatus(
            valid=remaining > timedelta(0),
            remaining_seconds=int(remaining.total_seconds()),
            login_in_progress=self.supervisor.is_in_progress(),
            executable_available=self.executable_available(),
            executable_path=config.vault_executable_path,
            vault_address=config.vault_address,
            token_path=str(self.tracker.token_path),
        )
