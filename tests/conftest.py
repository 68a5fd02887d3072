"""Shared test fixtures for the vault-token-manager test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from vaulttoken.core.broadcast import StateBroadcaster, Topic
from vaulttoken.core.config_store import ConfigStore
from vaulttoken.core.supervisor import LoginProcessSupervisor
from vaulttoken.core.validity import ValidityTracker


@pytest.fixture
def broadcaster() -> StateBroadcaster:
    return StateBroadcaster()


@pytest.fixture
def login_events(broadcaster: StateBroadcaster) -> list[bool]:
    """Every login-state payload published during the test, in order."""
    events: list[bool] = []
    broadcaster.subscribe(Topic.LOGIN_STATE, events.append)
    return events


@pytest.fixture
def token_path(tmp_path: Path) -> Path:
    return tmp_path / "home" / ".vault-token"


@pytest.fixture
def make_store(tmp_path: Path, broadcaster: StateBroadcaster) -> Callable[..., ConfigStore]:
    """Build a ConfigStore under tmp_path, optionally pre-populated via update()."""

    def _make(**values: Any) -> ConfigStore:
        store = ConfigStore(tmp_path / "settings.yaml", broadcaster=broadcaster)
        if values:
            store.update(**values)
        return store

    return _make


@pytest.fixture
def make_supervisor(
    broadcaster: StateBroadcaster,
    token_path: Path,
    make_store: Callable[..., ConfigStore],
) -> Callable[..., LoginProcessSupervisor]:
    """Build a supervisor wired to a tmp store and token path."""

    def _make(*, popen: Callable[..., Any] | None = None, **values: Any) -> LoginProcessSupervisor:
        values.setdefault("vault_address", "https://vault.example.com")
        store = make_store(**values)
        tracker = ValidityTracker(store, token_path=token_path)
        if popen is None:
            return LoginProcessSupervisor(store, tracker, broadcaster)
        return LoginProcessSupervisor(store, tracker, broadcaster, popen=popen)

    return _make
