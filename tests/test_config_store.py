"""Tests for the YAML settings store."""

from __future__ import annotations

import os
import platform
from pathlib import Path

import pytest
import yaml

from tests.helpers import write_settings
from vaulttoken.core.broadcast import StateBroadcaster, Topic
from vaulttoken.core.config_store import ConfigStore
from vaulttoken.core.errors import ConfigError
from vaulttoken.models.config import (
    DEFAULT_LOGIN_TIMEOUT_SECONDS,
    DEFAULT_TOKEN_VALIDITY_HOURS,
    DEFAULT_VAULT_ADDRESS,
)


def _changes(hub: StateBroadcaster) -> list[str]:
    events: list[str] = []
    hub.subscribe(Topic.SETTINGS_CHANGED, lambda: events.append("changed"))
    return events


def test_missing_file_yields_defaults_without_writing(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "settings.yaml")

    config = store.config
    assert config.vault_address == DEFAULT_VAULT_ADDRESS
    assert config.token_validity_hours == DEFAULT_TOKEN_VALIDITY_HOURS
    assert config.login_timeout_seconds == DEFAULT_LOGIN_TIMEOUT_SECONDS
    assert not store.path.exists()


def test_update_persists_and_publishes(tmp_path: Path) -> None:
    hub = StateBroadcaster()
    events = _changes(hub)
    store = ConfigStore(tmp_path / "settings.yaml", broadcaster=hub)

    updated = store.update(vault_address="https://vault.corp.example", token_validity_hours=8)

    assert updated.vault_address == "https://vault.corp.example"
    assert updated.token_validity_hours == 8
    assert events == ["changed"]
    on_disk = yaml.safe_load(store.path.read_text())
    assert on_disk["vault_address"] == "https://vault.corp.example"
    assert on_disk["token_validity_hours"] == 8
    assert on_disk["login_timeout_seconds"] == DEFAULT_LOGIN_TIMEOUT_SECONDS

    reopened = ConfigStore(store.path)
    assert reopened.config == updated


def test_update_ignores_none_values(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "settings.yaml")
    store.update(login_timeout_seconds=90)

    updated = store.update(vault_executable_path="/opt/vault/bin/vault")

    assert updated.login_timeout_seconds == 90
    assert updated.vault_executable_path == "/opt/vault/bin/vault"


@pytest.mark.parametrize(
    "field,value",
    [
        ("token_validity_hours", 0),
        ("token_validity_hours", -4),
        ("login_timeout_seconds", 0),
        ("vault_address", "   "),
    ],
)
def test_invalid_update_is_rejected_without_side_effects(
    tmp_path: Path, field: str, value: object
) -> None:
    hub = StateBroadcaster()
    events = _changes(hub)
    store = ConfigStore(tmp_path / "settings.yaml", broadcaster=hub)
    before = store.config

    with pytest.raises(ConfigError) as excinfo:
        store.update(**{field: value})

    assert field in str(excinfo.value)
    assert store.config == before
    assert events == []
    assert not store.path.exists()


def test_invalid_values_on_disk_raise_config_error(tmp_path: Path) -> None:
    path = write_settings(tmp_path / "settings.yaml", token_validity_hours=-1)

    with pytest.raises(ConfigError, match="token_validity_hours"):
        ConfigStore(path)


def test_broken_yaml_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("vault_address: [unclosed\n")

    with pytest.raises(ConfigError, match="not valid YAML"):
        ConfigStore(path)


def test_non_mapping_yaml_raises_config_error(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigError, match="mapping"):
        ConfigStore(path)


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("")

    assert ConfigStore(path).config.vault_address == DEFAULT_VAULT_ADDRESS


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    path = write_settings(tmp_path / "settings.yaml", vault_address="https://v", legacy_flag=True)

    assert ConfigStore(path).config.vault_address == "https://v"


def test_reload_picks_up_external_edits(tmp_path: Path) -> None:
    hub = StateBroadcaster()
    events = _changes(hub)
    path = write_settings(tmp_path / "settings.yaml", login_timeout_seconds=30)
    store = ConfigStore(path, broadcaster=hub)

    write_settings(path, login_timeout_seconds=45)
    assert store.reload().login_timeout_seconds == 45
    assert events == ["changed"]


@pytest.mark.skipif(platform.system() == "Windows", reason="POSIX permissions")
def test_settings_file_is_private(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "nested" / "settings.yaml")
    store.update(vault_address="https://vault.example.com")

    assert oct(os.stat(store.path).st_mode)[-3:] == "600"


@pytest.mark.skipif(platform.system() == "Windows", reason="POSIX permissions")
def test_executable_exists(tmp_path: Path) -> None:
    script = tmp_path / "vault"
    script.write_text("#!/bin/sh\n")

    assert ConfigStore.executable_exists(script) is False
    script.chmod(0o755)
    assert ConfigStore.executable_exists(str(script)) is True
    assert ConfigStore.executable_exists(tmp_path) is False
    assert ConfigStore.executable_exists(tmp_path / "missing") is False


def test_vtm_config_env_var_sets_default_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "from-env.yaml"
    monkeypatch.setenv("VTM_CONFIG", str(target))

    assert ConfigStore().path == target
