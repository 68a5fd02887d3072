"""Shared filesystem state path helpers."""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_ENV_VAR = "VTM_CONFIG"
TOKEN_FILE_NAME = ".vault-token"
SETTINGS_FILE_NAME = "settings.yaml"


def resolve_root(root: str | Path | None = None) -> Path:
    """Resolve the per-user state root (``~/.vaulttoken`` by default)."""
    if root is None:
        return Path.home() / ".vaulttoken"
    return Path(root).expanduser()


def root_path(root: str | Path | None, *parts: str) -> Path:
    """Resolve a child path within the state root."""
    resolved = resolve_root(root)
    for part in parts:
        resolved = resolved / part
    return resolved


def settings_path(root: str | Path | None = None) -> Path:
    """Return the settings file path, honouring ``VTM_CONFIG`` when set."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override and root is None:
        return Path(override).expanduser()
    return root_path(root, SETTINGS_FILE_NAME)


def login_lock_path(root: str | Path | None = None) -> Path:
    """Return the cross-process login lock path for a root."""
    return root_path(root, "state", "login.lock")


def default_token_path() -> Path:
    """Return the token file the vault CLI writes after ``vault login``."""
    return Path.home() / TOKEN_FILE_NAME
