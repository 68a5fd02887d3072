"""YAML-backed settings store that announces every change."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from vaulttoken.core.broadcast import StateBroadcaster
from vaulttoken.core.errors import ConfigError, InvalidConfigurationError
from vaulttoken.models.config import VaultConfig
from vaulttoken.utils.files import atomic_write_text, executable_exists
from vaulttoken.utils.state import settings_path

logger = logging.getLogger(__name__)


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


def _positive(field: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfigurationError(field, value)
    return value


def token_validity_window(config: VaultConfig) -> timedelta:
    """Return the validity window, rejecting non-positive hours."""
    return timedelta(hours=_positive("token_validity_hours", config.token_validity_hours))


def login_timeout_seconds(config: VaultConfig) -> int:
    """Return the login timeout, rejecting non-positive seconds."""
    return _positive("login_timeout_seconds", config.login_timeout_seconds)


class ConfigStore:
    """Owns the current ``VaultConfig`` and its on-disk YAML copy.

    The file is only read at construction (or ``reload``); a missing file
    yields defaults and is not created until the first ``update``.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        broadcaster: StateBroadcaster | None = None,
    ) -> None:
        self.path = Path(path).expanduser() if path is not None else settings_path()
        self.broadcaster = broadcaster
        self._lock = threading.Lock()
        self._config = self._load()

    @property
    def config(self) -> VaultConfig:
        with self._lock:
            return self._config

    @staticmethod
    def executable_exists(path: str | Path) -> bool:
        return executable_exists(path)

    def _load(self) -> VaultConfig:
        if not self.path.exists():
            logger.debug("No settings file at %s; using defaults", self.path)
            return VaultConfig()
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"Cannot read settings file {self.path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Settings file {self.path} is not valid YAML: {exc}") from exc

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Settings file {self.path} must contain a mapping")
        try:
            return VaultConfig.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(
                f"Invalid settings in {self.path}: {_format_validation_error(exc)}"
            ) from exc

    def reload(self) -> VaultConfig:
        """Re-read the settings file and announce the change."""
        config = self._load()
        with self._lock:
            self._config = config
        self._notify()
        return config

    def update(
        self,
        *,
        vault_address: str | None = None,
        token_validity_hours: int | None = None,
        login_timeout_seconds: int | None = None,
        vault_executable_path: str | None = None,
    ) -> VaultConfig:
        """Merge the given values, persist them and publish ``settings-changed``.

        ``None`` leaves a value unchanged.
        """
        changes: dict[str, Any] = {
            key: value
            for key, value in {
                "vault_address": vault_address,
                "token_validity_hours": token_validity_hours,
                "login_timeout_seconds": login_timeout_seconds,
                "vault_executable_path": vault_executable_path,
            }.items()
            if value is not None
        }

        with self._lock:
            merged = {**self._config.model_dump(), **changes}
            try:
                updated = VaultConfig.model_validate(merged)
            except ValidationError as exc:
                raise ConfigError(f"Invalid settings: {_format_validation_error(exc)}") from exc
            self._write(updated)
            self._config = updated

        logger.debug("Settings updated: %s", sorted(changes))
        self._notify()
        return updated

    def _write(self, config: VaultConfig) -> None:
        payload = yaml.safe_dump(config.model_dump(), sort_keys=True)
        try:
            atomic_write_text(self.path, payload, private=True)
        except OSError as exc:
            raise ConfigError(f"Cannot write settings file {self.path}: {exc}") from exc

    def _notify(self) -> None:
        if self.broadcaster is not None:
            self.broadcaster.publish_settings_changed()
