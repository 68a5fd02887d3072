"""Persisted settings for the vault login tooling."""

from __future__ import annotations

import sys
from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_VAULT_ADDRESS = "https://vault.your-address.com"
DEFAULT_TOKEN_VALIDITY_HOURS = 12
DEFAULT_LOGIN_TIMEOUT_SECONDS = 60


def default_vault_path(platform: str | None = None) -> str:
    """Return the usual install location of the vault CLI for *platform*.

    Args:
        platform: Override for ``sys.platform`` (for testing on Linux CI).
    """
    current = platform or sys.platform
    if current == "darwin":
        return "/opt/homebrew/bin/vault"
    if current.startswith("win"):
        return "C:\\Program Files\\vault\\vault.exe"
    return "/usr/bin/vault"


class VaultConfig(BaseModel):
    """Vault server address, token lifetime and CLI location."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    vault_address: str = DEFAULT_VAULT_ADDRESS
    token_validity_hours: int = Field(default=DEFAULT_TOKEN_VALIDITY_HOURS, gt=0)
    login_timeout_seconds: int = Field(default=DEFAULT_LOGIN_TIMEOUT_SECONDS, gt=0)
    vault_executable_path: str = Field(default_factory=default_vault_path)

    @field_validator("vault_address", "vault_executable_path")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @property
    def token_validity(self) -> timedelta:
        return timedelta(hours=self.token_validity_hours)

    @property
    def login_timeout(self) -> timedelta:
        return timedelta(seconds=self.login_timeout_seconds)
