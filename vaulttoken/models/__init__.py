"""Pydantic data models for vault-token-manager."""

from vaulttoken.models.config import (
    DEFAULT_LOGIN_TIMEOUT_SECONDS,
    DEFAULT_TOKEN_VALIDITY_HOURS,
    DEFAULT_VAULT_ADDRESS,
    VaultConfig,
    default_vault_path,
)
from vaulttoken.models.login import AttemptState, LoginOutcome, TokenStatus

__all__ = [
    "AttemptState",
    "DEFAULT_LOGIN_TIMEOUT_SECONDS",
    "DEFAULT_TOKEN_VALIDITY_HOURS",
    "DEFAULT_VAULT_ADDRESS",
    "LoginOutcome",
    "TokenStatus",
    "VaultConfig",
    "default_vault_path",
]
