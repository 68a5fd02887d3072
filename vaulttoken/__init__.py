"""Vault token lifecycle manager: OIDC login supervision and token freshness tracking."""

__version__ = "0.3.0"
