"""Command-line interface for vault-token-manager."""
