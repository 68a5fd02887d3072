"""Product naming shared by the CLI and rendered output."""

from __future__ import annotations

PRODUCT_NAME = "Vault Token Manager"
CLI_PRIMARY_COMMAND = "vtm"
