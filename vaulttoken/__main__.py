"""Allow ``python -m vaulttoken``."""

from vaulttoken.cli.main import cli

if __name__ == "__main__":
    cli()
