"""Token freshness computed from the token file's modification time."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from vaulttoken.core.config_store import ConfigStore, token_validity_window
from vaulttoken.utils.state import default_token_path

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ValidityTracker:
    """Answers "is the token the vault CLI wrote still fresh?".

    The token content is never read; only the file's existence and mtime
    count. A token is valid while ``mtime + validity window`` lies in the
    future.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        *,
        token_path: str | Path | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.config_store = config_store
        self.token_path = Path(token_path).expanduser() if token_path is not None else default_token_path()
        self._clock = clock

    def last_modified(self) -> datetime | None:
        """Return the token file mtime, or None if it is missing or unreadable."""
        try:
            stat = self.token_path.stat()
        except FileNotFoundError:
            return None
        except OSError:
            logger.warning("Cannot stat token file %s", self.token_path, exc_info=True)
            return None
        return datetime.fromtimestamp(stat.st_mtime, tz=UTC)

    def remaining_validity(self) -> timedelta:
        """Validity window minus token age; zero when there is no token.

        The result is negative once the token has expired.
        """
        window = token_validity_window(self.config_store.config)
        modified = self.last_modified()
        if modified is None:
            return timedelta(0)
        age = self._clock() - modified
        return window - age

    def is_valid(self) -> bool:
        return self.remaining_validity() > timedelta(0)
