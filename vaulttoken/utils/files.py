"""Filesystem helpers for settings persistence and executable checks."""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, data: str, *, private: bool = False) -> None:
    """Atomically write text data to a file with fsync.

    With ``private=True`` the temporary file is chmod'ed to 0600 before it
    replaces *path*, so the final file is never world-readable.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    with open(tmp_path, "w", encoding="utf-8") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())

    if private:
        set_secure_permissions(tmp_path)
    os.replace(tmp_path, path)
    _fsync_directory(path.parent)


def _fsync_directory(path: Path) -> None:
    """Best-effort fsync on a directory after atomic replace."""
    try:
        fd = os.open(path, os.O_DIRECTORY)
    except (OSError, AttributeError):
        return
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def set_secure_permissions(path: Path) -> None:
    """Set file permissions to 0600 on POSIX systems."""
    if platform.system() == "Windows":
        return
    try:
        os.chmod(path, 0o600)
    except OSError:
        logger.warning("Could not set secure permissions on %s", path)


def executable_exists(path: str | Path) -> bool:
    """Return True if *path* is an existing file the current user may execute."""
    candidate = Path(path).expanduser()
    return candidate.is_file() and os.access(candidate, os.X_OK)
