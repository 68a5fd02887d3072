"""Cross-process lock so two terminals never run the browser login at once."""

from __future__ import annotations

import json
import os
import time
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from vaulttoken.utils.state import login_lock_path


class LoginLockError(RuntimeError):
    """Raised when another process holds the login lock."""


@dataclass(frozen=True)
class LoginLockInfo:
    """Metadata persisted in the lock file."""

    pid: int
    command: str
    created_at: float

    def to_json(self) -> str:
        return json.dumps(
            {"pid": self.pid, "command": self.command, "created_at": self.created_at},
            sort_keys=True,
        )


def _pid_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
        return True
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError:
        return False


def read_lock_info(path: Path) -> LoginLockInfo | None:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        return LoginLockInfo(
            pid=int(payload["pid"]),
            command=str(payload["command"]),
            created_at=float(payload["created_at"]),
        )
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError):
        return None


def _busy_error(info: LoginLockInfo, path: Path) -> LoginLockError:
    return LoginLockError(
        f"another vault login is running (pid={info.pid}, command={info.command}). "
        f"If stale, clear it with `vtm unlock --force` or remove {path}."
    )


def clear_login_lock(root: str | Path | None, force: bool = False) -> bool:
    """Remove the login lock for *root*. Returns True if a lock file was removed.

    Raises LoginLockError if the holder is still alive and force=False.
    """
    path = login_lock_path(root)
    if not path.exists():
        return False
    info = read_lock_info(path)
    if not force and info and _pid_alive(info.pid):
        raise _busy_error(info, path)
    path.unlink(missing_ok=True)
    return True


def _create_exclusive(path: Path) -> int | None:
    try:
        return os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    except FileExistsError:
        return None


@contextmanager
def login_process_lock(root: str | Path | None, command: str) -> Generator[None, None, None]:
    """Hold ``<root>/state/login.lock`` for the duration of a login command.

    A lock left behind by a dead process is cleared once and re-acquired.
    """
    path = login_lock_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = _create_exclusive(path)
    if fd is None:
        existing = read_lock_info(path)
        if existing and _pid_alive(existing.pid):
            raise _busy_error(existing, path)
        path.unlink(missing_ok=True)
        fd = _create_exclusive(path)
        if fd is None:
            holder = read_lock_info(path)
            if holder is not None:
                raise _busy_error(holder, path)
            raise LoginLockError(f"could not acquire login lock at {path}")

    info = LoginLockInfo(pid=os.getpid(), command=command, created_at=time.time())
    try:
        os.write(fd, info.to_json().encode("utf-8"))
        os.close(fd)
        fd = None
        yield
    finally:
        if fd is not None:
            os.close(fd)
        path.unlink(missing_ok=True)
