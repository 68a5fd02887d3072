"""Single-flight supervision of the external ``vault login -method oidc`` process."""

from __future__ import annotations

import itertools
import logging
import os
import subprocess
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from vaulttoken.core.broadcast import StateBroadcaster
from vaulttoken.core.config_store import ConfigStore, login_timeout_seconds
from vaulttoken.core.errors import (
    AlreadyInProgressError,
    ExecutableNotFoundError,
    InterruptedWaitError,
    LoginCanceledError,
    LoginError,
    LoginFailedError,
    LoginTimedOutError,
    ProcessLaunchError,
    normalize_exit_code,
)
from vaulttoken.core.validity import ValidityTracker
from vaulttoken.models.login import AttemptState, LoginOutcome

logger = logging.getLogger(__name__)

LOGIN_ARGS = ("login", "-method", "oidc")
VAULT_ADDR_ENV = "VAULT_ADDR"


@dataclass
class _Attempt:
    attempt_id: int
    state: AttemptState = AttemptState.STARTING
    process: subprocess.Popen[Any] | None = None
    canceled: bool = False
    # login-state(True) delivered; login-state(False) delivered.
    announced: bool = False
    end_announced: bool = False


def _terminal_state(exc: BaseException) -> AttemptState:
    if isinstance(exc, LoginError) and exc.is_cancellation:
        return AttemptState.CANCELED
    if isinstance(exc, LoginTimedOutError):
        return AttemptState.TIMED_OUT
    return AttemptState.FAILED


def _kill(process: subprocess.Popen[Any]) -> None:
    try:
        process.kill()
    except OSError:
        logger.debug("vault login process %s already gone", process.pid)


class LoginProcessSupervisor:
    """Runs at most one vault login at a time and lets another thread cancel it.

    The current attempt (and with it the process handle) lives behind one
    lock: registering an attempt is an atomic check-and-set, and exactly one
    of ``cancel()`` or the waiting thread claims the handle and clears it.
    ``login-state`` events are published outside the lock.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        tracker: ValidityTracker,
        broadcaster: StateBroadcaster,
        *,
        popen: Callable[..., subprocess.Popen[Any]] = subprocess.Popen,
    ) -> None:
        self.config_store = config_store
        self.tracker = tracker
        self.broadcaster = broadcaster
        self._popen = popen
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._attempt: _Attempt | None = None
        self._last_state = AttemptState.IDLE

    def is_in_progress(self) -> bool:
        with self._lock:
            return self._attempt is not None

    @property
    def state(self) -> AttemptState:
        """State of the running attempt, ``idle`` when there is none."""
        with self._lock:
            return self._attempt.state if self._attempt is not None else AttemptState.IDLE

    @property
    def last_state(self) -> AttemptState:
        """Terminal state of the most recently finished attempt."""
        with self._lock:
            return self._last_state

    def ensure_token(self) -> LoginOutcome:
        """Make sure a fresh token exists, running ``vault login`` if needed.

        Blocks the calling thread until the login finishes, times out or is
        canceled.

        Raises:
            AlreadyInProgressError: Another attempt is running.
            ExecutableNotFoundError: The configured vault CLI is missing.
            LoginTimedOutError: The login took longer than the configured timeout.
            LoginFailedError: vault exited non-zero (``LoginCanceledError`` if canceled).
            ProcessLaunchError: The OS refused to start the process.
            InterruptedWaitError: The waiting thread was interrupted.
        """
        attempt = self._begin()

        terminal = AttemptState.FAILED
        try:
            self.broadcaster.publish_login_state(True)
            if self._announce(attempt):
                raise LoginCanceledError()
            outcome = self._run(attempt)
            terminal = AttemptState.COMPLETED
            return outcome
        except BaseException as exc:
            terminal = _terminal_state(exc)
            raise
        finally:
            if self._finish(attempt, terminal):
                self.broadcaster.publish_login_state(False)

    def cancel(self) -> bool:
        """Force-kill the running login. Returns False when nothing was running."""
        with self._lock:
            attempt = self._attempt
            if attempt is None:
                return False
            attempt.canceled = True
            attempt.state = AttemptState.CANCELED
            process = attempt.process
            attempt.process = None
            self._attempt = None
            self._last_state = AttemptState.CANCELED
            publish_end = self._take_end_announcement(attempt)
            if process is not None:
                _kill(process)

        logger.info("Vault login process was manually canceled")
        if publish_end:
            self.broadcaster.publish_login_state(False)
        return True

    def _begin(self) -> _Attempt:
        with self._lock:
            if self._attempt is not None:
                raise AlreadyInProgressError()
            attempt = _Attempt(attempt_id=next(self._ids))
            self._attempt = attempt
        return attempt

    def _announce(self, attempt: _Attempt) -> bool:
        """Mark login-state(True) as delivered. Returns True if already canceled."""
        with self._lock:
            attempt.announced = True
            return attempt.canceled

    @staticmethod
    def _take_end_announcement(attempt: _Attempt) -> bool:
        """Claim the login-state(False) event for *attempt*. Call with the lock held.

        Only an announced attempt gets one, and only once; an attempt canceled
        before its login-state(True) went out is closed by ensure_token instead.
        """
        if not attempt.announced or attempt.end_announced:
            return False
        attempt.end_announced = True
        return True

    def _finish(self, attempt: _Attempt, terminal: AttemptState) -> bool:
        """Release *attempt* if it is still current.

        Returns True when the caller must publish login-state(False).
        """
        with self._lock:
            attempt.process = None
            if self._attempt is attempt:
                attempt.state = terminal
                self._attempt = None
                self._last_state = terminal
            return self._take_end_announcement(attempt)

    def _claim(self, attempt: _Attempt, process: subprocess.Popen[Any]) -> bool:
        """Take ownership of *process* back from the attempt, unless cancel() has."""
        with self._lock:
            if attempt.canceled or attempt.process is not process:
                return False
            attempt.process = None
            return True

    def _run(self, attempt: _Attempt) -> LoginOutcome:
        config = self.config_store.config
        logger.debug("Setting VAULT_ADDR to: %s", config.vault_address)
        logger.debug("Using vault executable: %s", config.vault_executable_path)

        if self.tracker.is_valid():
            logger.debug("Token still valid; skipping vault login")
            return LoginOutcome.ALREADY_VALID

        executable = config.vault_executable_path
        if not self.config_store.executable_exists(executable):
            raise ExecutableNotFoundError(executable)

        timeout = login_timeout_seconds(config)
        process = self._spawn(attempt, executable, config.vault_address)
        return self._wait(attempt, process, timeout)

    def _spawn(self, attempt: _Attempt, executable: str, vault_address: str) -> subprocess.Popen[Any]:
        env = dict(os.environ)
        env[VAULT_ADDR_ENV] = vault_address
        command = [executable, *LOGIN_ARGS]

        logger.debug("Executing vault login command...")
        with self._lock:
            if attempt.canceled:
                raise LoginCanceledError()
            try:
                # stdout/stderr stay inherited so the browser-flow prompts are visible.
                process = self._popen(command, env=env)
            except OSError as exc:
                logger.error("OSError while running vault login command: %s", exc)
                raise ProcessLaunchError(str(exc)) from exc
            attempt.process = process
            attempt.state = AttemptState.RUNNING
        return process

    def _wait(self, attempt: _Attempt, process: subprocess.Popen[Any], timeout: int) -> LoginOutcome:
        try:
            returncode = process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            if self._claim(attempt, process):
                _kill(process)
                process.wait()
                logger.warning("Vault login timed out after %s seconds", timeout)
                raise LoginTimedOutError(timeout) from None
            returncode = process.wait()
        except KeyboardInterrupt:
            if self._claim(attempt, process):
                _kill(process)
            process.wait()
            logger.error("Interrupted while waiting for vault login")
            raise InterruptedWaitError() from None

        exit_code = normalize_exit_code(returncode)
        if not self._claim(attempt, process):
            raise LoginCanceledError(exit_code)
        if exit_code != 0:
            raise LoginFailedError(exit_code)

        logger.info("vault login command executed successfully.")
        return LoginOutcome.COMPLETED
