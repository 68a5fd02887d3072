"""Typed failures raised by the login supervisor and settings store.

Every login failure leaves the supervisor idle and ready for another attempt.
"""

from __future__ import annotations

import signal
from enum import StrEnum

# 128 + SIGKILL, the status a shell reports for a force-killed process.
CANCELED_EXIT_CODE = 128 + int(getattr(signal, "SIGKILL", 9))


class LoginErrorCode(StrEnum):
    """Stable error-code vocabulary for login failures."""

    ALREADY_IN_PROGRESS = "already_in_progress"
    EXECUTABLE_NOT_FOUND = "executable_not_found"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELED = "canceled"
    LAUNCH_FAILED = "launch_failed"
    INTERRUPTED = "interrupted"
    INVALID_CONFIGURATION = "invalid_configuration"


class ConfigError(RuntimeError):
    """Raised when the settings file cannot be read, parsed or written."""


class LoginError(RuntimeError):
    """Base class for every ``ensure_token`` failure."""

    code: LoginErrorCode = LoginErrorCode.FAILED

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    @property
    def is_cancellation(self) -> bool:
        """True when callers should present this as a cancel, not an error."""
        return self.exit_code == CANCELED_EXIT_CODE


class AlreadyInProgressError(LoginError):
    code = LoginErrorCode.ALREADY_IN_PROGRESS

    def __init__(self) -> None:
        super().__init__("Login process already in progress")


class ExecutableNotFoundError(LoginError):
    code = LoginErrorCode.EXECUTABLE_NOT_FOUND

    def __init__(self, path: str) -> None:
        super().__init__(f"Vault executable not found at: {path}")
        self.path = path


class LoginTimedOutError(LoginError):
    code = LoginErrorCode.TIMED_OUT

    def __init__(self, timeout_seconds: int) -> None:
        super().__init__(f"Login process timed out after {timeout_seconds} seconds")
        self.timeout_seconds = timeout_seconds


class LoginFailedError(LoginError):
    code = LoginErrorCode.FAILED

    def __init__(self, exit_code: int) -> None:
        super().__init__(f"Vault login failed with exit code: {exit_code}", exit_code=exit_code)


class LoginCanceledError(LoginFailedError):
    """The attempt was claimed by ``cancel()`` before it finished."""

    code = LoginErrorCode.CANCELED

    def __init__(self, exit_code: int | None = None) -> None:
        LoginError.__init__(
            self,
            "Vault login process was canceled",
            exit_code=CANCELED_EXIT_CODE if exit_code is None else exit_code,
        )

    @property
    def is_cancellation(self) -> bool:
        return True


class ProcessLaunchError(LoginError):
    code = LoginErrorCode.LAUNCH_FAILED

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to run vault login: {reason}")


class InterruptedWaitError(LoginError):
    code = LoginErrorCode.INTERRUPTED

    def __init__(self) -> None:
        super().__init__("Vault login process was interrupted")

    @property
    def is_cancellation(self) -> bool:
        return True


class InvalidConfigurationError(LoginError):
    code = LoginErrorCode.INVALID_CONFIGURATION

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Invalid configuration: {field} must be a positive integer (got {value!r})")
        self.field = field


def normalize_exit_code(returncode: int) -> int:
    """Map a negative POSIX ``returncode`` (killed by signal N) to ``128 + N``."""
    if returncode < 0:
        return 128 - returncode
    return returncode
