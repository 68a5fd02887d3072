"""Tests for config/login models, error helpers and duration formatting."""

from __future__ import annotations

from datetime import timedelta
from io import StringIO

import pytest
from pydantic import ValidationError
from rich.console import Console

from vaulttoken.core.errors import (
    CANCELED_EXIT_CODE,
    AlreadyInProgressError,
    ExecutableNotFoundError,
    InterruptedWaitError,
    LoginCanceledError,
    LoginErrorCode,
    LoginFailedError,
    LoginTimedOutError,
    normalize_exit_code,
)
from vaulttoken.core.manager import format_duration
from vaulttoken.models.config import VaultConfig, default_vault_path
from vaulttoken.models.login import TokenStatus
from vaulttoken.ui.notify import LoginStateNotifier, Severity, classify_login_error
from vaulttoken.ui.tables import status_rows


@pytest.mark.parametrize(
    "platform,expected",
    [
        ("darwin", "/opt/homebrew/bin/vault"),
        ("win32", "C:\\Program Files\\vault\\vault.exe"),
        ("linux", "/usr/bin/vault"),
        ("freebsd14", "/usr/bin/vault"),
    ],
)
def test_default_vault_path(platform: str, expected: str) -> None:
    assert default_vault_path(platform) == expected


def test_config_durations() -> None:
    config = VaultConfig(token_validity_hours=4, login_timeout_seconds=90)

    assert config.token_validity == timedelta(hours=4)
    assert config.login_timeout == timedelta(seconds=90)


@pytest.mark.parametrize("field", ["token_validity_hours", "login_timeout_seconds"])
@pytest.mark.parametrize("value", [0, -1])
def test_config_rejects_non_positive(field: str, value: int) -> None:
    with pytest.raises(ValidationError):
        VaultConfig(**{field: value})


def test_config_strips_address() -> None:
    assert VaultConfig(vault_address="  https://vault.example.com ").vault_address == (
        "https://vault.example.com"
    )


@pytest.mark.parametrize(
    "duration,expected",
    [
        (timedelta(0), "00h 00m 00s"),
        (timedelta(hours=11, minutes=59, seconds=7), "11h 59m 07s"),
        (timedelta(hours=36, seconds=1), "36h 00m 01s"),
        (timedelta(minutes=-5), "00h 00m 00s"),
    ],
)
def test_format_duration(duration: timedelta, expected: str) -> None:
    assert format_duration(duration) == expected


def test_normalize_exit_code() -> None:
    assert normalize_exit_code(0) == 0
    assert normalize_exit_code(2) == 2
    assert normalize_exit_code(-9) == CANCELED_EXIT_CODE == 137
    assert normalize_exit_code(-15) == 143


def test_error_codes_and_cancellation_flags() -> None:
    assert AlreadyInProgressError().code is LoginErrorCode.ALREADY_IN_PROGRESS
    assert ExecutableNotFoundError("/x").code is LoginErrorCode.EXECUTABLE_NOT_FOUND
    assert LoginTimedOutError(60).is_cancellation is False
    assert LoginFailedError(1).is_cancellation is False
    assert LoginFailedError(137).is_cancellation is True
    assert LoginCanceledError().exit_code == 137
    assert LoginCanceledError(0).is_cancellation is True
    assert isinstance(LoginCanceledError(), LoginFailedError)
    assert InterruptedWaitError().is_cancellation is True


def test_classify_login_error() -> None:
    assert classify_login_error(LoginFailedError(137)) == (
        "Vault login process was canceled",
        Severity.WARNING,
    )
    message, severity = classify_login_error(LoginTimedOutError(60))
    assert severity is Severity.ERROR
    assert message == "Login process timed out after 60 seconds"


def test_login_state_notifier_prints_transitions() -> None:
    buffer = StringIO()
    notifier = LoginStateNotifier(Console(file=buffer, width=120))

    notifier(True)
    notifier(False)

    assert notifier.transitions == [True, False]
    output = buffer.getvalue()
    assert "Login process ongoing..." in output
    assert "Login process finished." in output


def _status(**overrides: object) -> TokenStatus:
    values: dict[str, object] = {
        "valid": True,
        "remaining_seconds": 3725,
        "login_in_progress": False,
        "executable_available": True,
        "executable_path": "/usr/bin/vault",
        "vault_address": "https://vault.example.com",
        "token_path": "/home/dev/.vault-token",
    }
    values.update(overrides)
    return TokenStatus.model_validate(values)


def test_status_rows_for_valid_token() -> None:
    rows = status_rows(_status())

    assert rows == [
        ("Vault executable", True, "/usr/bin/vault"),
        ("Token is valid", True, "Valid for: 01h 02m 05s"),
    ]


def test_status_rows_flag_missing_executable_and_running_login() -> None:
    rows = status_rows(
        _status(valid=False, remaining_seconds=0, executable_available=False, login_in_progress=True)
    )

    labels = [label for label, _, _ in rows]
    assert labels == [
        "Vault executable not found",
        "Token is invalid or not found",
        "Login process ongoing...",
    ]
    assert all(ok is False for _, ok, _ in rows)
