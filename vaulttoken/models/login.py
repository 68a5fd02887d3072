"""Login attempt and token status models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class AttemptState(StrEnum):
    """Lifecycle of a single supervised login attempt."""

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELED = "canceled"


class LoginOutcome(StrEnum):
    """Successful results of ``ensure_token``."""

    COMPLETED = "completed"
    ALREADY_VALID = "already_valid"


class TokenStatus(BaseModel):
    """Point-in-time view of the token and login machinery."""

    valid: bool
    remaining_seconds: int
    login_in_progress: bool
    executable_available: bool
    executable_path: str
    vault_address: str
    token_path: str
