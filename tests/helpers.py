"""Test helpers for fake vault executables, token files and settings."""

from __future__ import annotations

import os
import time
from datetime import timedelta
from pathlib import Path

import pytest
import yaml

posix_only = pytest.mark.skipif(os.name == "nt", reason="fake vault scripts need /bin/sh")


def write_fake_vault(directory: Path, body: str, *, name: str = "vault") -> Path:
    """Write an executable POSIX shell script standing in for the vault CLI."""
    directory.mkdir(parents=True, exist_ok=True)
    script = directory / name
    script.write_text("#!/bin/sh\n" + body.strip() + "\n", encoding="utf-8")
    script.chmod(0o755)
    return script


def write_token(path: Path, *, age: timedelta = timedelta(0)) -> Path:
    """Create a token file whose mtime is *age* in the past."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("s.not-a-real-token\n", encoding="utf-8")
    stamp = time.time() - age.total_seconds()
    os.utime(path, (stamp, stamp))
    return path


def write_settings(path: Path, **values: object) -> Path:
    """Write a settings.yaml with the given keys."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(values, sort_keys=True), encoding="utf-8")
    return path


def wait_for(predicate, *, timeout: float = 5.0, interval: float = 0.01) -> bool:
    """Poll *predicate* until it is truthy or *timeout* elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())
