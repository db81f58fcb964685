"""Shared test fixtures."""

from __future__ import annotations

import shlex
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

_ENV_VARS = (
    "PROVIDER_RUNNER_PROVIDER",
    "PROVIDER_RUNNER_TIMEOUT_SECONDS",
    "PROVIDER_RUNNER_DEBUG",
    "PROVIDER_RUNNER_SHELL",
)


@pytest.fixture(autouse=True)
def _clean_provider_env(monkeypatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def provider_script(tmp_path: Path) -> Callable[[str, str], str]:
    """Write a Python fake provider and return the command string that runs it."""

    def _write(name: str, source: str) -> str:
        script = tmp_path / f"{name}.py"
        script.write_text(source.strip() + "\n", "utf-8")
        return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"

    return _write


@pytest.fixture()
def echo_provider(provider_script) -> str:
    """Provider that copies stdin to stdout byte-for-byte."""

    return provider_script(
        "echo_provider",
        """
import sys

sys.stdout.buffer.write(sys.stdin.buffer.read())
sys.stdout.buffer.flush()
""",
    )
