"""Runtime configuration for provider execution."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_TIMEOUT_SECONDS = 300


@dataclass(slots=True)
class RunnerSettings:
    """Options passed explicitly into ``CommandRunner``."""

    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    stream_to_terminal: bool = False
    shell: bool = False
    terminate_grace_seconds: float = 2.0


@dataclass(slots=True)
class Settings:
    """Application settings."""

    provider: str = ""
    runner: RunnerSettings = field(default_factory=RunnerSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults for interactive use."""

        return cls(
            provider=os.getenv("PROVIDER_RUNNER_PROVIDER", "").strip(),
            runner=RunnerSettings(
                timeout_seconds=_env_int(
                    "PROVIDER_RUNNER_TIMEOUT_SECONDS",
                    default=DEFAULT_TIMEOUT_SECONDS,
                ),
                stream_to_terminal=_env_bool("PROVIDER_RUNNER_DEBUG", default=False),
                shell=_env_bool("PROVIDER_RUNNER_SHELL", default=False),
            ),
        )


def _env_int(name: str, *, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from error


def _env_bool(name: str, *, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
