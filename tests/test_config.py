from __future__ import annotations

import allure
import pytest

from provider_runner.config import DEFAULT_TIMEOUT_SECONDS, RunnerSettings, Settings

pytestmark = [
    allure.epic("Provider Runtime"),
    allure.feature("Configuration"),
]


def test_runner_settings_defaults() -> None:
    settings = RunnerSettings()

    assert settings.timeout_seconds == DEFAULT_TIMEOUT_SECONDS == 300
    assert settings.stream_to_terminal is False
    assert settings.shell is False


def test_from_env_uses_defaults_without_environment() -> None:
    settings = Settings.from_env()

    assert settings.provider == ""
    assert settings.runner == RunnerSettings()


def test_from_env_reads_provider_timeout_and_flags(monkeypatch) -> None:
    monkeypatch.setenv("PROVIDER_RUNNER_PROVIDER", "  opencode run --model X ")
    monkeypatch.setenv("PROVIDER_RUNNER_TIMEOUT_SECONDS", "0")
    monkeypatch.setenv("PROVIDER_RUNNER_DEBUG", "true")
    monkeypatch.setenv("PROVIDER_RUNNER_SHELL", "1")

    settings = Settings.from_env()

    assert settings.provider == "opencode run --model X"
    assert settings.runner.timeout_seconds == 0
    assert settings.runner.stream_to_terminal is True
    assert settings.runner.shell is True


def test_from_env_accepts_explicit_false_flag(monkeypatch) -> None:
    monkeypatch.setenv("PROVIDER_RUNNER_DEBUG", "off")

    assert Settings.from_env().runner.stream_to_terminal is False


def test_from_env_rejects_unrecognized_flag_value(monkeypatch) -> None:
    monkeypatch.setenv("PROVIDER_RUNNER_DEBUG", "ture")

    with pytest.raises(ValueError, match="PROVIDER_RUNNER_DEBUG"):
        Settings.from_env()


def test_from_env_rejects_non_integer_timeout(monkeypatch) -> None:
    monkeypatch.setenv("PROVIDER_RUNNER_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ValueError, match="PROVIDER_RUNNER_TIMEOUT_SECONDS"):
        Settings.from_env()
