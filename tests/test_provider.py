from __future__ import annotations

import shlex
import sys

import allure

from provider_runner.config import RunnerSettings
from provider_runner.errors import PromptResourceError, ProviderNotFoundError
from provider_runner.models import TIMEOUT_EXIT_STATUS, HintCategory
from provider_runner.provider import (
    execute_provider,
    extract_model,
    provider_executable,
    resolve_provider,
)

pytestmark = [
    allure.epic("Provider Runtime"),
    allure.feature("Provider Operations"),
]


def test_provider_executable_returns_first_token() -> None:
    assert provider_executable("opencode run --model X") == "opencode"
    assert provider_executable("  gemini  ") == "gemini"
    assert provider_executable("") == ""


def test_resolve_provider_finds_executable_on_path() -> None:
    assert resolve_provider(f"{shlex.quote(sys.executable)} -V") == sys.executable
    assert resolve_provider("nonexistent-binary-xyz run") is None
    assert resolve_provider("   ") is None


def test_extract_model_supports_space_and_equals_forms() -> None:
    assert extract_model("opencode run --model anthropic/claude-opus-4-5") == (
        "anthropic/claude-opus-4-5"
    )
    assert extract_model("gemini --model=gemini-2.5-pro --yolo") == "gemini-2.5-pro"
    assert extract_model("ollama run llama3.2") is None


def test_execute_provider_succeeds_for_zero_exit(echo_provider: str) -> None:
    outcome = execute_provider(echo_provider, "hello")

    assert outcome.success is True
    assert outcome.result is not None
    assert outcome.result.captured_output == "hello"
    assert outcome.hint is None
    assert outcome.error is None


def test_execute_provider_classifies_failed_output(provider_script) -> None:
    command = provider_script(
        "model_missing",
        """
import sys

print("Error: model not found (404)")
sys.exit(1)
""",
    )

    outcome = execute_provider(command, "prompt")

    assert outcome.success is False
    assert outcome.result is not None
    assert outcome.result.exit_status == 1
    assert outcome.hint is not None
    assert outcome.hint.category == HintCategory.MODEL_NOT_FOUND


def test_execute_provider_reports_timeout(provider_script) -> None:
    command = provider_script("hang", "import time\ntime.sleep(30)")

    outcome = execute_provider(
        command,
        "",
        settings=RunnerSettings(timeout_seconds=1, terminate_grace_seconds=1.0),
    )

    assert outcome.success is False
    assert outcome.result is not None
    assert outcome.result.timed_out is True
    assert outcome.result.exit_status == TIMEOUT_EXIT_STATUS
    assert outcome.hint is not None


def test_execute_provider_returns_configuration_fault_instead_of_raising() -> None:
    outcome = execute_provider("nonexistent-binary-xyz", "prompt")

    assert outcome.success is False
    assert outcome.result is None
    assert isinstance(outcome.error, ProviderNotFoundError)


def test_provider_executable_honours_quoting() -> None:
    assert provider_executable("'/opt/my tools/gemini' --yolo") == "/opt/my tools/gemini"


def test_execute_provider_returns_resource_fault_for_unencodable_prompt(
    echo_provider: str,
) -> None:
    outcome = execute_provider(echo_provider, "lone \ud800 surrogate")

    assert outcome.success is False
    assert outcome.result is None
    assert isinstance(outcome.error, PromptResourceError)
