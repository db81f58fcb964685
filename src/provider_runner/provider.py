"""Provider-level operations built on top of the command runner."""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass
from typing import BinaryIO

from provider_runner.config import RunnerSettings
from provider_runner.errors import ProviderRunError
from provider_runner.failure_classifier import classify_failure
from provider_runner.models import ExecutionResult, FailureHint
from provider_runner.runner import CommandRunner, command_head

logger = logging.getLogger(__name__)

_MODEL_FLAG_PATTERN = re.compile(r"--model[= ](\S+)")


@dataclass(slots=True)
class ProviderOutcome:
    """Definite success/failure signal for one provider invocation.

    ``result`` is missing when the provider could not be run at all; ``error``
    then carries the fault.
    """

    success: bool
    result: ExecutionResult | None = None
    hint: FailureHint | None = None
    error: ProviderRunError | None = None


def provider_executable(command: str) -> str:
    """Return the executable token of a provider command (shell quoting honoured)."""

    return command_head(command)


def resolve_provider(command: str) -> str | None:
    """Return the resolved path of the provider executable, if it is on PATH."""

    executable = provider_executable(command)
    if not executable:
        return None
    return shutil.which(executable)


def extract_model(command: str) -> str | None:
    """Return the ``--model`` value embedded in a provider command, if any."""

    match = _MODEL_FLAG_PATTERN.search(command)
    if match is None:
        return None
    return match.group(1)


def execute_provider(
    command: str,
    prompt: str,
    *,
    settings: RunnerSettings | None = None,
    sink: BinaryIO | None = None,
) -> ProviderOutcome:
    """Run a provider once and classify its output if it failed."""

    runner = CommandRunner(settings, sink=sink)
    try:
        result = runner.run(command, prompt)
    except ProviderRunError as error:
        logger.error("Provider %r could not be run: %s", command, error)
        return ProviderOutcome(success=False, error=error)

    if result.succeeded:
        return ProviderOutcome(success=True, result=result)

    hint = classify_failure(result.captured_output)
    logger.info(
        "Provider %r failed: status=%s timed_out=%s hint=%s",
        command,
        result.exit_status,
        result.timed_out,
        hint.category.value,
    )
    return ProviderOutcome(success=False, result=result, hint=hint)
