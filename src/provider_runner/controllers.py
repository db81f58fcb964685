"""Controllers for provider CLI commands."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import BinaryIO

from provider_runner.config import RunnerSettings, Settings
from provider_runner.errors import ProviderNotFoundError
from provider_runner.provider import execute_provider, resolve_provider
from provider_runner.reporting import (
    render_failure,
    render_missing_provider,
    render_output_banner,
    render_output_footer,
    render_provider_config,
    render_provider_not_found,
    render_run_error,
    render_timeout,
    render_transcript,
)


@dataclass(slots=True)
class ProviderRunCommand:
    """CLI input for one provider run."""

    provider: str | None
    prompt: str
    timeout_seconds: int | None = None
    stream: bool | None = None
    shell: bool | None = None


@dataclass(slots=True)
class ProviderInspectCommand:
    """CLI input for provider check / info."""

    provider: str | None


@dataclass(slots=True)
class ProviderCommandResult:
    """Report to render in CLI: ``lines`` go to stdout, ``error_lines`` to stderr."""

    lines: list[str]
    error_lines: list[str] = field(default_factory=list)
    success: bool = True
    timed_out: bool = False


@dataclass(slots=True)
class ProviderRunPlan:
    """Validated run ready to execute, or the reason it cannot run."""

    provider: str
    prompt: str
    settings: RunnerSettings
    lines: list[str]
    error_lines: list[str] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        return not self.error_lines


class ProviderCliController:
    """Coordinates provider validation, execution and reporting for the CLI."""

    def __init__(self, *, sink: BinaryIO | None = None) -> None:
        self._sink = sink

    def info(self, command: ProviderInspectCommand) -> ProviderCommandResult:
        provider = _effective_provider(command.provider)
        if not provider:
            return ProviderCommandResult(
                lines=[],
                error_lines=render_missing_provider(),
                success=False,
            )
        return ProviderCommandResult(lines=render_provider_config(provider))

    def check(self, command: ProviderInspectCommand) -> ProviderCommandResult:
        provider = _effective_provider(command.provider)
        if not provider:
            return ProviderCommandResult(
                lines=[],
                error_lines=render_missing_provider(),
                success=False,
            )
        resolved = resolve_provider(provider)
        if resolved is None:
            return ProviderCommandResult(
                lines=[],
                error_lines=render_provider_not_found(provider),
                success=False,
            )
        return ProviderCommandResult(lines=[f"Provider executable: {resolved}"])

    def prepare(self, command: ProviderRunCommand) -> ProviderRunPlan:
        """Resolve settings and validate the provider before anything is spawned."""

        try:
            settings = Settings.from_env()
        except ValueError as error:
            return ProviderRunPlan(
                provider=(command.provider or "").strip(),
                prompt=command.prompt,
                settings=RunnerSettings(),
                lines=[],
                error_lines=[str(error)],
            )
        provider = (command.provider or settings.provider).strip()
        runner_settings = _override_runner_settings(settings.runner, command)

        if not provider:
            return ProviderRunPlan(
                provider=provider,
                prompt=command.prompt,
                settings=runner_settings,
                lines=[],
                error_lines=render_missing_provider(),
            )

        config_lines = render_provider_config(provider)
        if resolve_provider(provider) is None:
            return ProviderRunPlan(
                provider=provider,
                prompt=command.prompt,
                settings=runner_settings,
                lines=config_lines,
                error_lines=render_provider_not_found(provider),
            )

        return ProviderRunPlan(
            provider=provider,
            prompt=command.prompt,
            settings=runner_settings,
            lines=[*config_lines, *render_output_banner()],
        )

    def execute(self, plan: ProviderRunPlan) -> ProviderCommandResult:
        """Run a prepared plan; output is mirrored live when streaming is on."""

        outcome = execute_provider(
            plan.provider,
            plan.prompt,
            settings=plan.settings,
            sink=self._sink,
        )

        if outcome.error is not None:
            error_lines = (
                render_provider_not_found(plan.provider)
                if isinstance(outcome.error, ProviderNotFoundError)
                else render_run_error(outcome.error)
            )
            return ProviderCommandResult(
                lines=render_output_footer(),
                error_lines=error_lines,
                success=False,
            )

        result = outcome.result
        if result is None or (not outcome.success and outcome.hint is None):
            raise RuntimeError("Provider outcome is missing its execution result.")
        if plan.settings.stream_to_terminal:
            lines = render_output_footer()
        else:
            lines = render_transcript(result)
        if outcome.success:
            return ProviderCommandResult(lines=lines)

        if result.timed_out:
            return ProviderCommandResult(
                lines=lines,
                error_lines=render_timeout(
                    plan.provider,
                    result,
                    outcome.hint,
                    timeout_seconds=plan.settings.timeout_seconds,
                ),
                success=False,
                timed_out=True,
            )
        return ProviderCommandResult(
            lines=lines,
            error_lines=render_failure(plan.provider, result, outcome.hint),
            success=False,
        )


def _effective_provider(provider: str | None) -> str:
    if provider and provider.strip():
        return provider.strip()
    return os.getenv("PROVIDER_RUNNER_PROVIDER", "").strip()


def _override_runner_settings(
    settings: RunnerSettings,
    command: ProviderRunCommand,
) -> RunnerSettings:
    overrides: dict[str, object] = {}
    if command.timeout_seconds is not None:
        overrides["timeout_seconds"] = command.timeout_seconds
    if command.stream is not None:
        overrides["stream_to_terminal"] = command.stream
    if command.shell is not None:
        overrides["shell"] = command.shell
    return replace(settings, **overrides)
