"""Human-readable rendering of provider runs, failures and configuration."""

from __future__ import annotations

import click

from provider_runner.errors import ProviderRunError
from provider_runner.failure_classifier import PROVIDER_EXAMPLES
from provider_runner.models import ExecutionResult, FailureHint
from provider_runner.provider import extract_model, provider_executable

OUTPUT_BANNER = "━━━ Provider Output ━━━"
OUTPUT_FOOTER = "━━━ End Output ━━━"


def render_output_banner() -> list[str]:
    return [click.style(OUTPUT_BANNER, fg="cyan"), ""]


def render_output_footer() -> list[str]:
    return ["", click.style(OUTPUT_FOOTER, fg="cyan"), ""]


def render_transcript(result: ExecutionResult) -> list[str]:
    """Captured provider output followed by the closing banner."""

    return [result.captured_output.rstrip("\n"), *render_output_footer()]


def render_failure(command: str, result: ExecutionResult, hint: FailureHint) -> list[str]:
    """Describe a provider that ran and exited with a non-zero status."""

    return [
        click.style("❌ Provider command failed", fg="red"),
        "",
        f"Command: {command}",
        f"Exit code: {result.exit_status}",
        "",
        *render_hint(hint),
        "",
    ]


def render_timeout(
    command: str,
    result: ExecutionResult,
    hint: FailureHint,
    *,
    timeout_seconds: int,
) -> list[str]:
    """Describe a provider that was terminated at the deadline."""

    return [
        click.style(f"⏱ Provider command timed out after {timeout_seconds} seconds", fg="red"),
        "",
        f"Command: {command}",
        f"Exit code: {result.exit_status} (timeout)",
        "",
        "The provider did not finish in time and its process tree was terminated.",
        "Increase PROVIDER_RUNNER_TIMEOUT_SECONDS or set it to 0 to disable the timeout.",
        "",
        *render_hint(hint),
        "",
    ]


def render_hint(hint: FailureHint) -> list[str]:
    lines = [click.style(f"💡 {hint.title}", fg="yellow")]
    lines.extend(f"  {line}" if line else "" for line in hint.remediation)
    return lines


def render_provider_not_found(command: str) -> list[str]:
    """Installation and usage guidance for a provider missing from PATH."""

    executable = provider_executable(command)
    return [
        click.style(f"❌ Command not found: {executable}", fg="red"),
        "",
        "The PROVIDER command must be executable and available in PATH.",
        "",
        f"Current PROVIDER: {command}",
        "",
        "Examples of valid PROVIDER configurations:",
        "  # Using local installation:",
        '  PROVIDER="gemini"',
        '  PROVIDER="claude"',
        '  PROVIDER="opencode run --model anthropic/claude-opus-4-5"',
        '  PROVIDER="ollama run llama3.2"',
        "",
        "  # Using npx/bunx (no local installation needed):",
        '  PROVIDER="bunx @google/gemini-cli"',
        '  PROVIDER="npx @google/gemini-cli"',
        '  PROVIDER="bunx github-copilot-cli"',
        "",
        f"Make sure '{executable}' is installed or use npx/bunx to run it.",
        "",
    ]


def render_missing_provider() -> list[str]:
    return [
        click.style("❌ No provider configured", fg="red"),
        "",
        "Pass --provider or set PROVIDER_RUNNER_PROVIDER, for example:",
        *(f"  {example}" for example in PROVIDER_EXAMPLES),
        "",
    ]


def render_provider_config(command: str) -> list[str]:
    lines = [
        click.style("Provider Configuration:", bold=True),
        f"  Command: {click.style(command, fg='cyan')}",
    ]
    model = extract_model(command)
    if model:
        lines.append(f"  Model: {click.style(model, fg='cyan')}")
    lines.append("")
    return lines


def render_run_error(error: ProviderRunError) -> list[str]:
    """Describe a fault that kept the provider from producing a result."""

    return [
        click.style("❌ Provider command could not be run", fg="red"),
        "",
        f"Command: {error.command}",
        f"Error: {error}",
        "",
    ]
