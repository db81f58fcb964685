"""CLI entrypoint for provider-runner."""

from pathlib import Path

import rich_click as click

from provider_runner import __version__
from provider_runner.controllers import (
    ProviderCliController,
    ProviderInspectCommand,
    ProviderRunCommand,
)

click.rich_click.USE_MARKDOWN = True
PROVIDER_CONTROLLER = ProviderCliController()

_PROVIDER_HELP = (
    "Provider command, for example `gemini` or `opencode run --model X`. "
    "Defaults to PROVIDER_RUNNER_PROVIDER."
)


@click.group()
@click.version_option(version=__version__, prog_name="provider-runner")
def provider_runner() -> None:
    """Send prompts to an external AI CLI provider."""


@provider_runner.command("run")
@click.option("--provider", default=None, help=_PROVIDER_HELP)
@click.option("--prompt", default=None, help="Prompt text. Read from stdin when omitted.")
@click.option(
    "--prompt-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the prompt from a file instead of --prompt or stdin.",
)
@click.option(
    "--timeout-seconds",
    type=int,
    default=None,
    help="Kill the provider after this many seconds; 0 disables. "
    "Defaults to PROVIDER_RUNNER_TIMEOUT_SECONDS or 300.",
)
@click.option(
    "--stream/--no-stream",
    default=None,
    help="Mirror provider output live. Defaults to PROVIDER_RUNNER_DEBUG.",
)
@click.option(
    "--shell/--no-shell",
    default=None,
    help="Run the provider through /bin/sh to allow pipes and variable expansion. "
    "Defaults to PROVIDER_RUNNER_SHELL.",
)
def provider_run(  # noqa: PLR0913
    provider: str | None,
    prompt: str | None,
    prompt_file: Path | None,
    timeout_seconds: int | None,
    stream: bool | None,
    shell: bool | None,
) -> None:
    """Pipe a prompt into the provider and report its output."""

    if prompt is not None and prompt_file is not None:
        raise click.UsageError("Use either --prompt or --prompt-file, not both.")
    if prompt_file is not None:
        prompt_text = _decode_prompt(prompt_file.read_bytes())
    elif prompt is not None:
        prompt_text = prompt
    else:
        prompt_text = _decode_prompt(click.get_binary_stream("stdin").read())

    plan = PROVIDER_CONTROLLER.prepare(
        ProviderRunCommand(
            provider=provider,
            prompt=prompt_text,
            timeout_seconds=timeout_seconds,
            stream=stream,
            shell=shell,
        ),
    )
    _emit_lines(plan.lines)
    if not plan.ready:
        _emit_lines(plan.error_lines, err=True)
        raise click.ClickException("Provider is not available.")

    result = PROVIDER_CONTROLLER.execute(plan)
    _emit_lines(result.lines)
    _emit_lines(result.error_lines, err=True)
    if result.timed_out:
        raise click.ClickException("Provider timed out.")
    if not result.success:
        raise click.ClickException("Provider run failed.")


@provider_runner.command("check")
@click.option("--provider", default=None, help=_PROVIDER_HELP)
def provider_check(provider: str | None) -> None:
    """Verify the provider executable is available in PATH."""

    result = PROVIDER_CONTROLLER.check(ProviderInspectCommand(provider=provider))
    _emit_lines(result.lines)
    _emit_lines(result.error_lines, err=True)
    if not result.success:
        raise click.ClickException("Provider check failed.")


@provider_runner.command("info")
@click.option("--provider", default=None, help=_PROVIDER_HELP)
def provider_info(provider: str | None) -> None:
    """Show the provider configuration."""

    result = PROVIDER_CONTROLLER.info(ProviderInspectCommand(provider=provider))
    _emit_lines(result.lines)
    _emit_lines(result.error_lines, err=True)
    if not result.success:
        raise click.ClickException("No provider configured.")


def _decode_prompt(raw: bytes) -> str:
    # Bytes that are not UTF-8 reach the provider unchanged.
    return raw.decode("utf-8", errors="surrogateescape")


def _emit_lines(lines: list[str], *, err: bool = False) -> None:
    for line in lines:
        click.echo(line, err=err)


if __name__ == "__main__":  # pragma: no cover
    provider_runner()
