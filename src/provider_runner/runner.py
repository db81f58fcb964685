"""Subprocess runner that pipes a prompt into a provider CLI."""

from __future__ import annotations

import logging
import os
import shlex
import select
import shutil
import signal
import subprocess
import sys
import tempfile
import threading
import time
from collections.abc import Callable
from typing import IO, BinaryIO

from provider_runner.config import RunnerSettings
from provider_runner.errors import (
    PromptResourceError,
    ProviderNotFoundError,
    ProviderSpawnError,
)
from provider_runner.models import TIMEOUT_EXIT_STATUS, ExecutionResult

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 4096
_HAS_PROCESS_GROUPS = os.name == "posix" and hasattr(os, "killpg")
_CAN_SELECT_PIPES = os.name == "posix"
_POLL_SECONDS = 0.1


class CommandRunner:
    """Execute a provider command with the prompt delivered on standard input.

    Standard output and standard error of the provider are merged into one
    captured stream. With ``stream_to_terminal`` enabled every chunk is also
    mirrored to ``sink`` (binary stdout unless given) as soon as it arrives.
    """

    def __init__(
        self,
        settings: RunnerSettings | None = None,
        *,
        sink: BinaryIO | None = None,
    ) -> None:
        self.settings = settings or RunnerSettings()
        self._sink = sink

    def run(self, command: str, prompt: str) -> ExecutionResult:
        """Run ``command`` once; ordinary non-zero exits are returned, not raised."""

        run_args = build_run_args(command, shell=self.settings.shell)

        try:
            prompt_file = tempfile.TemporaryFile(prefix="provider-prompt-")
        except OSError as error:
            raise PromptResourceError(
                f"Failed to create temporary prompt file: {error}",
                command=command,
            ) from error

        with prompt_file:
            try:
                payload = prompt.encode("utf-8", errors="surrogateescape")
            except UnicodeEncodeError as error:
                raise PromptResourceError(
                    f"Prompt cannot be encoded for the provider: {error}",
                    command=command,
                ) from error
            try:
                prompt_file.write(payload)
                prompt_file.flush()
                prompt_file.seek(0)
            except OSError as error:
                raise PromptResourceError(
                    f"Failed to write temporary prompt file: {error}",
                    command=command,
                ) from error

            process = _spawn(command=command, run_args=run_args, stdin=prompt_file)
            return self._collect(process)

    def _collect(self, process: subprocess.Popen[bytes]) -> ExecutionResult:
        timeout_seconds = self.settings.timeout_seconds
        deadline = time.monotonic() + timeout_seconds if timeout_seconds > 0 else None
        chunks: list[bytes] = []
        sink = self._resolve_sink() if self.settings.stream_to_terminal else None

        grace_seconds = self.settings.terminate_grace_seconds
        stop_reading = threading.Event()
        reader = threading.Thread(
            target=_drain_output,
            args=(process.stdout, chunks, sink, stop_reading),
            name=f"provider-output-{process.pid}",
            daemon=True,
        )
        reader.start()

        timed_out = False
        try:
            try:
                process.wait(timeout=_remaining(deadline))
            except subprocess.TimeoutExpired:
                timed_out = True
                logger.warning(
                    "Provider pid=%s exceeded %ss timeout, terminating process tree",
                    process.pid,
                    timeout_seconds,
                )
                _terminate_process_tree(process, grace_seconds=grace_seconds)
                reader.join(timeout=grace_seconds)
            else:
                reader.join(timeout=_remaining(deadline))
                if reader.is_alive():
                    # The provider itself finished in time; only a descendant
                    # still holds the output pipe. Its exit status stands.
                    logger.warning(
                        "Provider pid=%s exited but descendants held its output past the timeout",
                        process.pid,
                    )
                    _terminate_process_tree(process, grace_seconds=grace_seconds)
                    reader.join(timeout=grace_seconds)

            if reader.is_alive():
                logger.warning(
                    "Output pipe of provider pid=%s is held by a detached process",
                    process.pid,
                )
                stop_reading.set()
                reader.join(timeout=grace_seconds)
        except BaseException:
            _terminate_process_tree(
                process,
                grace_seconds=self.settings.terminate_grace_seconds,
            )
            raise
        finally:
            if process.stdout is not None and not reader.is_alive():
                process.stdout.close()

        captured_output = b"".join(chunks).decode("utf-8", errors="replace")
        if timed_out:
            return ExecutionResult(
                captured_output=captured_output,
                exit_status=TIMEOUT_EXIT_STATUS,
                timed_out=True,
            )

        exit_status = _normalize_returncode(process.returncode)
        logger.debug("Provider pid=%s exited with status %s", process.pid, exit_status)
        return ExecutionResult(captured_output=captured_output, exit_status=exit_status)

    def _resolve_sink(self) -> IO[bytes] | None:
        if self._sink is not None:
            return self._sink
        sys.stdout.flush()
        return getattr(sys.stdout, "buffer", None)


def build_run_args(command: str, *, shell: bool = False) -> str | list[str]:
    """Split a provider command and make sure its executable resolves on PATH.

    Raises ``ProviderNotFoundError`` before anything is spawned.
    """

    stripped = command.strip()
    if not stripped:
        raise ProviderNotFoundError(
            "Provider command is empty.",
            command=command,
            executable="",
        )

    if shell:
        _resolve_executable(command=command, executable=command_head(stripped))
        return stripped

    try:
        argv = shlex.split(stripped)
    except ValueError as error:
        raise ProviderNotFoundError(
            f"Provider command could not be parsed: {error}",
            command=command,
            executable=stripped.split(maxsplit=1)[0],
        ) from error
    if not argv:
        raise ProviderNotFoundError(
            "Provider command is empty.",
            command=command,
            executable="",
        )
    resolved = _resolve_executable(command=command, executable=argv[0])
    return [resolved, *argv[1:]]


def command_head(command: str) -> str:
    """Return the executable token of a provider command, unquoted as a shell would."""

    try:
        argv = shlex.split(command)
    except ValueError:
        argv = command.split()
    return argv[0] if argv else ""


def _resolve_executable(*, command: str, executable: str) -> str:
    resolved = shutil.which(executable)
    if resolved is None:
        raise ProviderNotFoundError(
            f"Command not found: {executable}",
            command=command,
            executable=executable,
        )
    return resolved


def _spawn(
    *,
    command: str,
    run_args: str | list[str],
    stdin: IO[bytes],
) -> subprocess.Popen[bytes]:
    session_kwargs: dict[str, object] = {}
    if _HAS_PROCESS_GROUPS:
        session_kwargs["start_new_session"] = True
    elif os.name == "nt":
        session_kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP

    try:
        process = subprocess.Popen(  # noqa: S603
            run_args,
            stdin=stdin,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            shell=isinstance(run_args, str),
            **session_kwargs,
        )
    except FileNotFoundError as error:
        raise ProviderNotFoundError(
            f"Command not found: {error.filename or command}",
            command=command,
            executable=str(error.filename or ""),
        ) from error
    except OSError as error:
        raise ProviderSpawnError(
            f"Provider failed to start: {error}",
            command=command,
        ) from error

    logger.debug("Started provider pid=%s: %s", process.pid, command)
    return process


def _drain_output(
    stream: IO[bytes] | None,
    chunks: list[bytes],
    sink: IO[bytes] | None,
    stop: threading.Event,
) -> None:
    if stream is None:
        return
    read = _pipe_reader(stream, stop)
    while True:
        chunk = read()
        if not chunk:
            return
        chunks.append(chunk)
        if sink is None:
            continue
        try:
            sink.write(chunk)
            sink.flush()
        except (OSError, ValueError) as error:
            logger.warning("Stopped mirroring provider output to terminal: %s", error)
            sink = None


def _pipe_reader(stream: IO[bytes], stop: threading.Event) -> Callable[[], bytes]:
    if not _CAN_SELECT_PIPES:
        read1 = getattr(stream, "read1", stream.read)
        return lambda: read1(_READ_CHUNK_SIZE)

    fd = stream.fileno()

    def _read() -> bytes:
        while not stop.is_set():
            ready, _, _ = select.select([fd], [], [], _POLL_SECONDS)
            if ready:
                return os.read(fd, _READ_CHUNK_SIZE)
        return b""

    return _read


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())


def _normalize_returncode(returncode: int) -> int:
    # Killed by signal N: report it the way a shell does.
    if returncode < 0:
        return 128 - returncode
    return returncode


def _terminate_process_tree(
    process: subprocess.Popen[bytes],
    *,
    grace_seconds: float,
) -> None:
    _signal_tree(process, force=False)
    try:
        process.wait(timeout=grace_seconds)
    except subprocess.TimeoutExpired:
        _signal_tree(process, force=True)
        process.wait(timeout=grace_seconds)
    # Descendants that ignored SIGTERM keep the group alive after the leader exits.
    _signal_tree(process, force=True)


def _signal_tree(process: subprocess.Popen[bytes], *, force: bool) -> None:
    if _HAS_PROCESS_GROUPS:
        try:
            os.killpg(process.pid, signal.SIGKILL if force else signal.SIGTERM)
        except ProcessLookupError:
            return
        except PermissionError:
            logger.warning(
                "Cannot signal process group of pid=%s, signalling the process only",
                process.pid,
            )
        else:
            return

    if process.poll() is not None:
        return
    try:
        if force:
            process.kill()
        else:
            process.terminate()
    except OSError:
        return
