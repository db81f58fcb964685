"""Value objects shared by the runner, classifier and reporting layers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

TIMEOUT_EXIT_STATUS = 124


class HintCategory(str, Enum):
    """Failure categories recognized in provider output."""

    MODEL_NOT_FOUND = "model_not_found"
    RATE_LIMITED = "rate_limited"
    AUTH_FAILURE = "auth_failure"
    COMMAND_NOT_FOUND = "command_not_found"
    GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Captured output and exit status of one provider invocation."""

    captured_output: str
    exit_status: int
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0 and not self.timed_out


@dataclass(frozen=True, slots=True)
class FailureHint:
    """Human-readable remediation block selected for a failed run."""

    category: HintCategory
    title: str
    remediation: tuple[str, ...]
