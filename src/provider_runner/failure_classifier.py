"""Deterministic classification of provider failure output into remediation hints.

Matching is heuristic: signatures are checked in table order and the first one
that matches wins, regardless of how specific later signatures are.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from provider_runner.models import FailureHint, HintCategory

PROVIDER_EXAMPLES: tuple[str, ...] = (
    'PROVIDER="gemini"',
    'PROVIDER="bunx @google/gemini-cli"',
    'PROVIDER="opencode run --model anthropic/claude-opus-4-5"',
    'PROVIDER="ollama run llama3.2"',
)


@dataclass(frozen=True, slots=True)
class FailureSignature:
    """One row of the ordered signature table."""

    hint: FailureHint
    matches: Callable[[str], bool]


def _any_pattern(*patterns: str) -> Callable[[str], bool]:
    compiled = re.compile("|".join(patterns), re.IGNORECASE)

    def _matches(text: str) -> bool:
        return compiled.search(text) is not None

    return _matches


def _model_not_found(text: str) -> bool:
    lowered = text.lower()
    if "404" in lowered:
        return True
    return all(word in lowered for word in ("model", "not", "found"))


FAILURE_SIGNATURES: tuple[FailureSignature, ...] = (
    FailureSignature(
        hint=FailureHint(
            category=HintCategory.MODEL_NOT_FOUND,
            title="Model Not Found:",
            remediation=(
                "The specified model is not available.",
                "• Remove --model flag to use the default model",
                "• Check available models for your API tier",
                '• Example: PROVIDER="bunx @google/gemini-cli"',
            ),
        ),
        matches=_model_not_found,
    ),
    FailureSignature(
        hint=FailureHint(
            category=HintCategory.RATE_LIMITED,
            title="API Quota/Rate Limit Issue:",
            remediation=(
                "Your API provider has rate limits or quota restrictions.",
                "• Wait for the quota to reset (check provider's rate limit policy)",
                "• Use a different model or provider",
                "• Upgrade your API plan if available",
            ),
        ),
        matches=_any_pattern(r"quota", r"rate.limit", r"429"),
    ),
    FailureSignature(
        hint=FailureHint(
            category=HintCategory.AUTH_FAILURE,
            title="Authentication Issue:",
            remediation=(
                "The provider requires authentication.",
                "• Set the required API key environment variable",
                "• Check your provider's authentication documentation",
                "• Example: export GEMINI_API_KEY='your-key-here'",
            ),
        ),
        matches=_any_pattern(r"auth", r"api.key", r"unauthorized", r"403"),
    ),
    FailureSignature(
        hint=FailureHint(
            category=HintCategory.COMMAND_NOT_FOUND,
            title="Command Not Found:",
            remediation=(
                "The provider command is not available.",
                "• Install the provider locally, or",
                "• Use npx/bunx to run without installing",
                '• Example: PROVIDER="bunx @google/gemini-cli"',
            ),
        ),
        matches=_any_pattern(r"not found", r"command not found", r"no such"),
    ),
)

GENERIC_HINT = FailureHint(
    category=HintCategory.GENERIC,
    title="General Troubleshooting:",
    remediation=(
        "Make sure your PROVIDER command:",
        "1. Accepts input via stdin (pipe)",
        "2. Returns the AI response to stdout",
        "3. Includes all necessary arguments (model, API keys, etc.)",
        "",
        "Examples:",
        *PROVIDER_EXAMPLES,
    ),
)


def classify_failure(captured_output: str) -> FailureHint:
    """Return the first matching remediation hint for failed provider output."""

    for signature in FAILURE_SIGNATURES:
        if signature.matches(captured_output):
            return signature.hint
    return GENERIC_HINT
