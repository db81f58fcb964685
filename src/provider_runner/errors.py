"""Faults raised when a provider cannot be run at all."""

from __future__ import annotations


class ProviderRunError(RuntimeError):
    """Provider execution error that prevented a result from being produced."""

    def __init__(self, message: str, *, command: str) -> None:
        super().__init__(message)
        self.command = command


class ProviderNotFoundError(ProviderRunError):
    """Provider executable could not be located; nothing was spawned."""

    def __init__(self, message: str, *, command: str, executable: str) -> None:
        super().__init__(message, command=command)
        self.executable = executable


class PromptResourceError(ProviderRunError):
    """Temporary prompt file could not be created or written."""


class ProviderSpawnError(ProviderRunError):
    """Operating system refused to start the provider process."""
