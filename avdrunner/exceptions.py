"""Custom exceptions for avd-runner."""

from __future__ import annotations

from typing import List, Optional


class RunnerError(RuntimeError):
    """Raised on unrecoverable configuration or runtime errors."""


class ValidationError(RunnerError):
    """Bad input; raised before anything touches the host."""


class InstallationError(RunnerError):
    """An SDK package could not be installed."""


class ProvisioningError(RunnerError):
    """The AVD could not be created."""


class LaunchError(RunnerError):
    """The emulator process could not be spawned."""


class BootError(RunnerError):
    """The emulator never reached a usable state.

    ``cause`` is the terminal :class:`~avdrunner.models.BootState`
    (``TIMED_OUT`` or ``CRASHED``).
    """

    def __init__(self, message: str, cause) -> None:
        super().__init__(message)
        self.cause = cause

    @property
    def timed_out(self) -> bool:
        return self.cause.name == "TIMED_OUT"

    @property
    def crashed(self) -> bool:
        return self.cause.name == "CRASHED"


class ConfigError(RunnerError):
    """One or more best-effort runtime settings failed to apply."""

    def __init__(self, message: str, failed: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.failed = failed or []


class ScriptExecutionError(RunnerError):
    """A user script command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        super().__init__(f"Script command failed with exit code {returncode}: {command}")
        self.command = command
        self.returncode = returncode
