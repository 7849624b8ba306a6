"""Domain errors.

Why one hierarchy:
- The CLI catches `BackupError` once and reports any failure with context.
- Each kind names the step that failed, so the message alone is enough to
  diagnose without re-running in verbose mode.
"""

from __future__ import annotations

from typing import Sequence


class BackupError(Exception):
    """Base class for every failure of a backup run."""


class ProcessLaunchError(BackupError):
    """The external command could not be started."""

    def __init__(self, command: Sequence[str], reason: str) -> None:
        self.command = list(command)
        self.reason = reason
        super().__init__(f"could not start {' '.join(self.command)!r}: {reason}")


class ProcessExecutionError(BackupError):
    """The external command exited non-zero, timed out or failed during I/O."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        returncode: int | None,
        output: str = "",
        reason: str | None = None,
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        detail = reason or f"exit code {returncode}"
        message = f"command {' '.join(self.command)!r} failed ({detail})"
        if output.strip():
            message += f": {output.strip()}"
        super().__init__(message)


class DecodeError(BackupError):
    """Host tool output is not valid UTF-16."""


class GuestNotFoundError(BackupError):
    def __init__(self, name: str, hint: str) -> None:
        self.name = name
        super().__init__(f"distribution {name!r} not found, check installed distributions with {hint!r}")


class GuestBusyError(BackupError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"found distribution {name} but it is running and terminate was not requested, "
            "so it will not be stopped"
        )


class StopTimeoutError(BackupError):
    """The guest was still running after every terminate attempt."""

    def __init__(self, name: str, attempts: int) -> None:
        self.name = name
        self.attempts = attempts
        super().__init__(f"distribution {name} is still running after {attempts} terminate attempt(s)")


class ConfigurationError(BackupError):
    """Invalid option values, reported before any process is spawned."""


class ConfigurationConflictError(ConfigurationError):
    pass


class UnsupportedFormatError(ConfigurationError):
    pass


class CompressionVerificationError(BackupError):
    """`compact` ran but its output lacks the confirmation phrase."""

    def __init__(self, path: str, output: str) -> None:
        self.path = path
        self.output = output
        super().__init__(f"compact failed for {path}: {output.strip() or '<no output>'}")


class ArchiveWriteError(BackupError):
    def __init__(self, stage: str, path: str, reason: str) -> None:
        self.stage = stage
        self.path = path
        super().__init__(f"error {stage} {path}: {reason}")
