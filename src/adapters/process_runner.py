"""subprocess-backed `CommandRunner`.

Why a wrapper:
- Standardizes capture (stdout and stderr), timeouts and logging for every
  external command.
- Makes testing easy: services accept any `CommandRunner`, so a fake can be
  swapped in.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from core.config import AppSettings
from core.domain.errors import ProcessExecutionError, ProcessLaunchError
from core.interfaces.runner import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class SubprocessRunner(CommandRunner):
    """Runs commands synchronously, one at a time, capturing raw bytes."""

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    def run(self, args: Sequence[str]) -> CommandResult:
        argv = [str(a) for a in args]
        logger.debug("Running: %s", subprocess.list2cmdline(argv))
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                capture_output=True,
                check=False,
                timeout=self._settings.process_timeout_seconds,
            )
        except subprocess.TimeoutExpired as exc:
            raise ProcessExecutionError(
                argv,
                returncode=None,
                reason=f"timed out after {exc.timeout} seconds",
            ) from exc
        except OSError as exc:
            raise ProcessLaunchError(argv, str(exc)) from exc

        logger.debug("Exit code %s for %s", completed.returncode, argv[0])
        return CommandResult(
            args=tuple(argv),
            returncode=completed.returncode,
            stdout=completed.stdout or b"",
            stderr=completed.stderr or b"",
        )
