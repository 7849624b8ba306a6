"""External command contract.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- The subprocess-backed runner and the fakes used in tests are
  interchangeable, and every spawned process goes through one seam.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class CommandResult:
    """Raw outcome of a finished command; bytes are left undecoded."""

    args: tuple[str, ...]
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Minimal contract for running an external command.

    Design rules:
    - `run` is synchronous and blocks until the process exits and its output
      has been fully read.
    - A command that cannot be started raises `ProcessLaunchError`; a non-zero
      exit is reported through `CommandResult.returncode`, and interpreting it
      is left to the caller.
    """

    def run(self, args: Sequence[str]) -> CommandResult:
        ...
