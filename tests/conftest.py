from __future__ import annotations

import codecs
from typing import Callable, Sequence, Union

import pytest

from core.config import AppSettings
from core.interfaces.runner import CommandResult

Outcome = tuple[int, bytes, bytes]
Step = Union[Outcome, Exception, Callable[[list[str]], Outcome]]

HEADER = "  NAME                   STATE           VERSION"


def wide(text: str, *, bom: bool = True) -> bytes:
    """Encode like wsl.exe does: UTF-16LE, usually with a BOM."""

    payload = text.encode("utf-16-le")
    return codecs.BOM_UTF16_LE + payload if bom else payload


def listing(*rows: str) -> bytes:
    return wide("\r\n".join([HEADER, *rows]) + "\r\n")


class FakeRunner:
    """Scripted `CommandRunner`.

    Steps are keyed by the first argument after the executable (`-l`,
    `--terminate`, `--export`, `/c`). Each call consumes one step; the last
    step of a key repeats.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self._steps: dict[str, list[Step]] = {}

    def add(self, key: str, *steps: Step) -> "FakeRunner":
        self._steps.setdefault(key, []).extend(steps)
        return self

    def count(self, key: str) -> int:
        return sum(1 for call in self.calls if call[1] == key)

    def run(self, args: Sequence[str]) -> CommandResult:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        queue = self._steps[argv[1]]
        step = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(step, Exception):
            raise step
        if callable(step):
            step = step(argv)
        returncode, stdout, stderr = step
        return CommandResult(args=tuple(argv), returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        stop_backoff_seconds=0,
        stop_max_attempts=3,
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


COMPACT_OK = (
    b"\r\n Compressing files in C:\\backups\\\r\n\r\n"
    b"202401011200-Debian.vhdx  1048576 :   524288 = 2.0 to 1 [OK]\r\n\r\n"
    b"1 files within 1 directories were compressed.\r\n"
    b"1,048,576 total bytes of data are stored in 524,288 bytes.\r\n"
)
