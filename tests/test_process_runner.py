import sys

import pytest

from adapters.process_runner import SubprocessRunner
from core.config import AppSettings
from core.domain.errors import ProcessExecutionError, ProcessLaunchError
from core.interfaces.runner import CommandRunner


def test_runner_captures_bytes_and_exit_code(settings: AppSettings) -> None:
    runner = SubprocessRunner(settings)
    script = "import sys; sys.stdout.buffer.write(b'out'); sys.stderr.buffer.write(b'err'); sys.exit(3)"

    result = runner.run([sys.executable, "-c", script])

    assert isinstance(runner, CommandRunner)
    assert result.returncode == 3
    assert not result.ok
    assert result.stdout == b"out"
    assert result.stderr == b"err"


def test_missing_executable_is_a_launch_error(settings: AppSettings) -> None:
    with pytest.raises(ProcessLaunchError, match="definitely-not-wsl"):
        SubprocessRunner(settings).run(["definitely-not-wsl-2b7c", "-l", "-v"])


def test_timeout_is_an_execution_error() -> None:
    settings = AppSettings(_env_file=None, process_timeout_seconds=0.2)

    with pytest.raises(ProcessExecutionError, match="timed out"):
        SubprocessRunner(settings).run([sys.executable, "-c", "import time; time.sleep(5)"])
