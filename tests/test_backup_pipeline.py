import zipfile
from datetime import datetime
from pathlib import Path

import pytest

from adapters.compression import zip_path_for
from conftest import COMPACT_OK, FakeRunner, listing, wide
from core.config import AppSettings
from core.domain.errors import GuestBusyError, GuestNotFoundError
from core.domain.models import CompressionChoice, CompressionKind, ContainerFormat
from core.services.backup_pipeline import (
    BackupRequest,
    PipelineHooks,
    default_output_name,
    resolve_output_path,
    run_backup,
)

STOPPED = listing("* Debian    Stopped    2")
RUNNING = listing("* Debian    Running    2")
NOW = datetime(2024, 3, 9, 7, 5)


def _exporting(payload: bytes = b"filesystem"):
    def step(argv: list[str]) -> tuple[int, bytes, bytes]:
        Path(argv[3]).write_bytes(payload)
        return 0, wide("The operation completed successfully."), b""

    return step


def test_default_output_name() -> None:
    assert default_output_name(ContainerFormat.VHDX, "Debian", NOW) == "202403090705-Debian.vhdx"
    assert default_output_name(ContainerFormat.TAR, "Ubuntu 22.04", NOW) == "202403090705-Ubuntu-22.04.tar"


def test_output_dir_setting_is_used_for_generated_names(tmp_path: Path) -> None:
    settings = AppSettings(_env_file=None, output_dir=tmp_path)
    request = BackupRequest(distro="Debian", container_format=ContainerFormat.TAR)

    assert resolve_output_path(request, settings, NOW) == tmp_path / "202403090705-Debian.tar"
    explicit = BackupRequest(distro="Debian", output_path=Path("mine.tar"))
    assert resolve_output_path(explicit, settings, NOW) == Path("mine.tar")


def test_export_without_compression(settings, runner: FakeRunner, tmp_path: Path) -> None:
    runner.add("-l", (0, STOPPED, b""))
    runner.add("--export", _exporting())
    stages: list[str] = []

    result = run_backup(
        settings=settings,
        request=BackupRequest(distro="debian", output_path=tmp_path / "out.vhdx"),
        runner=runner,
        hooks=PipelineHooks(stage=stages.append),
    )

    assert result.final_path == tmp_path / "out.vhdx"
    assert result.archive_path is None
    assert runner.calls[-1] == ["wsl", "--export", "debian", str(tmp_path / "out.vhdx"), "--vhd"]
    assert stages and stages[0].startswith("Checking")


def test_zip_flow_deletes_original(settings, runner: FakeRunner, tmp_path: Path) -> None:
    runner.add("-l", (0, RUNNING, b""), (0, STOPPED, b""))
    runner.add("--terminate", (0, b"", b""))
    runner.add("--export", _exporting(b"tarball bytes"))
    output = tmp_path / "debian.tar"

    result = run_backup(
        settings=settings,
        request=BackupRequest(
            distro="Debian",
            container_format=ContainerFormat.TAR,
            output_path=output,
            compression=CompressionChoice(kind=CompressionKind.ZIP, delete_original=True),
            force_stop=True,
        ),
        runner=runner,
    )

    assert result.original_removed
    assert result.archive_path == zip_path_for(output)
    assert not output.exists()
    with zipfile.ZipFile(result.archive_path) as zf:
        assert zf.read("debian.tar") == b"tarball bytes"
    assert runner.count("--terminate") == 1


def test_compact_flow(settings, runner: FakeRunner, tmp_path: Path) -> None:
    runner.add("-l", (0, STOPPED, b""))
    runner.add("--export", _exporting())
    runner.add("/c", (0, COMPACT_OK, b""))
    output = tmp_path / "debian.vhdx"

    result = run_backup(
        settings=settings,
        request=BackupRequest(
            distro="Debian",
            output_path=output,
            compression=CompressionChoice(kind=CompressionKind.NATIVE),
        ),
        runner=runner,
    )

    assert output.exists()
    assert result.compact_output is not None
    assert runner.calls[-1] == ["compact", "/c", str(output)]


def test_missing_distro_never_exports(settings, runner: FakeRunner) -> None:
    runner.add("-l", (0, STOPPED, b""))

    with pytest.raises(GuestNotFoundError, match="wsl -l -v"):
        run_backup(settings=settings, request=BackupRequest(distro="Fedora"), runner=runner)

    assert runner.count("--export") == 0


def test_busy_distro_never_exports(settings, runner: FakeRunner) -> None:
    runner.add("-l", (0, RUNNING, b""))

    with pytest.raises(GuestBusyError):
        run_backup(settings=settings, request=BackupRequest(distro="Debian"), runner=runner)

    assert runner.count("--export") == 0


def test_verify_before_export_rereads_registry(runner: FakeRunner, tmp_path: Path) -> None:
    settings = AppSettings(_env_file=None, verify_before_export=True)
    runner.add("-l", (0, STOPPED, b""), (0, RUNNING, b""))

    with pytest.raises(GuestBusyError):
        run_backup(
            settings=settings,
            request=BackupRequest(distro="Debian", output_path=tmp_path / "x.vhdx"),
            runner=runner,
        )

    assert runner.count("-l") == 2
    assert runner.count("--export") == 0
