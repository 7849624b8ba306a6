"""Backup orchestration.

This module runs one backup end to end: resolve the distribution, export it,
then apply the selected compression. The CLI delegates everything here and
only renders progress through `PipelineHooks`, which keeps side-effects
(printing, spinners) out of the core logic and makes the flow testable with
a fake `CommandRunner`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable

from adapters.compression import compact_file, zip_file
from adapters.process_runner import SubprocessRunner
from adapters.wsl_client import WslClient
from core.config import AppSettings
from core.domain.errors import GuestNotFoundError
from core.domain.models import (
    CompressionChoice,
    CompressionKind,
    ContainerFormat,
    ExportRequest,
)
from core.interfaces.runner import CommandRunner
from core.services.guest_resolver import GuestResolver

logger = logging.getLogger(__name__)


@dataclass
class BackupRequest:
    """Parameters that control one backup run."""

    distro: str
    container_format: ContainerFormat = ContainerFormat.VHDX
    output_path: Path | None = None
    compression: CompressionChoice = field(default_factory=CompressionChoice)
    force_stop: bool = False


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress messages)."""

    stage: Callable[[str], None] | None = None


@dataclass
class BackupResult:
    """Output of a pipeline invocation."""

    export: ExportRequest
    export_output: str = ""
    archive_path: Path | None = None
    original_removed: bool = False
    compact_output: str | None = None

    @property
    def final_path(self) -> Path:
        return self.archive_path or self.export.output_path


def sanitize_distro_for_filename(value: str) -> str:
    out: list[str] = []
    for ch in value.strip():
        if ch.isalnum() or ch in ("-", "_", "."):
            out.append(ch)
        else:
            out.append("-")
    cleaned = "".join(out).strip("-_")
    return cleaned or "distro"


def default_output_name(
    container_format: ContainerFormat,
    distro: str,
    now: datetime | None = None,
) -> str:
    """`<YYYYMMDDHHMM>-<distro>.<ext>`, used when no output file is given."""

    now = now or datetime.now()
    return f"{now:%Y%m%d%H%M}-{sanitize_distro_for_filename(distro)}.{container_format.extension}"


def resolve_output_path(
    request: BackupRequest,
    settings: AppSettings,
    now: datetime | None = None,
) -> Path:
    if request.output_path is not None:
        return request.output_path
    name = default_output_name(request.container_format, request.distro, now)
    if settings.output_dir is not None:
        return settings.output_dir / name
    return Path(name)


def run_backup(
    *,
    settings: AppSettings,
    request: BackupRequest,
    runner: CommandRunner | None = None,
    hooks: PipelineHooks | None = None,
    now: datetime | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> BackupResult:
    hooks = hooks or PipelineHooks()
    runner = runner or SubprocessRunner(settings)

    def report(message: str) -> None:
        logger.debug(message)
        if hooks.stage:
            hooks.stage(message)

    client = WslClient(settings, runner)
    resolver = GuestResolver(client, settings, sleep=sleep)

    report(f"Checking distribution {request.distro}")
    if not resolver.resolve(request.distro, force_stop=request.force_stop):
        raise GuestNotFoundError(request.distro, client.list_command)

    output_path = resolve_output_path(request, settings, now)
    if output_path.parent != Path("."):
        output_path.parent.mkdir(parents=True, exist_ok=True)

    if settings.verify_before_export:
        report("Re-checking distribution state")
        resolver.ensure_stopped(request.distro)

    export = ExportRequest(
        guest_name=request.distro,
        container_format=request.container_format,
        output_path=output_path,
    )
    report(f"Exporting {export.guest_name} to {export.output_path}")
    result = BackupResult(export=export, export_output=client.export(export))

    choice = request.compression
    if choice.kind is CompressionKind.ZIP:
        report(f"Compressing {output_path} to ZIP")
        result.archive_path = zip_file(
            output_path,
            delete_original=choice.delete_original,
            compresslevel=settings.zip_compresslevel,
        )
        result.original_removed = not output_path.exists()
    elif choice.kind is CompressionKind.NATIVE:
        report(f"Compacting {output_path}")
        result.compact_output = compact_file(output_path, settings=settings, runner=runner)

    return result
