"""Post-processing of the exported file.

Two exclusive strategies:
- `zip_file`: writes `<export>.zip` next to the export (stdlib `zipfile`).
- `compact_file`: NTFS transparent compression via `compact /c`, in place.
"""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path

from adapters.process_runner import SubprocessRunner
from core.config import AppSettings
from core.domain.errors import (
    ArchiveWriteError,
    CompressionVerificationError,
    ProcessExecutionError,
)
from core.interfaces.runner import CommandRunner

logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE = 1024 * 1024


def zip_path_for(path: Path) -> Path:
    return path.with_name(path.name + ".zip")


def _discard_partial(archive: Path) -> None:
    try:
        archive.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove partial archive %s: %s", archive, exc)


def zip_file(path: Path, *, delete_original: bool = False, compresslevel: int = 6) -> Path:
    """Compress `path` into a single-entry ZIP archive and return its path.

    The original is only removed once the archive has been closed
    successfully; on any failure it is left intact and a partial archive
    written by this call is deleted. An existing archive is only replaced
    once it could be opened for writing.
    """

    archive = zip_path_for(path)
    logger.info("Compressing %s file to %s...", path, archive)

    stage = "creating zip file"
    opened = False
    try:
        with zipfile.ZipFile(
            archive,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compresslevel,
        ) as zf:
            opened = True
            stage = "opening exported file"
            with path.open("rb") as source:
                stage = "creating zip entry for"
                # VHDX exports routinely exceed 4 GiB.
                with zf.open(path.name, mode="w", force_zip64=True) as entry:
                    stage = "copying"
                    shutil.copyfileobj(source, entry, _COPY_CHUNK_SIZE)
            stage = "closing zip file"
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        if opened:
            _discard_partial(archive)
        raise ArchiveWriteError(stage, str(path), str(exc)) from exc

    logger.info("Compression completed successfully.")

    if delete_original:
        try:
            path.unlink()
        except OSError as exc:
            raise ArchiveWriteError("removing", str(path), str(exc)) from exc
        logger.info("Removed uncompressed export %s", path)
    return archive


def compact_file(
    path: Path,
    *,
    settings: AppSettings | None = None,
    runner: CommandRunner | None = None,
) -> str:
    """Compress `path` in place with NTFS compression.

    The exit code is checked first; a zero exit still needs the confirmation
    phrase in compact's output, otherwise the run fails with the raw output.
    """

    settings = settings or AppSettings()
    runner = runner or SubprocessRunner(settings)

    argv = [settings.compact_executable, "/c", str(path)]
    logger.info("Compacting %s with NTFS compression...", path)
    result = runner.run(argv)
    output = result.stdout.decode(settings.compact_output_encoding, errors="replace")
    if not result.ok:
        errors = result.stderr.decode(settings.compact_output_encoding, errors="replace")
        raise ProcessExecutionError(
            argv,
            returncode=result.returncode,
            output="\n".join(p for p in (output.strip(), errors.strip()) if p),
        )

    if settings.compact_success_marker not in output:
        raise CompressionVerificationError(str(path), output)

    logger.info("Compression completed successfully.")
    return output
