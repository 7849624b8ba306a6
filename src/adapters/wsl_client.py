"""Host tool adapter: `wsl.exe`.

Why it lives in adapters:
- Command lines, UTF-16 console output and the listing's column layout are
  infrastructure details.
- The core only sees `GuestListing` and `ExportRequest`.
"""

from __future__ import annotations

import logging
from typing import Sequence

from adapters.process_runner import SubprocessRunner
from adapters.text_decoder import decode_wide_output
from core.config import AppSettings
from core.domain.errors import DecodeError, ProcessExecutionError
from core.domain.models import (
    ExportRequest,
    GuestListing,
    GuestRecord,
    GuestState,
    RegistryParseError,
)
from core.interfaces.runner import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

LIST_ARGS: tuple[str, ...] = ("-l", "-v")
SELECTED_MARKER = "*"


def parse_guest_listing(text: str) -> GuestListing:
    """Parse `wsl -l -v` output.

    Rules:
    - first line is the header (`NAME STATE VERSION`) and is skipped;
    - blank lines are ignored;
    - the `*` marking the default distribution is stripped;
    - a line that does not split into exactly three fields becomes a
      `RegistryParseError` and the scan continues.
    """

    records: list[GuestRecord] = []
    errors: list[RegistryParseError] = []
    for number, raw_line in enumerate(text.splitlines(), start=1):
        if number == 1:
            continue
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith(SELECTED_MARKER):
            line = line[len(SELECTED_MARKER):].lstrip()

        fields = line.split()
        if len(fields) != 3:
            errors.append(
                RegistryParseError(
                    line_number=number,
                    line=raw_line,
                    reason=f"expected 3 fields (name, state, version), got {len(fields)}",
                )
            )
            continue

        name, state, version = fields
        records.append(GuestRecord(name=name, state=GuestState.from_token(state), version=version))

    return GuestListing(records=records, parse_errors=errors)


def _diagnostic_text(raw: bytes) -> str:
    """Decode output that is only logged or reported, never parsed."""

    try:
        return decode_wide_output(raw)
    except DecodeError:
        return raw.decode("utf-16-le", errors="replace")


def _command_output(result: CommandResult) -> str:
    parts = [_diagnostic_text(stream).strip() for stream in (result.stdout, result.stderr) if stream]
    return "\n".join(p for p in parts if p)


class WslClient:
    """Lists, terminates and exports WSL distributions."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._runner = runner or SubprocessRunner(self._settings)

    @property
    def list_command(self) -> str:
        """Command line an operator can run to inspect the registry."""

        return " ".join((self._settings.wsl_executable, *LIST_ARGS))

    def _run(self, args: Sequence[str]) -> tuple[CommandResult, str]:
        argv = [self._settings.wsl_executable, *args]
        result = self._runner.run(argv)
        output = _command_output(result)
        if not result.ok:
            raise ProcessExecutionError(argv, returncode=result.returncode, output=output)
        return result, output

    def list_guests(self) -> GuestListing:
        result, _ = self._run(LIST_ARGS)
        listing = parse_guest_listing(decode_wide_output(result.stdout))
        logger.debug("Registry lists %d distribution(s)", len(listing.records))
        return listing

    def terminate(self, name: str) -> str:
        logger.info("Terminating distribution %s", name)
        _, output = self._run(["--terminate", name])
        return output

    def export(self, request: ExportRequest) -> str:
        """Run `wsl --export`; the guest must already be stopped."""

        args = ["--export", request.guest_name, str(request.output_path)]
        if request.container_format.is_virtual_disk:
            args.append("--vhd")

        logger.info(
            "Exporting distribution %r for backup to file %r in %s format...",
            request.guest_name,
            str(request.output_path),
            request.container_format.value,
        )
        try:
            _, output = self._run(args)
        except ProcessExecutionError as exc:
            logger.error("Export failed: %s", exc.output or "<no output>")
            raise
        logger.info("Export succeeded: %s", output or "<no output>")
        return output
