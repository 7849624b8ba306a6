"""wsl2backup command-line interface (Typer).

Commands:
- `backup`: export a distribution, optionally terminating and compressing it.
- `list`: show the registry as seen by `wsl -l -v`.
- `doctor`: environment diagnostics and default configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from adapters.wsl_client import WslClient
from cli import doctor
from cli.logs import configure_logging
from cli.ui_components import build_guests_table, build_result_panel, print_banner
from core.config import AppSettings
from core.domain.errors import BackupError, ConfigurationError
from core.domain.models import CompressionChoice, ContainerFormat
from core.services.backup_pipeline import BackupRequest, PipelineHooks, run_backup

app = typer.Typer(
    no_args_is_help=True,
    help="Back up WSL distributions with wsl --export, optionally compressed.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
logger = logging.getLogger(__name__)


def _fail(exc: BackupError) -> typer.Exit:
    _console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False)
    return typer.Exit(code=2 if isinstance(exc, ConfigurationError) else 1)


@app.command()
def backup(
    distro: Optional[str] = typer.Option(
        None,
        "--distro",
        "-d",
        help="The WSL distribution to back up (default from settings: kali-linux).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output filename; defaults to <date>-<distro>.<format>.",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help='Export output type: "tar" or "vhdx" (default).',
    ),
    zip_archive: bool = typer.Option(False, "--zip", "-z", help="Compress the export into a ZIP file."),
    compact: bool = typer.Option(
        False,
        "--compact",
        "-c",
        help="Use Windows compact (NTFS compression) on the export instead of ZIP.",
    ),
    keep: bool = typer.Option(False, "--keep", help="Keep the uncompressed export after --zip."),
    terminate: bool = typer.Option(
        False,
        "--terminate",
        "-t",
        help="Terminate the distribution if it is running in order to back it up.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Skip the banner."),
) -> None:
    """Export a distribution to a tar or vhdx backup."""

    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level, console=_console)

    # Everything below is validated before any process is spawned.
    try:
        container_format = (
            ContainerFormat.from_value(output_format) if output_format else settings.default_format
        )
        compression = CompressionChoice.from_flags(
            zip_archive=zip_archive,
            native=compact,
            keep_original=keep,
        )
    except ConfigurationError as exc:
        raise _fail(exc) from exc
    if keep and not zip_archive:
        logger.warning("--keep only applies to --zip, ignoring it")

    if not quiet:
        print_banner(_console)

    request = BackupRequest(
        distro=distro or settings.default_distro,
        container_format=container_format,
        output_path=output,
        compression=compression,
        force_stop=terminate,
    )
    hooks = PipelineHooks(stage=lambda message: _console.print(f"[cyan]›[/cyan] {escape(message)}"))
    try:
        result = run_backup(settings=settings, request=request, hooks=hooks)
    except BackupError as exc:
        raise _fail(exc) from exc

    _console.print(build_result_panel(result))


@app.command(name="list")
def list_distros(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    """Show installed distributions and their state."""

    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level, console=_console)

    try:
        listing = WslClient(settings).list_guests()
    except BackupError as exc:
        raise _fail(exc) from exc

    _console.print(build_guests_table(listing))
    for problem in listing.parse_errors:
        _console.print(
            f"[yellow]Unparsed line {problem.line_number}:[/yellow] {escape(repr(problem.line))} ({problem.reason})",
            highlight=False,
        )


def run() -> None:
    app()
