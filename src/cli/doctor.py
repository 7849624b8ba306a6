"""Doctor command for environment diagnostics."""

from __future__ import annotations

import shutil
import sys

import typer
from rich.console import Console
from rich.table import Table

from adapters.wsl_client import WslClient
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.errors import BackupError, ConfigurationError
from core.domain.models import ContainerFormat

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_executable(name: str) -> tuple[bool, str]:
    found = shutil.which(name)
    if found:
        return True, found
    return False, f"{name!r} not found on PATH"


def _check_registry(settings: AppSettings) -> tuple[bool, str]:
    """List distributions and confirm the default one is installed."""

    try:
        listing = WslClient(settings).list_guests()
    except BackupError as exc:
        return False, str(exc)

    record = listing.find(settings.default_distro)
    detail = f"{len(listing.records)} distribution(s)"
    if listing.parse_errors:
        detail += f", {len(listing.parse_errors)} unparsed line(s)"
    if record is None:
        return False, f"{detail}; default {settings.default_distro!r} not installed"
    return True, f"{detail}; {record.name} is {record.state.value}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="wsl2backup Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    on_windows = sys.platform.startswith("win")
    table.add_row("Platform", "OK" if on_windows else "WARN", sys.platform)

    ok_wsl, detail_wsl = _check_executable(settings.wsl_executable)
    table.add_row("Host tool", "OK" if ok_wsl else "FAIL", detail_wsl)

    ok_compact, detail_compact = _check_executable(settings.compact_executable)
    table.add_row("compact", "OK" if ok_compact else "OPTIONAL", detail_compact)

    if ok_wsl:
        ok_list, detail_list = _check_registry(settings)
        table.add_row("Registry", "OK" if ok_list else "FAIL", detail_list)

    table.add_row("Default format", "OK", settings.default_format.value)
    table.add_row("Output dir", "OK", str(settings.output_dir or "current directory"))
    table.add_row("User config", "OK", str(get_user_env_file()))

    _console.print(table)

    if not ok_compact:
        _console.print(
            "\n[yellow]Note:[/yellow] Without compact, use `--zip` instead of `--compact`."
        )


@app.command()
def setup() -> None:
    """Interactive defaults setup (stored in the user config .env)."""

    settings = AppSettings()

    distro = typer.prompt("Default distribution", default=settings.default_distro).strip()
    fmt = typer.prompt("Default export format (vhdx/tar)", default=settings.default_format.value)
    output_dir = typer.prompt(
        "Backup directory (empty for current directory)",
        default=str(settings.output_dir or ""),
        show_default=False,
    ).strip()

    try:
        container_format = ContainerFormat.from_value(fmt)
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if not distro:
        raise typer.BadParameter("distribution is required")

    values = {
        "WSL2BACKUP_DEFAULT_DISTRO": distro,
        "WSL2BACKUP_DEFAULT_FORMAT": container_format.value,
    }
    if output_dir:
        values["WSL2BACKUP_OUTPUT_DIR"] = output_dir

    env_path = write_user_env_vars(values)
    _console.print(f"[green]Saved:[/green] {env_path}")
