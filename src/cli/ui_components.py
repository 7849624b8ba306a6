"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Tables and panels are reused by `list`, `backup` and `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import GuestListing, GuestState
from core.services.backup_pipeline import BackupResult

_STATE_STYLES = {
    GuestState.RUNNING: "yellow",
    GuestState.STOPPED: "green",
    GuestState.UNKNOWN: "dim",
}


def print_banner(console: Console) -> None:
    """Print the welcome banner.

    Why here:
    - Avoids circular imports (main <-> doctor).
    - Lets non-interactive runs skip it (`--quiet`).
    """

    title = Text("wsl2backup", style="bold cyan")
    subtitle = Text("Export • Compress • Keep your WSL distributions safe", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_guests_table(listing: GuestListing) -> Table:
    table = Table(title="WSL Distributions")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("State")
    table.add_column("Version", style="magenta")
    for record in listing.records:
        style = _STATE_STYLES[record.state]
        table.add_row(record.name, Text(record.state.value, style=style), record.version)
    return table


def build_result_panel(result: BackupResult) -> Panel:
    """Panel summarizing a finished backup."""

    body = Text()
    body.append("Distribution: ", style="bold")
    body.append(f"{result.export.guest_name}\n")
    body.append("Format: ", style="bold")
    body.append(f"{result.export.container_format.value}\n")
    body.append("Export: ", style="bold")
    body.append(str(result.export.output_path))
    if result.original_removed:
        body.append(" (removed)", style="dim")
    if result.archive_path:
        body.append("\nArchive: ", style="bold")
        body.append(str(result.archive_path))
    if result.compact_output is not None:
        body.append("\nNTFS compression: ", style="bold")
        body.append("applied")

    return Panel(body, title=Text("Backup complete", style="bold green"), border_style="green")
