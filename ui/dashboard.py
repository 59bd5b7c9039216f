"""
Rich-based terminal dashboard for speed test results.

All formatting helpers live in ``client.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

from typing import Any, Dict

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from client.config import SpeedTestConfig
from client.results import SpeedTestResult
from client.stats import format_duration, format_latency, format_speed

console = Console()
err_console = Console(stderr=True)

_TITLES = {
    "latency": "Latency",
    "download": "Download",
    "upload": "Upload",
}


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header() -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Speed Test[/bold cyan]\n"
            "[dim]Latency, download and upload against a speed test server[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def print_config(config: SpeedTestConfig) -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="dim")
    table.add_column(style="bold")
    table.add_row("Server:", config.server)
    table.add_row("Pings:", str(config.ping_count))
    table.add_row("Download:", f"{config.download_megabytes} MB")
    table.add_row("Upload:", f"{config.upload_megabytes} MB")
    table.add_row("Deadline:", f"{config.deadline_seconds} s per test")
    console.print(Panel(table, title="[bold]Configuration[/bold]", border_style="blue"))


def print_server_status(status: Dict[str, Any]) -> None:
    table = Table(title="Server Status", box=box.ROUNDED)
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Status", f"[green]{status.get('status', '?')}[/green]")
    for key, value in (status.get("version") or {}).items():
        table.add_row(f"Version ({key})", str(value))
    for key, value in (status.get("memoryUsage") or {}).items():
        table.add_row(f"Memory ({key})", str(value))
    console.print(table)


def print_final_results(result: SpeedTestResult) -> None:
    table = Table(title="Results", box=box.ROUNDED, border_style="cyan")
    table.add_column("Test", style="bold")
    table.add_column("Result", justify="right")
    table.add_column("Duration", justify="right", style="dim")

    latency = result.latency
    if latency.ok:
        table.add_row(
            "Latency",
            f"[bold yellow]{format_latency(latency.latency_ms)}[/bold yellow]",
            f"{format_duration(latency.duration_ms)} / {latency.ping_count} pings",
        )
    else:
        table.add_row("Latency", _failure_cell(latency), "")

    download = result.download
    if download.ok:
        table.add_row(
            "Download",
            f"[bold green]{format_speed(download.download_speed_mbps)}[/bold green]",
            f"{format_duration(download.duration_ms)} / {download.download_megabytes} MB",
        )
    else:
        table.add_row("Download", _failure_cell(download), "")

    upload = result.upload
    if upload.ok:
        table.add_row(
            "Upload",
            f"[bold blue]{format_speed(upload.upload_speed_mbps)}[/bold blue]",
            f"{format_duration(upload.duration_ms)} / {upload.upload_megabytes} MB",
        )
    else:
        table.add_row("Upload", _failure_cell(upload), "")

    console.print()
    console.print(table)
    console.print()


def _failure_cell(failure) -> str:  # noqa: ANN001 (SubTestFailure)
    color = "yellow" if failure.kind == "deadline" else "red"
    return f"[{color}]failed ({failure.kind}): {escape(failure.reason)}[/{color}]"


# ---------------------------------------------------------------------------
# Progress display
# ---------------------------------------------------------------------------

class ProgressDisplay:
    """Manages a ``rich`` progress bar while a sub-test runs."""

    def __init__(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TextColumn("[bold cyan]{task.fields[speed]}[/bold cyan]"),
            TimeElapsedColumn(),
            console=console,
        )
        self._task_id = None

    def start(self, name: str) -> None:
        self.progress.start()
        self._task_id = self.progress.add_task(_TITLES.get(name, name), total=100, speed="")

    def update(self, progress: float, speed_mbps: float = 0) -> None:
        if self._task_id is None:
            return
        speed_str = format_speed(speed_mbps) if speed_mbps > 0 else "..."
        self.progress.update(self._task_id, completed=progress * 100, speed=speed_str)

    def stop(self) -> None:
        if self._task_id is not None:
            self.progress.update(self._task_id, completed=100)
        self.progress.stop()
        self._task_id = None
