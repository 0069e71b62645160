"""
Rich-based terminal dashboard for speed test results.

All formatting helpers live in ``cfspeed.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

import ipaddress
import json
from datetime import datetime
from typing import Dict, Iterable, Optional

from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
)
from rich.table import Table

from cfspeed.catalog import TestSpec, display_order, total_iterations
from cfspeed.results import RunResult

console = Console()

_LINK = "[link=https://speed.cloudflare.com]Cloudflare Speed Test[/link]"


# ---------------------------------------------------------------------------
# IP masking
# ---------------------------------------------------------------------------

def mask_ip(address: str) -> str:
    """Hide the host part of an IP address; other strings pass through."""
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return address

    if ip.version == 4:
        a, b, _, _ = address.split(".")
        return f"{a}.{b}.***.***"

    groups = address.split(":")
    if len(groups) == 8 and all(groups):
        return ":".join(groups[:4] + ["****"] * 4)
    return address


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_start(started_at: datetime, out: Optional[Console] = None) -> None:
    out = out or console
    out.print(f"[green]Starting [blue]{_LINK}[/blue] at {started_at.isoformat()}[/green]")


def print_tests(specs: Iterable[TestSpec], out: Optional[Console] = None) -> None:
    out = out or console
    specs = display_order(specs)
    table = Table(title="Test Plan", caption=f"{total_iterations(specs)} requests in total")
    table.add_column("Test", style="bold")
    table.add_column("Bytes", justify="right")
    table.add_column("Iterations", justify="right")
    for spec in specs:
        table.add_row(spec.description, f"{spec.payload_bytes:,}", str(spec.iterations))
    out.print(table)


def print_metadata(result: RunResult, out: Optional[Console] = None) -> None:
    out = out or console
    meta = result.meta
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="dim", no_wrap=True)
    table.add_column(style="bold", no_wrap=True)
    table.add_row("City", meta.city)
    table.add_row("Country", meta.country)
    table.add_row("IP", mask_ip(meta.ip))
    table.add_row("Asn", meta.asn)
    table.add_row("Colo", meta.colo)
    out.print(Panel(table, title="[yellow]Metadata[/yellow]", expand=False))


def print_summary(result: RunResult, out: Optional[Console] = None) -> None:
    out = out or console
    pretty = result.pretty
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(no_wrap=True)
    table.add_column(justify="right")
    table.add_row("Download", f"[bold green]{pretty.downloaded_speed}[/bold green]")
    table.add_row("Upload", f"[bold blue]{pretty.uploaded_speed}[/bold blue]")
    table.add_row("Latency", f"[bold yellow]{pretty.latency}[/bold yellow]")
    table.add_row("Jitter", pretty.jitter)
    table.add_row("Downloaded Latency", pretty.downloaded_latency)
    table.add_row("Downloaded Jitter", pretty.downloaded_jitter)
    table.add_row("Uploaded Latency", pretty.uploaded_latency)
    table.add_row("Uploaded Jitter", pretty.uploaded_jitter)
    out.print(Panel(table, title="[yellow]Speed Test Results Summary[/yellow]", expand=False))


def print_json(result: RunResult, out: Optional[Console] = None) -> None:
    out = out or console
    out.print(
        Panel(
            JSON(json.dumps(result.to_dict())),
            title="[yellow]Speed Test Results in Json[/yellow]",
            expand=False,
        )
    )


# ---------------------------------------------------------------------------
# Progress display
# ---------------------------------------------------------------------------

class ProgressDisplay:
    """One ``rich`` progress bar per spec; usable as a run progress sink."""

    def __init__(self, specs: Iterable[TestSpec], out: Optional[Console] = None) -> None:
        self.specs = display_order(specs)
        self.progress = Progress(
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            SpinnerColumn(),
            console=out or console,
            transient=True,
        )
        self._tasks: Dict[TestSpec, TaskID] = {}

    def __enter__(self) -> ProgressDisplay:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.stop()

    def start(self) -> None:
        self.progress.start()
        for spec in self.specs:
            self._tasks[spec] = self.progress.add_task(
                spec.description, start=False, total=spec.iterations
            )

    def start_task(self, spec: TestSpec) -> None:
        task_id = self._tasks.get(spec)
        if task_id is not None:
            self.progress.start_task(task_id)

    def increment(self, spec: TestSpec) -> None:
        task_id = self._tasks.get(spec)
        if task_id is not None:
            self.progress.advance(task_id)

    def stop(self) -> None:
        self.progress.stop()
