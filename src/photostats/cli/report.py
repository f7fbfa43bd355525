"""Rich rendering of stats snapshots and the ``show`` command."""

from __future__ import annotations

from typing import Mapping

import orjson
import typer
from rich.console import Console
from rich.table import Table

from photostats.io.stats_io import read_snapshot
from photostats.models.stats import StatsSnapshot
from photostats.utils import fmt_meters, top_counts

console = Console()


def _counts_table(title: str, rows: list[tuple[str, int]]) -> Table:
    table = Table(title=title, title_justify="left", show_header=False, border_style="blue")
    table.add_column("Label", style="bold")
    table.add_column("Count", justify="right")
    for label, count in rows:
        table.add_row(label, f"{count:,}")
    return table


def _by_year(years: Mapping[str, int]) -> list[tuple[str, int]]:
    def key(kv: tuple[str, int]) -> tuple[int, str]:
        return (-int(kv[0]) if kv[0].isdigit() else 0, kv[0])

    return sorted(years.items(), key=key)


def render_stats(stats: StatsSnapshot, out: Console | None = None) -> None:
    """Print a snapshot as a summary table plus one table per dimension."""
    out = out or console

    summary = Table(title="Photo Library Stats", show_header=False, border_style="blue")
    summary.add_column("Key", style="bold")
    summary.add_column("Value")
    summary.add_row("Total photos", f"{stats.total:,}")
    summary.add_row("Local photos", f"{stats.local_photos:,}")
    summary.add_row("Network photos", f"{stats.network_photos:,}")
    if stats.skipped_photos:
        summary.add_row("Skipped", f"{stats.skipped_photos:,}")
    summary.add_row("Highest", fmt_meters(stats.highest_photo))
    summary.add_row("Lowest", fmt_meters(stats.lowest_photo if stats.has_altitude else None))
    summary.add_row("Fastest", f"{stats.fastest_photo:.2f} km/h")
    out.print(summary)

    sections = [
        ("File Types", top_counts(stats.file_types)),
        ("Orientations", top_counts(stats.orientations)),
        ("Top 5 Aspect Ratios", top_counts(stats.aspect_ratios, 5)),
        ("Top 5 Camera Models", top_counts(stats.camera_models, 5)),
        ("Top 5 Lens Models", top_counts(stats.lens_models, 5)),
        ("Photos by Year", _by_year(stats.creation_years)),
        ("Photos by Time of Day", top_counts(stats.time_of_day)),
    ]
    for title, rows in sections:
        if rows:
            out.print(_counts_table(title, rows))


def show(
    stats_path: str = typer.Option(..., "-s", "--stats", help="Path to a saved stats JSON"),
) -> None:
    """Render a stats file written by ``scan --output``."""
    try:
        meta, snapshot = read_snapshot(stats_path)
    except (OSError, ValueError, orjson.JSONDecodeError) as exc:
        console.print(f"[red]Could not read {stats_path}: {exc}[/red]")
        raise typer.Exit(1)

    render_stats(snapshot)
    if meta.get("truncated"):
        console.print(
            f"[yellow]Limited to {meta.get('cap', 0):,} photos; "
            "some photos may not be included.[/yellow]"
        )
