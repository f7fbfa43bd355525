"""photostats scan command."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from photostats.errors import PermissionDeniedError, PhotoStatsError
from photostats.log import setup_logging
from photostats.models.config import ScanConfig
from photostats.sources.base import AssetSource

console = Console()


def scan(
    directory: Optional[str] = typer.Argument(None, help="Photo directory to analyze"),
    manifest: Optional[str] = typer.Option(
        None, "-m", "--manifest", help="Analyze a JSONL asset export instead of a directory"
    ),
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Save final stats as JSON"),
    batch_size: int = typer.Option(10, "--batch-size", help="Assets per page"),
    max_assets: int = typer.Option(300, "--max-assets", help="Stop after this many assets"),
    order: str = typer.Option("newest", "--order", help="newest or oldest first"),
    timeout: float = typer.Option(30.0, "--timeout", help="Per-asset metadata timeout (seconds)"),
    retries: int = typer.Option(0, "--retries", help="Retries per asset on fetch failure"),
    exact_cap: bool = typer.Option(
        False, "--exact-cap", help="Trim the last page so exactly --max-assets are counted"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
) -> None:
    """Analyze a photo library and print aggregate stats."""
    from photostats.cli.report import render_stats
    from photostats.io.stats_io import write_result
    from photostats.pipeline.runner import run_scan

    setup_logging(verbose)

    if (directory is None) == (manifest is None):
        typer.echo("Error: pass either a DIRECTORY or --manifest", err=True)
        raise typer.Exit(1)

    try:
        config = ScanConfig(
            batch_size=batch_size,
            max_assets=max_assets,
            sort_order=order,
            asset_timeout=timeout,
            max_retries=retries,
            exact_cap=exact_cap,
        )
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    source: AssetSource
    if manifest is not None:
        from photostats.sources.manifest import ManifestAssetSource

        source = ManifestAssetSource(manifest)
    else:
        from photostats.sources.directory import DirectoryAssetSource

        if not Path(directory).is_dir():
            typer.echo(f"Error: {directory} is not a valid directory", err=True)
            raise typer.Exit(1)
        source = DirectoryAssetSource(directory)

    try:
        result = run_scan(source, config)
    except PermissionDeniedError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    except PhotoStatsError as exc:
        console.print(
            f"[red]Error:[/red] An error occurred while analyzing the photo library: {exc}"
        )
        raise typer.Exit(1)

    console.print()
    render_stats(result.stats, console)

    if output:
        write_result(output, result)
        console.print(f"[bold green]Stats saved to {output}[/bold green]")
