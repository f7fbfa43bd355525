"""Paginated library scan with per-page snapshots and Rich progress."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from photostats.core.aggregator import aggregate_page
from photostats.errors import PermissionDeniedError, ScanAbortedError
from photostats.models.asset import PermissionStatus
from photostats.models.config import ScanConfig
from photostats.models.stats import PhotoStats, StatsSnapshot
from photostats.pipeline.signals import CancelToken, cancel_on_signals
from photostats.sources.base import AssetSource

logger = logging.getLogger(__name__)

console = Console()


@dataclass(frozen=True, slots=True)
class ScanProgress:
    stats: StatsSnapshot
    processed: int
    page: int


@dataclass(frozen=True, slots=True)
class ScanResult:
    stats: StatsSnapshot
    processed: int
    pages: int
    cap: int
    truncated: bool = False
    overshoot: int = 0
    cancelled: bool = False
    cancel_reason: str | None = None


ProgressCallback = Callable[[ScanProgress], None]


async def scan_library(
    source: AssetSource,
    config: ScanConfig,
    on_progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancelToken] = None,
) -> ScanResult:
    """Scan the source page by page until it is exhausted or the cap is reached.

    The cap is checked between pages, so the last page may push ``processed``
    past ``config.max_assets`` unless ``config.exact_cap`` is set. Raises
    PermissionDeniedError or ScanAbortedError; per-asset failures only show up
    as ``skipped_photos``.
    """
    try:
        status = await source.request_permission()
    except Exception as exc:
        raise ScanAbortedError(f"Permission request failed: {exc}") from exc
    if status != PermissionStatus.GRANTED:
        logger.error("Media library permission was denied")
        raise PermissionDeniedError("Permission to access media library was denied")

    stats = PhotoStats()
    processed = 0
    pages = 0
    cursor: str | None = None
    has_more = True
    trimmed = False
    cancelled = False

    while has_more and processed < config.max_assets:
        if cancel is not None and cancel.cancelled:
            logger.info("Scan cancelled after %d pages: %s", pages, cancel.reason)
            cancelled = True
            break

        try:
            page = await source.fetch_page(config.batch_size, cursor, config.sort_order)
        except Exception as exc:
            logger.error("Fetching page %d failed: %s", pages + 1, exc)
            raise ScanAbortedError(f"Fetching page {pages + 1} failed: {exc}") from exc

        if not page.items:
            if page.has_more:
                logger.warning("Source returned an empty page claiming more; stopping")
            break

        items = page.items
        if config.exact_cap:
            budget = config.max_assets - processed
            trimmed = len(items) > budget
            items = items[:budget]

        stats.merge(await aggregate_page(items, source, config))
        processed += len(items)
        pages += 1
        has_more = page.has_more
        cursor = page.next_cursor
        logger.debug("Page %d folded, %d assets processed", pages, processed)

        if on_progress is not None:
            on_progress(ScanProgress(stats=stats.snapshot(), processed=processed, page=pages))

    truncated = not cancelled and processed >= config.max_assets and (has_more or trimmed)
    if truncated:
        logger.info("Scan stopped at cap of %d assets (%d processed)", config.max_assets, processed)

    return ScanResult(
        stats=stats.snapshot(),
        processed=processed,
        pages=pages,
        cap=config.max_assets,
        truncated=truncated,
        overshoot=max(0, processed - config.max_assets),
        cancelled=cancelled,
        cancel_reason=cancel.reason if cancelled and cancel is not None else None,
    )


def run_scan(source: AssetSource, config: ScanConfig) -> ScanResult:
    """Run a scan in the foreground with a progress bar and Ctrl+C cancellation."""
    with cancel_on_signals(CancelToken()) as cancel:
        return _run_scan_inner(source, config, cancel)


def _run_scan_inner(source: AssetSource, config: ScanConfig, cancel: CancelToken) -> ScanResult:
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]Analyzing photos"),
        BarColumn(bar_width=40),
        MofNCompleteColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        console=console,
    )

    with progress:
        task = progress.add_task("Analyzing", total=config.max_assets)

        def on_progress(p: ScanProgress) -> None:
            progress.update(task, completed=min(p.processed, config.max_assets))
            if cancel.cancelled:
                progress.update(task, description="[yellow]Stopping after this page...")

        result = asyncio.run(scan_library(source, config, on_progress=on_progress, cancel=cancel))

    stats = result.stats
    console.print()
    console.print("[bold green]Analysis complete![/bold green]")
    console.print(f"  Total photos: [bold]{result.processed:,}[/bold] in {result.pages:,} pages")
    console.print(f"  Local: {stats.local_photos:,}  Network: {stats.network_photos:,}")
    if stats.skipped_photos:
        console.print(f"  Skipped: [red]{stats.skipped_photos:,}[/red]")

    if result.truncated:
        console.print(
            f"\n[yellow]Analysis limit reached: analyzed {result.processed:,} photos "
            f"(limit {result.cap:,}). Some photos may not be included in the stats.[/yellow]"
        )
    if result.cancelled:
        console.print(
            f"\n[yellow]Scan cancelled ({result.cancel_reason}); "
            "stats cover the pages analyzed so far.[/yellow]"
        )

    return result
