"""Per-asset metadata fetch and page-level aggregation."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from photostats.core.classify import classify
from photostats.errors import AssetFetchError
from photostats.models.asset import Asset, ExtendedAssetInfo
from photostats.models.config import ScanConfig
from photostats.models.stats import AssetFacts, PhotoStats
from photostats.sources.base import AssetSource

logger = logging.getLogger(__name__)

SKIPPED = AssetFacts(skipped=True)


async def fetch_asset_info(
    asset: Asset, source: AssetSource, config: ScanConfig
) -> ExtendedAssetInfo:
    """Fetch extended info without network download, bounded by timeout and retries.

    Raises AssetFetchError once every attempt has failed.
    """
    attempts = config.max_retries + 1
    last: BaseException | None = None
    for attempt in range(attempts):
        try:
            return await asyncio.wait_for(
                source.get_asset_info(asset, should_download_from_network=False),
                timeout=config.asset_timeout,
            )
        except asyncio.TimeoutError as exc:
            last = exc
            reason = f"timed out after {config.asset_timeout:g}s"
        except Exception as exc:
            last = exc
            reason = f"{type(exc).__name__}: {exc}"

        if attempt + 1 < attempts:
            delay = config.retry_backoff * 2**attempt
            logger.debug(
                "Attempt %d/%d for %s failed (%s), retrying in %.2fs",
                attempt + 1,
                attempts,
                asset.id,
                reason,
                delay,
            )
            await asyncio.sleep(delay)

    raise AssetFetchError(asset.id, reason) from last


async def fetch_asset_facts(asset: Asset, source: AssetSource, config: ScanConfig) -> AssetFacts:
    """Classify one asset. Never raises.

    A failed fetch comes back as a skipped delta. If the fetch succeeded but
    classification fails, the local/network split still counts and no
    dimension labels are recorded.
    """
    try:
        info = await fetch_asset_info(asset, source, config)
    except Exception as exc:
        logger.warning("Skipping asset %s (%s): %s", asset.id, asset.filename, exc)
        return SKIPPED

    try:
        return classify(asset, info)
    except Exception as exc:
        logger.warning("Could not classify asset %s (%s): %s", asset.id, asset.filename, exc)
        return AssetFacts(is_network_asset=info.is_network_asset)


def fold_page(facts: Iterable[AssetFacts]) -> PhotoStats:
    """Fold one page's deltas into a fresh partial accumulator."""
    partial = PhotoStats()
    for f in facts:
        partial.fold(f)
    return partial


async def aggregate_page(
    assets: list[Asset], source: AssetSource, config: ScanConfig
) -> PhotoStats:
    """Fetch and classify a page's assets concurrently, then fold them serially."""
    facts = await asyncio.gather(*(fetch_asset_facts(a, source, config) for a in assets))
    return fold_page(facts)
