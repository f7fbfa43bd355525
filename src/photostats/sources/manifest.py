"""Asset source backed by a JSONL asset export.

Each line is one asset::

    {"id": "A1", "filename": "IMG_0001.JPG", "width": 4032, "height": 3024,
     "creation_time": 1650000000.0, "is_network_asset": false,
     "exif": {"{TIFF}": {"Model": "iPhone 13"}, "{GPS}": {"Altitude": 12.4}}}
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any

import orjson

from photostats.models.asset import Asset, AssetPage, ExtendedAssetInfo, PermissionStatus
from photostats.sources.base import paginate_list, sort_assets

logger = logging.getLogger(__name__)


def read_asset_manifest(path: str | Path) -> tuple[list[Asset], dict[str, dict[str, Any]]]:
    """Read assets and their raw metadata bags, skipping corrupt lines."""
    assets: list[Asset] = []
    exif: dict[str, dict[str, Any]] = {}
    with open(path, "rb") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
                asset = Asset.from_dict(data)
            except (orjson.JSONDecodeError, KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed manifest line %d in %s", lineno, path)
                continue
            assets.append(asset)
            bag = data.get("exif")
            if isinstance(bag, dict):
                exif[asset.id] = bag
    return assets, exif


class ManifestAssetSource:
    """Serves assets from a JSONL export of a device library."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._assets: list[Asset] | None = None
        self._exif: dict[str, dict[str, Any]] = {}
        self._ordered: dict[str, list[Asset]] = {}

    async def request_permission(self) -> PermissionStatus:
        ok = self.path.is_file() and os.access(self.path, os.R_OK)
        return PermissionStatus.GRANTED if ok else PermissionStatus.DENIED

    async def fetch_page(self, page_size: int, cursor: str | None, sort_order: str) -> AssetPage:
        if self._assets is None:
            self._assets, self._exif = await asyncio.to_thread(read_asset_manifest, self.path)
        if sort_order not in self._ordered:
            self._ordered[sort_order] = sort_assets(self._assets, sort_order)
        return paginate_list(self._ordered[sort_order], page_size, cursor)

    async def get_asset_info(
        self, asset: Asset, should_download_from_network: bool = False
    ) -> ExtendedAssetInfo:
        # An export only carries what was cached on the device, so nothing to download
        return ExtendedAssetInfo.from_exif(
            self._exif.get(asset.id), is_network_asset=asset.is_network_asset
        )
