"""Asset source protocol consumed by the scan loop."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from photostats.models.asset import Asset, AssetPage, ExtendedAssetInfo, PermissionStatus


@runtime_checkable
class AssetSource(Protocol):
    """Supplies photo listings and per-asset metadata.

    ``fetch_page`` lists photos only, ordered by capture time. ``cursor`` is
    opaque; ``None`` requests the first page.
    """

    async def request_permission(self) -> PermissionStatus: ...

    async def fetch_page(
        self, page_size: int, cursor: str | None, sort_order: str
    ) -> AssetPage: ...

    async def get_asset_info(
        self, asset: Asset, should_download_from_network: bool = False
    ) -> ExtendedAssetInfo: ...


def paginate_list(assets: list[Asset], page_size: int, cursor: str | None) -> AssetPage:
    """Slice an already-sorted list into a page using an integer-offset cursor."""
    start = int(cursor) if cursor else 0
    items = assets[start : start + page_size]
    end = start + len(items)
    has_more = end < len(assets)
    return AssetPage(items=items, next_cursor=str(end) if has_more else None, has_more=has_more)


def sort_assets(assets: list[Asset], sort_order: str) -> list[Asset]:
    return sorted(
        assets,
        key=lambda a: (a.creation_time, a.id),
        reverse=sort_order == "newest",
    )
