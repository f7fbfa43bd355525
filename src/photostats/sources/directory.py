"""Asset source backed by a local photo directory, read with Pillow."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError

from photostats.models.asset import (
    Asset,
    AssetPage,
    ExtendedAssetInfo,
    PermissionStatus,
    parse_float,
)
from photostats.sources.base import paginate_list, sort_assets

logger = logging.getLogger(__name__)

PHOTO_EXTENSIONS = (".jpg", ".jpeg", ".png", ".heic", ".gif", ".tiff", ".tif", ".bmp", ".webp")

# iCloud leaves ".<name>.icloud" stubs for photos evicted from local storage
ICLOUD_SUFFIX = ".icloud"

# EXIF tag IDs
_TIFF_MAKE = 0x010F  # 271
_TIFF_MODEL = 0x0110  # 272
_EXIF_IFD = 0x8769  # 34665, ExifIFD sub-IFD pointer
_EXIF_LENS_MODEL = 0xA434  # 42036
_GPS_IFD = 0x8825  # 34853, GPS info sub-IFD pointer
_GPS_ALTITUDE = 0x0006
_GPS_SPEED = 0x000D


def _placeholder_name(fn: str) -> str | None:
    """Return the real filename behind an iCloud stub, or None."""
    if fn.startswith(".") and fn.endswith(ICLOUD_SUFFIX):
        return fn[1 : -len(ICLOUD_SUFFIX)]
    return None


def discover_photos(root: str | Path, extensions: tuple[str, ...]) -> list[tuple[str, str, bool]]:
    """Recursively find photos under root.

    Returns ``(path, filename, is_placeholder)`` tuples sorted by path.
    """
    ext_set = {e.lower() for e in extensions}
    found: list[tuple[str, str, bool]] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for fn in filenames:
            real = _placeholder_name(fn)
            name = real if real is not None else fn
            if any(name.lower().endswith(ext) for ext in ext_set):
                found.append((os.path.join(dirpath, fn), name, real is not None))
    found.sort()
    return found


def _exif_str(src: Any, tag: int) -> str | None:
    val = src.get(tag)
    if isinstance(val, bytes):
        val = val.decode("utf-8", errors="replace")
    if not isinstance(val, str):
        return None
    s = val.strip().rstrip("\x00")
    return s or None


def exif_namespaces(exif: Any) -> dict[str, dict[str, Any]]:
    """Translate a Pillow ``Image.Exif`` into the ``TIFF``/``Exif``/``GPS`` bag."""
    if not exif:
        return {}
    bag: dict[str, dict[str, Any]] = {}

    tiff: dict[str, Any] = {}
    make = _exif_str(exif, _TIFF_MAKE)
    model = _exif_str(exif, _TIFF_MODEL)
    if make:
        tiff["Make"] = make
    if model:
        tiff["Model"] = model
    if tiff:
        bag["TIFF"] = tiff

    # LensModel normally lives in the ExifIFD, but some writers put it in IFD0
    exif_ifd = exif.get_ifd(_EXIF_IFD)
    lens = None
    for src in ([exif_ifd, exif] if exif_ifd else [exif]):
        lens = _exif_str(src, _EXIF_LENS_MODEL)
        if lens:
            break
    if lens:
        bag["Exif"] = {"LensModel": lens}

    gps_ifd = exif.get_ifd(_GPS_IFD)
    if gps_ifd:
        gps = {
            k: v
            for k, v in (
                ("Altitude", parse_float(gps_ifd.get(_GPS_ALTITUDE))),
                ("Speed", parse_float(gps_ifd.get(_GPS_SPEED))),
            )
            if v is not None
        }
        if gps:
            bag["GPS"] = gps
    return bag


def read_dimensions(path: str) -> tuple[int, int]:
    """Image size from the file header; (0, 0) when Pillow refuses the file.

    Never raises, so one bad photo cannot fail the whole page listing.
    """
    try:
        with Image.open(path) as img:
            return img.size
    except Exception as exc:
        logger.debug("Could not read dimensions of %s: %s", path, exc)
        return 0, 0


def read_exif(path: str) -> dict[str, dict[str, Any]]:
    """Metadata bag for a local file. Unreadable files raise OSError."""
    try:
        with Image.open(path) as img:
            return exif_namespaces(img.getexif())
    except UnidentifiedImageError:
        # Present locally but in a format Pillow cannot decode (e.g. HEIC without a plugin)
        logger.debug("No decoder for %s, skipping embedded metadata", path)
        return {}


class DirectoryAssetSource:
    """Serves the photos under ``root`` as an asset library."""

    def __init__(self, root: str | Path, extensions: tuple[str, ...] = PHOTO_EXTENSIONS) -> None:
        self.root = Path(root)
        self.extensions = extensions
        self._paths: dict[str, str] = {}
        self._listing: list[Asset] | None = None
        self._ordered: dict[str, list[Asset]] = {}

    async def request_permission(self) -> PermissionStatus:
        ok = self.root.is_dir() and os.access(self.root, os.R_OK | os.X_OK)
        return PermissionStatus.GRANTED if ok else PermissionStatus.DENIED

    def _list_assets(self) -> list[Asset]:
        assets: list[Asset] = []
        for path, name, is_placeholder in discover_photos(self.root, self.extensions):
            try:
                st = os.stat(path)
            except OSError:
                logger.warning("Cannot stat %s, leaving it out of the listing", path)
                continue
            asset_id = os.path.relpath(path, self.root)
            self._paths[asset_id] = path
            assets.append(
                Asset(
                    id=asset_id,
                    filename=name,
                    creation_time=st.st_mtime,
                    is_network_asset=is_placeholder,
                )
            )
        logger.debug("Listed %d photos under %s", len(assets), self.root)
        return assets

    def _with_dimensions(self, items: list[Asset]) -> list[Asset]:
        out: list[Asset] = []
        for asset in items:
            if asset.is_network_asset:
                out.append(asset)
                continue
            width, height = read_dimensions(self._paths[asset.id])
            out.append(replace(asset, width=width, height=height))
        return out

    async def fetch_page(self, page_size: int, cursor: str | None, sort_order: str) -> AssetPage:
        if self._listing is None:
            self._listing = await asyncio.to_thread(self._list_assets)
        if sort_order not in self._ordered:
            self._ordered[sort_order] = sort_assets(self._listing, sort_order)

        page = paginate_list(self._ordered[sort_order], page_size, cursor)
        items = await asyncio.to_thread(self._with_dimensions, page.items)
        return replace(page, items=items)

    async def get_asset_info(
        self, asset: Asset, should_download_from_network: bool = False
    ) -> ExtendedAssetInfo:
        if asset.is_network_asset:
            # Placeholder bytes are never local; nothing to read either way
            return ExtendedAssetInfo(is_network_asset=True)
        bag = await asyncio.to_thread(read_exif, self._paths[asset.id])
        return ExtendedAssetInfo.from_exif(bag)
