"""Per-asset classification along the fixed statistics dimensions."""

from __future__ import annotations

import math
from datetime import datetime

from photostats.models.asset import Asset, ExtendedAssetInfo
from photostats.models.stats import AssetFacts

UNKNOWN_FILE_TYPE = "Unknown"
UNKNOWN_ASPECT_RATIO = "unknown"

_FILE_TYPES = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "heic": "HEIC",
    "gif": "GIF",
    "tiff": "TIFF",
    "bmp": "BMP",
}


def file_type(filename: str) -> str:
    """Map a filename's lowercase extension to a display type."""
    if "." not in filename:
        return UNKNOWN_FILE_TYPE
    ext = filename.rsplit(".", 1)[-1].lower()
    return _FILE_TYPES.get(ext, UNKNOWN_FILE_TYPE)


def orientation(width: int, height: int) -> str:
    if width > height:
        return "landscape"
    if height > width:
        return "portrait"
    return "square"


def aspect_ratio(width: int, height: int) -> str:
    """Reduce width:height to lowest terms, e.g. 6000x4000 -> ``"3:2"``.

    A zero side has no meaningful ratio and yields ``"unknown"``.
    """
    if width <= 0 or height <= 0:
        return UNKNOWN_ASPECT_RATIO
    divisor = math.gcd(width, height)
    return f"{width // divisor}:{height // divisor}"


def time_of_day(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def local_datetime(timestamp: float) -> datetime:
    """POSIX seconds to a naive local-time datetime."""
    return datetime.fromtimestamp(timestamp)


def classify(asset: Asset, info: ExtendedAssetInfo) -> AssetFacts:
    """Derive every dimension label for one asset.

    Network-resident assets only contribute to the local/network split.
    """
    if info.is_network_asset:
        return AssetFacts(is_network_asset=True)

    created = local_datetime(asset.creation_time)
    gps = info.gps
    return AssetFacts(
        file_type=file_type(asset.filename),
        creation_year=f"{created.year:04d}",
        time_of_day=time_of_day(created.hour),
        orientation=orientation(asset.width, asset.height),
        aspect_ratio=aspect_ratio(asset.width, asset.height),
        camera_model=info.camera.model if info.camera else None,
        lens_model=info.lens.model if info.lens else None,
        altitude=gps.altitude if gps else None,
        speed=gps.speed if gps else None,
    )
