"""Data models for listed assets and their extended metadata."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class PermissionStatus(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True, slots=True)
class Asset:
    """One photo as listed by an asset source."""

    id: str
    filename: str
    width: int = 0
    height: int = 0
    creation_time: float = 0.0  # POSIX seconds
    is_network_asset: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Asset:
        return cls(
            id=str(data["id"]),
            filename=str(data.get("filename", "")),
            width=int(data.get("width") or 0),
            height=int(data.get("height") or 0),
            creation_time=float(data.get("creation_time") or 0.0),
            is_network_asset=parse_bool(data.get("is_network_asset", False)),
        )


_TRUE = {"true", "yes", "1"}
_FALSE = {"false", "no", "0", ""}


def parse_bool(value: Any) -> bool:
    """Strict flag parsing; ``"false"`` is False. Raises ValueError on anything else."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        s = value.strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
    raise ValueError(f"not a boolean flag: {value!r}")


@dataclass(frozen=True, slots=True)
class AssetPage:
    items: list[Asset] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


def parse_str(value: Any) -> str | None:
    """Accept only genuine strings; anything else is treated as absent."""
    if isinstance(value, str):
        return value
    return None


def parse_float(value: Any) -> float | None:
    """Parse a finite number from an int, float, rational or numeric string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    return result if math.isfinite(result) else None


def _namespace(exif: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    ns = exif.get(name)
    if ns is None:
        ns = exif.get("{" + name + "}")
    return ns if isinstance(ns, Mapping) else {}


@dataclass(frozen=True, slots=True)
class CameraInfo:
    model: str | None = None


@dataclass(frozen=True, slots=True)
class LensInfo:
    model: str | None = None


@dataclass(frozen=True, slots=True)
class GpsInfo:
    altitude: float | None = None
    speed: float | None = None


@dataclass(frozen=True, slots=True)
class ExtendedAssetInfo:
    is_network_asset: bool = False
    camera: CameraInfo | None = None
    lens: LensInfo | None = None
    gps: GpsInfo | None = None

    @classmethod
    def from_exif(
        cls, exif: Mapping[str, Any] | None, is_network_asset: bool = False
    ) -> ExtendedAssetInfo:
        """Build typed namespaces from a raw ``{TIFF, Exif, GPS}`` metadata bag.

        Keys may be bare (``TIFF``) or braced (``{TIFF}``). Fields of the wrong
        type are dropped rather than coerced.
        """
        if not exif:
            return cls(is_network_asset=is_network_asset)
        tiff = _namespace(exif, "TIFF")
        exif_ns = _namespace(exif, "Exif")
        gps = _namespace(exif, "GPS")
        return cls(
            is_network_asset=is_network_asset,
            camera=CameraInfo(model=parse_str(tiff.get("Model"))) if tiff else None,
            lens=LensInfo(model=parse_str(exif_ns.get("LensModel"))) if exif_ns else None,
            gps=GpsInfo(
                altitude=parse_float(gps.get("Altitude")),
                speed=parse_float(gps.get("Speed")),
            )
            if gps
            else None,
        )
