"""Statistics accumulator, per-asset deltas and immutable snapshots."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

FREQUENCY_TABLES = (
    "orientations",
    "aspect_ratios",
    "file_types",
    "creation_years",
    "time_of_day",
    "camera_models",
    "lens_models",
)

# Tables filled for every local asset, so each sums to local_photos
PER_LOCAL_TABLES = ("orientations", "aspect_ratios", "file_types", "creation_years", "time_of_day")


@dataclass(frozen=True, slots=True)
class AssetFacts:
    """Classification of a single asset, folded into a PhotoStats later.

    ``skipped`` marks an asset whose extended info could not be fetched.
    Network assets carry no dimension labels.
    """

    is_network_asset: bool = False
    skipped: bool = False
    file_type: str | None = None
    creation_year: str | None = None
    time_of_day: str | None = None
    orientation: str | None = None
    aspect_ratio: str | None = None
    camera_model: str | None = None
    lens_model: str | None = None
    altitude: float | None = None
    speed: float | None = None


def _bump(table: dict[str, int], label: str | None) -> None:
    if label is not None:
        table[label] = table.get(label, 0) + 1


@dataclass(slots=True)
class PhotoStats:
    """Mutable running statistics for one scan."""

    local_photos: int = 0
    network_photos: int = 0
    skipped_photos: int = 0

    orientations: dict[str, int] = field(default_factory=dict)
    aspect_ratios: dict[str, int] = field(default_factory=dict)
    file_types: dict[str, int] = field(default_factory=dict)
    creation_years: dict[str, int] = field(default_factory=dict)
    time_of_day: dict[str, int] = field(default_factory=dict)
    camera_models: dict[str, int] = field(default_factory=dict)
    lens_models: dict[str, int] = field(default_factory=dict)

    highest_photo: float = 0.0
    lowest_photo: float = math.inf  # inf = no altitude seen yet
    fastest_photo: float = 0.0

    @property
    def total(self) -> int:
        return self.local_photos + self.network_photos + self.skipped_photos

    def fold(self, facts: AssetFacts) -> None:
        """Apply one asset's classification."""
        if facts.skipped:
            self.skipped_photos += 1
            return
        if facts.is_network_asset:
            self.network_photos += 1
            return

        self.local_photos += 1
        _bump(self.file_types, facts.file_type)
        _bump(self.creation_years, facts.creation_year)
        _bump(self.time_of_day, facts.time_of_day)
        _bump(self.orientations, facts.orientation)
        _bump(self.aspect_ratios, facts.aspect_ratio)
        _bump(self.camera_models, facts.camera_model)
        _bump(self.lens_models, facts.lens_model)

        if facts.altitude is not None:
            self.highest_photo = max(self.highest_photo, facts.altitude)
            self.lowest_photo = min(self.lowest_photo, facts.altitude)
        if facts.speed is not None:
            self.fastest_photo = max(self.fastest_photo, facts.speed)

    def merge(self, other: PhotoStats) -> None:
        """Combine another accumulator into this one (sum counts, max/min extrema)."""
        self.local_photos += other.local_photos
        self.network_photos += other.network_photos
        self.skipped_photos += other.skipped_photos
        for name in FREQUENCY_TABLES:
            mine: dict[str, int] = getattr(self, name)
            for label, count in getattr(other, name).items():
                mine[label] = mine.get(label, 0) + count
        self.highest_photo = max(self.highest_photo, other.highest_photo)
        self.lowest_photo = min(self.lowest_photo, other.lowest_photo)
        self.fastest_photo = max(self.fastest_photo, other.fastest_photo)

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            local_photos=self.local_photos,
            network_photos=self.network_photos,
            skipped_photos=self.skipped_photos,
            highest_photo=self.highest_photo,
            lowest_photo=self.lowest_photo,
            fastest_photo=self.fastest_photo,
            **{name: MappingProxyType(dict(getattr(self, name))) for name in FREQUENCY_TABLES},
        )


@dataclass(frozen=True, slots=True)
class StatsSnapshot:
    """Read-only copy of a PhotoStats at one observation point."""

    local_photos: int = 0
    network_photos: int = 0
    skipped_photos: int = 0

    orientations: Mapping[str, int] = field(default_factory=dict)
    aspect_ratios: Mapping[str, int] = field(default_factory=dict)
    file_types: Mapping[str, int] = field(default_factory=dict)
    creation_years: Mapping[str, int] = field(default_factory=dict)
    time_of_day: Mapping[str, int] = field(default_factory=dict)
    camera_models: Mapping[str, int] = field(default_factory=dict)
    lens_models: Mapping[str, int] = field(default_factory=dict)

    highest_photo: float = 0.0
    lowest_photo: float = math.inf
    fastest_photo: float = 0.0

    @property
    def total(self) -> int:
        return self.local_photos + self.network_photos + self.skipped_photos

    @property
    def has_altitude(self) -> bool:
        return not math.isinf(self.lowest_photo)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "local_photos": self.local_photos,
            "network_photos": self.network_photos,
            "skipped_photos": self.skipped_photos,
            "highest_photo": self.highest_photo,
            "lowest_photo": self.lowest_photo if self.has_altitude else None,
            "fastest_photo": self.fastest_photo,
        }
        for name in FREQUENCY_TABLES:
            d[name] = dict(getattr(self, name))
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StatsSnapshot:
        lowest = data.get("lowest_photo")
        return cls(
            local_photos=int(data.get("local_photos", 0)),
            network_photos=int(data.get("network_photos", 0)),
            skipped_photos=int(data.get("skipped_photos", 0)),
            highest_photo=float(data.get("highest_photo", 0.0)),
            lowest_photo=math.inf if lowest is None else float(lowest),
            fastest_photo=float(data.get("fastest_photo", 0.0)),
            **{
                name: MappingProxyType({str(k): int(v) for k, v in (data.get(name) or {}).items()})
                for name in FREQUENCY_TABLES
            },
        )
