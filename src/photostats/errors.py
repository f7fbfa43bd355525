"""Exception hierarchy for library scans."""

from __future__ import annotations


class PhotoStatsError(Exception):
    """Base class for all photostats errors."""


class PermissionDeniedError(PhotoStatsError):
    """The asset source refused access to the library. Fatal."""


class ScanAbortedError(PhotoStatsError):
    """The pagination loop hit an unexpected error. Fatal."""


class AssetFetchError(PhotoStatsError):
    """Extended info for a single asset could not be fetched. Not fatal."""

    def __init__(self, asset_id: str, reason: str) -> None:
        super().__init__(f"asset {asset_id!r}: {reason}")
        self.asset_id = asset_id
        self.reason = reason
