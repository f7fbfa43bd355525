"""Scan configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass

SORT_ORDERS = ("newest", "oldest")


@dataclass(slots=True)
class ScanConfig:
    batch_size: int = 10
    max_assets: int = 300
    sort_order: str = "newest"
    asset_timeout: float = 30.0
    max_retries: int = 0
    retry_backoff: float = 0.5
    exact_cap: bool = False

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_assets < 1:
            raise ValueError(f"max_assets must be >= 1, got {self.max_assets}")
        if self.sort_order not in SORT_ORDERS:
            raise ValueError(f"sort_order must be one of {SORT_ORDERS}, got {self.sort_order!r}")
        if self.asset_timeout <= 0:
            raise ValueError(f"asset_timeout must be > 0, got {self.asset_timeout}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_backoff < 0:
            raise ValueError(f"retry_backoff must be >= 0, got {self.retry_backoff}")
