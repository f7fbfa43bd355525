"""Shared utilities."""

from __future__ import annotations

from typing import Mapping


def top_counts(counts: Mapping[str, int], n: int | None = None) -> list[tuple[str, int]]:
    """Labels by descending count, ties broken by label."""
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return ranked if n is None else ranked[:n]


def fmt_meters(value: float | None) -> str:
    return "N/A" if value is None else f"{value:.2f} meters"
