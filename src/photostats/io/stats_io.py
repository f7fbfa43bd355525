"""JSON read/write for scan results and stats snapshots."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import orjson

from photostats.models.stats import StatsSnapshot
from photostats.pipeline.runner import ScanResult


def result_to_dict(result: ScanResult) -> dict[str, Any]:
    return {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "processed": result.processed,
        "pages": result.pages,
        "cap": result.cap,
        "truncated": result.truncated,
        "overshoot": result.overshoot,
        "cancelled": result.cancelled,
        "cancel_reason": result.cancel_reason,
        "stats": result.stats.to_dict(),
    }


def write_result(path: str | Path, result: ScanResult) -> None:
    """Write a scan result as indented JSON via temp file + rename."""
    path = Path(path)
    data = orjson.dumps(result_to_dict(result), option=orjson.OPT_INDENT_2)

    fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise


def read_snapshot(path: str | Path) -> tuple[dict[str, Any], StatsSnapshot]:
    """Load a saved result. Returns (scan metadata, snapshot).

    A bare snapshot document (no ``stats`` key) is accepted with empty metadata.
    """
    data = orjson.loads(Path(path).read_bytes())
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    if "stats" in data:
        meta = {k: v for k, v in data.items() if k != "stats"}
        return meta, StatsSnapshot.from_dict(data["stats"])
    return {}, StatsSnapshot.from_dict(data)
