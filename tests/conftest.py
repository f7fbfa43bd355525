"""Fake asset sources and programmatic photo fixtures."""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator

import numpy as np
import orjson
import pytest
from PIL import Image

from photostats.models.asset import Asset, AssetPage, ExtendedAssetInfo, PermissionStatus
from photostats.sources.base import paginate_list

# 2021-06-01 09:30 local time -> year 2021, morning
MORNING_2021 = datetime(2021, 6, 1, 9, 30).timestamp()


class FakeAssetSource:
    """In-memory asset source with scripted failures.

    ``infos`` maps asset id to an ExtendedAssetInfo or an exception to raise.
    ``flaky`` maps asset id to how many calls fail before succeeding.
    ``hang`` lists asset ids whose info fetch never completes.
    """

    def __init__(
        self,
        assets: list[Asset],
        infos: dict[str, Any] | None = None,
        permission: PermissionStatus = PermissionStatus.GRANTED,
        page_error_at: int | None = None,
        flaky: dict[str, int] | None = None,
        hang: tuple[str, ...] = (),
    ) -> None:
        self.assets = assets
        self.infos = infos or {}
        self.permission = permission
        self.page_error_at = page_error_at
        self.flaky = dict(flaky or {})
        self.hang = hang
        self.permission_calls = 0
        self.page_calls = 0
        self.info_calls: list[tuple[str, bool]] = []

    async def request_permission(self) -> PermissionStatus:
        self.permission_calls += 1
        return self.permission

    async def fetch_page(self, page_size: int, cursor: str | None, sort_order: str) -> AssetPage:
        self.page_calls += 1
        if self.page_error_at == self.page_calls:
            raise RuntimeError("listing backend went away")
        return paginate_list(self.assets, page_size, cursor)

    async def get_asset_info(
        self, asset: Asset, should_download_from_network: bool = False
    ) -> ExtendedAssetInfo:
        self.info_calls.append((asset.id, should_download_from_network))
        await asyncio.sleep(0)
        if asset.id in self.hang:
            await asyncio.sleep(3600)
        if self.flaky.get(asset.id, 0) > 0:
            self.flaky[asset.id] -= 1
            raise ConnectionError("transient")
        info = self.infos.get(asset.id)
        if isinstance(info, Exception):
            raise info
        if info is None:
            return ExtendedAssetInfo(is_network_asset=asset.is_network_asset)
        return info


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """CLI runs attach handlers bound to CliRunner streams; drop them afterwards."""
    yield
    logger = logging.getLogger("photostats")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_source() -> type[FakeAssetSource]:
    return FakeAssetSource


@pytest.fixture
def make_assets() -> Callable[..., list[Asset]]:
    """Factory for n uniform assets with ids A0000, A0001, ..."""

    def _make(
        n: int,
        filename: str = "IMG_{i:04d}.JPG",
        width: int = 4000,
        height: int = 3000,
        creation_time: float = MORNING_2021,
        is_network_asset: bool = False,
        start: int = 0,
    ) -> list[Asset]:
        return [
            Asset(
                id=f"A{i:04d}",
                filename=filename.format(i=i),
                width=width,
                height=height,
                creation_time=creation_time,
                is_network_asset=is_network_asset,
            )
            for i in range(start, start + n)
        ]

    return _make


def _save_rgb(path: Path, width: int, height: int, exif: Image.Exif | None = None) -> None:
    arr = np.random.randint(60, 200, (height, width, 3), dtype=np.uint8)
    img = Image.fromarray(arr)
    if exif is not None:
        img.save(path, exif=exif.tobytes())
    else:
        img.save(path)


@pytest.fixture
def photo_dir(tmp_path: Path) -> Path:
    """Directory of small photos with known dimensions, types and capture times.

    - 3 landscape 400x300 JPEGs (one tagged with camera model "Canon EOS R5")
    - 1 portrait 300x600 PNG in a subdirectory
    - 1 iCloud placeholder for an evicted HEIC
    - 1 corrupt JPEG
    - 1 text file that is not a photo
    """
    root = tmp_path / "photos"
    (root / "2020").mkdir(parents=True)

    evening_2020 = datetime(2020, 7, 4, 18, 15).timestamp()

    img = Image.fromarray(np.zeros((1, 1, 3), dtype=np.uint8))
    exif = img.getexif()
    exif[0x010F] = "Canon"  # Make
    exif[0x0110] = "Canon EOS R5"  # Model
    _save_rgb(root / "IMG_0001.JPG", 400, 300, exif)
    _save_rgb(root / "IMG_0002.jpg", 400, 300)
    _save_rgb(root / "IMG_0003.jpeg", 400, 300)
    _save_rgb(root / "2020" / "scan.png", 300, 600)

    (root / ".IMG_0004.HEIC.icloud").write_bytes(b"bplist00")
    (root / "broken.jpg").write_bytes(b"not a real image file content")
    (root / "notes.txt").write_text("not a photo")

    for dirpath, _dirs, files in os.walk(root):
        for fn in files:
            os.utime(os.path.join(dirpath, fn), (evening_2020, evening_2020))

    return root


@pytest.fixture
def asset_manifest(tmp_path: Path) -> Path:
    """JSONL asset export with EXIF bags, one network asset and one corrupt line."""
    night_2019 = datetime(2019, 12, 31, 23, 0).timestamp()
    rows = [
        {
            "id": "M1",
            "filename": "IMG_1.HEIC",
            "width": 4032,
            "height": 3024,
            "creation_time": MORNING_2021,
            "exif": {
                "{TIFF}": {"Model": "iPhone 13 Pro"},
                "{Exif}": {"LensModel": "iPhone 13 Pro back triple camera 5.7mm f/1.5"},
                "{GPS}": {"Altitude": 35.5, "Speed": 1.25},
            },
        },
        {
            "id": "M2",
            "filename": "IMG_2.HEIC",
            "width": 3024,
            "height": 4032,
            "creation_time": night_2019,
            "exif": {"{TIFF}": {"Model": "iPhone 13 Pro"}, "{GPS}": {"Altitude": "-2.0"}},
        },
        {
            "id": "M3",
            "filename": "IMG_3.PNG",
            "width": 1000,
            "height": 1000,
            "creation_time": night_2019,
            "is_network_asset": True,
        },
    ]
    path = tmp_path / "assets.jsonl"
    with open(path, "wb") as f:
        for row in rows:
            f.write(orjson.dumps(row, option=orjson.OPT_APPEND_NEWLINE))
        f.write(b'{"id": "M4", "filename": "trunc')
    return path
