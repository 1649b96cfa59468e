"""Shared fixtures for portfolio-gallery tests."""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pytest
from PIL import Image

from portfolio_gallery.albums.errors import DataAccessError
from portfolio_gallery.albums.models import StorageObject
from portfolio_gallery.albums.storage import ObjectStore


def obj(key: str, content_type: Optional[str] = None, updated: Optional[str] = None, size: int = 100) -> StorageObject:
    """Build a StorageObject the way a bucket listing would report it."""
    last_modified = None
    if updated:
        last_modified = datetime.fromisoformat(updated).replace(tzinfo=timezone.utc)
    return StorageObject(key=key, size_bytes=size, content_type=content_type, last_modified=last_modified)


class FakeObjectStore(ObjectStore):
    """In-memory object store that records how often it is listed."""

    def __init__(self, objects: Optional[List[StorageObject]] = None, error: Optional[Exception] = None):
        self.objects = list(objects or [])
        self.error = error
        self.calls: List[str] = []
        self.closed = False

    async def list_objects(self, bucket: str) -> List[StorageObject]:
        self.calls.append(bucket)
        if self.error is not None:
            raise self.error
        return list(self.objects)

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_objects() -> List[StorageObject]:
    return [
        obj("Japan-2019/photo-10.jpg", "image/jpeg", "2019-04-02T10:00:00"),
        obj("Japan-2019/photo-2.jpg", "image/jpeg", "2019-04-01T10:00:00"),
        obj("Japan-2019/photo-2_thumbnail.jpg", "image/jpeg", "2019-04-01T11:00:00"),
        obj("Iceland-2023/album-cover.jpg", "image/jpeg", "2023-06-01T00:00:00"),
        obj("Iceland-2023/a.jpg", "image/jpeg", "2023-06-02T00:00:00"),
        obj("Iceland-2023/clip.mp4", "video/mp4", "2023-06-03T00:00:00"),
        obj("Street/night.png", None, "2024-01-01T00:00:00"),
        obj("Street/notes.txt", "text/plain", None),
        obj("root-file.jpg", "image/jpeg"),
        obj("Street/", None),
        obj("Street/.DS_Store", None),
    ]


@pytest.fixture
def fake_store(sample_objects) -> FakeObjectStore:
    return FakeObjectStore(sample_objects)


@pytest.fixture
def failing_store() -> FakeObjectStore:
    return FakeObjectStore(error=DataAccessError("403 Forbidden: bucket access denied"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_image(path: Path, size=(640, 480), fmt: Optional[str] = None, noise: bool = True, quality: int = 95) -> Path:
    """Write a test image. Noise images compress poorly, which makes byte budgets bite."""
    path.parent.mkdir(parents=True, exist_ok=True)
    width, height = size
    if noise:
        img = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
    else:
        img = Image.new("RGB", (width, height), (200, 120, 40))
    save_kwargs = {"quality": quality} if (fmt or path.suffix.lower()) in ("JPEG", ".jpg", ".jpeg") else {}
    img.save(path, format=fmt, **save_kwargs)
    return path
