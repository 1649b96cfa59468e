"""Size budgets and quality ladders for the media optimizer."""

import os
from dataclasses import dataclass, field

MIB = 1024 * 1024

# Extensions the optimizer rewrites, mapped to the Pillow format used to save them
FORMAT_BY_EXTENSION = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".webp": "WEBP",
    ".tif": "TIFF",
    ".tiff": "TIFF",
    ".avif": "AVIF",
    ".heic": "HEIF",
    ".heif": "HEIF",
}
SUPPORTED_EXTENSIONS = frozenset(FORMAT_BY_EXTENSION)

THUMBNAIL_SUFFIX = "_thumbnail"


def default_concurrency() -> int:
    """Worker count: the CPU count, kept between 2 and 6."""
    return max(2, min(6, os.cpu_count() or 1))


@dataclass
class ThumbnailOptions:
    """Bounds for the preview image written next to each original."""
    width: int = 1024
    height: int = 768
    max_bytes: int = 2 * MIB
    start_quality: int = 80
    min_quality: int = 40
    quality_step: int = 5


@dataclass
class OptimizerOptions:
    """Settings for one optimizer run."""
    max_master_bytes: int = 20 * MIB
    min_short_side: int = 1024
    master_start_quality: int = 85
    master_min_quality: int = 50
    quality_step: int = 5
    # Fraction of the short side kept on each resize step
    resize_factor: float = 0.9
    concurrency: int = field(default_factory=default_concurrency)
    dry_run: bool = False
    force: bool = False
    thumbnail: ThumbnailOptions = field(default_factory=ThumbnailOptions)
