"""Pillow encoding helpers used by the optimizer."""

import io
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import pillow_heif
from PIL import Image, ImageOps

from .config import FORMAT_BY_EXTENSION

logger = logging.getLogger(__name__)

# HEIC/HEIF support comes from pillow-heif; AVIF is built into Pillow
pillow_heif.register_heif_opener()

RESAMPLE = Image.Resampling.LANCZOS


@dataclass(frozen=True)
class ImageInfo:
    """Size and pixel dimensions of a file on disk."""
    size_bytes: int
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def short_side(self) -> Optional[int]:
        if not self.width or not self.height:
            return None
        return min(self.width, self.height)


def format_for(path: Path) -> Optional[str]:
    """Pillow save format for a file, by extension."""
    return FORMAT_BY_EXTENSION.get(path.suffix.lower())


def read_image_info(path: Path) -> ImageInfo:
    """Read the byte size and pixel dimensions without decoding the image."""
    size_bytes = path.stat().st_size
    with Image.open(path) as img:
        width, height = img.size
    return ImageInfo(size_bytes=size_bytes, width=width, height=height)


def compute_resize(width: Optional[int], height: Optional[int], target_short_side: Optional[int]) -> Optional[Tuple[int, int]]:
    """Dimensions that bring the short side down to target_short_side.

    Returns None when no resize is needed (unknown dimensions, or the image
    is already at or below the target). Never enlarges.
    """
    if not width or not height or not target_short_side:
        return None
    short_side = min(width, height)
    if target_short_side >= short_side:
        return None
    scale = target_short_side / short_side
    if width <= height:
        return target_short_side, max(1, round(height * scale))
    return max(1, round(width * scale)), target_short_side


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)


def _encode(img: Image.Image, image_format: str, quality: int) -> bytes:
    """Save an image to bytes with format-specific quality settings."""
    quality = max(1, min(100, int(round(quality))))
    buffer = io.BytesIO()

    if image_format == "JPEG":
        if img.mode not in ("RGB", "L", "CMYK"):
            img = img.convert("RGB")
        img.save(buffer, format="JPEG", quality=quality, optimize=True, progressive=True)
    elif image_format == "PNG":
        # Palette quantisation; fewer colours at lower quality
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if _has_alpha(img) else "RGB")
        colors = max(2, min(256, round(256 * quality / 100)))
        img = img.quantize(colors=colors, method=Image.Quantize.FASTOCTREE)
        img.save(buffer, format="PNG", optimize=True, compress_level=9)
    elif image_format == "TIFF":
        if img.mode not in ("RGB", "L", "CMYK"):
            img = img.convert("RGB")
        img.save(buffer, format="TIFF", compression="jpeg", quality=quality)
    elif image_format in ("WEBP", "AVIF", "HEIF"):
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if _has_alpha(img) else "RGB")
        img.save(buffer, format=image_format, quality=quality)
    else:
        raise ValueError(f"Unsupported output format: {image_format}")

    return buffer.getvalue()


def render_resized(path: Path, image_format: str, target_short_side: Optional[int], quality: int) -> Tuple[bytes, Tuple[int, int]]:
    """Re-encode an image, shrinking its short side to the target if larger.

    Returns:
        Tuple of (encoded bytes, (width, height) of the encoded image).
    """
    with Image.open(path) as source:
        img = ImageOps.exif_transpose(source)
        new_size = compute_resize(img.width, img.height, target_short_side)
        if new_size:
            img = img.resize(new_size, RESAMPLE)
        return _encode(img, image_format, quality), img.size


def render_thumbnail(path: Path, image_format: str, width: int, height: int, quality: int) -> bytes:
    """Encode a copy that fits inside width x height, keeping the aspect ratio."""
    with Image.open(path) as source:
        img = ImageOps.exif_transpose(source)
        img.thumbnail((width, height), RESAMPLE)
        return _encode(img, image_format, quality)


def write_atomic(path: Path, data: bytes) -> None:
    """Write data to a temporary file beside path, then rename it over path."""
    path = Path(path)
    temp_path = path.with_name(f"{path.name}.tmp-{os.getpid()}-{time.time_ns()}")
    try:
        temp_path.write_bytes(data)
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
