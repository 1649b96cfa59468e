"""Naming conventions used to turn bucket keys into albums."""

from enum import Enum
from typing import Optional


class MediaType(str, Enum):
    """Kinds of media an album item can hold."""
    IMAGE = "image"
    VIDEO = "video"
    UNKNOWN = "unknown"

    @classmethod
    def detect(cls, file_name: str, content_type: Optional[str] = None) -> "MediaType":
        """Classify a file by content type, falling back to its extension."""
        if isinstance(content_type, str):
            if content_type.startswith("video/"):
                return cls.VIDEO
            if content_type.startswith("image/"):
                return cls.IMAGE

        if not file_name:
            return cls.UNKNOWN

        dot = file_name.rfind(".")
        if dot == -1 or dot == len(file_name) - 1:
            return cls.UNKNOWN

        extension = file_name[dot + 1:].lower()
        if extension in VIDEO_EXTENSIONS:
            return cls.VIDEO
        if extension in IMAGE_EXTENSIONS:
            return cls.IMAGE
        return cls.UNKNOWN


# Files with one of these names mark the album's cover photo
COVER_FILENAMES = frozenset({
    "album-cover.jpg",
    "album-cover.jpeg",
    "album-cover.png",
})

VIDEO_EXTENSIONS = frozenset({"mp4", "mov", "m4v", "webm", "avi"})
IMAGE_EXTENSIONS = frozenset({
    "jpg",
    "jpeg",
    "png",
    "gif",
    "avif",
    "webp",
    "bmp",
    "heic",
    "heif",
    "tif",
    "tiff",
})

# Preview variants are stored next to the original as <stem>_thumbnail<ext>
THUMBNAIL_SUFFIX = "_thumbnail"

# macOS folder metadata that sometimes gets uploaded along with albums
IGNORED_SEGMENT = ".ds_store"

PUBLIC_URL_TEMPLATE = "https://storage.googleapis.com/{bucket}"


def is_cover_filename(file_name: str) -> bool:
    return bool(file_name) and file_name.lower() in COVER_FILENAMES


def split_thumbnail_name(file_name: str):
    """Strip the thumbnail suffix from a file name.

    Args:
        file_name: Last path segment of an object key.

    Returns:
        Tuple of (base file name, whether the name was a thumbnail).
    """
    if not file_name:
        return file_name, False

    dot = file_name.rfind(".")
    if dot <= 0 or dot == len(file_name) - 1:
        return file_name, False

    stem, extension = file_name[:dot], file_name[dot:]
    if stem.endswith(THUMBNAIL_SUFFIX):
        return stem[: -len(THUMBNAIL_SUFFIX)] + extension, True
    return file_name, False
