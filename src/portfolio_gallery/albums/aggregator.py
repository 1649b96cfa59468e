"""Group a flat bucket listing into sorted photo albums.

Keys follow the convention ``<album>/<path>/<file>``. Each album is built in
two phases: objects are first collected into per-path slots holding the
original and its ``_thumbnail`` variant, then every slot is resolved into an
immutable :class:`MediaItem` in a single step, so the listing order never
changes the result.
"""

import functools
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from .config import (
    IGNORED_SEGMENT,
    PUBLIC_URL_TEMPLATE,
    MediaType,
    is_cover_filename,
    split_thumbnail_name,
)
from .models import Album, AlbumSummary, MediaItem, StorageObject

logger = logging.getLogger(__name__)

YEAR_PATTERN = re.compile(r"\b(\d{4})\b", re.ASCII)
_NUMBER_RUN = re.compile(r"(\d+)", re.ASCII)


def natural_key(value: str):
    """Sort key that compares digit runs numerically ("photo-2" < "photo-10")."""
    parts = []
    for index, chunk in enumerate(_NUMBER_RUN.split(value or "")):
        if not chunk:
            continue
        # split() with a capture group puts the digit runs at odd positions
        if index % 2:
            parts.append((0, int(chunk), ""))
        else:
            parts.append((1, 0, chunk.casefold()))
    return (tuple(parts), value or "")


def _compare(a, b) -> int:
    return (a > b) - (a < b)


@dataclass
class _Slot:
    """Raw candidates for one item before resolution."""
    key: str
    media_type: MediaType
    original: Optional[StorageObject] = None
    thumbnail: Optional[StorageObject] = None
    name: str = ""


@dataclass
class _AlbumDraft:
    slots: Dict[str, _Slot] = field(default_factory=dict)
    cover_key: Optional[str] = None


class AlbumBuilder:
    """Builds albums for one bucket.

    Args:
        bucket: Bucket the objects were listed from.
        public_base_url: Prefix for absolute links to original assets.
            Defaults to the public Google Cloud Storage URL of the bucket.
    """

    def __init__(self, bucket: str, public_base_url: Optional[str] = None):
        self.bucket = bucket
        base = public_base_url or PUBLIC_URL_TEMPLATE.format(bucket=bucket)
        self.public_base_url = base.rstrip("/")

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    @staticmethod
    def relative_url(key: str) -> str:
        return f"/{key}"

    def build(self, objects: Iterable[StorageObject]) -> List[Album]:
        drafts: Dict[str, _AlbumDraft] = {}
        skipped = 0

        for obj in objects:
            if not self._collect(drafts, obj):
                skipped += 1

        albums = [self._resolve_album(name, draft) for name, draft in drafts.items()]
        albums.sort(key=functools.cmp_to_key(compare_albums))

        logger.info(
            f"Built {len(albums)} albums from bucket {self.bucket} "
            f"({skipped} objects skipped)"
        )
        return albums

    def _collect(self, drafts: Dict[str, _AlbumDraft], obj: StorageObject) -> bool:
        key = obj.key
        if not key or key.endswith("/"):
            return False

        segments = key.split("/")
        album_name, item_segments = segments[0], segments[1:]
        if not album_name or not item_segments:
            # Objects at the bucket root do not belong to an album
            return False
        if any(segment.lower() == IGNORED_SEGMENT for segment in segments):
            return False

        draft = drafts.setdefault(album_name, _AlbumDraft())
        file_name = item_segments[-1]
        media_type = MediaType.detect(file_name, obj.content_type)

        if media_type != MediaType.IMAGE:
            draft.slots[key] = _Slot(key=key, media_type=media_type, original=obj, name=file_name)
            slot_key = key
        else:
            base_name, is_thumbnail = split_thumbnail_name(file_name)
            slot_key = "/".join([album_name, *item_segments[:-1], base_name])
            slot = draft.slots.get(slot_key)
            if slot is None:
                slot = _Slot(key=slot_key, media_type=media_type, name=base_name)
                draft.slots[slot_key] = slot
            if is_thumbnail:
                slot.thumbnail = obj
            else:
                slot.original = obj

        if is_cover_filename(file_name):
            draft.cover_key = slot_key
        return True

    def _resolve_item(self, slot: _Slot) -> MediaItem:
        original, thumbnail = slot.original, slot.thumbnail
        primary = original or thumbnail
        display = thumbnail or original

        def pick(attribute):
            value = getattr(original, attribute, None) if original else None
            if not value and thumbnail is not None:
                value = getattr(thumbnail, attribute, None)
            return value or None

        return MediaItem(
            name=slot.name,
            canonical_path=primary.key,
            display_url=self.relative_url(display.key),
            link_url=self.public_url(primary.key),
            media_type=slot.media_type,
            last_modified=pick("last_modified"),
            size_bytes=pick("size_bytes"),
            content_type=pick("content_type"),
        )

    def _resolve_album(self, name: str, draft: _AlbumDraft) -> Album:
        resolved = {key: self._resolve_item(slot) for key, slot in draft.slots.items()}
        items = sorted(resolved.values(), key=lambda item: natural_key(item.canonical_path))

        timestamps = [item.last_modified for item in items if item.last_modified is not None]
        most_recent = max(timestamps) if timestamps else None
        average = None
        if timestamps:
            mean = sum(ts.timestamp() for ts in timestamps) / len(timestamps)
            average = datetime.fromtimestamp(mean, tz=timezone.utc)

        candidate = resolved.get(draft.cover_key) if draft.cover_key else None
        first_image = next((item for item in items if item.media_type == MediaType.IMAGE), None)
        if candidate is not None and candidate.media_type == MediaType.IMAGE:
            cover = candidate
        else:
            cover = first_image or candidate or (items[0] if items else None)

        return Album(
            name=name,
            items=tuple(items),
            cover_item=cover,
            most_recent_update=most_recent,
            average_update=average,
        )


def album_year(name: str) -> Optional[int]:
    match = YEAR_PATTERN.search(name or "")
    return int(match.group(1)) if match else None


def _compare_present_desc(a: Optional[datetime], b: Optional[datetime]) -> int:
    """Newest first; albums with a timestamp before albums without one."""
    if a is not None and b is not None:
        return _compare(b, a)
    if a is not None:
        return -1
    if b is not None:
        return 1
    return 0


def compare_albums(a: Album, b: Album) -> int:
    """Order albums by year in the name, then update times, then name."""
    a_year, b_year = album_year(a.name), album_year(b.name)
    if a_year is not None and b_year is not None:
        if a_year != b_year:
            return b_year - a_year
    elif a_year is not None:
        return -1
    elif b_year is not None:
        return 1

    result = _compare_present_desc(a.average_update, b.average_update)
    if result:
        return result
    result = _compare_present_desc(a.most_recent_update, b.most_recent_update)
    if result:
        return result
    return _compare(natural_key(a.name), natural_key(b.name))


def build_albums(
    objects: Iterable[StorageObject],
    bucket: str,
    public_base_url: Optional[str] = None,
) -> List[Album]:
    """Convenience function to group a bucket listing into sorted albums."""
    return AlbumBuilder(bucket, public_base_url=public_base_url).build(objects)


def summarize(albums: Iterable[Album]) -> AlbumSummary:
    """Total the album, photo, video and item counts."""
    album_count = photo_count = video_count = item_count = 0
    for album in albums:
        album_count += 1
        photo_count += album.image_count
        video_count += album.video_count
        item_count += album.item_count
    return AlbumSummary(
        album_count=album_count,
        photo_count=photo_count,
        video_count=video_count,
        item_count=item_count,
    )
