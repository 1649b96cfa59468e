"""Data models for bucket objects, media items and albums."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import MediaType


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp into an aware UTC datetime.

    Naive datetimes are assumed to be UTC. Returns None for missing or
    unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as ISO 8601 UTC with millisecond precision."""
    if value is None:
        return None
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class StorageObject:
    """One object as reported by the bucket listing."""
    key: str
    size_bytes: int = 0
    content_type: Optional[str] = None
    last_modified: Optional[datetime] = None

    @property
    def file_name(self) -> str:
        return self.key.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class MediaItem:
    """A photo or video after pairing the original with its thumbnail."""
    name: str
    canonical_path: str
    display_url: str  # thumbnail when available, for rendering
    link_url: str  # original asset, for "view full" links
    media_type: MediaType
    last_modified: Optional[datetime] = None
    size_bytes: Optional[int] = None
    content_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.canonical_path,
            "url": self.display_url,
            "originalUrl": self.link_url,
            "updated": format_timestamp(self.last_modified),
            "size": self.size_bytes,
            "contentType": self.content_type,
            "mediaType": self.media_type.value,
        }


@dataclass(frozen=True)
class Album:
    """A named group of media items sharing the first key segment."""
    name: str
    items: Tuple[MediaItem, ...] = ()
    cover_item: Optional[MediaItem] = None
    most_recent_update: Optional[datetime] = None
    average_update: Optional[datetime] = None

    @property
    def image_count(self) -> int:
        return sum(1 for item in self.items if item.media_type == MediaType.IMAGE)

    @property
    def video_count(self) -> int:
        return sum(1 for item in self.items if item.media_type == MediaType.VIDEO)

    @property
    def item_count(self) -> int:
        return len(self.items)

    def to_dict(self, include_items: bool = True) -> Dict[str, Any]:
        """Convert to the JSON shape served by the album API.

        Args:
            include_items: When False the item list is left out, as in
                paginated listings where items are fetched per album.
        """
        data: Dict[str, Any] = {
            "name": self.name,
            "photoCount": self.image_count,
            "videoCount": self.video_count,
            "itemCount": self.item_count,
            "updatedAt": format_timestamp(self.most_recent_update),
            "averageUpdatedAt": format_timestamp(self.average_update),
            "coverPhoto": self.cover_item.to_dict() if self.cover_item else None,
        }
        if include_items:
            data["photos"] = [item.to_dict() for item in self.items]
        data["isHydrated"] = include_items
        return data


@dataclass(frozen=True)
class AlbumSummary:
    """Totals across every album in a bucket."""
    album_count: int = 0
    photo_count: int = 0
    video_count: int = 0
    item_count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "albumCount": self.album_count,
            "photoCount": self.photo_count,
            "videoCount": self.video_count,
            "itemCount": self.item_count,
        }


@dataclass(frozen=True)
class CacheEntry:
    """Albums and summary fetched for one bucket at a point in time."""
    albums: List[Album]
    summary: AlbumSummary
    fetched_at: float


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int
    total_albums: int
    total_pages: int
    has_more: bool = False
    next_page: Optional[int] = None
    prev_page: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "totalAlbums": self.total_albums,
            "totalPages": self.total_pages,
            "hasMore": self.has_more,
            "nextPage": self.next_page,
            "prevPage": self.prev_page,
        }

