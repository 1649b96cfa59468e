"""Album service: fetches, caches and serves album listings."""

import logging
from typing import Any, Dict, List, Optional

from .aggregator import build_albums, summarize
from .cache import AlbumCache
from .errors import ConfigurationError, DataAccessError, GalleryError
from .models import Album, CacheEntry
from .pagination import DEFAULT_PAGE_SIZE, paginate
from .storage import ObjectStore

logger = logging.getLogger(__name__)


class AlbumService:
    """Serves albums for a bucket from a TTL cache.

    One service (with its store and cache) is created at process start and
    shared by every caller.

    Args:
        store: Backend used to list bucket objects.
        cache: Cache of built albums, keyed by bucket.
        default_bucket: Bucket used when callers do not name one.
        public_base_url: Prefix for links to original assets.
    """

    def __init__(
        self,
        store: ObjectStore,
        cache: Optional[AlbumCache] = None,
        default_bucket: Optional[str] = None,
        public_base_url: Optional[str] = None,
    ):
        self.store = store
        self.cache = cache if cache is not None else AlbumCache()
        self.default_bucket = default_bucket
        self.public_base_url = public_base_url

    def _resolve_bucket(self, bucket: Optional[str]) -> str:
        resolved = bucket or self.default_bucket
        if not resolved:
            raise ConfigurationError(
                "A Google Cloud Storage bucket must be provided to load photo albums."
            )
        return resolved

    async def load(self, bucket: Optional[str] = None) -> CacheEntry:
        """Return the cached albums for a bucket, refreshing them if stale.

        Raises:
            ConfigurationError: If no bucket is configured.
            DataAccessError: If the bucket listing fails.
        """
        bucket = self._resolve_bucket(bucket)
        entry = self.cache.get(bucket)
        if entry is not None:
            return entry

        logger.info(f"Refreshing albums for bucket {bucket}")
        try:
            objects = await self.store.list_objects(bucket)
        except GalleryError:
            raise
        except Exception as e:
            raise DataAccessError(str(e) or f"Unable to list bucket {bucket}") from e

        albums = build_albums(objects, bucket, public_base_url=self.public_base_url)
        entry = CacheEntry(albums=albums, summary=summarize(albums), fetched_at=self.cache.now())
        self.cache.put(bucket, entry)
        return entry

    async def list_albums(self, bucket: Optional[str] = None) -> List[Album]:
        """All albums in display order."""
        entry = await self.load(bucket)
        return entry.albums

    async def get_paginated_albums(
        self,
        page: Any = 1,
        page_size: Any = DEFAULT_PAGE_SIZE,
        bucket: Optional[str] = None,
    ) -> Dict[str, Any]:
        """One page of albums without item lists, plus totals."""
        entry = await self.load(bucket)
        return paginate(entry.albums, entry.summary, page=page, page_size=page_size)

    async def get_album_details(self, album_name: str, bucket: Optional[str] = None) -> Optional[Album]:
        """Look up one album by exact name; None when it does not exist."""
        if not album_name:
            return None
        entry = await self.load(bucket)
        for album in entry.albums:
            if album.name == album_name:
                return album
        return None

    async def close(self) -> None:
        await self.store.close()
