"""Time-bounded in-memory cache of album listings, one slot per bucket."""

import logging
import math
import os
import time
from typing import Callable, Dict, Optional

from .models import CacheEntry

logger = logging.getLogger(__name__)

ENV_CACHE_TTL_MS = "PHOTO_ALBUM_CACHE_TTL_MS"
DEFAULT_CACHE_TTL_SECONDS = 5 * 60


def resolve_cache_ttl(raw_value: Optional[str] = None) -> float:
    """Resolve the cache TTL in seconds.

    Args:
        raw_value: TTL in milliseconds. Read from PHOTO_ALBUM_CACHE_TTL_MS
            when not given.

    Returns:
        The TTL in seconds, or the 5 minute default when the value is
        missing or not a positive number.
    """
    if raw_value is None:
        raw_value = os.environ.get(ENV_CACHE_TTL_MS)
    if raw_value is None or str(raw_value).strip() == "":
        return DEFAULT_CACHE_TTL_SECONDS
    try:
        millis = float(raw_value)
    except (TypeError, ValueError):
        return DEFAULT_CACHE_TTL_SECONDS
    if not math.isfinite(millis) or millis <= 0:
        return DEFAULT_CACHE_TTL_SECONDS
    return millis / 1000.0


class AlbumCache:
    """Holds the latest album listing for each bucket.

    Entries are replaced wholesale, so a reader either sees the previous
    entry or the new one. Concurrent refreshes of the same bucket may both
    fetch; whichever stores last wins.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = resolve_cache_ttl() if ttl is None else ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def now(self) -> float:
        return self._clock()

    def get(self, bucket: str) -> Optional[CacheEntry]:
        """Return the entry for a bucket if it is still fresh."""
        entry = self._entries.get(bucket)
        if entry is None:
            return None
        age = self._clock() - entry.fetched_at
        if age < self.ttl:
            return entry
        logger.debug(f"Album cache for {bucket} expired ({age:.1f}s old)")
        return None

    def put(self, bucket: str, entry: CacheEntry) -> None:
        self._entries[bucket] = entry

    def invalidate(self, bucket: Optional[str] = None) -> None:
        """Drop one bucket's entry, or every entry when no bucket is given."""
        if bucket is None:
            self._entries.clear()
        else:
            self._entries.pop(bucket, None)

    def __contains__(self, bucket: str) -> bool:
        return self.get(bucket) is not None
