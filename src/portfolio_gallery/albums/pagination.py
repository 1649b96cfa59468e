"""Page through a sorted album list."""

import math
from typing import Any, Dict, List, Optional

from .models import Album, AlbumSummary, Pagination

DEFAULT_PAGE_SIZE = 12
FALLBACK_PAGE_SIZE = 9
MAX_PAGE_SIZE = 50


def coerce_number(value: Any) -> Optional[float]:
    """Interpret a query value as a finite number, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def normalize_page_size(page_size: Any = DEFAULT_PAGE_SIZE) -> int:
    number = coerce_number(page_size)
    if number is None or number <= 0:
        return FALLBACK_PAGE_SIZE
    return max(1, min(int(math.floor(number)), MAX_PAGE_SIZE))


def normalize_page(page: Any, total_pages: int) -> int:
    number = coerce_number(page)
    if number is None or number <= 0 or total_pages == 0:
        return 1
    return max(1, min(int(math.floor(number)), total_pages))


def paginate(
    albums: List[Album],
    summary: AlbumSummary,
    page: Any = 1,
    page_size: Any = DEFAULT_PAGE_SIZE,
) -> Dict[str, Any]:
    """Slice one page of albums.

    Albums in the page are serialised without their item lists; clients
    fetch those per album.

    Args:
        albums: Albums in display order.
        summary: Totals for the whole bucket, returned unchanged.
        page: Requested 1-based page. Invalid values mean page 1.
        page_size: Albums per page, capped at 50. None means the default
            of 12; other invalid values fall back to 9.

    Returns:
        Dictionary with ``albums``, ``summary`` and ``pagination`` keys.
    """
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    total_albums = len(albums)
    size = normalize_page_size(page_size)
    total_pages = math.ceil(total_albums / size) if total_albums else 0
    current = normalize_page(page, total_pages)

    start = (current - 1) * size
    page_albums = albums[start:start + size] if total_albums else []

    has_more = total_pages > 0 and current < total_pages
    meta = Pagination(
        page=current,
        page_size=size,
        total_albums=total_albums,
        total_pages=total_pages,
        has_more=has_more,
        next_page=current + 1 if has_more else None,
        prev_page=current - 1 if total_pages > 0 and current > 1 else None,
    )

    return {
        "albums": [album.to_dict(include_items=False) for album in page_albums],
        "summary": summary.to_dict(),
        "pagination": meta.to_dict(),
    }
