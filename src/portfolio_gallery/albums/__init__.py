"""Photo album aggregation over a cloud object bucket."""

from .aggregator import build_albums, summarize
from .cache import AlbumCache, resolve_cache_ttl
from .errors import ConfigurationError, DataAccessError, GalleryError
from .models import Album, AlbumSummary, MediaItem, MediaType, StorageObject
from .pagination import paginate
from .service import AlbumService
from .storage import GCSObjectStore, LocalDirectoryStore, ObjectStore, create_object_store

__all__ = [
    "Album",
    "AlbumCache",
    "AlbumService",
    "AlbumSummary",
    "ConfigurationError",
    "DataAccessError",
    "GCSObjectStore",
    "GalleryError",
    "LocalDirectoryStore",
    "MediaItem",
    "MediaType",
    "ObjectStore",
    "StorageObject",
    "build_albums",
    "create_object_store",
    "paginate",
    "resolve_cache_ttl",
    "summarize",
]
