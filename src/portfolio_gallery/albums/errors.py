"""Errors raised while loading photo albums."""


class GalleryError(Exception):
    """Base class for album loading errors."""


class ConfigurationError(GalleryError):
    """Missing or invalid bucket name, credentials or storage settings."""


class DataAccessError(GalleryError):
    """The object store could not be listed."""
