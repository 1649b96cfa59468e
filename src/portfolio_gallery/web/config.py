"""Configuration for the portfolio-gallery web API and CLI."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from portfolio_gallery.albums.cache import ENV_CACHE_TTL_MS, resolve_cache_ttl

logger = logging.getLogger(__name__)

# Configuration file path
CONFIG_FILE_PATH = Path.home() / ".portfolio-gallery" / "config.json"

DEFAULT_STORAGE_BACKEND = "gcs"
DEFAULT_PAGE_SIZE = 12

# Settings read from the environment when not given explicitly
ENV_BUCKET = "PHOTOGRAPHY_BUCKET"
ENV_PUBLIC_BUCKET = "NEXT_PUBLIC_PHOTOGRAPHY_BUCKET"
ENV_SERVICE_ACCOUNT_KEY = "GOOGLE_SERVICE_ACCOUNT_KEY"
ENV_STORAGE_BACKEND = "PORTFOLIO_GALLERY_STORAGE"
ENV_LOCAL_ROOT = "PORTFOLIO_GALLERY_LOCAL_ROOT"
ENV_PUBLIC_URL = "PORTFOLIO_GALLERY_PUBLIC_URL"


class WebConfig:
    """Configuration manager for the album API."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        credentials_key: Optional[str] = None,
        cache_ttl: Optional[float] = None,
        storage_backend: Optional[str] = None,
        local_root: Optional[str] = None,
        public_base_url: Optional[str] = None,
        page_size: Optional[int] = None,
    ):
        self.bucket = bucket or os.environ.get(ENV_BUCKET) or os.environ.get(ENV_PUBLIC_BUCKET)
        self.credentials_key = credentials_key or os.environ.get(ENV_SERVICE_ACCOUNT_KEY)
        # Seconds; non-positive values fall back to the default like the env setting
        if isinstance(cache_ttl, (int, float)) and not isinstance(cache_ttl, bool) and cache_ttl > 0:
            self.cache_ttl = float(cache_ttl)
        else:
            self.cache_ttl = resolve_cache_ttl(os.environ.get(ENV_CACHE_TTL_MS))
        self.storage_backend = storage_backend or os.environ.get(ENV_STORAGE_BACKEND) or DEFAULT_STORAGE_BACKEND
        if local_root:
            local_root = os.path.expanduser(local_root)
        self.local_root = local_root or os.environ.get(ENV_LOCAL_ROOT)
        self.public_base_url = public_base_url or os.environ.get(ENV_PUBLIC_URL)
        self.page_size = page_size or DEFAULT_PAGE_SIZE

    @classmethod
    def load_from_file(cls, config_path: Optional[Path] = None, **overrides) -> "WebConfig":
        """Load configuration from a JSON file.

        Keyword overrides that are not None take precedence over the file.
        """
        if config_path is None:
            config_path = CONFIG_FILE_PATH
        explicit = {key: value for key, value in overrides.items() if value is not None}

        if not config_path.exists():
            return cls(**explicit)

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            # If config file is invalid, log warning and use defaults
            logger.warning(f"Failed to load config file {config_path}: {e}")
            return cls(**explicit)

        if not isinstance(config_data, dict):
            logger.warning(f"Ignoring config file {config_path}: expected a JSON object")
            return cls(**explicit)

        values = {
            "bucket": config_data.get("bucket"),
            "cache_ttl": config_data.get("cache_ttl"),
            "storage_backend": config_data.get("storage_backend"),
            "local_root": config_data.get("local_root"),
            "public_base_url": config_data.get("public_base_url"),
            "page_size": config_data.get("page_size"),
        }
        values.update(explicit)
        return cls(**values)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            "bucket": self.bucket,
            "cache_ttl": self.cache_ttl,
            "storage_backend": self.storage_backend,
            "local_root": self.local_root,
            "public_base_url": self.public_base_url,
            "page_size": self.page_size,
            "credentials_set": bool(self.credentials_key),
        }


def get_default_config() -> WebConfig:
    """Create default configuration for the web application."""
    return WebConfig.load_from_file()
