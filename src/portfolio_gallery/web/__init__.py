"""portfolio-gallery web interface."""

from .api import app, create_app
from .config import WebConfig, get_default_config

__all__ = ["app", "create_app", "WebConfig", "get_default_config"]
