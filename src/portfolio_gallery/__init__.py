"""portfolio-gallery - photo album API and media optimizer for a portfolio site."""

__version__ = "0.1.0"
__author__ = "portfolio-gallery contributors"
__license__ = "MIT"

import logging
from typing import Any, Dict

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "config",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Process-wide defaults shared by the CLI and the web app
config: Dict[str, Any] = {
    "debug": False,
    "verbose": False,
}
