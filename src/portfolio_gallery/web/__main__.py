"""Main entry point for the portfolio-gallery web server."""

import logging
import os
import sys

import uvicorn

from .api import create_app
from .config import get_default_config

ENV_HOST = "PORTFOLIO_GALLERY_HOST"
ENV_PORT = "PORTFOLIO_GALLERY_PORT"


def main():
    """Run the web server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = get_default_config()
    host = os.environ.get(ENV_HOST, "0.0.0.0")
    port = int(os.environ.get(ENV_PORT, "8000"))

    print("Starting portfolio-gallery web server...")
    print(f"API documentation: http://localhost:{port}/docs")
    print(f"Storage backend: {config.storage_backend}")
    print(f"Bucket: {config.bucket or '(not set)'}")
    if not config.bucket:
        print("\nNote: set PHOTOGRAPHY_BUCKET to the bucket holding your albums")
    print("\nPress Ctrl+C to stop the server")
    logging.getLogger(__name__).debug(f"Configuration: {config.to_dict()}")

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_level="info",
        reload=False,
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nServer stopped by user")
        sys.exit(0)
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
