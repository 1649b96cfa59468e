"""Batch re-encoding of gallery images with thumbnail generation."""

from .config import OptimizerOptions, ThumbnailOptions, default_concurrency
from .optimizer import (
    FileFailure,
    RunSummary,
    generate_thumbnail,
    optimize_directory,
    optimize_primary,
    run_optimizer,
)
from .scanner import discover_images

__all__ = [
    "FileFailure",
    "OptimizerOptions",
    "RunSummary",
    "ThumbnailOptions",
    "default_concurrency",
    "discover_images",
    "generate_thumbnail",
    "optimize_directory",
    "optimize_primary",
    "run_optimizer",
]
