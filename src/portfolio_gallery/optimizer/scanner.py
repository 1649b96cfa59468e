"""Find the images an optimizer run should process."""

import logging
from pathlib import Path
from typing import Iterator, List

from .config import SUPPORTED_EXTENSIONS, THUMBNAIL_SUFFIX

logger = logging.getLogger(__name__)


def is_candidate(path: Path) -> bool:
    """True for supported images that are not generated thumbnails."""
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        return False
    return not path.stem.lower().endswith(THUMBNAIL_SUFFIX)


class ImageScanner:
    """Recursive scanner for optimizable images."""

    def __init__(self):
        self._stats = {"found": 0, "ignored": 0, "unreadable_dirs": 0}

    def scan_directory(self, directory: str) -> List[Path]:
        """Scan a directory tree and return the matching files, sorted."""
        directory_path = Path(directory).resolve()
        if not directory_path.is_dir():
            raise ValueError(f"Not a directory: {directory}")

        files = sorted(self._scan_directory_iter(directory_path))
        logger.info(
            f"Scan completed: {self._stats['found']} images found, "
            f"{self._stats['ignored']} files ignored, "
            f"{self._stats['unreadable_dirs']} unreadable directories"
        )
        return files

    def _scan_directory_iter(self, directory: Path) -> Iterator[Path]:
        try:
            entries = list(directory.iterdir())
        except PermissionError:
            logger.warning(f"Permission denied: {directory}")
            self._stats["unreadable_dirs"] += 1
            return

        for entry in entries:
            if entry.is_symlink() and entry.is_dir():
                continue
            if entry.is_dir():
                yield from self._scan_directory_iter(entry)
            elif entry.is_file():
                if is_candidate(entry):
                    self._stats["found"] += 1
                    yield entry
                else:
                    self._stats["ignored"] += 1

    def get_stats(self) -> dict:
        return self._stats.copy()


def discover_images(directory: str) -> List[Path]:
    """Convenience function to list the images under a directory."""
    return ImageScanner().scan_directory(directory)
