"""Shrink gallery images to a byte budget and write their thumbnails.

Every image is first re-encoded in place until it fits the master budget:
quality is lowered step by step down to a floor, and only then is the short
side reduced by 10% per step down to a minimum. A bounded preview is then
written next to it as ``<stem>_thumbnail<ext>``. Files are processed in
worker threads, at most ``concurrency`` at a time; a failure on one file is
recorded and never stops the run.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .config import THUMBNAIL_SUFFIX, OptimizerOptions
from .encoder import (
    ImageInfo,
    format_for,
    read_image_info,
    render_resized,
    render_thumbnail,
    write_atomic,
)
from .scanner import discover_images

logger = logging.getLogger(__name__)


@dataclass
class PrimaryResult:
    """Outcome of re-encoding the original image."""
    original_size: int
    optimized_size: int
    skipped: bool = False
    quality: Optional[int] = None
    short_side: Optional[int] = None

    @property
    def optimized(self) -> bool:
        return not self.skipped and self.optimized_size < self.original_size

    @property
    def bytes_saved(self) -> int:
        return max(0, self.original_size - self.optimized_size)


@dataclass
class ThumbnailResult:
    path: Path
    created: bool = False
    skipped: bool = False
    size: Optional[int] = None
    quality: Optional[int] = None


@dataclass
class FileFailure:
    path: str
    message: str


@dataclass
class FileOutcome:
    """Everything that happened to one file during a run."""
    path: str
    primary: Optional[PrimaryResult] = None
    thumbnail: Optional[ThumbnailResult] = None
    skipped: bool = False
    error: Optional[str] = None


@dataclass
class RunSummary:
    """Counters for a whole optimizer run."""
    total: int = 0
    optimized: int = 0
    unchanged: int = 0
    skipped: int = 0
    thumbnails_created: int = 0
    thumbnails_skipped: int = 0
    bytes_saved: int = 0
    failures: List[FileFailure] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.optimized + self.unchanged

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def record(self, outcome: FileOutcome) -> None:
        """Fold one file's outcome into the totals."""
        if outcome.skipped:
            self.skipped += 1
        if outcome.primary is not None:
            if outcome.primary.optimized:
                self.optimized += 1
                self.bytes_saved += outcome.primary.bytes_saved
            else:
                self.unchanged += 1
        if outcome.thumbnail is not None:
            if outcome.thumbnail.created:
                self.thumbnails_created += 1
            elif outcome.thumbnail.skipped:
                self.thumbnails_skipped += 1
        if outcome.error is not None:
            self.failures.append(FileFailure(path=outcome.path, message=outcome.error))


def format_bytes(num_bytes: int) -> str:
    """Human-readable size, e.g. "1.5 MB"."""
    units = ["B", "KB", "MB", "GB"]
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    if value >= 10 or value % 1 == 0:
        return f"{value:.0f} {units[unit]}"
    return f"{value:.1f} {units[unit]}"


def thumbnail_path_for(path: Path) -> Path:
    return path.with_name(f"{path.stem}{THUMBNAIL_SUFFIX}{path.suffix}")


def optimize_primary(path: Path, info: ImageInfo, image_format: str, options: OptimizerOptions) -> PrimaryResult:
    """Re-encode an image in place until it fits the master byte budget.

    Images already within the budget whose short side is at or below
    ``min_short_side`` are left untouched.
    """
    short_side = info.short_side
    if info.size_bytes <= options.max_master_bytes and (short_side is None or short_side <= options.min_short_side):
        return PrimaryResult(
            original_size=info.size_bytes,
            optimized_size=info.size_bytes,
            skipped=True,
            short_side=short_side,
        )

    target = short_side
    quality = options.master_start_quality

    while True:
        data, dimensions = render_resized(path, image_format, target, quality)
        at_quality_floor = quality <= options.master_min_quality
        at_min_side = target is not None and target <= options.min_short_side
        if len(data) <= options.max_master_bytes or (at_quality_floor and at_min_side):
            break

        if quality > options.master_min_quality:
            quality = max(options.master_min_quality, quality - options.quality_step)
            continue

        if target is not None and target > options.min_short_side:
            next_target = max(options.min_short_side, int(target * options.resize_factor))
            target = options.min_short_side if next_target == target else next_target
            continue

        # Unknown dimensions: nothing left to shrink
        break

    if not options.dry_run:
        write_atomic(path, data)

    logger.debug(f"Encoded {path} at quality {quality}, {dimensions[0]}x{dimensions[1]}: {len(data)} bytes")
    return PrimaryResult(
        original_size=info.size_bytes,
        optimized_size=len(data),
        quality=quality,
        short_side=min(dimensions),
    )


def generate_thumbnail(path: Path, image_format: str, options: OptimizerOptions) -> ThumbnailResult:
    """Write ``<stem>_thumbnail<ext>`` next to the image.

    An existing thumbnail is kept unless ``options.force`` is set.
    """
    settings = options.thumbnail
    thumb_path = thumbnail_path_for(path)

    if not options.force and thumb_path.exists():
        return ThumbnailResult(path=thumb_path, skipped=True)

    quality = settings.start_quality
    while True:
        data = render_thumbnail(path, image_format, settings.width, settings.height, quality)
        if len(data) <= settings.max_bytes or quality <= settings.min_quality:
            break
        next_quality = max(settings.min_quality, quality - settings.quality_step)
        if next_quality == quality:
            break
        quality = next_quality

    if not options.dry_run:
        write_atomic(thumb_path, data)

    return ThumbnailResult(path=thumb_path, created=True, size=len(data), quality=quality)


def process_file(path: Path, input_dir: Path, options: OptimizerOptions) -> FileOutcome:
    """Optimize one image and its thumbnail. Errors are captured, not raised."""
    try:
        relative = str(path.relative_to(input_dir))
    except ValueError:
        relative = str(path)
    outcome = FileOutcome(path=relative)

    image_format = format_for(path)
    if image_format is None:
        outcome.skipped = True
        return outcome

    try:
        if not path.is_file():
            outcome.skipped = True
            return outcome
        info = read_image_info(path)
    except Exception as e:
        logger.error(f"Failed to read metadata for {relative}: {e}")
        outcome.error = str(e)
        return outcome

    try:
        outcome.primary = optimize_primary(path, info, image_format, options)
        if outcome.primary.optimized:
            logger.info(
                f"Optimized {relative}: saved {format_bytes(outcome.primary.bytes_saved)} "
                f"(quality {outcome.primary.quality})"
            )
        outcome.thumbnail = generate_thumbnail(path, image_format, options)
    except Exception as e:
        logger.error(f"Failed to process {relative}: {e}")
        outcome.error = str(e)

    return outcome


async def optimize_directory(
    input_dir: str,
    options: Optional[OptimizerOptions] = None,
    on_result: Optional[Callable[[FileOutcome], None]] = None,
) -> RunSummary:
    """Optimize every image under a directory.

    Args:
        input_dir: Directory searched recursively for images.
        options: Budgets and run flags; defaults when omitted.
        on_result: Called on the event loop with each file's outcome.

    Returns:
        RunSummary with counters and per-file failures.

    Raises:
        ValueError: If input_dir is not an existing directory.
    """
    options = options or OptimizerOptions()
    root = Path(input_dir).resolve()
    if not root.is_dir():
        raise ValueError(f"Input path must be a directory: {input_dir}")

    files = await asyncio.to_thread(discover_images, str(root))
    summary = RunSummary(total=len(files))
    if not files:
        return summary

    semaphore = asyncio.Semaphore(max(1, options.concurrency))

    async def process(path: Path) -> None:
        async with semaphore:
            outcome = await asyncio.to_thread(process_file, path, root, options)
        # Counters are only touched from the event loop thread
        summary.record(outcome)
        if on_result is not None:
            on_result(outcome)

    await asyncio.gather(*(process(path) for path in files))
    return summary


def run_optimizer(
    input_dir: str,
    options: Optional[OptimizerOptions] = None,
    on_result: Optional[Callable[[FileOutcome], None]] = None,
) -> RunSummary:
    """Synchronous wrapper around optimize_directory."""
    return asyncio.run(optimize_directory(input_dir, options, on_result))
