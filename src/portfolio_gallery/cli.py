"""CLI interface for portfolio-gallery."""

import asyncio
import json
import logging
import sys

import click

from . import __version__

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="portfolio-gallery")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug mode.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """portfolio-gallery - photo albums and media optimization for the portfolio site."""
    # Ensure ctx.obj exists
    if ctx.obj is None:
        ctx.obj = {}

    # Configure logging
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug

    if debug:
        logger.debug("Debug mode enabled")
    elif verbose:
        logger.info("Verbose mode enabled")


@cli.command()
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option("--concurrency", type=click.IntRange(min=1), default=None, help="Images processed in parallel (default: CPU count, 2-6).")
@click.option("--dry-run", is_flag=True, help="Compute everything but write nothing.")
@click.option("--force", is_flag=True, help="Regenerate thumbnails that already exist.")
@click.pass_context
def optimize(ctx, input_dir, concurrency, dry_run, force):
    """Shrink images under INPUT_DIR and write their thumbnails."""
    from portfolio_gallery.optimizer import OptimizerOptions, run_optimizer
    from portfolio_gallery.optimizer.optimizer import format_bytes

    options = OptimizerOptions(dry_run=dry_run, force=force)
    if concurrency is not None:
        options.concurrency = concurrency

    click.echo(
        f"Processing images from {input_dir} using concurrency {options.concurrency}"
        f"{' (dry run)' if dry_run else ''}..."
    )

    def report(outcome):
        if outcome.primary is not None and outcome.primary.optimized:
            click.echo(
                f"Optimized {outcome.path}: saved {format_bytes(outcome.primary.bytes_saved)}"
                f" (quality {outcome.primary.quality})"
            )
        if outcome.error is not None:
            click.echo(f"Failed to process {outcome.path}: {outcome.error}", err=True)

    try:
        summary = run_optimizer(input_dir, options, on_result=report)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if summary.total == 0:
        click.echo("No matching images found.")
        return

    click.echo("\nDone.")
    click.echo(f"Processed: {summary.processed}/{summary.total}")
    click.echo(f"Optimized: {summary.optimized}")
    click.echo(f"Unchanged: {summary.unchanged}")
    click.echo(f"Skipped (unsupported or non-file): {summary.skipped}")
    click.echo(f"Thumbnails created: {summary.thumbnails_created}")
    click.echo(f"Thumbnails skipped: {summary.thumbnails_skipped}")
    click.echo(f"Bytes saved: {format_bytes(summary.bytes_saved)}")

    if summary.has_failures:
        click.echo(f"Failures: {len(summary.failures)}")
        for failure in summary.failures:
            click.echo(f" - {failure.path}: {failure.message}")
        ctx.exit(1)


@cli.group()
@click.option("--bucket", help="Bucket holding the albums (or set PHOTOGRAPHY_BUCKET).")
@click.option("--storage", type=click.Choice(["gcs", "local"]), help="Storage backend.")
@click.option("--local-root", type=click.Path(file_okay=False), help="Directory containing local buckets.")
@click.pass_context
def albums(ctx, bucket, storage, local_root):
    """Inspect photo albums in the bucket."""
    from portfolio_gallery.web.config import WebConfig

    ctx.ensure_object(dict)
    ctx.obj["config"] = WebConfig.load_from_file(
        bucket=bucket,
        storage_backend=storage,
        local_root=local_root,
    )


def _album_service(ctx):
    from portfolio_gallery.albums import AlbumService, create_object_store

    config = ctx.obj["config"]
    return AlbumService(
        store=create_object_store(config),
        default_bucket=config.bucket,
        public_base_url=config.public_base_url,
    )


async def _with_service(service, call):
    try:
        return await call(service)
    finally:
        await service.close()


@albums.command("list")
@click.option("--page", default=1, help="Page number.")
@click.option("--page-size", default=None, type=int, help="Albums per page (max 50).")
@click.option("--output-format", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.pass_context
def list_albums(ctx, page, page_size, output_format):
    """List albums, newest first."""
    from portfolio_gallery.albums import GalleryError

    config = ctx.obj["config"]
    try:
        service = _album_service(ctx)
        result = asyncio.run(_with_service(
            service,
            lambda s: s.get_paginated_albums(page=page, page_size=page_size or config.page_size),
        ))
    except GalleryError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if output_format == "json":
        click.echo(json.dumps(result, indent=2))
        return

    if not result["albums"]:
        click.echo("No albums found.")
        return

    meta = result["pagination"]
    summary = result["summary"]
    click.echo(
        f"Page {meta['page']}/{meta['totalPages']} - {summary['albumCount']} albums, "
        f"{summary['photoCount']} photos, {summary['videoCount']} videos"
    )
    for album in result["albums"]:
        cover = album["coverPhoto"]["name"] if album["coverPhoto"] else "-"
        click.echo(f"\n{album['name']}")
        click.echo(f"   Photos: {album['photoCount']}  Videos: {album['videoCount']}  Items: {album['itemCount']}")
        click.echo(f"   Updated: {album['updatedAt'] or '-'}")
        click.echo(f"   Cover: {cover}")


@albums.command("show")
@click.argument("name")
@click.option("--output-format", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.pass_context
def show_album(ctx, name, output_format):
    """Show one album and its items."""
    from portfolio_gallery.albums import GalleryError

    try:
        service = _album_service(ctx)
        album = asyncio.run(_with_service(service, lambda s: s.get_album_details(name)))
    except GalleryError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if album is None:
        click.echo(f"Album not found: {name}", err=True)
        ctx.exit(1)

    if output_format == "json":
        click.echo(json.dumps(album.to_dict(include_items=True), indent=2))
        return

    click.echo(f"{album.name}")
    click.echo(f"  Photos: {album.image_count}  Videos: {album.video_count}  Items: {album.item_count}")
    if album.cover_item is not None:
        click.echo(f"  Cover: {album.cover_item.canonical_path}")
    for i, item in enumerate(album.items, 1):
        click.echo(f"  {i}. [{item.media_type.value}] {item.canonical_path}")
        if ctx.obj.get("verbose"):
            click.echo(f"     {item.link_url}")


def main() -> None:
    """Entry point for the CLI."""
    try:
        cli(obj={})
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
