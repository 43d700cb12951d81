# =============================================================================
# kexplorer/cli/explore.py - CLI Explore Command
# =============================================================================
#
# Standalone command-line host for the artist gallery core.  Each run builds
# one ExplorerContext (one "session"), runs a single subcommand against it,
# and closes the shared HTTP client on exit.
#
# Supported subcommands:
#
#   image   - Resolve (or, with --reload, force-refresh) one artist's image
#   counts  - Print total and tag-filtered post counts for one artist
#   gallery - Filter the catalogue, print one page and resolve its images
#   tags    - List catalogue tags, optionally narrowed by --search
#   copy    - Print the search text for artists and the copied-artists list
#   forget  - Drop one artist's stored image URL from the durable cache
#   health  - Probe the search API and report whether it is reachable
#
# Repeating a --tag toggles it back off, like clicking a tag button twice.
#
# Usage examples:
#   python -m kexplorer.cli image some_artist --reload
#   python -m kexplorer.cli counts some_artist --tag 1girl --tag solo
#   python -m kexplorer.cli gallery --name ab --tag landscape --page 2 --counts
#   python -m kexplorer.cli tags --search land
#   python -m kexplorer.cli copy some_artist other_artist
#   python -m kexplorer.cli health
# =============================================================================

"""Standalone CLI for browsing the artist gallery.

Usage::

    python -m kexplorer.cli image ARTIST [--reload]
    python -m kexplorer.cli counts ARTIST [--tag TAG ...]
    python -m kexplorer.cli gallery [--name TEXT] [--tag TAG ...] [--page N] [--counts]
    python -m kexplorer.cli tags [--search TEXT]
    python -m kexplorer.cli copy ARTIST [ARTIST ...]
    python -m kexplorer.cli forget ARTIST
    python -m kexplorer.cli health
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from kexplorer.config.settings import Settings
from kexplorer.interfaces.gallery_listener import IGalleryListener
from kexplorer.main import ExplorerContext, build_context
from kexplorer.models.entities import Artist
from kexplorer.models.gallery import CountsResult, GalleryPage, ImageOutcome
from kexplorer.pipeline.gallery_pipeline import GalleryPipeline
from kexplorer.services.output_formatter import (
    NO_TAGS_FOUND_MESSAGE,
    display_name,
    format_artist_label,
    format_copied_artist,
    format_outcome,
    format_page_header,
)
from kexplorer.utils.errors import ConfigurationError, DataLoadError
from kexplorer.utils.keys import IMAGE_KEY_PREFIX, generate_cache_key
from kexplorer.utils.logging import configure_logging


class ConsoleGalleryListener(IGalleryListener):
    """Prints gallery events to stdout as they arrive."""

    def __init__(self, filtered: bool = False, result_limit: int | None = 1000) -> None:
        self._filtered = filtered
        self._result_limit = result_limit
        self._artists: dict[str, Artist] = {}

    async def on_page(self, page: GalleryPage) -> None:
        print(format_page_header(page))
        for artist in page.artists:
            self._artists[artist.artist_name] = artist
            print(f"  {format_artist_label(artist)}")
        print()

    async def on_image(self, artist_name: str, outcome: ImageOutcome) -> None:
        print(f"  {format_outcome(artist_name, outcome)}")

    async def on_counts(self, artist_name: str, counts: CountsResult) -> None:
        artist = self._artists.get(artist_name) or Artist(artist_name=artist_name)
        label = format_artist_label(
            artist, counts, filtered=self._filtered, result_limit=self._result_limit
        )
        print(f"  {label}")

    async def on_load_failed(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_image(args: argparse.Namespace, ctx: ExplorerContext) -> int:
    """Resolve one artist's image, optionally forcing a fresh lookup."""
    if args.reload:
        await ctx.pipeline.reload_image(args.artist)
        return 0

    outcome = await ctx.image_resolver.resolve_image(args.artist)
    await ctx.notifier.notify_image(args.artist, outcome)
    return 0


async def _handle_counts(args: argparse.Namespace, ctx: ExplorerContext) -> int:
    tags = args.tag or []
    counts = await ctx.count_aggregator.counts_for(args.artist, tags)
    await ctx.notifier.notify_counts(args.artist, counts)
    return 0


async def _handle_gallery(args: argparse.Namespace, ctx: ExplorerContext) -> int:
    """Show one page of the filtered gallery, then its counts if requested."""
    tags = args.tag or []
    try:
        page, _outcomes = await ctx.pipeline.show_page(
            page_index=args.page - 1,
            name_filter=args.name,
            active_tags=tags,
        )
    except DataLoadError:
        return 1

    if args.counts and page.artists:
        print()
        await ctx.pipeline.refresh_counts(page.artists, tags)
    return 0


async def _handle_tags(args: argparse.Namespace, ctx: ExplorerContext) -> int:
    try:
        tags = await ctx.pipeline.available_tags(search=args.search)
    except DataLoadError:
        return 1

    if not tags:
        print(NO_TAGS_FOUND_MESSAGE)
        return 0

    data = await ctx.pipeline.load()
    for tag in tags:
        tooltip = data.tag_tooltips.get(tag)
        print(f"  {tag:<24} {tooltip}" if tooltip else f"  {tag}")
    return 0


async def _handle_copy(args: argparse.Namespace, ctx: ExplorerContext) -> int:
    """Print the search text for each artist, then the copied-artists list."""
    for artist_name in args.artist:
        print(f"Copied: {ctx.pipeline.copy_artist(artist_name)}")

    print()
    print("Copied artists:")
    for entry in await ctx.pipeline.copied_entries():
        print(f"  {format_copied_artist(entry)}")
    return 0


async def _handle_forget(args: argparse.Namespace, ctx: ExplorerContext) -> int:
    """Remove the stored image URL for one artist."""
    await ctx.durable_cache.remove(generate_cache_key(IMAGE_KEY_PREFIX, args.artist))
    print(f"Forgot cached image for {display_name(args.artist)}")
    return 0


async def _handle_health(ctx: ExplorerContext) -> int:
    healthy = await ctx.health_checker.check()
    print("Search API: available" if healthy else "Search API: unavailable")
    return 0 if healthy else 1


def _active_tags(requested: Sequence[str] | None) -> list[str]:
    """Fold repeated ``--tag`` options the way tag buttons toggle."""
    active: frozenset[str] = frozenset()
    for tag in requested or ():
        active = GalleryPipeline.toggle_tag(active, tag)
    return sorted(active)


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    """Build a session, dispatch *args.command* against it, and clean up."""
    if hasattr(args, "tag"):
        args.tag = _active_tags(args.tag)

    ctx = build_context(settings=app_settings)
    result_limit = ctx.query_client.result_limit
    listener = ConsoleGalleryListener(
        filtered=bool(getattr(args, "tag", None)),
        result_limit=result_limit,
    )
    ctx.notifier.register_listener(listener)

    async with ctx:
        if args.command == "image":
            return await _handle_image(args, ctx)
        if args.command == "counts":
            return await _handle_counts(args, ctx)
        if args.command == "gallery":
            return await _handle_gallery(args, ctx)
        if args.command == "tags":
            return await _handle_tags(args, ctx)
        if args.command == "copy":
            return await _handle_copy(args, ctx)
        if args.command == "forget":
            return await _handle_forget(args, ctx)
        if args.command == "health":
            return await _handle_health(ctx)
    return 1


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the explore CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m kexplorer.cli",
        description="Browse artist images and post counts from the search API.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Explore commands")

    # -- image --
    image_parser = subparsers.add_parser("image", help="Resolve one artist's image")
    image_parser.add_argument("artist", help="Artist tag, e.g. some_artist")
    image_parser.add_argument(
        "--reload",
        action="store_true",
        help="Ignore cached results and look the artist up again",
    )

    # -- counts --
    counts_parser = subparsers.add_parser("counts", help="Count an artist's posts")
    counts_parser.add_argument("artist", help="Artist tag")
    counts_parser.add_argument(
        "--tag", action="append", help="Filter tag (repeatable; repeating toggles it off)"
    )

    # -- gallery --
    gallery_parser = subparsers.add_parser("gallery", help="Show one page of the gallery")
    gallery_parser.add_argument("--name", default="", help="Case-insensitive name filter")
    gallery_parser.add_argument(
        "--tag",
        action="append",
        help="Only artists carrying this tag (repeatable; repeating toggles it off)",
    )
    gallery_parser.add_argument(
        "--page", type=_positive_int, default=1, help="Page number (default: 1)"
    )
    gallery_parser.add_argument(
        "--counts", action="store_true", help="Also fetch post counts for the page"
    )

    # -- tags --
    tags_parser = subparsers.add_parser("tags", help="List catalogue tags")
    tags_parser.add_argument(
        "--search", default="", help="Only tags containing this text (case-insensitive)"
    )

    # -- copy --
    copy_parser = subparsers.add_parser(
        "copy", help="Print the search text for artists and list them as copied"
    )
    copy_parser.add_argument("artist", nargs="+", help="Artist tag(s), in copy order")

    # -- forget --
    forget_parser = subparsers.add_parser("forget", help="Drop one artist's cached image")
    forget_parser.add_argument("artist", help="Artist tag")

    # -- health --
    subparsers.add_parser("health", help="Check whether the search API is reachable")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for the explore tool."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    try:
        configure_logging(
            log_level=app_settings.log_level,
            json_output=(app_settings.app_env == "production"),
        )
        exit_code = asyncio.run(_run(args, app_settings))
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
