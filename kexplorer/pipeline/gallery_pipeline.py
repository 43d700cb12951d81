"""Gallery orchestration: filter, paginate, resolve, notify.

This is the host loop the core was built for.  It filters the static
artist catalogue by name and tags, slices it into pages, and resolves the
visible artists' images and counts through :func:`run_batched` so a full
page never bursts past the API's rate limit.  Every result is pushed to the
view layer through :class:`GalleryNotifier`.

Bulk resolution uses collect-and-continue batching: one artist failing
never stops the rest of the page from resolving.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from kexplorer.models.entities import Artist
from kexplorer.models.gallery import (
    FAILED_TO_LOAD_MESSAGE,
    AppData,
    CopiedArtist,
    CountsResult,
    GalleryPage,
    ImageOutcome,
)
from kexplorer.pipeline.copied_artists import CopiedArtists
from kexplorer.pipeline.notifier import GalleryNotifier
from kexplorer.providers.data.json_data_provider import JsonDataProvider
from kexplorer.services.count_aggregator import CountAggregator
from kexplorer.services.image_resolver import ImageResolver
from kexplorer.services.output_formatter import copy_tag_text
from kexplorer.utils.concurrency import DEFAULT_BATCH_DELAY_MS, run_batched
from kexplorer.utils.errors import DataLoadError
from kexplorer.utils.logging import get_logger

DEFAULT_ITEMS_PER_PAGE = 25
DEFAULT_BATCH_SIZE = 5
LOAD_FAILED_MESSAGE = "Failed to load required data files"


class GalleryPipeline:
    """Drives image and count resolution for pages of the artist gallery."""

    def __init__(
        self,
        data_provider: JsonDataProvider,
        image_resolver: ImageResolver,
        count_aggregator: CountAggregator,
        notifier: GalleryNotifier,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay_ms: int = DEFAULT_BATCH_DELAY_MS,
        items_per_page: int = DEFAULT_ITEMS_PER_PAGE,
    ) -> None:
        if items_per_page < 1:
            raise ValueError(f"items_per_page must be a positive integer, got {items_per_page}")
        self._data_provider = data_provider
        self._image_resolver = image_resolver
        self._count_aggregator = count_aggregator
        self._notifier = notifier
        self._batch_size = batch_size
        self._batch_delay_ms = batch_delay_ms
        self._items_per_page = items_per_page
        self._load_failure_reported = False
        self._copied = CopiedArtists()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Static data
    # ------------------------------------------------------------------

    async def load(self) -> AppData:
        """Load the static data once; report a failure to listeners only once."""
        try:
            return await self._data_provider.load()
        except DataLoadError:
            if not self._load_failure_reported:
                self._load_failure_reported = True
                await self._notifier.notify_load_failed(LOAD_FAILED_MESSAGE)
            raise

    async def available_tags(self, search: str = "") -> list[str]:
        """Return the sorted union of every artist's tags.

        *search* keeps only tags containing it, ignoring case.
        """
        data = await self.load()
        tags: set[str] = set()
        for artist in data.artists:
            tags.update(artist.tags)
        needle = search.strip().lower()
        return sorted(tag for tag in tags if needle in tag.lower())

    async def find_artist(self, artist_name: str) -> Artist | None:
        data = await self.load()
        return data.find_artist(artist_name)

    # ------------------------------------------------------------------
    # Copied artists
    # ------------------------------------------------------------------

    @property
    def copied(self) -> CopiedArtists:
        return self._copied

    def copy_artist(self, artist_name: str) -> str:
        """Record *artist_name* as copied and return the text to copy."""
        if self._copied.add(artist_name):
            self._logger.info("artist_copied", artist=artist_name, copied=len(self._copied))
        return copy_tag_text(artist_name)

    async def copied_entries(self) -> list[CopiedArtist]:
        """Return the copied artists in copy order, with catalogue details.

        When the catalogue cannot be loaded every entry falls back to the
        artist's display name.
        """
        try:
            catalogue = {name: await self.find_artist(name) for name in self._copied}
        except DataLoadError:
            catalogue = dict.fromkeys(self._copied)
        return [CopiedArtist.from_catalogue(name, artist) for name, artist in catalogue.items()]

    # ------------------------------------------------------------------
    # Filtering and paging
    # ------------------------------------------------------------------

    @staticmethod
    def filter_artists(
        artists: Iterable[Artist],
        name_filter: str = "",
        active_tags: Iterable[str] = (),
    ) -> list[Artist]:
        """Return artists whose name contains *name_filter* and that carry every active tag."""
        needle = name_filter.strip().lower()
        required = set(active_tags)
        return [
            artist
            for artist in artists
            if (not needle or needle in artist.artist_name.lower())
            and required.issubset(artist.tags)
        ]

    def paginate(self, filtered: Sequence[Artist], page_index: int = 0) -> GalleryPage:
        if page_index < 0:
            raise ValueError(f"page_index must not be negative, got {page_index}")
        start = page_index * self._items_per_page
        end = start + self._items_per_page
        return GalleryPage(
            page_index=page_index,
            artists=tuple(filtered[start:end]),
            total_matches=len(filtered),
            remaining=max(0, len(filtered) - end),
        )

    @staticmethod
    def toggle_tag(active_tags: Iterable[str], tag: str) -> frozenset[str]:
        """Return *active_tags* with *tag* removed if present, added otherwise."""
        current = set(active_tags)
        if tag in current:
            current.remove(tag)
        else:
            current.add(tag)
        return frozenset(current)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def show_page(
        self,
        page_index: int = 0,
        name_filter: str = "",
        active_tags: Iterable[str] = (),
    ) -> tuple[GalleryPage, list[ImageOutcome]]:
        """Filter, page, and resolve images for one page of the gallery."""
        data = await self.load()
        filtered = self.filter_artists(data.artists, name_filter, active_tags)
        page = self.paginate(filtered, page_index)

        self._logger.info(
            "gallery_page",
            page=page_index,
            matches=page.total_matches,
            shown=len(page.artists),
        )
        await self._notifier.notify_page(page)
        outcomes = await self.resolve_images(page.artists)
        return page, outcomes

    async def resolve_images(
        self, artists: Sequence[Artist], force_reload: bool = False
    ) -> list[ImageOutcome]:
        """Resolve images for *artists* in rate-limited batches, in input order."""

        async def _resolve(artist: Artist) -> ImageOutcome:
            outcome = await self._image_resolver.resolve_image(artist, force_reload=force_reload)
            await self._notifier.notify_image(artist.artist_name, outcome)
            return outcome

        results = await run_batched(
            artists,
            self._batch_size,
            _resolve,
            delay_ms=self._batch_delay_ms,
            return_exceptions=True,
        )

        outcomes: list[ImageOutcome] = []
        for artist, result in zip(artists, results):
            if isinstance(result, BaseException):
                self._logger.error(
                    "image_resolution_crashed", artist=artist.artist_name, error=str(result)
                )
                result = ImageOutcome.no_entries(FAILED_TO_LOAD_MESSAGE)
                await self._notifier.notify_image(artist.artist_name, result)
            outcomes.append(result)
        return outcomes

    async def refresh_counts(
        self, artists: Sequence[Artist], active_tags: Iterable[str] = ()
    ) -> list[CountsResult]:
        """Compute counts for *artists* in rate-limited batches, in input order."""
        filter_tags = sorted(active_tags)

        async def _count(artist: Artist) -> CountsResult:
            counts = await self._count_aggregator.counts_for(artist.artist_name, filter_tags)
            await self._notifier.notify_counts(artist.artist_name, counts)
            return counts

        results = await run_batched(
            artists,
            self._batch_size,
            _count,
            delay_ms=self._batch_delay_ms,
            return_exceptions=True,
        )
        return [
            result if isinstance(result, CountsResult) else CountsResult()
            for result in results
        ]

    async def reload_image(self, artist_name: str) -> ImageOutcome:
        """Force a fresh lookup for one artist and overwrite its cached image."""
        outcome = await self._image_resolver.resolve_image(artist_name, force_reload=True)
        await self._notifier.notify_image(artist_name, outcome)
        return outcome
