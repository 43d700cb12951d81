"""Resolves the image shown for each artist.

# ─── RESOLUTION STATE MACHINE ─────────────────────────────────────────
#
#   ColdCacheCheck ──absent──────────────────────────→ Fetch
#        │ present                                       │
#        ▼                                               ▼
#     Validate ──probe fails──→ evict durable entry ──→ Fetch ──error──→ NoEntries("Failed to load image")
#        │ probe ok                                      │ []  ─────────→ NoEntries("No valid entries")
#        ▼                                               ▼
#     Display(cached url)                             Select ──no url──→ NoEntries("No valid entries")
#                                                        │
#                                                        ▼
#                                          write durable entry → Display(url)
#
# force_reload=True starts at Fetch (bypassing the session cache as well)
# and overwrites the durable entry on success: the explicit, user-triggered
# invalidation path.  NoEntries never writes the durable cache, so the
# cache only ever holds a URL that was actually displayed.  The Fetch that
# follows an eviction also bypasses the session cache.
# ──────────────────────────────────────────────────────────────────────

Resolutions for the same artist are serialised with a per-artist
``asyncio.Lock``: a forced reload requested while an ambient resolution is
in flight waits for it and then overwrites its result, so the last request
always wins the durable cache.  Different artists never contend.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from kexplorer.interfaces.cache_provider import ICacheProvider
from kexplorer.interfaces.image_probe import IImageProbe
from kexplorer.models.entities import Artist
from kexplorer.models.gallery import FAILED_TO_LOAD_MESSAGE, ImageOutcome
from kexplorer.services.query_client import QueryClient
from kexplorer.services.selection import DEFAULT_PREDICATES, PostPredicate, select_best_post
from kexplorer.utils.errors import QUERY_ERRORS, ImageValidationError
from kexplorer.utils.keys import IMAGE_KEY_PREFIX, QUERY_KEY_PREFIX, generate_cache_key
from kexplorer.utils.logging import get_logger


class ImageResolver:
    """Chooses, validates, and persists the best image URL per artist."""

    def __init__(
        self,
        query_client: QueryClient,
        durable_cache: ICacheProvider,
        image_probe: IImageProbe,
        predicates: Sequence[PostPredicate] = DEFAULT_PREDICATES,
    ) -> None:
        self._query_client = query_client
        self._durable_cache = durable_cache
        self._probe = image_probe
        self._predicates = tuple(predicates)
        self._locks: dict[str, asyncio.Lock] = {}
        self._logger = get_logger(__name__)

    async def resolve_image(self, artist: Artist | str, force_reload: bool = False) -> ImageOutcome:
        """Return the outcome to display for *artist*.

        Parameters
        ----------
        artist:
            The artist, or its ``artist_name``.
        force_reload:
            Skip the durable cache entirely and look the artist up afresh.

        Returns
        -------
        ImageOutcome
            ``DISPLAY`` with the image URL, or ``NO_ENTRIES`` with a reason.
        """
        artist_name = artist.artist_name if isinstance(artist, Artist) else artist
        lock = self._locks.setdefault(artist_name, asyncio.Lock())
        async with lock:
            return await self._resolve(artist_name, force_reload)

    async def _resolve(self, artist_name: str, force_reload: bool) -> ImageOutcome:
        image_key = generate_cache_key(IMAGE_KEY_PREFIX, artist_name)
        evicted = False

        if not force_reload:
            cached_url = await self._durable_cache.get(image_key)
            if cached_url is not None:
                outcome = await self._validate_cached(artist_name, image_key, cached_url)
                if outcome is not None:
                    return outcome
                evicted = True

        # A session entry may still list the URL that was just evicted.
        return await self._fetch_and_select(
            artist_name, image_key, force_reload, refresh=force_reload or evicted
        )

    async def _validate_cached(
        self, artist_name: str, image_key: str, cached_url: object
    ) -> ImageOutcome | None:
        """Probe a cached URL; evict it and return ``None`` if it is unusable."""
        if isinstance(cached_url, str) and cached_url:
            try:
                await self._probe.probe(cached_url)
            except ImageValidationError as exc:
                self._logger.info("image_cache_invalid", artist=artist_name, error=str(exc))
            else:
                self._logger.debug("image_cache_valid", artist=artist_name)
                return ImageOutcome.display(cached_url, from_cache=True)
        else:
            self._logger.warning("image_cache_entry_malformed", artist=artist_name)

        await self._durable_cache.remove(image_key)
        return None

    async def _fetch_and_select(
        self, artist_name: str, image_key: str, force_reload: bool, refresh: bool = False
    ) -> ImageOutcome:
        query_key = generate_cache_key(QUERY_KEY_PREFIX, artist_name)
        try:
            posts = await self._query_client.search(artist_name, query_key, refresh=refresh)
        except QUERY_ERRORS as exc:
            self._logger.error("image_fetch_failed", artist=artist_name, error=str(exc))
            return ImageOutcome.no_entries(FAILED_TO_LOAD_MESSAGE)

        if not posts:
            self._logger.info("image_no_posts", artist=artist_name)
            return ImageOutcome.no_entries()

        best = select_best_post(posts, self._predicates)
        if best is None or not best.file_url:
            self._logger.info("image_no_usable_post", artist=artist_name, posts=len(posts))
            return ImageOutcome.no_entries()

        await self._durable_cache.set(image_key, best.file_url)
        self._logger.info(
            "image_resolved",
            artist=artist_name,
            post_id=best.id,
            forced=force_reload,
        )
        return ImageOutcome.display(best.file_url)
