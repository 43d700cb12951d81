"""Per-artist post counts, unfiltered and restricted to the active tags.

Counts are advisory decoration for the artist label, not critical data, so
this service never raises: a failed sub-query falls back to the last count
that query produced (or 0) and the failure is only logged.

Both sub-queries go through :class:`QueryClient`, so the unfiltered count
shares its session-cache entry with the image lookup for the same artist
and costs no extra request once the image has been resolved.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from kexplorer.models.entities import Post
from kexplorer.models.gallery import CountsResult
from kexplorer.services.query_client import QueryClient
from kexplorer.utils.keys import QUERY_KEY_PREFIX, generate_cache_key
from kexplorer.utils.logging import get_logger


def count_distinct_posts(posts: Sequence[Post]) -> int:
    """Return the number of distinct post ids (the API may repeat posts)."""
    return len({post.id for post in posts})


def build_tag_query(artist_name: str, filter_tags: Sequence[str] = ()) -> str:
    """Join the artist tag and filter tags into one space-separated query."""
    return " ".join([artist_name, *filter_tags])


class CountAggregator:
    """Computes :class:`CountsResult` values with last-known-good fallback."""

    def __init__(self, query_client: QueryClient) -> None:
        self._query_client = query_client
        # Last successful distinct count per tag query.
        self._last_counts: dict[str, int] = {}
        self._logger = get_logger(__name__)

    async def counts_for(
        self, artist_name: str, active_filter_tags: Sequence[str] = ()
    ) -> CountsResult:
        """Return total and filtered distinct-post counts for *artist_name*.

        With no active filter tags, ``filtered_count`` equals
        ``total_count`` and only one query is issued.
        """
        filter_tags = list(active_filter_tags)

        if not filter_tags:
            total = await self._count(build_tag_query(artist_name), artist_name)
            return CountsResult(total_count=total, filtered_count=total)

        total, filtered = await asyncio.gather(
            self._count(build_tag_query(artist_name), artist_name),
            self._count(build_tag_query(artist_name, filter_tags), artist_name),
        )
        return CountsResult(total_count=total, filtered_count=filtered)

    async def _count(self, tag_query: str, artist_name: str) -> int:
        cache_key = generate_cache_key(QUERY_KEY_PREFIX, tag_query)
        try:
            posts = await self._query_client.search(tag_query, cache_key)
        except Exception as exc:
            fallback = self._last_counts.get(tag_query, 0)
            self._logger.warning(
                "counts_fetch_failed",
                artist=artist_name,
                query=tag_query,
                error=str(exc),
                fallback=fallback,
            )
            return fallback

        count = count_distinct_posts(posts)
        self._last_counts[tag_query] = count
        return count
