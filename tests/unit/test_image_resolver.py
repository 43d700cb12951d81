"""Unit tests for ImageResolver: cache validation, fetch, select, persist."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from kexplorer.interfaces.cache_provider import ICacheProvider
from kexplorer.interfaces.image_probe import IImageProbe
from kexplorer.models.entities import Artist, Post
from kexplorer.models.gallery import (
    DEFAULT_NO_ENTRIES_MESSAGE,
    FAILED_TO_LOAD_MESSAGE,
    OutcomeStatus,
)
from kexplorer.providers.cache.memory_cache import MemoryCacheProvider
from kexplorer.providers.cache.sqlite_cache import SQLiteCacheProvider
from kexplorer.services.availability_gate import AvailabilityGate
from kexplorer.services.image_resolver import ImageResolver
from kexplorer.services.query_client import QueryClient
from kexplorer.utils.errors import ImageValidationError
from tests.conftest import FakeBooru

CACHED_URL = "https://cdn.booru.test/old.jpg"
SCENARIO_POSTS = [
    {"id": 1, "file_url": "a.png", "file_ext": "png", "rating": "s"},
    {"id": 2, "file_url": "b.jpg", "file_ext": "jpg", "rating": "e"},
]


@pytest.fixture
def probe() -> MagicMock:
    mock = MagicMock(spec=IImageProbe)
    mock.probe = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def resolver(
    query_client: QueryClient, durable_cache: SQLiteCacheProvider, probe: MagicMock
) -> ImageResolver:
    return ImageResolver(query_client, durable_cache, probe)


class TestCachedImage:
    @pytest.mark.asyncio
    async def test_valid_cached_url_is_displayed_without_search(
        self,
        resolver: ImageResolver,
        durable_cache: SQLiteCacheProvider,
        probe: MagicMock,
        booru: FakeBooru,
    ) -> None:
        await durable_cache.set("artist_img_foo_bar", CACHED_URL)

        outcome = await resolver.resolve_image("foo_bar")

        assert outcome.status is OutcomeStatus.DISPLAY
        assert outcome.image_url == CACHED_URL
        assert outcome.from_cache is True
        probe.probe.assert_awaited_once_with(CACHED_URL)
        assert booru.search_count() == 0
        assert await durable_cache.get("artist_img_foo_bar") == CACHED_URL

    @pytest.mark.asyncio
    async def test_broken_cached_url_is_evicted_and_refetched_once(
        self,
        resolver: ImageResolver,
        durable_cache: SQLiteCacheProvider,
        probe: MagicMock,
        booru: FakeBooru,
    ) -> None:
        await durable_cache.set("artist_img_foo_bar", CACHED_URL)
        probe.probe.side_effect = ImageValidationError()
        booru.respond("foo_bar", SCENARIO_POSTS)

        outcome = await resolver.resolve_image("foo_bar")

        assert outcome.status is OutcomeStatus.DISPLAY
        assert outcome.image_url == "a.png"
        assert outcome.from_cache is False
        assert booru.search_count("foo_bar") == 1
        assert await durable_cache.get("artist_img_foo_bar") == "a.png"

    @pytest.mark.asyncio
    async def test_refetch_after_eviction_skips_warm_session_entry(
        self,
        resolver: ImageResolver,
        query_client: QueryClient,
        durable_cache: SQLiteCacheProvider,
        probe: MagicMock,
        booru: FakeBooru,
    ) -> None:
        booru.respond("foo_bar", [{"id": 9, "file_url": CACHED_URL, "file_ext": "jpg"}])
        await query_client.search("foo_bar", "api_foo_bar")
        await durable_cache.set("artist_img_foo_bar", CACHED_URL)
        probe.probe.side_effect = ImageValidationError()
        booru.respond("foo_bar", SCENARIO_POSTS)

        outcome = await resolver.resolve_image("foo_bar")

        assert outcome.status is OutcomeStatus.DISPLAY
        assert outcome.image_url == "a.png"
        assert booru.search_count("foo_bar") == 2
        assert await durable_cache.get("artist_img_foo_bar") == "a.png"

    @pytest.mark.asyncio
    async def test_broken_cached_url_then_no_posts_leaves_cache_empty(
        self,
        resolver: ImageResolver,
        durable_cache: SQLiteCacheProvider,
        probe: MagicMock,
        booru: FakeBooru,
    ) -> None:
        await durable_cache.set("artist_img_foo_bar", CACHED_URL)
        probe.probe.side_effect = ImageValidationError()
        booru.respond("foo_bar", [])

        outcome = await resolver.resolve_image("foo_bar")

        assert outcome.status is OutcomeStatus.NO_ENTRIES
        assert outcome.message == DEFAULT_NO_ENTRIES_MESSAGE
        assert await durable_cache.get("artist_img_foo_bar") is None

    @pytest.mark.asyncio
    async def test_non_string_cache_entry_is_evicted(
        self,
        resolver: ImageResolver,
        durable_cache: SQLiteCacheProvider,
        probe: MagicMock,
        booru: FakeBooru,
    ) -> None:
        await durable_cache.set("artist_img_foo_bar", {"url": CACHED_URL})
        booru.respond("foo_bar", SCENARIO_POSTS)

        outcome = await resolver.resolve_image("foo_bar")

        probe.probe.assert_not_awaited()
        assert outcome.image_url == "a.png"
        assert await durable_cache.get("artist_img_foo_bar") == "a.png"


class TestFetchAndSelect:
    @pytest.mark.asyncio
    async def test_selects_safe_post_and_persists_it(
        self, resolver: ImageResolver, durable_cache: SQLiteCacheProvider, booru: FakeBooru
    ) -> None:
        booru.respond("foo_bar", SCENARIO_POSTS)

        outcome = await resolver.resolve_image(Artist(artist_name="foo_bar"))

        assert outcome.is_display
        assert outcome.image_url == "a.png"
        assert await durable_cache.get("artist_img_foo_bar") == "a.png"

    @pytest.mark.asyncio
    async def test_empty_result_leaves_durable_cache_untouched(
        self, query_client: QueryClient, probe: MagicMock, booru: FakeBooru
    ) -> None:
        durable = MagicMock(spec=ICacheProvider)
        durable.get = AsyncMock(return_value=None)
        durable.set = AsyncMock(return_value=True)
        durable.remove = AsyncMock()
        resolver = ImageResolver(query_client, durable, probe)
        booru.respond("nobody", [])

        outcome = await resolver.resolve_image("nobody")

        assert outcome.status is OutcomeStatus.NO_ENTRIES
        assert outcome.message == DEFAULT_NO_ENTRIES_MESSAGE
        durable.set.assert_not_awaited()
        durable.remove.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_chosen_post_without_url_is_no_entries(
        self, resolver: ImageResolver, durable_cache: SQLiteCacheProvider, booru: FakeBooru
    ) -> None:
        booru.respond("foo_bar", [{"id": 1, "file_url": None, "file_ext": "jpg", "rating": "s"}])

        outcome = await resolver.resolve_image("foo_bar")

        assert outcome.status is OutcomeStatus.NO_ENTRIES
        assert outcome.message == DEFAULT_NO_ENTRIES_MESSAGE
        assert await durable_cache.get("artist_img_foo_bar") is None

    @pytest.mark.asyncio
    async def test_fallback_to_first_post(self, resolver: ImageResolver, booru: FakeBooru) -> None:
        booru.respond(
            "foo_bar",
            [
                {"id": 1, "file_url": "x.gif", "file_ext": "gif", "rating": "e"},
                {"id": 2, "file_url": "y.mp4", "file_ext": "mp4", "rating": "s"},
            ],
        )

        outcome = await resolver.resolve_image("foo_bar")

        assert outcome.image_url == "x.gif"

    @pytest.mark.asyncio
    async def test_transport_error_is_failure_message(
        self, resolver: ImageResolver, durable_cache: SQLiteCacheProvider, booru: FakeBooru
    ) -> None:
        booru.respond("foo_bar", httpx.Response(502))

        outcome = await resolver.resolve_image("foo_bar")

        assert outcome.status is OutcomeStatus.NO_ENTRIES
        assert outcome.message == FAILED_TO_LOAD_MESSAGE
        assert await durable_cache.get("artist_img_foo_bar") is None

    @pytest.mark.asyncio
    async def test_malformed_response_is_failure_message(
        self, resolver: ImageResolver, booru: FakeBooru
    ) -> None:
        booru.respond("foo_bar", {"error": "nope"})

        outcome = await resolver.resolve_image("foo_bar")

        assert outcome.message == FAILED_TO_LOAD_MESSAGE

    @pytest.mark.asyncio
    async def test_tripped_gate_is_failure_message(
        self, resolver: ImageResolver, gate: AvailabilityGate, booru: FakeBooru
    ) -> None:
        gate.set_unavailable(True)

        outcome = await resolver.resolve_image("foo_bar")

        assert outcome.message == FAILED_TO_LOAD_MESSAGE
        assert booru.search_count() == 0

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_valid_entry(
        self,
        query_client: QueryClient,
        durable_cache: SQLiteCacheProvider,
        probe: MagicMock,
        booru: FakeBooru,
    ) -> None:
        await durable_cache.set("artist_img_foo_bar", CACHED_URL)
        booru.respond("foo_bar", httpx.Response(500))
        resolver = ImageResolver(query_client, durable_cache, probe)

        outcome = await resolver.resolve_image("foo_bar", force_reload=True)

        assert outcome.message == FAILED_TO_LOAD_MESSAGE
        assert await durable_cache.get("artist_img_foo_bar") == CACHED_URL


class TestForceReload:
    @pytest.mark.asyncio
    async def test_never_reads_durable_cache_and_overwrites(
        self, query_client: QueryClient, probe: MagicMock, booru: FakeBooru
    ) -> None:
        durable = MagicMock(spec=ICacheProvider)
        durable.get = AsyncMock(return_value=CACHED_URL)
        durable.set = AsyncMock(return_value=True)
        durable.remove = AsyncMock()
        resolver = ImageResolver(query_client, durable, probe)
        booru.respond("foo_bar", SCENARIO_POSTS)

        outcome = await resolver.resolve_image("foo_bar", force_reload=True)

        durable.get.assert_not_awaited()
        probe.probe.assert_not_awaited()
        durable.set.assert_awaited_once_with("artist_img_foo_bar", "a.png")
        assert outcome.image_url == "a.png"
        assert booru.search_count("foo_bar") == 1

    @pytest.mark.asyncio
    async def test_bypasses_session_cache(
        self,
        resolver: ImageResolver,
        session_cache: MemoryCacheProvider,
        booru: FakeBooru,
    ) -> None:
        await session_cache.set(
            "api_foo_bar", [{"id": 9, "file_url": "stale.jpg", "file_ext": "jpg"}]
        )
        booru.respond("foo_bar", SCENARIO_POSTS)

        outcome = await resolver.resolve_image("foo_bar", force_reload=True)

        assert outcome.image_url == "a.png"
        assert booru.search_count("foo_bar") == 1


class TestSameArtistSerialisation:
    @pytest.mark.asyncio
    async def test_forced_reload_waits_and_wins(self, probe: MagicMock) -> None:
        release = asyncio.Event()

        async def fake_search(tag_query: str, cache_key: str, refresh: bool = False) -> list[Post]:
            if not refresh:
                await release.wait()
                return [Post(id=1, file_url="ambient.jpg", file_ext="jpg", rating="s")]
            return [Post(id=2, file_url="forced.jpg", file_ext="jpg", rating="s")]

        query_client = MagicMock(spec=QueryClient)
        query_client.search = AsyncMock(side_effect=fake_search)
        durable = MemoryCacheProvider()
        resolver = ImageResolver(query_client, durable, probe)

        ambient = asyncio.create_task(resolver.resolve_image("foo_bar"))
        while query_client.search.await_count == 0:
            await asyncio.sleep(0)
        forced = asyncio.create_task(resolver.resolve_image("foo_bar", force_reload=True))
        for _ in range(5):
            await asyncio.sleep(0)

        assert query_client.search.await_count == 1

        release.set()
        ambient_outcome, forced_outcome = await asyncio.gather(ambient, forced)

        assert ambient_outcome.image_url == "ambient.jpg"
        assert forced_outcome.image_url == "forced.jpg"
        assert await durable.get("artist_img_foo_bar") == "forced.jpg"

    @pytest.mark.asyncio
    async def test_different_artists_do_not_block_each_other(self, probe: MagicMock) -> None:
        release = asyncio.Event()

        async def fake_search(tag_query: str, cache_key: str, refresh: bool = False) -> list[Post]:
            if tag_query == "slow_artist":
                await release.wait()
            return [Post(id=1, file_url=f"{tag_query}.jpg", file_ext="jpg", rating="s")]

        query_client = MagicMock(spec=QueryClient)
        query_client.search = AsyncMock(side_effect=fake_search)
        resolver = ImageResolver(query_client, MemoryCacheProvider(), probe)

        slow = asyncio.create_task(resolver.resolve_image("slow_artist"))
        fast_outcome = await resolver.resolve_image("fast_artist")

        assert fast_outcome.image_url == "fast_artist.jpg"
        assert not slow.done()

        release.set()
        assert (await slow).image_url == "slow_artist.jpg"
