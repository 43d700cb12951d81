"""Unit tests for QueryClient: gating, session caching, and error mapping."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from kexplorer.interfaces.cache_provider import ICacheProvider
from kexplorer.models.entities import Post
from kexplorer.providers.cache.memory_cache import MemoryCacheProvider
from kexplorer.services.availability_gate import AvailabilityGate
from kexplorer.services.query_client import QueryClient
from kexplorer.utils.errors import (
    MalformedResponseError,
    ServiceUnavailableError,
    TransportError,
)
from tests.conftest import BASE_URL, FakeBooru


class TestBuildParams:
    def test_appends_order_term_and_limit(self, query_client: QueryClient) -> None:
        assert query_client.build_params("foo_bar") == {
            "tags": "foo_bar order:score",
            "limit": 1000,
        }

    def test_empty_order_term(self, http_client, gate, session_cache) -> None:
        client = QueryClient(http_client, gate, session_cache, order_term="", result_limit=50)
        assert client.build_params("foo_bar solo") == {"tags": "foo_bar solo", "limit": 50}


class TestSearch:
    @pytest.mark.asyncio
    async def test_fetches_and_parses_posts(
        self, query_client: QueryClient, booru: FakeBooru, make_post
    ) -> None:
        booru.respond("foo_bar", [make_post(1), make_post(2, file_ext="png")])

        posts = await query_client.search("foo_bar", "api_foo_bar")

        assert [p.id for p in posts] == [1, 2]
        assert all(isinstance(p, Post) for p in posts)
        assert posts[1].file_ext == "png"

    @pytest.mark.asyncio
    async def test_request_carries_query_parameters(
        self, query_client: QueryClient, booru: FakeBooru
    ) -> None:
        await query_client.search("foo_bar", "api_foo_bar")

        request = booru.search_requests[0]
        assert str(request.url).startswith(f"{BASE_URL}/posts.json")
        assert request.url.params["tags"] == "foo_bar order:score"
        assert request.url.params["limit"] == "1000"
        assert request.headers["user-agent"] == "kexplorer/0.1.0"

    @pytest.mark.asyncio
    async def test_result_is_cached_for_the_session(
        self, query_client: QueryClient, booru: FakeBooru, make_post
    ) -> None:
        booru.respond("foo_bar", [make_post(1)])

        await query_client.search("foo_bar", "api_foo_bar")
        posts = await query_client.search("foo_bar", "api_foo_bar")

        assert [p.id for p in posts] == [1]
        assert booru.search_count("foo_bar") == 1

    @pytest.mark.asyncio
    async def test_cache_hit_skips_network(
        self,
        query_client: QueryClient,
        session_cache: MemoryCacheProvider,
        booru: FakeBooru,
        make_post,
    ) -> None:
        await session_cache.set("api_foo_bar", [make_post(7)])

        posts = await query_client.search("foo_bar", "api_foo_bar")

        assert [p.id for p in posts] == [7]
        assert booru.search_count() == 0

    @pytest.mark.asyncio
    async def test_empty_list_is_cached_not_an_error(
        self,
        query_client: QueryClient,
        session_cache: MemoryCacheProvider,
        booru: FakeBooru,
    ) -> None:
        booru.respond("nobody", [])

        assert await query_client.search("nobody", "api_nobody") == []
        assert await query_client.search("nobody", "api_nobody") == []
        assert await session_cache.get("api_nobody") == []
        assert booru.search_count("nobody") == 1

    @pytest.mark.asyncio
    async def test_refresh_bypasses_cache_read_but_writes(
        self,
        query_client: QueryClient,
        session_cache: MemoryCacheProvider,
        booru: FakeBooru,
        make_post,
    ) -> None:
        booru.respond("foo_bar", [make_post(1)])
        await query_client.search("foo_bar", "api_foo_bar")

        booru.respond("foo_bar", [make_post(2)])
        posts = await query_client.search("foo_bar", "api_foo_bar", refresh=True)

        assert [p.id for p in posts] == [2]
        assert booru.search_count("foo_bar") == 2
        assert (await session_cache.get("api_foo_bar"))[0]["id"] == 2

    @pytest.mark.asyncio
    async def test_invalid_cached_entry_is_refetched(
        self,
        query_client: QueryClient,
        session_cache: MemoryCacheProvider,
        booru: FakeBooru,
        make_post,
    ) -> None:
        await session_cache.set("api_foo_bar", [{"id": "not-a-number"}])
        booru.respond("foo_bar", [make_post(3)])

        posts = await query_client.search("foo_bar", "api_foo_bar")

        assert [p.id for p in posts] == [3]
        assert booru.search_count("foo_bar") == 1


class TestSearchGate:
    @pytest.mark.asyncio
    async def test_tripped_gate_touches_neither_cache_nor_network(
        self, http_client: httpx.AsyncClient, booru: FakeBooru
    ) -> None:
        gate = AvailabilityGate()
        gate.set_unavailable(True)
        cache = MagicMock(spec=ICacheProvider)
        client = QueryClient(http_client, gate, cache, base_url=BASE_URL)

        with pytest.raises(ServiceUnavailableError):
            await client.search("foo_bar", "api_foo_bar")

        cache.get.assert_not_called()
        cache.set.assert_not_called()
        assert booru.search_count() == 0

    @pytest.mark.asyncio
    async def test_tripped_gate_blocks_even_cached_queries(
        self,
        query_client: QueryClient,
        gate: AvailabilityGate,
        session_cache: MemoryCacheProvider,
        make_post,
    ) -> None:
        await session_cache.set("api_foo_bar", [make_post(1)])
        gate.set_unavailable(True)

        with pytest.raises(ServiceUnavailableError):
            await query_client.search("foo_bar", "api_foo_bar")


class TestSearchErrors:
    @pytest.mark.asyncio
    async def test_non_success_status_raises_transport_error(
        self,
        query_client: QueryClient,
        gate: AvailabilityGate,
        session_cache: MemoryCacheProvider,
        booru: FakeBooru,
    ) -> None:
        booru.respond("foo_bar", httpx.Response(500))

        with pytest.raises(TransportError) as exc_info:
            await query_client.search("foo_bar", "api_foo_bar")

        assert exc_info.value.status_code == 500
        assert "HTTP error! status: 500" in str(exc_info.value)
        assert gate.is_unavailable() is False
        assert await session_cache.get("api_foo_bar") is None

    @pytest.mark.asyncio
    async def test_service_unavailable_status_trips_gate(
        self, query_client: QueryClient, gate: AvailabilityGate, booru: FakeBooru
    ) -> None:
        booru.respond("foo_bar", httpx.Response(503))

        with pytest.raises(TransportError):
            await query_client.search("foo_bar", "api_foo_bar")
        assert gate.is_unavailable() is True

        with pytest.raises(ServiceUnavailableError):
            await query_client.search("other", "api_other")
        assert booru.search_count() == 1

    @pytest.mark.asyncio
    async def test_connection_failure_trips_gate(
        self, query_client: QueryClient, gate: AvailabilityGate, booru: FakeBooru
    ) -> None:
        booru.respond("foo_bar", httpx.ConnectError)

        with pytest.raises(TransportError) as exc_info:
            await query_client.search("foo_bar", "api_foo_bar")

        assert exc_info.value.status_code is None
        assert gate.is_unavailable() is True

    @pytest.mark.asyncio
    async def test_object_body_is_malformed_and_not_cached(
        self,
        query_client: QueryClient,
        session_cache: MemoryCacheProvider,
        booru: FakeBooru,
    ) -> None:
        booru.respond("foo_bar", {"success": False, "message": "timeout"})

        with pytest.raises(MalformedResponseError):
            await query_client.search("foo_bar", "api_foo_bar")
        assert await session_cache.get("api_foo_bar") is None

    @pytest.mark.asyncio
    async def test_undecodable_body_is_malformed(
        self, query_client: QueryClient, booru: FakeBooru
    ) -> None:
        booru.respond("foo_bar", httpx.Response(200, text="<html>maintenance</html>"))

        with pytest.raises(MalformedResponseError):
            await query_client.search("foo_bar", "api_foo_bar")

    @pytest.mark.asyncio
    async def test_list_of_non_posts_is_malformed(
        self,
        query_client: QueryClient,
        session_cache: MemoryCacheProvider,
        booru: FakeBooru,
    ) -> None:
        booru.respond("foo_bar", ["not", "posts"])

        with pytest.raises(MalformedResponseError):
            await query_client.search("foo_bar", "api_foo_bar")
        assert await session_cache.get("api_foo_bar") is None
