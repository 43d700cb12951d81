"""Shared pytest fixtures for the kexplorer test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio

from kexplorer.providers.cache.memory_cache import MemoryCacheProvider
from kexplorer.providers.cache.sqlite_cache import SQLiteCacheProvider
from kexplorer.services.availability_gate import AvailabilityGate
from kexplorer.services.query_client import QueryClient

BASE_URL = "https://booru.test"
ORDER_TERM = "order:score"


# ---------------------------------------------------------------------------
# Fake search API
# ---------------------------------------------------------------------------


class FakeBooru:
    """Programmable stand-in for the search API, served via ``httpx.MockTransport``.

    Search answers are keyed by tag query (without the order term).  Each
    answer is either a JSON-able payload, a ready ``httpx.Response``, or an
    ``httpx.TransportError`` subclass to raise.  Unknown queries answer
    ``[]``.  Any non-search URL is treated as an image request and looked up
    in :attr:`images` (404 when absent).
    """

    def __init__(self) -> None:
        self.searches: dict[str, Any] = {}
        self.images: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def respond(self, tag_query: str, answer: Any) -> None:
        self.searches[f"{tag_query} {ORDER_TERM}"] = answer

    def serve_image(self, url: str, content_type: str = "image/jpeg", status: int = 200) -> None:
        self.images[url] = httpx.Response(
            status, headers={"content-type": content_type}, content=b"\xff\xd8"
        )

    @property
    def search_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/posts.json")]

    def search_count(self, tag_query: str | None = None) -> int:
        if tag_query is None:
            return len(self.search_requests)
        wanted = f"{tag_query} {ORDER_TERM}"
        return sum(1 for r in self.search_requests if r.url.params.get("tags") == wanted)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/posts.json"):
            answer = self.searches.get(request.url.params.get("tags", ""), [])
        else:
            answer = self.images.get(str(request.url), httpx.Response(404))

        if isinstance(answer, type) and issubclass(answer, httpx.TransportError):
            raise answer("simulated transport failure", request=request)
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def booru() -> FakeBooru:
    return FakeBooru()


@pytest_asyncio.fixture
async def http_client(booru: FakeBooru):
    """An AsyncClient whose every request is answered by :class:`FakeBooru`."""
    client = booru.client()
    yield client
    await client.aclose()


# ---------------------------------------------------------------------------
# Core collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def gate() -> AvailabilityGate:
    return AvailabilityGate()


@pytest.fixture
def session_cache() -> MemoryCacheProvider:
    return MemoryCacheProvider(max_size=100, ttl=3600)


@pytest_asyncio.fixture
async def durable_cache(tmp_path: Path) -> SQLiteCacheProvider:
    """A SQLite-backed durable cache in a temporary directory."""
    cache = SQLiteCacheProvider(db_path=tmp_path / "image_cache.db")
    await cache.initialize()
    return cache


@pytest.fixture
def query_client(
    http_client: httpx.AsyncClient,
    gate: AvailabilityGate,
    session_cache: MemoryCacheProvider,
) -> QueryClient:
    return QueryClient(
        http_client=http_client,
        gate=gate,
        session_cache=session_cache,
        base_url=BASE_URL,
        order_term=ORDER_TERM,
    )


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


@pytest.fixture
def make_post() -> Callable[..., dict[str, Any]]:
    """Return a factory for raw post dicts as the search API returns them."""

    def _make(
        post_id: int,
        file_ext: str | None = "jpg",
        rating: str | None = "s",
        file_url: str | None = "",
    ) -> dict[str, Any]:
        if file_url == "":
            file_url = f"https://cdn.booru.test/{post_id}.{file_ext or 'bin'}"
        return {
            "id": post_id,
            "file_url": file_url,
            "file_ext": file_ext,
            "rating": rating,
            "tag_string": "irrelevant",
        }

    return _make


@pytest.fixture
def fixtures_data_dir() -> Path:
    """Return the directory holding the sample static data documents."""
    return Path(__file__).parent / "fixtures" / "data"
