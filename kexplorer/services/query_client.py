"""Cache-aware client for the booru ``posts.json`` search endpoint.

# ─── HOW A SEARCH IS SERVED ───────────────────────────────────────────
#
#   search(tag_query, cache_key)
#     1. gate tripped?        → ServiceUnavailableError (no cache, no network)
#     2. session cache hit?   → cached posts, no network, no freshness check
#     3. GET posts.json       → non-2xx: TransportError(status_code)
#     4. body not a list?     → MalformedResponseError (never cached)
#     5. cache raw list, return posts
#
# An empty list is a legitimate answer ("this artist has no posts") and is
# cached like any other; it is never confused with a failed fetch.
#
# Staleness is accepted for the lifetime of the session in exchange for
# never searching the same artist twice per visit.  ``refresh=True`` skips
# the read in step 2 (forced reloads) but still writes the new result.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from kexplorer.interfaces.cache_provider import ICacheProvider
from kexplorer.models.entities import Post
from kexplorer.services.availability_gate import AvailabilityGate
from kexplorer.utils.errors import MalformedResponseError, TransportError
from kexplorer.utils.logging import get_logger

_SEARCH_PATH = "/posts.json"
_DEFAULT_BASE_URL = "https://danbooru.donmai.us"
_USER_AGENT = "kexplorer/0.1.0"
DEFAULT_RESULT_LIMIT = 1000
DEFAULT_ORDER_TERM = "order:score"

# Statuses that mean the whole service is down rather than this one query.
_UNAVAILABLE_STATUSES = frozenset({503})


class QueryClient:
    """Issues tag searches against the post API through the session cache.

    The ``httpx.AsyncClient`` is injected for testability; the gate and the
    session cache come from the owning ``ExplorerContext``.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        gate: AvailabilityGate,
        session_cache: ICacheProvider,
        base_url: str = _DEFAULT_BASE_URL,
        result_limit: int = DEFAULT_RESULT_LIMIT,
        order_term: str = DEFAULT_ORDER_TERM,
        user_agent: str = _USER_AGENT,
    ) -> None:
        self._http = http_client
        self._gate = gate
        self._session_cache = session_cache
        self._search_url = f"{base_url.rstrip('/')}{_SEARCH_PATH}"
        self._result_limit = result_limit
        self._order_term = order_term
        self._user_agent = user_agent
        self._logger = get_logger(__name__)

    @property
    def result_limit(self) -> int:
        return self._result_limit

    def build_params(self, tag_query: str) -> dict[str, Any]:
        """Return the query parameters for *tag_query* (order term appended)."""
        tags = f"{tag_query} {self._order_term}".strip()
        return {"tags": tags, "limit": self._result_limit}

    async def search(self, tag_query: str, cache_key: str, refresh: bool = False) -> list[Post]:
        """Return the posts matching *tag_query*, consulting the session cache first.

        Parameters
        ----------
        tag_query:
            Space-separated tag query, e.g. ``"foo_bar"`` or
            ``"foo_bar solo"`` (the API ANDs the terms).
        cache_key:
            Session-cache key for this query.
        refresh:
            Skip the session-cache read and always hit the API.

        Raises
        ------
        ServiceUnavailableError
            The availability gate is tripped; nothing was attempted.
        TransportError
            The API answered with a non-success status or not at all.
        MalformedResponseError
            The API answered 2xx with something other than a list of posts.
        """
        self._gate.ensure_available()

        if not refresh:
            cached = await self._session_cache.get(cache_key)
            if isinstance(cached, list):
                try:
                    posts = self._parse_posts(cached)
                except MalformedResponseError:
                    self._logger.warning("query_cache_entry_invalid", cache_key=cache_key)
                else:
                    self._logger.debug("query_cache_hit", query=tag_query, posts=len(posts))
                    return posts

        data = await self._fetch(tag_query)
        posts = self._parse_posts(data)
        await self._session_cache.set(cache_key, data)

        self._logger.info("query_fetch_complete", query=tag_query, posts=len(posts))
        return posts

    # -- Private helpers -------------------------------------------------------

    async def _fetch(self, tag_query: str) -> list[Any]:
        """Issue the HTTP request and return the decoded JSON list."""
        headers = {"User-Agent": self._user_agent, "Accept": "application/json"}
        try:
            response = await self._http.get(
                self._search_url,
                params=self.build_params(tag_query),
                headers=headers,
            )
        except httpx.TransportError as exc:
            # No response at all: the host is unreachable.
            self._gate.set_unavailable(True)
            self._logger.error("query_transport_failed", query=tag_query, error=str(exc))
            raise TransportError(
                message=f"Search request failed for '{tag_query}': {exc}",
                provider_name="danbooru",
            ) from exc
        except httpx.HTTPError as exc:
            self._logger.error("query_request_failed", query=tag_query, error=str(exc))
            raise TransportError(
                message=f"Search request failed for '{tag_query}': {exc}",
                provider_name="danbooru",
            ) from exc

        if not response.is_success:
            if response.status_code in _UNAVAILABLE_STATUSES:
                self._gate.set_unavailable(True)
            self._logger.warning(
                "query_http_error", query=tag_query, status=response.status_code
            )
            raise TransportError(
                message=f"HTTP error! status: {response.status_code}",
                provider_name="danbooru",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                message=f"Undecodable response body for '{tag_query}'",
                provider_name="danbooru",
            ) from exc

        if not isinstance(data, list):
            self._logger.warning(
                "query_malformed_response", query=tag_query, body_type=type(data).__name__
            )
            raise MalformedResponseError(provider_name="danbooru")
        return data

    @staticmethod
    def _parse_posts(data: list[Any]) -> list[Post]:
        try:
            return [Post.model_validate(item) for item in data]
        except ValidationError as exc:
            raise MalformedResponseError(
                message=f"Response items are not posts: {exc.error_count()} invalid",
                provider_name="danbooru",
            ) from exc
