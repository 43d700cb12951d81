"""kexplorer composition root.

Wires together every provider and service via constructor injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and builds one
:class:`ExplorerContext` per session.  The context owns the shared
``httpx.AsyncClient``, the session cache and the availability gate, so
"per session" state lives exactly as long as the context does.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from kexplorer.config.loader import load_config
from kexplorer.config.settings import Settings
from kexplorer.pipeline.gallery_pipeline import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_ITEMS_PER_PAGE,
    GalleryPipeline,
)
from kexplorer.pipeline.notifier import GalleryNotifier
from kexplorer.providers.cache.memory_cache import MemoryCacheProvider
from kexplorer.providers.cache.sqlite_cache import SQLiteCacheProvider
from kexplorer.providers.data.json_data_provider import JsonDataProvider
from kexplorer.providers.probe.http_image_probe import HttpImageProbe
from kexplorer.services.availability_gate import AvailabilityGate
from kexplorer.services.count_aggregator import CountAggregator
from kexplorer.services.health_check import HealthChecker
from kexplorer.services.image_resolver import ImageResolver
from kexplorer.services.query_client import DEFAULT_ORDER_TERM, DEFAULT_RESULT_LIMIT, QueryClient
from kexplorer.services.selection import (
    DEFAULT_EXCLUDED_RATINGS,
    DEFAULT_SAFE_FORMATS,
    build_predicates,
)
from kexplorer.utils.concurrency import DEFAULT_BATCH_DELAY_MS
from kexplorer.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


@dataclass
class ExplorerContext:
    """Every live component for one browsing session."""

    config: dict[str, Any]
    http_client: httpx.AsyncClient
    gate: AvailabilityGate
    session_cache: MemoryCacheProvider
    durable_cache: SQLiteCacheProvider
    query_client: QueryClient
    count_aggregator: CountAggregator
    image_resolver: ImageResolver
    data_provider: JsonDataProvider
    health_checker: HealthChecker
    notifier: GalleryNotifier
    pipeline: GalleryPipeline

    async def initialize(self) -> None:
        await self.durable_cache.initialize()

    async def reset(self) -> None:
        """Start a fresh session: clear the gate, the session cache and the
        copied-artists list.

        The durable image cache survives a reset.
        """
        self.gate.set_unavailable(False)
        await self.session_cache.clear()
        self.pipeline.copied.clear()
        _logger.info("session_reset")

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> ExplorerContext:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    return config.get(name) or {}


def build_context(
    settings: Settings | None = None,
    config: dict[str, Any] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ExplorerContext:
    """Construct every provider and service for one session.

    Parameters
    ----------
    settings:
        Environment settings; read from the environment when omitted.
    config:
        Resolved configuration dict; loaded from ``config/config.yaml``
        merged with *settings* when omitted.
    http_client:
        Shared HTTP client.  A new one is created when omitted; the
        context closes it in :meth:`ExplorerContext.aclose` either way.
    """
    settings = settings or Settings()
    config = config if config is not None else load_config(settings=settings)

    api_cfg = _section(config, "api")
    query_cfg = _section(config, "query")
    batch_cfg = _section(config, "batch")
    gallery_cfg = _section(config, "gallery")
    selection_cfg = _section(config, "selection")
    cache_cfg = _section(config, "cache")
    storage_cfg = _section(config, "storage")

    base_url = api_cfg.get("base_url", settings.booru_base_url)
    user_agent = api_cfg.get("user_agent", settings.user_agent)

    # -- Shared resources --
    http_client = http_client or httpx.AsyncClient(
        timeout=api_cfg.get("timeout_seconds", settings.http_timeout_seconds)
    )
    gate = AvailabilityGate()

    # -- Cache tiers --
    session_cache = MemoryCacheProvider(
        max_size=cache_cfg.get("session_max_size", 2048),
        ttl=cache_cfg.get("session_ttl_seconds", 86400),
    )
    durable_cache = SQLiteCacheProvider(
        db_path=storage_cfg.get("durable_cache_db_path", settings.durable_cache_db_path)
    )

    # -- Search and derived services --
    query_client = QueryClient(
        http_client=http_client,
        gate=gate,
        session_cache=session_cache,
        base_url=base_url,
        result_limit=query_cfg.get("result_limit", DEFAULT_RESULT_LIMIT),
        order_term=query_cfg.get("order_term", DEFAULT_ORDER_TERM),
        user_agent=user_agent,
    )
    count_aggregator = CountAggregator(query_client=query_client)
    image_probe = HttpImageProbe(
        http_client=http_client,
        timeout_seconds=api_cfg.get("probe_timeout_seconds", settings.probe_timeout_seconds),
        user_agent=user_agent,
    )
    image_resolver = ImageResolver(
        query_client=query_client,
        durable_cache=durable_cache,
        image_probe=image_probe,
        predicates=build_predicates(
            selection_cfg.get("safe_formats", DEFAULT_SAFE_FORMATS),
            selection_cfg.get("excluded_ratings", DEFAULT_EXCLUDED_RATINGS),
        ),
    )
    health_checker = HealthChecker(
        http_client=http_client,
        gate=gate,
        base_url=base_url,
        timeout_seconds=api_cfg.get("probe_timeout_seconds", settings.probe_timeout_seconds),
    )

    # -- Gallery --
    data_provider = JsonDataProvider(
        source=storage_cfg.get("data_source", settings.data_source),
        http_client=http_client,
    )
    notifier = GalleryNotifier()
    pipeline = GalleryPipeline(
        data_provider=data_provider,
        image_resolver=image_resolver,
        count_aggregator=count_aggregator,
        notifier=notifier,
        batch_size=batch_cfg.get("size", DEFAULT_BATCH_SIZE),
        batch_delay_ms=batch_cfg.get("delay_ms", DEFAULT_BATCH_DELAY_MS),
        items_per_page=gallery_cfg.get("items_per_page", DEFAULT_ITEMS_PER_PAGE),
    )

    _logger.debug("context_built", base_url=base_url, remote_data=data_provider.is_remote)

    return ExplorerContext(
        config=config,
        http_client=http_client,
        gate=gate,
        session_cache=session_cache,
        durable_cache=durable_cache,
        query_client=query_client,
        count_aggregator=count_aggregator,
        image_resolver=image_resolver,
        data_provider=data_provider,
        health_checker=health_checker,
        notifier=notifier,
        pipeline=pipeline,
    )
