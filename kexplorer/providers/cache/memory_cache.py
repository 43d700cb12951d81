"""In-memory session cache provider using cachetools.TTLCache.

Holds raw search results for the lifetime of one ``ExplorerContext``, which
plays the role of a browsing session: nothing here survives a restart, and
``ExplorerContext.reset()`` clears it.  The TTL is only a ceiling for very
long-running processes; within a session, entries are served
stale to avoid duplicate calls for the same artist.
"""

from __future__ import annotations

from typing import Any

import structlog
from cachetools import TTLCache

from kexplorer.interfaces.cache_provider import ICacheProvider
from kexplorer.providers.cache.codec import decode_value, encode_value, is_missing
from kexplorer.utils.errors import CacheWriteError

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """Session-scoped TTL cache backed by ``cachetools.TTLCache``.

    Values are kept as JSON text, so a value read back is always a fresh
    deep copy of what was stored and callers cannot mutate cached state.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Time-to-live in seconds for cache entries.
    enabled:
        When ``False`` every ``set`` fails softly, simulating a disabled
        storage medium.
    """

    def __init__(self, max_size: int = 2048, ttl: int = 86400, enabled: bool = True) -> None:
        self._enabled = enabled
        self._cache: TTLCache[str, str] = TTLCache(maxsize=max_size, ttl=ttl)

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Return the cached value for *key*, or ``None`` if missing, expired or corrupt."""
        value = decode_value(self._cache.get(key))
        if is_missing(value):
            logger.debug("cache_miss", tier="session", key=key)
            return None
        logger.debug("cache_hit", tier="session", key=key)
        return value

    async def set(self, key: str, value: Any) -> bool:
        if not self._enabled:
            logger.warning("cache_write_failed", tier="session", key=key, error="cache disabled")
            return False
        try:
            self._cache[key] = encode_value(value, self.get_provider_name())
        except CacheWriteError as exc:
            logger.warning("cache_write_failed", tier="session", key=key, error=str(exc))
            return False
        logger.debug("cache_set", tier="session", key=key)
        return True

    async def remove(self, key: str) -> None:
        self._cache.pop(key, None)
        logger.debug("cache_delete", tier="session", key=key)

    async def clear(self) -> None:
        self._cache.clear()
        logger.debug("cache_cleared", tier="session")

    def get_provider_name(self) -> str:
        return "memory_cache"
