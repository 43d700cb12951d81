"""SQLite-backed durable cache provider.

Persists resolved best-image URLs across runs in a small key/value table at
``data/image_cache.db``.  Uses ``aiosqlite`` for async I/O.  Entries have no
TTL: they stay until an image fails validation (or a forced reload
overwrites them), which is the only invalidation protocol.

Every storage error is logged and swallowed.  A missing, locked or
read-only database turns reads into misses and writes into ``False``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from kexplorer.interfaces.cache_provider import ICacheProvider
from kexplorer.providers.cache.codec import decode_value, encode_value, is_missing
from kexplorer.utils.errors import CacheWriteError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/image_cache.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS kv_cache (
    cache_key   TEXT PRIMARY KEY,
    value_json  TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_UPSERT_SQL = """\
INSERT INTO kv_cache (cache_key, value_json)
VALUES (?, ?)
ON CONFLICT(cache_key)
DO UPDATE SET value_json = excluded.value_json,
              updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_SELECT_SQL = "SELECT value_json FROM kv_cache WHERE cache_key = ?;"

_DELETE_SQL = "DELETE FROM kv_cache WHERE cache_key = ?;"

_CLEAR_SQL = "DELETE FROM kv_cache;"


class SQLiteCacheProvider(ICacheProvider):
    """Durable key/value cache persisted to SQLite."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the cache table if it doesn't exist.

        Failures are logged; the provider then behaves as an always-empty
        cache that rejects writes.
        """
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                await db.commit()
        except (aiosqlite.Error, OSError) as exc:
            logger.warning("durable_cache_unavailable", path=str(self._db_path), error=str(exc))
            return
        logger.info("durable_cache_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(_SELECT_SQL, (key,))
                row = await cursor.fetchone()
        except (aiosqlite.Error, OSError) as exc:
            logger.warning("cache_read_failed", tier="durable", key=key, error=str(exc))
            return None

        value = decode_value(row[0] if row else None)
        if is_missing(value):
            logger.debug("cache_miss", tier="durable", key=key)
            return None
        logger.debug("cache_hit", tier="durable", key=key)
        return value

    async def set(self, key: str, value: Any) -> bool:
        try:
            payload = encode_value(value, self.get_provider_name())
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_UPSERT_SQL, (key, payload))
                await db.commit()
        except (CacheWriteError, aiosqlite.Error, OSError) as exc:
            logger.warning("cache_write_failed", tier="durable", key=key, error=str(exc))
            return False
        logger.debug("cache_set", tier="durable", key=key)
        return True

    async def remove(self, key: str) -> None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_DELETE_SQL, (key,))
                await db.commit()
        except (aiosqlite.Error, OSError) as exc:
            logger.warning("cache_delete_failed", tier="durable", key=key, error=str(exc))
            return
        logger.debug("cache_delete", tier="durable", key=key)

    async def clear(self) -> None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CLEAR_SQL)
                await db.commit()
        except (aiosqlite.Error, OSError) as exc:
            logger.warning("cache_clear_failed", tier="durable", error=str(exc))
            return
        logger.info("cache_cleared", tier="durable")

    def get_provider_name(self) -> str:
        return "sqlite_cache"
