"""Cache providers.

Two tiers share the ICacheProvider contract:

- MemoryCacheProvider - session tier.  Raw search results keyed by
  ``api_{tag query}``, so the same artist is searched at most once per
  session (the image lookup and the unfiltered count share one entry).
- SQLiteCacheProvider - durable tier.  Best-image URLs keyed by
  ``artist_img_{artist name}``, validated on every read.
"""

from kexplorer.providers.cache.memory_cache import MemoryCacheProvider
from kexplorer.providers.cache.sqlite_cache import SQLiteCacheProvider

__all__ = ["MemoryCacheProvider", "SQLiteCacheProvider"]
