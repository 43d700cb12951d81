"""Utility modules for kexplorer.

Available utility modules (all re-exported here for convenience):

- **errors** -- Domain-specific exception hierarchy rooted at KExplorerError;
  the search layer raises one subclass per failure mode so per-artist
  callers can degrade without broad ``except Exception`` blocks.
- **concurrency** -- chunked fan-out with inter-chunk delays that keeps bulk
  search calls under the API's rate limit.
- **logging** -- structlog setup with a dual-renderer pattern (coloured
  console output in development, structured JSON in production) that also
  holds HTTP and SQLite library loggers at WARNING.
- **keys** -- cache key construction shared by the two cache tiers.
"""

# -- Domain exception hierarchy --------------------------------------------
from kexplorer.utils.errors import (
    QUERY_ERRORS,
    CacheWriteError,
    ConfigurationError,
    DataLoadError,
    ImageValidationError,
    KExplorerError,
    MalformedResponseError,
    ServiceUnavailableError,
    TransportError,
)

# -- Batch scheduling ------------------------------------------------------
from kexplorer.utils.concurrency import DEFAULT_BATCH_DELAY_MS, run_batched

# -- Cache keys ------------------------------------------------------------
from kexplorer.utils.keys import generate_cache_key

# -- Structured logging setup ----------------------------------------------
from kexplorer.utils.logging import configure_logging, get_logger

__all__ = [
    "CacheWriteError",
    "ConfigurationError",
    "DEFAULT_BATCH_DELAY_MS",
    "DataLoadError",
    "ImageValidationError",
    "KExplorerError",
    "MalformedResponseError",
    "QUERY_ERRORS",
    "ServiceUnavailableError",
    "TransportError",
    "configure_logging",
    "generate_cache_key",
    "get_logger",
    "run_batched",
]
