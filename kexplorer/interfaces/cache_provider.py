"""Abstract base class for key-value cache providers.

Defines the contract shared by both cache tiers:

- the **session** tier (raw search results, lives as long as one
  ``ExplorerContext``), and
- the **durable** tier (resolved best-image URLs, survives restarts until
  explicitly invalidated).

Caching is a performance optimisation, never a correctness requirement, so
the contract is failure-soft: implementations never raise from these
methods.  Every caller keeps a correct cold-cache path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async so disk- or network-backed stores do not block
    the event loop.  Values must be JSON-serialisable.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Retrieve the value stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.

        Returns
        -------
        Any or None
            The decoded value if present; ``None`` when absent, expired, or
            when the stored payload is corrupt.
        """

    @abstractmethod
    async def set(self, key: str, value: Any) -> bool:
        """Store *value* under *key*.

        Parameters
        ----------
        key:
            The cache key.
        value:
            A JSON-serialisable value.

        Returns
        -------
        bool
            ``True`` if the value was stored.  ``False`` if the medium is
            full, disabled, failing, or the value cannot be encoded; the
            failure is logged, not raised.
        """

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove the entry stored under *key* (no-op if absent)."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry held by this tier."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs and errors."""
