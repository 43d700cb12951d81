"""Abstract base class for image liveness probes.

A cached image URL is a hotlink to third-party content that can disappear
or be rate-limited independently of our own caching, so a durable cache hit
is validated before it is trusted.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IImageProbe(ABC):
    """Contract for checking that an image URL still loads."""

    @abstractmethod
    async def probe(self, url: str) -> None:
        """Attempt to load *url* as an image.

        Raises
        ------
        kexplorer.utils.errors.ImageValidationError
            If the URL does not load or does not serve an image.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs and errors."""
