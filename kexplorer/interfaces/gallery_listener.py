"""Abstract base class for view-layer listeners.

The core never renders anything.  It delivers its outputs through this
typed notification contract, which a view (the CLI printer, a GUI, a test
recorder) implements and registers with
:class:`kexplorer.pipeline.notifier.GalleryNotifier`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from kexplorer.models.gallery import CountsResult, GalleryPage, ImageOutcome


class IGalleryListener(ABC):
    """Contract for consumers of gallery results."""

    @abstractmethod
    async def on_page(self, page: GalleryPage) -> None:
        """Called when a page of artists is about to be resolved."""

    @abstractmethod
    async def on_image(self, artist_name: str, outcome: ImageOutcome) -> None:
        """Called once per artist with the terminal image outcome."""

    @abstractmethod
    async def on_counts(self, artist_name: str, counts: CountsResult) -> None:
        """Called once per artist with its post counts."""

    @abstractmethod
    async def on_load_failed(self, message: str) -> None:
        """Called at most once when the static data cannot be loaded."""
