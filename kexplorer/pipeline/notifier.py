"""Fan-out of gallery results to registered view-layer listeners.

# ─── HOW NOTIFICATION WORKS ───────────────────────────────────────────
#
# This implements the Observer pattern:
#
#   GalleryPipeline ──notify_*()──→ GalleryNotifier ──on_*()──→ CLI printer
#                                                    ──→ (any other listener)
#
#   - Listeners implement IGalleryListener (typed contract, not ad hoc
#     callables).
#   - Registering the same listener twice is ignored; unregistering an
#     unknown listener is a no-op.
#   - A listener that raises is logged and skipped, so one broken view
#     cannot block the others or abort a batch of resolutions.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog

from kexplorer.interfaces.gallery_listener import IGalleryListener
from kexplorer.models.gallery import CountsResult, GalleryPage, ImageOutcome
from kexplorer.utils.logging import get_logger


class GalleryNotifier:
    """Delivers core outputs to every registered :class:`IGalleryListener`."""

    def __init__(self) -> None:
        self._listeners: list[IGalleryListener] = []
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_listener(self, listener: IGalleryListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)
            self._logger.debug("listener_registered", total_listeners=len(self._listeners))

    def unregister_listener(self, listener: IGalleryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
            self._logger.debug("listener_unregistered", remaining_listeners=len(self._listeners))

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def notify_page(self, page: GalleryPage) -> None:
        await self._dispatch("on_page", lambda listener: listener.on_page(page))

    async def notify_image(self, artist_name: str, outcome: ImageOutcome) -> None:
        await self._dispatch("on_image", lambda listener: listener.on_image(artist_name, outcome))

    async def notify_counts(self, artist_name: str, counts: CountsResult) -> None:
        await self._dispatch("on_counts", lambda listener: listener.on_counts(artist_name, counts))

    async def notify_load_failed(self, message: str) -> None:
        await self._dispatch("on_load_failed", lambda listener: listener.on_load_failed(message))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _dispatch(
        self,
        event: str,
        invoke: Callable[[IGalleryListener], Awaitable[None]],
    ) -> None:
        """Invoke *event* on every listener, isolating listener failures."""
        for listener in list(self._listeners):
            try:
                await invoke(listener)
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    event=event,
                    listener=type(listener).__name__,
                    error=str(exc),
                )
