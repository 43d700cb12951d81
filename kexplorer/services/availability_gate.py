"""Availability gate for the single external search dependency.

A coarse circuit breaker: one boolean, not per-endpoint,
because there is exactly one external API.  Once the API is known to be
unreachable the gate is tripped and every search fails fast with
``ServiceUnavailableError`` instead of stacking retries on a dead host.

The core only ever *trips* the gate.  Clearing it is the job of an
external collaborator (``HealthChecker`` or ``ExplorerContext.reset``).
The gate is owned by the context object rather than living in a module
global, so each test (and each context) starts from a clean state.
"""

from __future__ import annotations

from kexplorer.utils.errors import ServiceUnavailableError
from kexplorer.utils.logging import get_logger


class AvailabilityGate:
    """Process-wide availability flag for the search API."""

    def __init__(self, provider_name: str = "danbooru") -> None:
        self._unavailable = False
        self._provider_name = provider_name
        self._logger = get_logger(__name__)

    def is_unavailable(self) -> bool:
        return self._unavailable

    def set_unavailable(self, unavailable: bool) -> None:
        if unavailable == self._unavailable:
            return
        self._unavailable = unavailable
        if unavailable:
            self._logger.warning("availability_gate_tripped", provider=self._provider_name)
        else:
            self._logger.info("availability_gate_cleared", provider=self._provider_name)

    def ensure_available(self) -> None:
        """Raise :class:`ServiceUnavailableError` if the gate is tripped."""
        if self._unavailable:
            raise ServiceUnavailableError(
                message=f"{self._provider_name} is unavailable",
                provider_name=self._provider_name,
            )
