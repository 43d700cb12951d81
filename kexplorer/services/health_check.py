"""Health check that owns the recovery side of the availability gate.

The search layer only ever trips the gate.  This collaborator issues one
minimal request that bypasses the gate and sets the flag from
the answer, so a host can retry the API after an outage without
restarting.
"""

from __future__ import annotations

import httpx

from kexplorer.services.availability_gate import AvailabilityGate
from kexplorer.utils.logging import get_logger

_HEALTH_PATH = "/posts.json"


class HealthChecker:
    """Probes the search API and updates the availability gate."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        gate: AvailabilityGate,
        base_url: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._http = http_client
        self._gate = gate
        self._url = f"{base_url.rstrip('/')}{_HEALTH_PATH}"
        self._timeout = timeout_seconds
        self._logger = get_logger(__name__)

    async def check(self) -> bool:
        """Return ``True`` and clear the gate if the API answers successfully."""
        try:
            response = await self._http.get(
                self._url, params={"limit": 1}, timeout=self._timeout
            )
            healthy = response.is_success
            detail = f"HTTP {response.status_code}"
        except httpx.HTTPError as exc:
            healthy = False
            detail = str(exc)

        self._gate.set_unavailable(not healthy)
        self._logger.info("health_check_complete", healthy=healthy, detail=detail)
        return healthy
