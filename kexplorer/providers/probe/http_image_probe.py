"""HTTP image probe implementing IImageProbe.

Checks that a cached image URL still serves an image: the request must
succeed and the response must carry an ``image/*`` content type.  Only the
headers are read; the body is never downloaded.  The ``httpx.AsyncClient``
is injected for testability.
"""

from __future__ import annotations

import httpx

from kexplorer.interfaces.image_probe import IImageProbe
from kexplorer.utils.errors import ImageValidationError
from kexplorer.utils.logging import get_logger

_USER_AGENT = "kexplorer/0.1.0"


class HttpImageProbe(IImageProbe):
    """Image liveness probe backed by a streamed ``GET``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        timeout_seconds: float = 10.0,
        user_agent: str = _USER_AGENT,
    ) -> None:
        self._http = http_client
        self._timeout = timeout_seconds
        self._user_agent = user_agent
        self._logger = get_logger(__name__)

    async def probe(self, url: str) -> None:
        headers = {"User-Agent": self._user_agent, "Accept": "image/*"}
        try:
            async with self._http.stream(
                "GET",
                url,
                headers=headers,
                follow_redirects=True,
                timeout=self._timeout,
            ) as response:
                status = response.status_code
                content_type = response.headers.get("content-type", "")
        except httpx.HTTPError as exc:
            self._logger.debug("image_probe_failed", url=url, error=str(exc))
            raise ImageValidationError(
                message=f"Image request failed for {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not 200 <= status < 300:
            raise ImageValidationError(
                message=f"Image request for {url} returned HTTP {status}",
                provider_name=self.get_provider_name(),
            )
        if not content_type.lower().startswith("image/"):
            raise ImageValidationError(
                message=f"{url} is not an image (content-type {content_type or 'missing'!r})",
                provider_name=self.get_provider_name(),
            )

    def get_provider_name(self) -> str:
        return "image_probe"
