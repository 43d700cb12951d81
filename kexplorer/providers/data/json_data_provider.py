"""Static data provider for the artist catalogue and flavour text.

Loads the four JSON documents the gallery needs at startup:

    artists.json       → list of artist records
    tag-tooltips.json  → {tag: tooltip}
    taunts.json        → list of generic flavour lines
    tag-taunts.json    → {tag: flavour text(s)}

The documents are fetched concurrently from either a local directory or an
http(s) base URL.  The load is all-or-nothing: if any one document fails,
the whole load fails with a single :class:`DataLoadError`, which the
gallery reports once.  A successful load is kept for the provider's
lifetime (load-once).
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from kexplorer.models.gallery import AppData
from kexplorer.utils.errors import DataLoadError
from kexplorer.utils.logging import get_logger

ARTISTS_FILE = "artists.json"
TOOLTIPS_FILE = "tag-tooltips.json"
TAUNTS_FILE = "taunts.json"
TAG_TAUNTS_FILE = "tag-taunts.json"


class JsonDataProvider:
    """Loads the static documents from a directory or a base URL.

    Parameters
    ----------
    source:
        Local directory path, or an ``http://`` / ``https://`` base URL.
    http_client:
        Client used when *source* is a URL.  Not needed for local paths.
    """

    def __init__(self, source: str | Path, http_client: httpx.AsyncClient | None = None) -> None:
        self._source = str(source)
        self._http = http_client
        self._data: AppData | None = None
        self._logger = get_logger(__name__)

    @property
    def is_remote(self) -> bool:
        return self._source.startswith(("http://", "https://"))

    async def load(self) -> AppData:
        """Return the static data, loading it on first call.

        Raises
        ------
        DataLoadError
            If any document cannot be fetched, decoded, or validated.
        """
        if self._data is not None:
            return self._data

        try:
            artists, tips, general, specific = await self._fetch_all(
                (ARTISTS_FILE, TOOLTIPS_FILE, TAUNTS_FILE, TAG_TAUNTS_FILE)
            )
            data = AppData(
                artists=artists,
                tag_tooltips=tips,
                taunts=general,
                tag_taunts=specific,
            )
        except (httpx.HTTPError, OSError, ValueError, ValidationError) as exc:
            self._logger.error("static_data_load_failed", source=self._source, error=str(exc))
            raise DataLoadError(
                message=f"Failed to load required data files: {exc}",
                provider_name="static_data",
            ) from exc

        self._data = data
        self._logger.info(
            "static_data_loaded",
            source=self._source,
            artists=len(data.artists),
            tooltips=len(data.tag_tooltips),
        )
        return data

    async def _fetch_all(self, filenames: tuple[str, ...]) -> list[Any]:
        """Fetch every document concurrently; the first failure cancels the rest."""
        tasks = [asyncio.ensure_future(self._fetch_document(name)) for name in filenames]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _fetch_document(self, filename: str) -> Any:
        if self.is_remote:
            if self._http is None:
                raise DataLoadError(
                    message=f"No HTTP client configured to fetch {filename}",
                    provider_name="static_data",
                )
            response = await self._http.get(f"{self._source.rstrip('/')}/{filename}")
            response.raise_for_status()
            return response.json()

        path = Path(self._source) / filename
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return json.loads(text)
