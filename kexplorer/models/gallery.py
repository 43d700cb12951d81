"""Result models handed from the core to the view layer.

- :class:`ImageOutcome` - terminal state of one image resolution
  (``DISPLAY`` with a URL, or ``NO_ENTRIES`` with a human-readable reason).
- :class:`CountsResult` - total and tag-filtered post counts for an artist.
- :class:`GalleryPage` - one page of filtered artists.
- :class:`CopiedArtist` - one row of the copied-artists list.
- :class:`AppData` - the static documents loaded once at startup.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from kexplorer.models.entities import Artist

DEFAULT_NO_ENTRIES_MESSAGE = "No valid entries"
FAILED_TO_LOAD_MESSAGE = "Failed to load image"


class OutcomeStatus(str, Enum):
    """Terminal states of an image resolution."""

    DISPLAY = "DISPLAY"
    NO_ENTRIES = "NO_ENTRIES"


class ImageOutcome(BaseModel):
    """What the view layer should show for one artist.

    ``from_cache`` is ``True`` when a previously stored URL was validated and
    reused without a search call.
    """

    model_config = ConfigDict(frozen=True)

    status: OutcomeStatus
    image_url: str | None = None
    message: str | None = None
    from_cache: bool = False

    @classmethod
    def display(cls, image_url: str, from_cache: bool = False) -> ImageOutcome:
        return cls(status=OutcomeStatus.DISPLAY, image_url=image_url, from_cache=from_cache)

    @classmethod
    def no_entries(cls, message: str = DEFAULT_NO_ENTRIES_MESSAGE) -> ImageOutcome:
        return cls(status=OutcomeStatus.NO_ENTRIES, message=message)

    @property
    def is_display(self) -> bool:
        return self.status is OutcomeStatus.DISPLAY


class CountsResult(BaseModel):
    """Distinct-post counts for an artist, unfiltered and tag-filtered."""

    model_config = ConfigDict(frozen=True)

    total_count: int = Field(default=0, ge=0)
    filtered_count: int = Field(default=0, ge=0)


class GalleryPage(BaseModel):
    """One page of the filtered artist list."""

    model_config = ConfigDict(frozen=True)

    page_index: int = Field(ge=0)
    artists: tuple[Artist, ...] = ()
    total_matches: int = Field(default=0, ge=0)
    remaining: int = Field(default=0, ge=0)

    @property
    def has_more(self) -> bool:
        return self.remaining > 0


class CopiedArtist(BaseModel):
    """An artist whose search tag was copied during this session.

    ``tooltip`` is the catalogue tooltip, or the display name when the
    artist has none or is not in the catalogue.
    """

    model_config = ConfigDict(frozen=True)

    artist_name: str
    label: str
    tooltip: str
    thumbnail_url: str | None = None

    @classmethod
    def from_catalogue(cls, artist_name: str, artist: Artist | None = None) -> CopiedArtist:
        label = artist_name.replace("_", " ")
        return cls(
            artist_name=artist_name,
            label=label,
            tooltip=(artist.tooltip if artist else None) or label,
            thumbnail_url=artist.thumbnail_url if artist else None,
        )


class AppData(BaseModel):
    """Static documents loaded once at startup (all-or-nothing)."""

    model_config = ConfigDict(frozen=True)

    artists: tuple[Artist, ...] = ()
    tag_tooltips: dict[str, str] = Field(default_factory=dict)
    taunts: tuple[str, ...] = ()
    tag_taunts: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _unique_artist_names(self) -> AppData:
        seen: set[str] = set()
        for artist in self.artists:
            if artist.artist_name in seen:
                raise ValueError(f"duplicate artistName in catalogue: {artist.artist_name}")
            seen.add(artist.artist_name)
        return self

    def find_artist(self, artist_name: str) -> Artist | None:
        for artist in self.artists:
            if artist.artist_name == artist_name:
                return artist
        return None
