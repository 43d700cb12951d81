"""Core domain entities: artists from the static catalogue and posts from the API.

Both models are frozen.  Posts are received from the search API and never
mutated; artists are loaded once from ``artists.json`` and are read-only
afterwards.  The image chosen for an artist is not a field
here: it lives in the durable cache under a key derived from the artist name.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Post(BaseModel):
    """A single post returned by the search API.

    Only the attributes the gallery needs are modelled; the API returns
    dozens more, which are ignored.  Every field is optional because the API
    omits ``file_url`` (and sometimes more) for restricted posts.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | None = None
    file_url: str | None = None     # Full-size image location
    file_ext: str | None = None     # "jpg", "png", "gif", "mp4", ...
    rating: str | None = None       # "g", "s", "q", "e" (most explicit)


class Artist(BaseModel):
    """An artist entry from the static catalogue.

    ``artist_name`` is the unique identifier and doubles as the search-API
    tag for the artist (underscored, e.g. ``"foo_bar"``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    artist_name: str = Field(alias="artistName")
    category: str | None = None
    type: str | None = None
    tags: frozenset[str] = Field(default_factory=frozenset)
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
    tooltip: str | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: object) -> object:
        # artists.json stores tags as a list; null means none.
        if value is None:
            return frozenset()
        return value
