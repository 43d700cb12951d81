"""kexplorer domain models - re-exports all public model classes.

The models are organized across two submodules by domain concern:
    - entities.py - Artist (static catalogue) and Post (search API item)
    - gallery.py  - results handed to the view layer (ImageOutcome,
                    CountsResult, GalleryPage, CopiedArtist) and the
                    AppData bundle
"""

from __future__ import annotations

from kexplorer.models.entities import Artist, Post
from kexplorer.models.gallery import (
    DEFAULT_NO_ENTRIES_MESSAGE,
    FAILED_TO_LOAD_MESSAGE,
    AppData,
    CopiedArtist,
    CountsResult,
    GalleryPage,
    ImageOutcome,
    OutcomeStatus,
)

__all__ = [
    "AppData",
    "Artist",
    "CopiedArtist",
    "CountsResult",
    "DEFAULT_NO_ENTRIES_MESSAGE",
    "FAILED_TO_LOAD_MESSAGE",
    "GalleryPage",
    "ImageOutcome",
    "OutcomeStatus",
    "Post",
]
