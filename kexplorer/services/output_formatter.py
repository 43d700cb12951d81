"""Plain-text rendering of artists, counts, and image outcomes.

Used by the CLI listener.  Artist names are API tags with underscores; the
display form swaps them for spaces.  A count equal to the API result cap
means "at least this many" and is rendered with a trailing ``+``.
"""

from __future__ import annotations

from kexplorer.models.entities import Artist
from kexplorer.models.gallery import CopiedArtist, CountsResult, GalleryPage, ImageOutcome

LOADING_COUNT_LABEL = "[Loading count…]"
NO_TAGS_FOUND_MESSAGE = "No tags found."


def display_name(artist_name: str) -> str:
    return artist_name.replace("_", " ")


def copy_tag_text(artist_name: str) -> str:
    """Return the text copied to the clipboard for an artist, e.g. ``artist:foo bar``."""
    return f"artist:{display_name(artist_name)}"


def _format_count(count: int, result_limit: int | None) -> str:
    suffix = "+" if result_limit is not None and count >= result_limit else ""
    return f"{count}{suffix}"


def format_artist_label(
    artist: Artist,
    counts: CountsResult | None = None,
    filtered: bool = False,
    result_limit: int | None = 1000,
) -> str:
    """Return ``"{name} ({category}, {type}) [counts]"``.

    Args:
        artist: The artist to label.
        counts: Known counts, or ``None`` while they are still loading.
        filtered: Whether filter tags are active; shows ``[filtered/total]``.
        result_limit: API result cap; counts at the cap get a ``+``.
    """
    label = (
        f"{display_name(artist.artist_name)} "
        f"({artist.category or 'Unknown'}, {artist.type or 'Unknown'})"
    )

    if counts is None:
        return f"{label} {LOADING_COUNT_LABEL}"

    total = _format_count(counts.total_count, result_limit)
    if filtered:
        return f"{label} [{counts.filtered_count}/{total}]"
    return f"{label} [{total}]"


def format_outcome(artist_name: str, outcome: ImageOutcome) -> str:
    """Return a one-line summary of an image outcome."""
    name = display_name(artist_name)
    if outcome.is_display:
        source = " (cached)" if outcome.from_cache else ""
        return f"{name}: {outcome.image_url}{source}"
    return f"{name}: {outcome.message}"


def format_page_header(page: GalleryPage) -> str:
    """Return the header line printed above a gallery page."""
    header = f"Page {page.page_index + 1}: {page.total_matches} artist(s) found"
    if page.has_more:
        header += f", load more ({page.remaining} remaining)"
    return header


def format_copied_artist(entry: CopiedArtist) -> str:
    """Return one copied-list row: name, tooltip when it differs, thumbnail."""
    row = entry.label
    if entry.tooltip != entry.label:
        row += f" - {entry.tooltip}"
    if entry.thumbnail_url:
        row += f" <{entry.thumbnail_url}>"
    return row
