"""Session list of artists whose search tag has been copied.

Names are kept in the order they were first copied; copying the same
artist again leaves the list unchanged.
"""

from __future__ import annotations

from collections.abc import Iterator


class CopiedArtists:
    """Insertion-ordered, duplicate-free set of copied artist names."""

    def __init__(self) -> None:
        self._names: dict[str, None] = {}

    def add(self, artist_name: str) -> bool:
        """Record *artist_name*; return ``False`` if it was already listed."""
        if artist_name in self._names:
            return False
        self._names[artist_name] = None
        return True

    def clear(self) -> None:
        self._names.clear()

    def __contains__(self, artist_name: object) -> bool:
        return artist_name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __len__(self) -> int:
        return len(self._names)
