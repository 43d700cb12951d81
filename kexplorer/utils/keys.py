"""Cache key construction.

Keys are opaque strings built from a stable prefix and an identifier, so
two artists never share an entry and the same artist always maps to the
same entry across runs.
"""

IMAGE_KEY_PREFIX = "artist_img"
QUERY_KEY_PREFIX = "api"


def generate_cache_key(prefix: str, identifier: str) -> str:
    """Return ``"{prefix}_{identifier}"``."""
    return f"{prefix}_{identifier}"
