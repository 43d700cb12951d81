"""JSON encoding shared by the cache tiers.

Both tiers store values as JSON text, the same way browser storage holds
strings.  Decoding is forgiving (a corrupt payload is a miss); encoding is
strict and raises :class:`CacheWriteError` so providers can log and report
``False`` from ``set``.
"""

from __future__ import annotations

import json
from typing import Any

from kexplorer.utils.errors import CacheWriteError

_MISSING = object()


def encode_value(value: Any, provider_name: str | None = None) -> str:
    """Serialise *value* to JSON text or raise :class:`CacheWriteError`."""
    try:
        return json.dumps(value, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise CacheWriteError(
            message=f"Value is not JSON-serialisable: {exc}",
            provider_name=provider_name,
        ) from exc


def decode_value(payload: str | bytes | None) -> Any:
    """Deserialise *payload*; return :data:`_MISSING` if absent or corrupt."""
    if payload is None:
        return _MISSING
    try:
        return json.loads(payload)
    except (TypeError, ValueError):
        return _MISSING


def is_missing(value: Any) -> bool:
    return value is _MISSING
