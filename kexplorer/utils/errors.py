"""Custom exception hierarchy for kexplorer.

All application exceptions inherit from :class:`KExplorerError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "danbooru", "sqlite_cache", "image_probe") caused the
failure.

The hierarchy is organized by the layer that raises it:

    KExplorerError  (base -- catch-all for any kexplorer error)
    +-- ServiceUnavailableError  (availability gate tripped, no call made)
    +-- TransportError           (non-success HTTP status / no response)
    +-- MalformedResponseError   (success status, wrong-shaped body)
    +-- CacheWriteError          (value could not be stored; never surfaced)
    +-- ImageValidationError     (cached image URL no longer loads)
    +-- DataLoadError            (static data files could not be loaded)
    +-- ConfigurationError       (startup / invalid config)

Callers that render a single artist catch the three query errors together
(see :data:`QUERY_ERRORS`) and degrade to a "no entries" message, while
``DataLoadError`` is reported once for the whole gallery.
"""


class KExplorerError(Exception):
    """Base exception for all kexplorer errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[danbooru] HTTP error 502``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Search API errors
# ---------------------------------------------------------------------------

class ServiceUnavailableError(KExplorerError):
    """Raised when the availability gate reports the search API as down.

    No network or cache access happens before this is raised, so it is
    cheap to hit repeatedly while the gate stays tripped.
    """

    def __init__(
        self,
        message: str = "Search service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class TransportError(KExplorerError):
    """Raised when the search API answers with a non-success status.

    ``status_code`` is ``None`` when no HTTP response was received at all
    (connection refused, DNS failure, timeout).
    """

    def __init__(
        self,
        message: str = "Search request failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._status_code = status_code

    @property
    def status_code(self) -> int | None:
        return self._status_code


class MalformedResponseError(KExplorerError):
    """Raised when a success response does not decode to a list of posts.

    The API returns an error object instead of a list in some failure modes;
    that must not be cached or mistaken for "zero posts".
    """

    def __init__(
        self,
        message: str = "Invalid response format",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Cache / validation errors (handled internally, never surfaced)
# ---------------------------------------------------------------------------

class CacheWriteError(KExplorerError):
    """Raised when a value cannot be written to a cache tier."""

    def __init__(
        self,
        message: str = "Failed to cache data",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ImageValidationError(KExplorerError):
    """Raised when a previously cached image URL fails to load."""

    def __init__(
        self,
        message: str = "Cached image no longer loads",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Startup errors
# ---------------------------------------------------------------------------

class DataLoadError(KExplorerError):
    """Raised when any of the static data documents fails to load."""

    def __init__(
        self,
        message: str = "Failed to load required data files",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(KExplorerError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# Errors a single search can end in; per-artist callers degrade on these.
QUERY_ERRORS = (ServiceUnavailableError, TransportError, MalformedResponseError)
