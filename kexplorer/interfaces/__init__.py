"""Public interface definitions for the collaborators around the core.

Every storage medium, probe, and view consumer is accessed through the
abstract base classes defined in this package.  Concrete adapters live in
``kexplorer/providers/`` (and the CLI, for the listener) and are injected by
the composition root in ``kexplorer/main.py``, so unit tests can pass fakes
or mocks instead.

CONCRETE PROVIDER MAP:
    Interface          →  Concrete implementations
    ─────────────────────────────────────────────────────────────────
    ICacheProvider     →  MemoryCacheProvider (session tier),
                          SQLiteCacheProvider (durable tier)
    IImageProbe        →  HttpImageProbe
    IGalleryListener   →  ConsoleGalleryListener (kexplorer/cli/explore.py)
"""

from kexplorer.interfaces.cache_provider import ICacheProvider
from kexplorer.interfaces.gallery_listener import IGalleryListener
from kexplorer.interfaces.image_probe import IImageProbe

__all__ = [
    "ICacheProvider",
    "IGalleryListener",
    "IImageProbe",
]
