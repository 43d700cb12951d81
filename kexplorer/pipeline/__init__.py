"""Gallery orchestration and view-layer notification."""

from kexplorer.pipeline.copied_artists import CopiedArtists
from kexplorer.pipeline.gallery_pipeline import GalleryPipeline
from kexplorer.pipeline.notifier import GalleryNotifier

__all__ = ["CopiedArtists", "GalleryNotifier", "GalleryPipeline"]
