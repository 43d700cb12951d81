"""Image liveness probes used to validate durable cache hits."""

from kexplorer.providers.probe.http_image_probe import HttpImageProbe

__all__ = ["HttpImageProbe"]
