"""Static data providers (artist catalogue, tooltips, flavour text)."""

from kexplorer.providers.data.json_data_provider import JsonDataProvider

__all__ = ["JsonDataProvider"]
