"""Configuration module - exports Settings and load_config."""

from kexplorer.config.loader import load_config
from kexplorer.config.settings import Settings

__all__ = ["Settings", "load_config"]
