"""Concrete adapters for the interfaces in ``kexplorer/interfaces/``."""
