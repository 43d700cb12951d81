"""kexplorer -- tag-filterable artist gallery backed by a booru post search API."""

__version__ = "0.1.0"
