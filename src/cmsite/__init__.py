"""
Static site builder for Contentful-backed page collections.
"""

from importlib import metadata as _metadata

try:
    __version__ = _metadata.version("cmsite")
except _metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = ["__version__"]
