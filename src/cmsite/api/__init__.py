"""
External API clients used by the site build.
"""

from .content_source import Asset, ContentSourceClient, ContentSourceError, Entry, Record

__all__ = [
    "Asset",
    "ContentSourceClient",
    "ContentSourceError",
    "Entry",
    "Record",
]
