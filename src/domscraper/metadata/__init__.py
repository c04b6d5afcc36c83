"""
domscraper Metadata Module.

Provides page metadata fetching with the HTTPS to HTTP fallback.
"""

from domscraper.metadata.fetcher import MetadataFetcher
from domscraper.metadata.service import MetadataService, MetadataSource

__all__ = [
    "MetadataFetcher",
    "MetadataService",
    "MetadataSource",
]
