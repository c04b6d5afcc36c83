"""
domscraper - Headless-browser page scraper with DOM-to-JSON conversion.

Loads a page in Chrome through the DevTools Protocol, waits for it to settle,
and returns the elements matched by CSS selectors as outer HTML, flattened
text, or nested tag/class/id mappings. Also fetches page metadata.

Usage:
    from domscraper import BrowserSession, DomConverter, ScrapeRequest, ScrapeService

    items = DomConverter().convert("<ul><li>a</li></ul>", "ul", deep=True)
    # [{"ul": {"li": "a"}}]

    service = ScrapeService(BrowserSession)
    result = await service.scrape(ScrapeRequest(url="https://example.com", selector="h1"))
"""

__version__ = "0.1.0"

from domscraper.browser import BrowserConfig, BrowserSession, PageDriver
from domscraper.dom import CollisionPolicy, ConversionMode, DomConverter, element_reference
from domscraper.logging import logger, setup_logging
from domscraper.metadata import MetadataFetcher, MetadataService
from domscraper.models import ScrapeRequest, ScrapeResult, SelectorResult
from domscraper.scrape import ScrapeService

__all__ = [
    "__version__",
    "BrowserSession",
    "BrowserConfig",
    "PageDriver",
    "DomConverter",
    "ConversionMode",
    "CollisionPolicy",
    "element_reference",
    "ScrapeService",
    "ScrapeRequest",
    "ScrapeResult",
    "SelectorResult",
    "MetadataFetcher",
    "MetadataService",
    "setup_logging",
    "logger",
]
