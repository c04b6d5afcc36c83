"""
domscraper Scrape Module.

Provides the page scrape orchestration.
"""

from domscraper.scrape.service import ScrapeService, SessionFactory

__all__ = [
    "ScrapeService",
    "SessionFactory",
]
