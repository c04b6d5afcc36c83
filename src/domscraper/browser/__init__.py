"""
domscraper Browser Module.

Provides the page driver interface and its Chrome DevTools implementation.
"""

from domscraper.browser.base import LoadedCallback, PageDriver
from domscraper.browser.session import BrowserConfig, BrowserSession

__all__ = [
    "PageDriver",
    "LoadedCallback",
    "BrowserConfig",
    "BrowserSession",
]
