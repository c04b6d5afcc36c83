"""
Scrape Service - Fetches a rendered page and converts the selected subtrees.

Drives one browser page per request: navigate, wait for the load event, wait
the caller's settle delay, read ``document.body.outerHTML`` and hand it to the
DomConverter once per comma-separated selector.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from domscraper.browser.base import PageDriver
from domscraper.config import DEFAULT_NAVIGATION_TIMEOUT, OUTER_HTML_EXPRESSION
from domscraper.dom.converter import CollisionPolicy, DomConverter
from domscraper.exceptions import BrowserError
from domscraper.logging import logger as scrape_logger
from domscraper.models import ScrapeRequest, ScrapeResult

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], PageDriver]


class ScrapeService:
    """
    Orchestrates page fetching and DOM conversion.

    Usage:
        service = ScrapeService(lambda: BrowserSession(config=config))
        result = await service.scrape(ScrapeRequest(url="https://example.com", selector="h1"))
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        navigation_timeout: float | None = DEFAULT_NAVIGATION_TIMEOUT,
        expression: str = OUTER_HTML_EXPRESSION,
    ):
        self._session_factory = session_factory
        self._navigation_timeout = navigation_timeout
        self._expression = expression

    async def scrape(self, request: ScrapeRequest) -> ScrapeResult:
        """
        Scrape one page.

        Raises:
            InvalidSelectorError: If any selector piece cannot be parsed
            BrowserConnectionError: If the browser cannot be reached
            BrowserError: If navigation or evaluation fails, or the page never
                finishes loading within the navigation timeout (None waits forever)
        """
        started = time.monotonic()
        scrape_logger.scrape(request.url, request.selector, request.settle_ms)

        selectors = request.selectors
        for selector in selectors:
            DomConverter.validate_selector(selector)

        html = await self.fetch_html(request.url, request.settle_ms)

        converter = DomConverter(collision_policy=CollisionPolicy(request.collision))
        results = converter.convert_many(
            html, selectors, complete=request.complete, deep=request.deep
        )

        elapsed_ms = int((time.monotonic() - started) * 1000)
        result = ScrapeResult(time=elapsed_ms, results=results)
        scrape_logger.finished(request.url, elapsed_ms, result.counts)
        return result

    async def fetch_html(self, url: str, settle_ms: int = 0) -> str:
        """Load ``url`` in a fresh page and return its rendered body markup."""
        driver = self._session_factory()
        loaded = asyncio.Event()

        try:
            await driver.start()
            driver.on_loaded(loaded.set)
            await driver.navigate(url)
            await self._wait_for_load(loaded, url)

            # Extra time for client-side rendering
            if settle_ms > 0:
                await asyncio.sleep(settle_ms / 1000)

            html = await driver.evaluate(self._expression)
        finally:
            await driver.stop()

        if not isinstance(html, str):
            raise BrowserError(f"Page at {url} has no document body")

        logger.debug(f"Fetched {len(html)} characters from {url}")
        return html

    async def _wait_for_load(self, loaded: asyncio.Event, url: str) -> None:
        try:
            await asyncio.wait_for(loaded.wait(), timeout=self._navigation_timeout)
        except TimeoutError:
            raise BrowserError(
                f"Page at {url} did not finish loading within {self._navigation_timeout}s"
            ) from None
        scrape_logger.navigation(url, status="complete")
