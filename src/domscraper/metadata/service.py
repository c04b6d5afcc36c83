"""
Metadata Service - Page metadata with an HTTPS to HTTP fallback.

Some hosts time out over TLS but answer over plain HTTP. A gateway timeout on
an https URL is therefore retried once on the http URL; every other failure
is reported as-is.
"""

import logging
from typing import Any, Protocol

from domscraper.exceptions import MetadataError
from domscraper.logging import logger as scrape_logger
from domscraper.utils.url import downgrade_to_http, is_https

logger = logging.getLogger(__name__)


class MetadataSource(Protocol):
    async def fetch(self, url: str) -> dict[str, Any]: ...


class MetadataService:
    """Fetches metadata and merges it with the URL it was fetched from."""

    def __init__(self, fetcher: MetadataSource):
        self._fetcher = fetcher

    async def fetch(self, url: str) -> dict[str, Any]:
        """
        Fetch metadata for ``url``.

        Returns:
            ``{"url": <url actually fetched>, **metadata}``

        Raises:
            MetadataError: If the fetch fails and no fallback applies, or the
                fallback fails too
        """
        scrape_logger.meta(url)

        try:
            return self._merge(url, await self._fetcher.fetch(url))
        except MetadataError as e:
            scrape_logger.error(f"Metadata fetch failed for {url}: {e.message} ({e.status})")
            if not (e.is_gateway_timeout and is_https(url)):
                raise

        http_url = downgrade_to_http(url)
        scrape_logger.retry(http_url, "gateway timeout over https")
        try:
            return self._merge(http_url, await self._fetcher.fetch(http_url))
        except MetadataError as e:
            scrape_logger.error(f"Metadata fetch failed for {http_url}: {e.message} ({e.status})")
            raise

    def _merge(self, url: str, metadata: dict[str, Any]) -> dict[str, Any]:
        return {"url": url, **metadata}
