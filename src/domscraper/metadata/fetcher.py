"""
Metadata Fetcher - Downloads a page and extracts its HTML metadata.

Groups the page's metadata the way social previews consume it:

- general:   title, description, canonical, lang, author, keywords
- openGraph: og:* properties, without the prefix
- twitter:   twitter:* cards, without the prefix
- jsonLd:    parsed application/ld+json blocks
"""

import json
import logging
from typing import Any

import httpx
from bs4 import BeautifulSoup

from domscraper.config import DEFAULT_METADATA_TIMEOUT, DEFAULT_USER_AGENT
from domscraper.exceptions import GATEWAY_TIMEOUT, MetadataError

logger = logging.getLogger(__name__)

NAMED_META = ("description", "author", "keywords")


class MetadataFetcher:
    """
    Fetches and parses page metadata over HTTP.

    Transport failures (refused connections, TLS errors, timeouts) are
    reported with status 504, like an unreachable upstream behind a gateway.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_METADATA_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._headers = {"User-Agent": user_agent, "Accept": "text/html,application/xhtml+xml"}
        self._transport = transport

    async def fetch(self, url: str) -> dict[str, Any]:
        """
        Fetch ``url`` and extract its metadata.

        Raises:
            MetadataError: With the response status, 504 on transport failure,
                or no status when the page carries no metadata
        """
        html = await self._download(url)
        metadata = self.parse(html)
        if not metadata:
            raise MetadataError("No metadata found in page", url=url)
        return metadata

    async def _download(self, url: str) -> str:
        async with httpx.AsyncClient(
            headers=self._headers,
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(url)
            except httpx.TransportError as e:
                raise MetadataError(
                    f"Cannot reach {url}: {e.__class__.__name__}",
                    status=GATEWAY_TIMEOUT,
                    url=url,
                ) from e

        if not response.is_success:
            raise MetadataError(
                f"{response.status_code} {response.reason_phrase}".strip(),
                status=response.status_code,
                url=url,
            )

        return response.text

    def parse(self, html: str) -> dict[str, Any]:
        """Extract metadata groups from HTML, omitting empty groups."""
        soup = BeautifulSoup(html, "lxml")

        groups = {
            "general": self._general(soup),
            "openGraph": self._prefixed(soup, "og:"),
            "twitter": self._prefixed(soup, "twitter:"),
            "jsonLd": self._json_ld(soup),
        }
        return {name: group for name, group in groups.items() if group}

    def _general(self, soup: BeautifulSoup) -> dict[str, str]:
        general: dict[str, str] = {}

        title = soup.find("title")
        if title and title.get_text(strip=True):
            general["title"] = title.get_text(strip=True)

        for name in NAMED_META:
            meta = soup.find("meta", attrs={"name": name})
            content = (meta.get("content") or "").strip() if meta else ""
            if content:
                general[name] = content

        canonical = soup.find("link", attrs={"rel": "canonical"})
        if canonical and canonical.get("href"):
            general["canonical"] = canonical["href"].strip()

        html_tag = soup.find("html")
        if html_tag and html_tag.get("lang"):
            general["lang"] = html_tag["lang"]

        return general

    def _prefixed(self, soup: BeautifulSoup, prefix: str) -> dict[str, str]:
        values: dict[str, str] = {}
        for tag in soup.find_all("meta"):
            # Twitter cards use name=, Open Graph uses property=, sites mix both
            key = tag.get("property") or tag.get("name") or ""
            if key.startswith(prefix):
                values.setdefault(key[len(prefix):], tag.get("content") or "")
        return values

    def _json_ld(self, soup: BeautifulSoup) -> list[Any]:
        data = []
        for script in soup.find_all("script", type="application/ld+json"):
            text = script.string or script.get_text() or ""
            if not text.strip():
                continue
            try:
                data.append(json.loads(text))
            except json.JSONDecodeError as e:
                logger.debug(f"Skipping invalid JSON-LD block: {e}")
        return data
