"""Unit tests for MetadataFetcher parsing and MetadataService fallback."""

import httpx
import pytest

from domscraper.exceptions import MetadataError
from domscraper.metadata.fetcher import MetadataFetcher
from domscraper.metadata.service import MetadataService

PAGE = """
<html lang="en">
<head>
  <title> Example Domain </title>
  <meta name="description" content="An example page">
  <meta name="keywords" content="example, test">
  <meta property="og:title" content="Example OG">
  <meta property="og:image" content="https://example.com/og.png">
  <meta name="twitter:card" content="summary">
  <link rel="canonical" href="https://example.com/">
  <script type="application/ld+json">{"@type": "Organization", "name": "Example"}</script>
  <script type="application/ld+json">{not json</script>
</head>
<body><p>hi</p></body>
</html>
"""


# ── Helpers ──────────────────────────────────────────────────────────────────


def _fetcher(handler) -> MetadataFetcher:
    return MetadataFetcher(transport=httpx.MockTransport(handler))


# ── MetadataFetcher ───────────────────────────────────────────────────────────


class TestMetadataFetcher:
    @pytest.mark.asyncio
    async def test_groups_extracted(self):
        fetcher = _fetcher(lambda request: httpx.Response(200, text=PAGE))
        metadata = await fetcher.fetch("https://example.com")

        assert metadata["general"] == {
            "title": "Example Domain",
            "description": "An example page",
            "keywords": "example, test",
            "canonical": "https://example.com/",
            "lang": "en",
        }
        assert metadata["openGraph"] == {
            "title": "Example OG",
            "image": "https://example.com/og.png",
        }
        assert metadata["twitter"] == {"card": "summary"}
        assert metadata["jsonLd"] == [{"@type": "Organization", "name": "Example"}]

    @pytest.mark.asyncio
    async def test_empty_groups_omitted(self):
        html = "<html><head><title>Only title</title></head></html>"
        fetcher = _fetcher(lambda request: httpx.Response(200, text=html))
        metadata = await fetcher.fetch("https://example.com")
        assert metadata == {"general": {"title": "Only title"}}

    @pytest.mark.asyncio
    async def test_http_error_status_carried(self):
        fetcher = _fetcher(lambda request: httpx.Response(404))
        with pytest.raises(MetadataError) as exc_info:
            await fetcher.fetch("https://example.com/missing")
        assert exc_info.value.status == 404
        assert exc_info.value.url == "https://example.com/missing"

    @pytest.mark.asyncio
    async def test_transport_error_reported_as_gateway_timeout(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(MetadataError) as exc_info:
            await _fetcher(handler).fetch("https://example.com")
        assert exc_info.value.status == 504
        assert exc_info.value.is_gateway_timeout

    @pytest.mark.asyncio
    async def test_timeout_reported_as_gateway_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(MetadataError) as exc_info:
            await _fetcher(handler).fetch("https://example.com")
        assert exc_info.value.status == 504

    @pytest.mark.asyncio
    async def test_page_without_metadata_fails_without_status(self):
        fetcher = _fetcher(lambda request: httpx.Response(200, text="<p>bare</p>"))
        with pytest.raises(MetadataError, match="No metadata") as exc_info:
            await fetcher.fetch("https://example.com")
        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_user_agent_sent(self):
        seen = {}

        def handler(request):
            seen["ua"] = request.headers["user-agent"]
            return httpx.Response(200, text=PAGE)

        fetcher = MetadataFetcher(user_agent="test-agent", transport=httpx.MockTransport(handler))
        await fetcher.fetch("https://example.com")
        assert seen["ua"] == "test-agent"


# ── MetadataService ───────────────────────────────────────────────────────────


class TestMetadataService:
    @pytest.mark.asyncio
    async def test_success_merges_url(self, fake_fetcher):
        fetcher = fake_fetcher({"general": {"title": "T"}})
        result = await MetadataService(fetcher).fetch("https://example.com")
        assert result == {"url": "https://example.com", "general": {"title": "T"}}
        assert list(result)[0] == "url"

    @pytest.mark.asyncio
    async def test_https_gateway_timeout_retried_once_over_http(self, fake_fetcher):
        fetcher = fake_fetcher(MetadataError("timeout", status=504), {"general": {"title": "T"}})
        result = await MetadataService(fetcher).fetch("https://example.com/a")
        assert fetcher.urls == ["https://example.com/a", "http://example.com/a"]
        assert result["url"] == "http://example.com/a"

    @pytest.mark.asyncio
    async def test_retry_failure_propagates(self, fake_fetcher):
        fetcher = fake_fetcher(
            MetadataError("timeout", status=504),
            MetadataError("not found", status=404),
        )
        with pytest.raises(MetadataError) as exc_info:
            await MetadataService(fetcher).fetch("https://example.com")
        assert exc_info.value.status == 404
        assert len(fetcher.urls) == 2

    @pytest.mark.asyncio
    async def test_no_second_retry(self, fake_fetcher):
        fetcher = fake_fetcher(
            MetadataError("timeout", status=504),
            MetadataError("timeout", status=504),
        )
        with pytest.raises(MetadataError):
            await MetadataService(fetcher).fetch("https://example.com")
        assert len(fetcher.urls) == 2

    @pytest.mark.asyncio
    async def test_other_status_not_retried(self, fake_fetcher):
        fetcher = fake_fetcher(MetadataError("server error", status=500))
        with pytest.raises(MetadataError) as exc_info:
            await MetadataService(fetcher).fetch("https://example.com")
        assert exc_info.value.status == 500
        assert fetcher.urls == ["https://example.com"]

    @pytest.mark.asyncio
    async def test_http_gateway_timeout_not_retried(self, fake_fetcher):
        fetcher = fake_fetcher(MetadataError("timeout", status=504))
        with pytest.raises(MetadataError):
            await MetadataService(fetcher).fetch("http://example.com")
        assert fetcher.urls == ["http://example.com"]
