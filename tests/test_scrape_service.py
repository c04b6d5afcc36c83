"""Unit tests for ScrapeService with a fake page driver."""

import pytest

from domscraper.config import OUTER_HTML_EXPRESSION
from domscraper.exceptions import BrowserConnectionError, BrowserError, InvalidSelectorError
from domscraper.models import ScrapeRequest
from domscraper.scrape.service import ScrapeService


# ── Helpers ──────────────────────────────────────────────────────────────────


def _request(**kwargs) -> ScrapeRequest:
    kwargs.setdefault("url", "https://example.com")
    return ScrapeRequest(**kwargs)


# ── scrape ────────────────────────────────────────────────────────────────────


class TestScrape:
    @pytest.mark.asyncio
    async def test_default_selector_is_body(self, driver_factory):
        service = ScrapeService(driver_factory())
        result = await service.scrape(_request())
        assert [r.selector for r in result.results] == ["body"]
        assert result.results[0].count == 1

    @pytest.mark.asyncio
    async def test_comma_separated_selectors_grouped_in_order(self, driver_factory):
        service = ScrapeService(driver_factory())
        result = await service.scrape(_request(selector="h1,h2"))
        assert [r.selector for r in result.results] == ["h1", "h2"]
        assert [r.count for r in result.results] == [1, 2]
        assert result.results[1].items == ["One", "Two"]

    @pytest.mark.asyncio
    async def test_selector_pieces_are_stripped(self, driver_factory):
        service = ScrapeService(driver_factory())
        result = await service.scrape(_request(selector="h1, h2"))
        assert [r.selector for r in result.results] == ["h1", "h2"]

    @pytest.mark.asyncio
    async def test_trailing_comma_adds_empty_group(self, driver_factory):
        service = ScrapeService(driver_factory())
        result = await service.scrape(_request(selector="h1,"))
        assert [(r.selector, r.count, r.items) for r in result.results] == [
            ("h1", 1, ["Hello"]),
            ("", 0, []),
        ]

    @pytest.mark.asyncio
    async def test_deep_mode(self, driver_factory):
        service = ScrapeService(driver_factory())
        result = await service.scrape(_request(selector="#menu", deep=True))
        assert result.results[0].items == [{"ul$menu": {"li": "b"}}]

    @pytest.mark.asyncio
    async def test_collision_policy_passed_through(self, driver_factory):
        service = ScrapeService(driver_factory())
        result = await service.scrape(
            _request(selector="#menu", deep=True, collision="merge_to_array")
        )
        assert result.results[0].items == [{"ul$menu": {"li": ["a", "b"]}}]

    @pytest.mark.asyncio
    async def test_complete_mode(self, driver_factory):
        service = ScrapeService(driver_factory())
        result = await service.scrape(_request(selector="h1", complete=True))
        assert result.results[0].items == ['<h1 class="title">Hello</h1>']

    @pytest.mark.asyncio
    async def test_elapsed_time_reported(self, driver_factory):
        service = ScrapeService(driver_factory())
        result = await service.scrape(_request(settle_ms=20))
        assert result.time >= 15

    @pytest.mark.asyncio
    async def test_driver_sequence(self, driver_factory):
        factory = driver_factory()
        await ScrapeService(factory).scrape(_request(url="https://example.com/page"))
        [driver] = factory.drivers
        assert driver.calls == [
            "start",
            ("navigate", "https://example.com/page"),
            ("evaluate", OUTER_HTML_EXPRESSION),
            "stop",
        ]

    @pytest.mark.asyncio
    async def test_one_driver_per_request(self, driver_factory):
        factory = driver_factory()
        service = ScrapeService(factory)
        await service.scrape(_request())
        await service.scrape(_request())
        assert len(factory.drivers) == 2


# ── failures ──────────────────────────────────────────────────────────────────


class TestScrapeFailures:
    @pytest.mark.asyncio
    async def test_connection_error_propagates_and_driver_stopped(self, driver_factory):
        factory = driver_factory(start_error=BrowserConnectionError("refused"))
        with pytest.raises(BrowserConnectionError):
            await ScrapeService(factory).scrape(_request())
        assert factory.drivers[0].calls == ["start", "stop"]

    @pytest.mark.asyncio
    async def test_evaluate_error_stops_driver(self, driver_factory):
        factory = driver_factory(evaluate_error=BrowserError("JS error"))
        with pytest.raises(BrowserError):
            await ScrapeService(factory).scrape(_request())
        assert factory.drivers[0].calls[-1] == "stop"

    @pytest.mark.asyncio
    async def test_missing_body_is_browser_error(self, driver_factory):
        factory = driver_factory(html=None)
        with pytest.raises(BrowserError, match="no document body"):
            await ScrapeService(factory).scrape(_request())

    @pytest.mark.asyncio
    async def test_invalid_selector_rejected_before_browser_opens(self, driver_factory):
        factory = driver_factory()
        with pytest.raises(InvalidSelectorError):
            await ScrapeService(factory).scrape(_request(selector="h1,div["))
        assert factory.drivers == []

    @pytest.mark.asyncio
    async def test_missing_load_event_is_browser_error(self, driver_factory):
        factory = driver_factory(fire_load=False)
        service = ScrapeService(factory, navigation_timeout=0.01)
        with pytest.raises(BrowserError, match="did not finish loading"):
            await service.scrape(_request(selector="h1"))
        assert ("evaluate", OUTER_HTML_EXPRESSION) not in factory.drivers[0].calls
        assert factory.drivers[0].calls[-1] == "stop"
