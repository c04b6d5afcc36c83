"""Shared fakes for the page driver and the metadata source."""

import pytest

from domscraper.browser.base import PageDriver

PAGE = (
    "<body>"
    '<h1 class="title">Hello</h1>'
    "<h2>One</h2><h2>Two</h2>"
    '<ul id="menu"><li>a</li><li>b</li></ul>'
    "</body>"
)


class FakeDriver(PageDriver):
    """Page driver returning canned HTML."""

    def __init__(
        self,
        html: str | None = PAGE,
        fire_load: bool = True,
        start_error: Exception | None = None,
        evaluate_error: Exception | None = None,
    ):
        self.html = html
        self.fire_load = fire_load
        self.start_error = start_error
        self.evaluate_error = evaluate_error
        self.calls: list = []
        self._callbacks: list = []

    async def start(self) -> None:
        self.calls.append("start")
        if self.start_error:
            raise self.start_error

    async def stop(self) -> None:
        self.calls.append("stop")

    def on_loaded(self, callback) -> None:
        self._callbacks.append(callback)

    async def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))
        if self.fire_load:
            for callback in self._callbacks:
                callback()

    async def evaluate(self, expression: str):
        self.calls.append(("evaluate", expression))
        if self.evaluate_error:
            raise self.evaluate_error
        return self.html


class DriverFactory:
    """Session factory that remembers every driver it built."""

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.drivers: list[FakeDriver] = []

    def __call__(self) -> FakeDriver:
        driver = FakeDriver(**self.kwargs)
        self.drivers.append(driver)
        return driver


class FakeFetcher:
    """Metadata source replaying canned outcomes per call."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.urls: list[str] = []

    async def fetch(self, url: str) -> dict:
        self.urls.append(url)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def driver_factory():
    return DriverFactory


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
