"""
Page Driver - Abstract interface for remote-controllable browsers.

The scrape handler only needs to open a page, learn when it has loaded and
evaluate one expression, so that is all a driver has to provide.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

LoadedCallback = Callable[[], Any]


class PageDriver(ABC):
    """Abstract base class for browser page drivers."""

    @abstractmethod
    async def start(self) -> None:
        """
        Connect to the browser and open a page.

        Raises:
            BrowserConnectionError: If the browser cannot be reached
        """
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Close the page and the connection."""
        pass

    @abstractmethod
    def on_loaded(self, callback: LoadedCallback) -> None:
        """Register a callback fired when the page load event fires."""
        pass

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Start navigating the page to ``url``."""
        pass

    @abstractmethod
    async def evaluate(self, expression: str) -> Any:
        """
        Evaluate a JavaScript expression in the page.

        Returns:
            The expression's value, serialized by value
        """
        pass
