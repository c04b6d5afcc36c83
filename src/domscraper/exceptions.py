"""
domscraper Exceptions.

Centralized exception hierarchy for the application.
"""

from typing import Any

GATEWAY_TIMEOUT = 504


class DomScraperError(Exception):
    """Base exception for all domscraper errors."""
    pass


class ConfigurationError(DomScraperError):
    """Raised when configuration is invalid or missing."""
    pass


class BrowserError(DomScraperError):
    """Raised when browser operations fail."""
    pass


class BrowserConnectionError(BrowserError):
    """Raised when the browser cannot be reached or connected to."""
    pass


class ConversionError(DomScraperError):
    """Raised when a DOM subtree cannot be converted."""
    pass


class InvalidSelectorError(ConversionError):
    """Raised when a CSS selector cannot be parsed."""

    def __init__(self, selector: str, reason: str = ""):
        self.selector = selector
        message = f"Invalid selector: {selector!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidRequestError(DomScraperError):
    """Raised when request parameters are missing or malformed."""
    pass


class MetadataError(DomScraperError):
    """
    Raised when page metadata cannot be fetched.

    Carries the HTTP status reported by the fetch, if any. A status of 504
    marks a gateway timeout, which is the only failure the metadata handler
    retries.
    """

    def __init__(self, message: str, status: int | None = None, url: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.url = url

    @property
    def is_gateway_timeout(self) -> bool:
        return self.status == GATEWAY_TIMEOUT

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"message": self.message}
        if self.status is not None:
            data["status"] = self.status
        if self.url:
            data["url"] = self.url
        return data
