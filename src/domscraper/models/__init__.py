"""
domscraper Models - Shared Pydantic models.

Input/output models for the scrape endpoint.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from domscraper.config import DEFAULT_SELECTOR, DEFAULT_SETTLE_MS
from domscraper.utils.url import split_selectors

# ===== Input Models =====


class ScrapeRequest(BaseModel):
    """A single page scrape."""

    url: str
    selector: str = DEFAULT_SELECTOR
    settle_ms: int = Field(default=DEFAULT_SETTLE_MS, ge=0)
    deep: bool = False
    complete: bool = False
    collision: Literal["overwrite", "merge_to_array", "error"] = "overwrite"

    @property
    def selectors(self) -> list[str]:
        """Comma-separated selector pieces, each converted independently."""
        return split_selectors(self.selector)


# ===== Output Models =====


class SelectorResult(BaseModel):
    """Items produced for one selector."""

    selector: str
    count: int = 0
    items: list[str | dict[str, Any]] = Field(default_factory=list)


class ScrapeResult(BaseModel):
    """Response envelope for a scrape."""

    time: int = 0
    results: list[SelectorResult] = Field(default_factory=list)

    @property
    def counts(self) -> list[int]:
        return [result.count for result in self.results]
