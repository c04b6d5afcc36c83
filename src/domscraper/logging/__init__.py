"""
domscraper Logging Module.

Provides structured logging with Rich console output.
"""

from domscraper.logging.config import (
    ScraperLogger,
    console,
    get_logger,
    logger,
    setup_logging,
)
from domscraper.logging.formatters import (
    CompactFormatter,
    JSONFormatter,
    create_file_handler,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "ScraperLogger",
    "logger",
    "console",
    "JSONFormatter",
    "CompactFormatter",
    "create_file_handler",
]
