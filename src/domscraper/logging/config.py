"""
Logging Configuration - Structured logging with Rich console.

Provides pretty, structured logging for scrape and metadata requests.
"""

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.theme import Theme

from domscraper.logging.formatters import CompactFormatter, create_file_handler

# Custom theme for domscraper logs
SCRAPER_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "debug": "dim",
        "scrape": "bold green",
        "meta": "bold magenta",
        "cdp": "dim cyan",
    }
)

SUBMODULE_LOGGERS = (
    "domscraper.browser",
    "domscraper.dom",
    "domscraper.metadata",
    "domscraper.scrape",
    "domscraper.server",
)

# Shared console instance; stdout is reserved for JSON output of the CLI
console = Console(theme=SCRAPER_THEME, stderr=True)


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    show_path: bool = False,
    log_file: str | None = None,
    plain: bool = False,
) -> None:
    """
    Configure logging with Rich console handler.

    Args:
        level: Logging level
        show_path: Show file path in log messages
        log_file: Optional path for an additional JSON-lines log file
        plain: Use compact single-line output instead of Rich
    """
    handlers: list[logging.Handler] = []

    if plain:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(CompactFormatter())
        handlers.append(stream_handler)
    else:
        handler = RichHandler(
            console=console,
            show_time=True,
            show_level=True,
            show_path=show_path,
            rich_tracebacks=True,
            markup=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(handler)

    if log_file:
        handlers.append(create_file_handler(log_file))

    # Configure root domscraper logger
    root_logger = logging.getLogger("domscraper")
    root_logger.setLevel(level)
    root_logger.handlers = handlers
    root_logger.propagate = False

    for name in SUBMODULE_LOGGERS:
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with domscraper prefix.

    Args:
        name: Logger name (will be prefixed with 'domscraper.')

    Returns:
        Configured logger
    """
    if name != "domscraper" and not name.startswith("domscraper."):
        name = f"domscraper.{name}"
    return logging.getLogger(name)


class ScraperLogger:
    """
    Structured logger for scrape operations.

    Provides semantic logging methods for different operation types.
    """

    def __init__(self, name: str = "domscraper"):
        self._logger = get_logger(name)

    def scrape(self, url: str, selector: str, settle_ms: int) -> None:
        """Log scrape request."""
        self._logger.info(
            f'[scrape]Scrape[/scrape]: "{escape(url)}", "{escape(selector)}", {settle_ms} ms',
            extra={"url": url, "selector": selector},
        )

    def meta(self, url: str) -> None:
        """Log metadata request."""
        self._logger.info(f'[meta]Scrape metadata[/meta]: "{escape(url)}"', extra={"url": url})

    def retry(self, url: str, reason: str) -> None:
        """Log a retried request."""
        self._logger.warning(f"[warning]Retrying {escape(url)}[/warning] ({escape(reason)})")

    def cdp(self, domain: str, command: str, params: dict | None = None) -> None:
        """Log CDP command (debug level)."""
        param_str = str(params)[:50] if params else ""
        self._logger.debug(f"[cdp]CDP[/cdp]: {domain}.{command}({escape(param_str)})")

    def navigation(self, url: str, status: str = "started") -> None:
        """Log navigation event."""
        short = url[:60] + ("..." if len(url) > 60 else "")
        self._logger.info(f"Navigation {status}: {escape(short)}", extra={"url": url})

    def finished(self, url: str, elapsed_ms: int, counts: list[int]) -> None:
        """Log completed scrape."""
        self._logger.info(
            f"[green]✓[/green] Scraped {escape(url)} in {elapsed_ms} ms ({sum(counts)} items)",
            extra={"url": url, "elapsed_ms": elapsed_ms},
        )

    def error(self, message: str, exc: Exception | None = None) -> None:
        """Log error."""
        self._logger.error(f"[error]{escape(message)}[/error]", exc_info=exc)

    def warning(self, message: str) -> None:
        """Log warning."""
        self._logger.warning(f"[warning]{escape(message)}[/warning]")

    def debug(self, message: str) -> None:
        """Log debug message."""
        self._logger.debug(message)

    def info(self, message: str) -> None:
        """Log info message."""
        self._logger.info(message)


# Default logger instance
logger = ScraperLogger()
