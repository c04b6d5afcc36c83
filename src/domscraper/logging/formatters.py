"""
Log Formatters - Plain-text renderings of the rich log messages.

Messages carry rich markup for the console; these formatters strip it for log
files and non-terminal output.
"""

import json
import logging
from datetime import UTC, datetime

from rich.errors import MarkupError
from rich.text import Text


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the scrape context fields when present."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": strip_markup(record.getMessage()),
        }

        # Add extra fields
        if hasattr(record, "url"):
            log_data["url"] = record.url
        if hasattr(record, "selector"):
            log_data["selector"] = record.selector
        if hasattr(record, "elapsed_ms"):
            log_data["elapsed_ms"] = record.elapsed_ms

        # Add exception info
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class CompactFormatter(logging.Formatter):
    """
    Compact single-line formatter for plain (non-terminal) output.
    """

    LEVEL_SYMBOLS = {
        "DEBUG": "·",
        "INFO": "→",
        "WARNING": "⚠",
        "ERROR": "✗",
        "CRITICAL": "☠",
    }

    def format(self, record: logging.LogRecord) -> str:
        symbol = self.LEVEL_SYMBOLS.get(record.levelname, "?")
        timestamp = datetime.now().strftime("%H:%M:%S")
        return f"{timestamp} {symbol} {strip_markup(record.getMessage())}"


def strip_markup(message: str) -> str:
    """Remove Rich console markup so messages read cleanly outside a terminal."""
    try:
        return Text.from_markup(message).plain
    except MarkupError:
        return message


def create_file_handler(
    path: str,
    formatter: logging.Formatter | None = None,
    level: int = logging.DEBUG,
) -> logging.FileHandler:
    """
    Open a log file handler (JSON lines unless told otherwise).

    Args:
        path: Log file path
        formatter: Record formatter, JSONFormatter if omitted
        level: Logging level

    Returns:
        Configured file handler
    """
    handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(formatter or JSONFormatter())
    return handler
