"""
domscraper Configuration.

Centralizes default values and configuration settings.
"""

from typing import Literal

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domscraper.exceptions import ConfigurationError

# Browser Configuration
DEFAULT_CDP_URL = "http://localhost:9222"
DEFAULT_BROWSER_WIDTH = 1280
DEFAULT_BROWSER_HEIGHT = 800
DEFAULT_NAVIGATION_TIMEOUT = 30.0

# Scrape Defaults
DEFAULT_SELECTOR = "body"
DEFAULT_SETTLE_MS = 0
OUTER_HTML_EXPRESSION = "document.body.outerHTML"

# Metadata Defaults
DEFAULT_METADATA_TIMEOUT = 20.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; domscraper/0.1; +https://github.com/domscraper)"

# Server Defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3037

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

ENV_PREFIX = "DOMSCRAPER_"


class Settings(BaseSettings):
    """Runtime settings, overridable through DOMSCRAPER_* environment variables."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    cdp_url: str | None = DEFAULT_CDP_URL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: LogLevel = "INFO"
    navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT
    metadata_timeout: float = DEFAULT_METADATA_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("cdp_url", mode="before")
    @classmethod
    def blank_cdp_url_launches_chrome(cls, value):
        # An empty DOMSCRAPER_CDP_URL means "launch a local Chrome"
        return value or None

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the process environment.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        try:
            return cls()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
