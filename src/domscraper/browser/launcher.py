"""
Chrome launcher - Starts a local Chrome and resolves DevTools endpoints.

Used when no running browser is configured (``cdp_url=None``), and to turn an
``http://host:port`` DevTools address into the browser's WebSocket URL.
"""

import asyncio
import logging
import platform
import shutil
import socket
import subprocess
import time
from pathlib import Path

import httpx

from domscraper.exceptions import BrowserConnectionError

logger = logging.getLogger(__name__)

CHROME_CANDIDATES: dict[str, tuple[str, ...]] = {
    "Darwin": (
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        "/Applications/Chromium.app/Contents/MacOS/Chromium",
    ),
    "Linux": ("google-chrome", "google-chrome-stable", "chromium", "chromium-browser"),
    "Windows": (
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    ),
}

BASE_FLAGS = (
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-extensions",
    "--disable-sync",
    "--mute-audio",
)

LAUNCH_TIMEOUT = 30.0


def find_chrome() -> str:
    """
    Locate a Chrome or Chromium binary for this platform.

    Raises:
        BrowserConnectionError: If none is installed
    """
    for candidate in CHROME_CANDIDATES.get(platform.system(), ()):
        if shutil.which(candidate) or Path(candidate).exists():
            return candidate
    raise BrowserConnectionError(
        "Chrome not found. Install Chrome or set executable_path in config."
    )


def free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def chrome_command(
    executable: str,
    port: int,
    window_size: tuple[int, int],
    headless: bool = True,
    user_data_dir: str | Path | None = None,
    extra_args: list[str] | None = None,
) -> list[str]:
    """Build the command line for a Chrome exposing DevTools on ``port``."""
    width, height = window_size
    command = [executable, f"--remote-debugging-port={port}", f"--window-size={width},{height}"]
    command.extend(BASE_FLAGS)
    if headless:
        command.append("--headless=new")
    if user_data_dir:
        command.append(f"--user-data-dir={user_data_dir}")
    command.extend(extra_args or [])
    command.append("about:blank")
    return command


def launch_chrome(command: list[str]) -> subprocess.Popen:
    logger.debug(f"Launching Chrome: {command[0]} ({len(command) - 1} flags)")
    try:
        return subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        raise BrowserConnectionError(f"Cannot launch Chrome: {e}") from e


async def resolve_websocket_url(http_url: str, timeout: float = LAUNCH_TIMEOUT) -> str:
    """
    Ask a DevTools endpoint for its browser WebSocket URL.

    Polls ``/json/version`` until Chrome answers, since a freshly launched
    browser takes a moment to open its debugging port.

    Raises:
        BrowserConnectionError: If no answer arrives within ``timeout`` seconds
    """
    version_url = http_url.rstrip("/") + "/json/version"
    deadline = time.monotonic() + timeout
    failure: Exception | None = None

    async with httpx.AsyncClient(timeout=1.0) as client:
        while time.monotonic() < deadline:
            try:
                response = await client.get(version_url)
                response.raise_for_status()
                return response.json()["webSocketDebuggerUrl"]
            except (httpx.HTTPError, ValueError, KeyError) as e:
                failure = e
            await asyncio.sleep(0.1)

    detail = f": {failure}" if failure else ""
    raise BrowserConnectionError(f"Chrome DevTools not available at {http_url}{detail}")
