"""
Browser Session - One Chrome page driven over the DevTools Protocol.

A session owns its own cdp-use connection and its own page target, so
concurrent scrapes never share browser state. The target is closed, and a
locally launched Chrome terminated, when the session stops.
"""

import asyncio
import logging
import subprocess
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr

from domscraper.browser import launcher
from domscraper.browser.base import LoadedCallback, PageDriver
from domscraper.config import (
    DEFAULT_BROWSER_HEIGHT,
    DEFAULT_BROWSER_WIDTH,
    DEFAULT_CDP_URL,
    DEFAULT_NAVIGATION_TIMEOUT,
)
from domscraper.exceptions import BrowserConnectionError, BrowserError
from domscraper.logging import logger as scrape_logger

logger = logging.getLogger(__name__)


class BrowserConfig(BaseModel):
    """Where to find Chrome and how to start it."""

    # None launches a local Chrome instead of connecting to a running one
    cdp_url: str | None = DEFAULT_CDP_URL
    headless: bool = True
    executable_path: str | Path | None = None
    user_data_dir: str | Path | None = None
    window_size: tuple[int, int] = (DEFAULT_BROWSER_WIDTH, DEFAULT_BROWSER_HEIGHT)
    args: list[str] = Field(default_factory=list)

    connect_timeout: float = 10.0
    navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT


class BrowserSession(BaseModel, PageDriver):
    """
    PageDriver backed by cdp-use.

    Usage:
        async with BrowserSession(config=BrowserConfig(cdp_url=None)) as session:
            session.on_loaded(loaded.set)
            await session.navigate("https://example.com")
            await loaded.wait()
            html = await session.evaluate("document.body.outerHTML")
    """

    model_config = {"arbitrary_types_allowed": True}

    config: BrowserConfig = Field(default_factory=BrowserConfig)

    _client: Any = PrivateAttr(default=None)
    _process: subprocess.Popen | None = PrivateAttr(default=None)
    _session_id: str | None = PrivateAttr(default=None)
    _target_id: str | None = PrivateAttr(default=None)
    _load_callbacks: list[LoadedCallback] = PrivateAttr(default_factory=list)

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._session_id is not None

    @property
    def cdp_client(self) -> Any:
        if self._client is None:
            raise BrowserError("Browser session not started. Call start() first.")
        return self._client

    @property
    def session_id(self) -> str:
        if self._session_id is None:
            raise BrowserError("Browser session has no attached page.")
        return self._session_id

    @property
    def target_id(self) -> str:
        if self._target_id is None:
            raise BrowserError("Browser session has no page target.")
        return self._target_id

    async def start(self) -> None:
        """
        Connect to Chrome, open a blank page and attach to it.

        Raises:
            BrowserConnectionError: If Chrome cannot be reached, launched or
                asked for a page
        """
        from cdp_use import CDPClient

        if self.is_connected:
            logger.warning("Browser session already started")
            return

        ws_url = await self._websocket_url()
        logger.info(f"Connecting to Chrome at {ws_url}")

        client = CDPClient(ws_url)
        try:
            await client.start()
        except Exception as e:
            raise BrowserConnectionError(f"Cannot connect to browser at {ws_url}: {e}") from e
        self._client = client

        try:
            await self._open_page()
        except Exception as e:
            await self._disconnect()
            raise BrowserConnectionError(f"Cannot open a page in the browser: {e}") from e

        logger.info(f"Browser page ready (target {self._target_id})")

    async def stop(self) -> None:
        """Release the page, the connection and any launched Chrome. Never raises."""
        if self._client is not None and self._target_id is not None:
            try:
                await self._client.send.Target.closeTarget({"targetId": self._target_id})
            except Exception as e:
                logger.warning(f"Cannot close page target {self._target_id}: {e}")

        await self._disconnect()

        if self._process is not None:
            self._process.terminate()
            try:
                self._process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                logger.warning("Chrome did not exit, killing it")
                self._process.kill()
            self._process = None

        self._session_id = None
        self._target_id = None
        self._load_callbacks = []

    def on_loaded(self, callback: LoadedCallback) -> None:
        self._load_callbacks.append(callback)

    async def navigate(self, url: str) -> None:
        """
        Point the page at ``url``. Completion is reported through on_loaded.

        Raises:
            BrowserError: If Chrome refuses the navigation
        """
        scrape_logger.navigation(url)
        result = await self.cdp_client.send.Page.navigate({"url": url}, session_id=self.session_id)

        error_text = result.get("errorText")
        if error_text:
            raise BrowserError(f"Navigation to {url} failed: {error_text}")

    async def evaluate(self, expression: str) -> Any:
        """
        Evaluate ``expression`` in the page and return its value by value.

        Raises:
            BrowserError: If the expression throws
        """
        scrape_logger.cdp("Runtime", "evaluate", {"expression": expression})
        result = await self.cdp_client.send.Runtime.evaluate(
            {"expression": expression, "returnByValue": True, "awaitPromise": True},
            session_id=self.session_id,
        )

        if "exceptionDetails" in result:
            raise BrowserError(f"JS error: {result['exceptionDetails']}")
        return result.get("result", {}).get("value")

    async def _websocket_url(self) -> str:
        cdp_url = self.config.cdp_url
        if cdp_url is None:
            return await self._launch()
        if cdp_url.startswith(("ws://", "wss://")):
            return cdp_url
        return await launcher.resolve_websocket_url(cdp_url, timeout=self.config.connect_timeout)

    async def _launch(self) -> str:
        port = launcher.free_port()
        executable = str(self.config.executable_path or launcher.find_chrome())
        command = launcher.chrome_command(
            executable,
            port,
            self.config.window_size,
            headless=self.config.headless,
            user_data_dir=self.config.user_data_dir,
            extra_args=self.config.args,
        )
        self._process = launcher.launch_chrome(command)
        return await launcher.resolve_websocket_url(f"http://127.0.0.1:{port}")

    async def _open_page(self) -> None:
        scrape_logger.cdp("Target", "createTarget", {"url": "about:blank"})
        created = await self._client.send.Target.createTarget({"url": "about:blank"})
        self._target_id = created["targetId"]

        attached = await self._client.send.Target.attachToTarget(
            {"targetId": self._target_id, "flatten": True}
        )
        self._session_id = attached["sessionId"]

        self._client.register.Page.loadEventFired(self._on_load_event_fired)
        await asyncio.gather(
            self._client.send.Page.enable(session_id=self._session_id),
            self._client.send.Runtime.enable(session_id=self._session_id),
        )

    def _on_load_event_fired(self, event: Any, session_id: str | None = None) -> None:
        # Events arrive for every attached target on the connection
        if session_id is not None and session_id != self._session_id:
            return

        logger.debug(f"Load event fired on {self._target_id}")
        for callback in list(self._load_callbacks):
            callback()

    async def _disconnect(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            await client.stop()
        except Exception as e:
            logger.warning(f"Cannot close DevTools connection: {e}")

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
