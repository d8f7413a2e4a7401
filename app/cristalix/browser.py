import asyncio
from typing import Awaitable, Callable, Optional

from playwright.async_api import Browser, Playwright, async_playwright

from app.logger import logger

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--no-zygote",
    "--disable-accelerated-2d-canvas",
]

Launcher = Callable[[], Awaitable[Browser]]


class BrowserSession:
    """
    Owns the single headless Chromium used by the browser strategy.

    The browser is started on first use. Concurrent callers that arrive while it is
    starting all await the same launch. If the launch fails every waiter gets None,
    the failure is logged once and the next call starts a fresh attempt.
    """

    def __init__(self, executable_path: Optional[str] = None, launcher: Optional[Launcher] = None):
        self.executable_path = executable_path
        self._launcher = launcher or self._launch_chromium
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._launching: asyncio.Task | None = None
        self.launch_attempts = 0

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def _launch_chromium(self) -> Browser:
        if self._playwright is not None:
            await self._playwright.stop()
        self._playwright = await async_playwright().start()
        try:
            return await self._playwright.chromium.launch(
                headless=True,
                executable_path=self.executable_path,
                args=LAUNCH_ARGS,
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise

    async def _launch(self) -> Browser | None:
        self.launch_attempts += 1
        try:
            browser = await self._launcher()
        except Exception as e:
            logger.error(f"Browser launch failed, falling back to direct requests: {e}")
            return None
        logger.info("Browser started")
        return browser

    async def get_browser(self) -> Browser | None:
        if self._browser is not None:
            if self._browser.is_connected():
                return self._browser
            logger.warning("Browser disconnected, starting a new one")
            self._browser = None
        if self._launching is None:
            self._launching = asyncio.create_task(self._launch())
        launching = self._launching
        browser = await asyncio.shield(launching)
        if self._launching is launching:
            self._launching = None
            self._browser = browser
        return browser

    async def close(self) -> None:
        if self._launching is not None:
            browser = await self._launching
            self._launching = None
            self._browser = self._browser or browser
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
            logger.info("Browser closed")
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
