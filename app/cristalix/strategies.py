import asyncio
import json
from typing import Protocol, Sequence
from urllib.parse import urlsplit

import aiohttp
from playwright.async_api import BrowserContext, Error as PlaywrightError, Page
from playwright_stealth import Stealth

from app.cristalix.browser import BrowserSession
from app.cristalix.http_session import HttpSession
from app.cristalix.request_builder import USER_AGENT
from app.cristalix.structures import CristalixRequest, FetchResult
from app.logger import logger

EXTRACT_BODY_JS = """() => {
    const pre = document.querySelector('pre');
    if (pre) return pre.textContent;
    return document.body ? (document.body.textContent || document.body.innerText) : '';
}"""

POST_FROM_PAGE_JS = """async ({url, headers, body}) => {
    const response = await fetch(url, {
        method: 'POST',
        headers: headers,
        body: JSON.stringify(body),
        credentials: 'include',
    });
    return {status: response.status, text: await response.text()};
}"""


class FetchStrategy(Protocol):
    name: str

    async def fetch(self, request: CristalixRequest) -> FetchResult:
        ...


def parse_body(strategy: str, text: str | None) -> FetchResult:
    if not text or not text.strip():
        return FetchResult.failure(strategy, "empty response body")
    try:
        return FetchResult.success(strategy, json.loads(text))
    except ValueError:
        return FetchResult.failure(strategy, f"response is not JSON: {text[:200]!r}")


class BrowserStrategy:
    """
    Loads the request in a real Chromium page so bot checks are passed the way a browser
    passes them. GET requests are plain navigations; POST requests are sent with fetch()
    from a page that already sits on the upstream origin. Each request gets its own
    stealth-patched browser context, closed on every exit path.

    The whole page interaction, in-page fetch included, is bounded by ``timeout``.
    """
    name = "browser"

    def __init__(self, session: BrowserSession, timeout: float = 15.0, stealth: Stealth | None = None):
        self.session = session
        self.timeout = timeout
        self.stealth = stealth if stealth is not None else Stealth()

    async def fetch(self, request: CristalixRequest) -> FetchResult:
        browser = await self.session.get_browser()
        if browser is None:
            return FetchResult.failure(self.name, "browser unavailable")

        context: BrowserContext | None = None
        try:
            context = await browser.new_context(user_agent=USER_AGENT)
            await self.stealth.apply_stealth_async(context)
            page = await context.new_page()
            page.set_default_timeout(self.timeout * 1000)
            load = self._post(page, request) if request.method == "POST" else self._navigate(page, request)
            status, text = await asyncio.wait_for(load, timeout=self.timeout)
        except asyncio.TimeoutError:
            return FetchResult.failure(self.name, f"timeout after {self.timeout}s")
        except PlaywrightError as e:
            return FetchResult.failure(self.name, f"{type(e).__name__}: {e}")
        finally:
            if context is not None:
                await self._release(context)

        if status is not None and not 200 <= status < 300:
            return FetchResult.failure(self.name, f"HTTP {status}")
        return parse_body(self.name, text)

    async def _navigate(self, page: Page, request: CristalixRequest) -> tuple[int | None, str]:
        await page.set_extra_http_headers({"Authorization": request.headers.get("Authorization", "")})
        logger.debug(f"Browser GET {request.url}")
        response = await page.goto(request.url, wait_until="domcontentloaded", timeout=self.timeout * 1000)
        status = response.status if response is not None else None
        logger.debug(f"Browser GET status {status}")
        return status, await page.evaluate(EXTRACT_BODY_JS)

    async def _post(self, page: Page, request: CristalixRequest) -> tuple[int | None, str | None]:
        parts = urlsplit(request.url)
        await page.goto(f"{parts.scheme}://{parts.netloc}/", wait_until="domcontentloaded",
                        timeout=self.timeout * 1000)
        headers = {k: v for k, v in request.headers.items() if k.lower() != "user-agent"}
        logger.debug(f"Browser POST {request.url}")
        result = await page.evaluate(POST_FROM_PAGE_JS, {"url": request.url, "headers": headers, "body": request.body})
        if not isinstance(result, dict):
            return None, None
        logger.debug(f"Browser POST status {result.get('status')}")
        return result.get("status"), result.get("text")

    # noinspection PyMethodMayBeStatic
    async def _release(self, context: BrowserContext) -> None:
        try:
            await context.close()
        except PlaywrightError as e:
            logger.debug(f"Browser context already closed: {e}")


class DirectStrategy:
    name = "direct"

    def __init__(self, http: HttpSession):
        self.http = http

    async def fetch(self, request: CristalixRequest) -> FetchResult:
        session = self.http.get()
        try:
            async with session.request(
                    request.method, request.url, headers=request.headers, json=request.body
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    return FetchResult.failure(self.name, f"HTTP {resp.status}: {resp.reason}")
        except aiohttp.ClientError as e:
            return FetchResult.failure(self.name, f"{type(e).__name__}: {e}")
        except asyncio.TimeoutError:
            return FetchResult.failure(self.name, f"timeout after {self.http.request_timeout}s")
        return parse_body(self.name, text)


class StrategyChain:
    """Tries each strategy in order and returns the first successful result."""

    def __init__(self, strategies: Sequence[FetchStrategy]):
        if not strategies:
            raise ValueError("at least one fetch strategy is required")
        self.strategies = list(strategies)
        self.fallbacks = 0

    async def execute(self, request: CristalixRequest) -> FetchResult:
        failures: list[FetchResult] = []
        for strategy in self.strategies:
            try:
                result = await strategy.fetch(request)
            except Exception as e:
                logger.error(f"Unexpected error in {strategy.name} strategy: {e}", exc_info=True)
                result = FetchResult.failure(strategy.name, f"unexpected error: {e}")

            if result.ok:
                if failures:
                    self.fallbacks += 1
                    logger.debug(f"{request.method} {request.url} served by {result.strategy} after "
                                 f"{failures[-1].strategy} failed ({failures[-1].reason})")
                return result

            logger.debug(f"{strategy.name} strategy failed for {request.method} {request.url}: {result.reason}")
            failures.append(result)

        reason = "; ".join(f"{f.strategy}: {f.reason}" for f in failures)
        return FetchResult.failure(failures[-1].strategy, reason)
