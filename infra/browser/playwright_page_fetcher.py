from __future__ import annotations

from typing import Any


class PlaywrightPageFetcher:
    """
    Playwright-backed implementation of ``PageFetcherPort``.

    Requires ``playwright`` to be installed and browsers set up via
    ``playwright install chromium``.

    Use as an async context manager, or call ``launch()`` and ``close()``.
    One Chromium page is reused for every fetch.
    """

    def __init__(self, *, headless: bool = True, settle_timeout_ms: int = 15_000) -> None:
        self._headless = headless
        self._settle_timeout_ms = settle_timeout_ms
        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None

    async def __aenter__(self) -> "PlaywrightPageFetcher":
        await self.launch()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()

    async def launch(self) -> None:
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self._headless)
        self._page = await self._browser.new_page()

    async def close(self) -> None:
        if self._page:
            await self._page.close()
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()
        self._page = self._browser = self._playwright = None

    def _ensure_page(self) -> Any:
        if self._page is None:
            raise RuntimeError("Browser not launched. Call launch() first.")
        return self._page

    async def fetch_html(self, url: str) -> str:
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        page = self._ensure_page()
        await page.goto(url, wait_until="domcontentloaded")
        try:
            await page.wait_for_load_state("networkidle", timeout=self._settle_timeout_ms)
        except PlaywrightTimeoutError:
            # Pages with long-polling never go idle; the DOM is usable anyway.
            pass
        return await page.content()
