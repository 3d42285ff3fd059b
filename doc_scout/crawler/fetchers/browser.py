# doc_scout/crawler/fetchers/browser.py
"""
Browser-automation fetch strategy: Playwright drives a headless Chromium and
the rendered DOM goes through the same HTML extractor as the HTTP strategy.
"""
from __future__ import annotations

from typing import Optional

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from doc_scout.config import CrawlConfig
from doc_scout.crawler.fetchers.base import PageFetcher
from doc_scout.exceptions import CrawlStateError, FetcherUnavailableError, FetchError
from doc_scout.logger import logger
from doc_scout.parser.html_parser import ExtractionRules, ParsedPage, parse_page


class BrowserFetcher(PageFetcher):
    """Loads each page in a fresh tab of one shared browser context."""

    name = "browser"

    def __init__(self, config: CrawlConfig, rules: Optional[ExtractionRules] = None) -> None:
        super().__init__(config, rules)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def open(self) -> None:
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=["--disable-gpu", "--no-sandbox", "--disable-dev-shm-usage"],
            )
            self._context = await self._browser.new_context(user_agent=self.config.user_agent)
        except PlaywrightError as exc:
            await self.close()
            raise FetcherUnavailableError(f"Browser automation could not start: {exc}") from exc
        logger.info("Browser fetcher ready (headless=%s)", self.config.headless)

    async def close(self) -> None:
        await super().close()
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
            if self._playwright is not None:
                await self._playwright.stop()
        except PlaywrightError as exc:
            logger.debug("Browser shutdown: %s", exc)
        finally:
            self._context = self._browser = self._playwright = None

    async def _load(self, url: str) -> ParsedPage:
        if self._context is None:
            raise CrawlStateError("Browser context not initialized")
        page = await self._context.new_page()
        try:
            response = await page.goto(url, timeout=self.config.timeout, wait_until="load")
            if response is None:
                raise FetchError(url, "no response", retryable=True)
            status = response.status
            if status >= 400:
                raise FetchError(
                    url, f"HTTP {status}", status=status, retryable=status >= 500 or status == 429
                )
            html = await page.content()
            final_url = page.url
        except PlaywrightTimeout as exc:
            raise FetchError(url, "navigation timed out", retryable=True) from exc
        except PlaywrightError as exc:
            raise FetchError(url, f"browser error: {exc}", retryable=True) from exc
        finally:
            await page.close()
        return parse_page(html, self.rules, url=final_url)


__all__ = ["BrowserFetcher"]
