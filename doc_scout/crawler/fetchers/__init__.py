# doc_scout/crawler/fetchers/__init__.py
"""
Page fetch strategies and their explicit selection.

The strategy is chosen from configuration, never from the environment:
:func:`resolve_fetcher_kind` is the pure fallback rule and
:func:`create_fetcher` builds the instance.
"""
from __future__ import annotations

import importlib.util
from typing import Optional

from doc_scout.config import CrawlConfig
from doc_scout.crawler.fetchers.base import PageFetcher
from doc_scout.crawler.fetchers.http import HttpFetcher
from doc_scout.parser.html_parser import ExtractionRules

HTTP = "http"
BROWSER = "browser"


def playwright_installed() -> bool:
    """True when the Playwright distribution can be imported."""
    return importlib.util.find_spec("playwright") is not None


def resolve_fetcher_kind(requested: str, browser_available: bool) -> str:
    """``browser`` only when it was requested and is available, otherwise ``http``."""
    if requested == BROWSER and browser_available:
        return BROWSER
    return HTTP


def create_fetcher(
    config: CrawlConfig,
    *,
    kind: Optional[str] = None,
    browser_available: Optional[bool] = None,
    rules: Optional[ExtractionRules] = None,
) -> PageFetcher:
    """Build the fetcher selected by *kind* (default ``config.fetcher``)."""
    if browser_available is None:
        browser_available = playwright_installed()
    selected = resolve_fetcher_kind(kind or config.fetcher, browser_available)
    if selected == BROWSER:
        from doc_scout.crawler.fetchers.browser import BrowserFetcher

        return BrowserFetcher(config, rules)
    return HttpFetcher(config, rules)


__all__ = [
    "PageFetcher",
    "HttpFetcher",
    "playwright_installed",
    "resolve_fetcher_kind",
    "create_fetcher",
    "HTTP",
    "BROWSER",
]
