# doc_scout/crawler/fetchers/base.py
"""
Page fetcher contract: fetch one page, list its outbound links.

Both strategies share the retry/backoff policy implemented here and differ
only in how they load a document (:meth:`PageFetcher._load`).
"""
from __future__ import annotations

import abc
import asyncio
from typing import Dict, List, Optional, Tuple

from doc_scout.config import CrawlConfig
from doc_scout.crawler.models import PageContent
from doc_scout.crawler.url_filter import origin_of, resolve_link
from doc_scout.exceptions import FetchError, ParseError
from doc_scout.logger import logger
from doc_scout.parser.html_parser import ExtractionRules, ParsedPage

MAX_BACKOFF = 60.0


class PageFetcher(abc.ABC):
    """Loads pages with a per-request timeout and a bounded retry policy."""

    name: str = "abstract"

    def __init__(self, config: CrawlConfig, rules: Optional[ExtractionRules] = None) -> None:
        self.config = config
        self.rules = rules or ExtractionRules.from_selectors(config.selectors)
        self._hrefs: Dict[str, Tuple[str, List[str]]] = {}

    async def __aenter__(self) -> PageFetcher:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> None:
        """Acquire the strategy's resources; failure here is fatal for the crawl."""

    async def close(self) -> None:
        self._hrefs.clear()

    @abc.abstractmethod
    async def _load(self, url: str) -> ParsedPage:
        """Load and parse one document, raising FetchError on failure."""

    async def fetch(self, url: str, *, keep_links: bool = True) -> PageContent:
        """
        Fetch *url* and return its PageContent.

        Retryable failures (5xx, 429, timeout, transport) are retried up to
        ``config.retries`` times with exponential backoff. With *keep_links*
        the page's hrefs are held for one later :meth:`list_links` call.
        """
        attempts = 0
        while True:
            try:
                parsed = await self._load(url)
            except FetchError as exc:
                attempts += 1
                if not exc.retryable or attempts > self.config.retries:
                    raise
                backoff = min(MAX_BACKOFF, self.config.retry_backoff * 2 ** (attempts - 1))
                logger.debug(
                    "Retry %d/%d for %s after %.2f s: %s", attempts, self.config.retries, url, backoff, exc
                )
                await asyncio.sleep(backoff)
                continue
            if keep_links:
                self._hrefs[url] = (parsed.base_url or url, parsed.hrefs)
            return parsed.content

    async def list_links(self, url: str, base_origin: str) -> List[str]:
        """
        Absolute same-origin links of *url*, de-duplicated, in document order.
        Relative hrefs resolve against the URL the page was finally served
        from, or its ``<base href>``.

        Uses the hrefs remembered from :meth:`fetch` and loads the page again
        only when it was never fetched. Never raises.
        """
        remembered = self._hrefs.pop(url, None)
        if remembered is None:
            try:
                parsed = await self._load(url)
            except FetchError as exc:
                logger.warning("Could not extract links from %s: %s", url, exc)
                return []
            remembered = (parsed.base_url or url, parsed.hrefs)
        base, hrefs = remembered

        links: List[str] = []
        seen: set[str] = set()
        for href in hrefs:
            try:
                absolute = resolve_link(href, base)
                if origin_of(absolute) != base_origin:
                    continue
            except ParseError as exc:
                logger.debug("Dropped link %r on %s: %s", href, url, exc)
                continue
            if absolute not in seen:
                seen.add(absolute)
                links.append(absolute)
        return links


__all__ = ["PageFetcher", "MAX_BACKOFF"]
