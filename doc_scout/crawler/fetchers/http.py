# doc_scout/crawler/fetchers/http.py
"""
Direct HTTP fetch strategy: aiohttp request + BeautifulSoup parse.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from doc_scout.config import CrawlConfig
from doc_scout.crawler.fetchers.base import PageFetcher
from doc_scout.exceptions import CrawlStateError, FetchError
from doc_scout.parser.html_parser import ExtractionRules, ParsedPage, parse_page

_HTML_TYPES = ("text/html", "application/xhtml+xml")


class HttpFetcher(PageFetcher):
    """Fetches pages over plain HTTP with a per-request timeout."""

    name = "http"
    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(
        self,
        config: CrawlConfig,
        rules: Optional[ExtractionRules] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        super().__init__(config, rules)
        self.session = session
        self._owns_session = session is None

    async def open(self) -> None:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout_seconds),
                headers={
                    "User-Agent": self.config.user_agent,
                    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                    "Accept-Language": "en-US,en;q=0.5",
                },
                raise_for_status=False,
            )

    async def close(self) -> None:
        await super().close()
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
        if self._owns_session:
            self.session = None

    async def _load(self, url: str) -> ParsedPage:
        if self.session is None:
            raise CrawlStateError("HTTP session not initialized")
        try:
            async with self.session.get(url) as resp:
                status = resp.status
                if status in self._RETRY_STATUS:
                    raise FetchError(url, f"HTTP {status}", status=status, retryable=True)
                if not 200 <= status < 300:
                    raise FetchError(url, f"HTTP {status}", status=status)
                mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                if mime and mime not in _HTML_TYPES:
                    raise FetchError(url, f"unsupported content type {mime}", status=status)
                html = await resp.text(errors="replace")
                final_url = str(resp.url)
        except asyncio.TimeoutError as exc:
            raise FetchError(url, "request timed out", retryable=True) from exc
        except ClientError as exc:
            raise FetchError(url, f"transport error: {exc}", retryable=True) from exc
        return parse_page(html, self.rules, url=final_url)


__all__ = ["HttpFetcher"]
