# === FILE: doc_scout/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import enum
import time
from datetime import datetime, timezone
from typing import List, Optional, Set

from doc_scout.config import CrawlConfig
from doc_scout.crawler.fetchers import HTTP, PageFetcher, create_fetcher
from doc_scout.crawler.models import CrawlStats, FrontierEntry, PageRecord
from doc_scout.crawler.url_filter import is_eligible, normalize_url, origin_of
from doc_scout.exceptions import (
    ConfigError,
    CrawlStateError,
    FetcherUnavailableError,
    FetchError,
    ParseError,
)
from doc_scout.logger import logger

__all__ = ("CrawlState", "CrawlController")


class CrawlState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class CrawlController:
    """
    Breadth-first documentation crawler bounded by depth and page count.

    One instance drives one crawl: the visited set, the frontier and the
    collected PageRecords are instance fields and are never shared.
    ``config.concurrency`` workers consume the FIFO frontier; with the
    default of one worker pages are fetched strictly one at a time.
    """

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Optional[PageFetcher] = None,
        *,
        max_depth: Optional[int] = None,
    ) -> None:
        self.config = config
        self.max_depth: int = config.depth if max_depth is None else max_depth
        if self.max_depth < 0:
            raise ConfigError("max_depth must be >= 0")
        self.max_pages: int = config.max_pages
        self.concurrency: int = config.concurrency
        self.fetcher: Optional[PageFetcher] = fetcher
        self.state = CrawlState.IDLE
        self.visited: Set[str] = set()
        self.pages: List[PageRecord] = []
        self.failed_pages: List[str] = []
        self.base_origin: str = ""
        self._queued: Set[str] = set()
        self._frontier: Optional[asyncio.Queue[FrontierEntry]] = None
        self._in_flight = 0
        self._join: Optional[asyncio.Future] = None
        self._slots: Optional[asyncio.Condition] = None
        self._aborted = False

    async def crawl(self, seed_url: Optional[str] = None) -> List[PageRecord]:
        """Crawl from *seed_url* (default ``config.seed_url``) and return the PageRecords."""
        if self.state is not CrawlState.IDLE:
            raise CrawlStateError(f"crawl() already called (state: {self.state.value})")
        seed = self._validate_seed(seed_url or self.config.seed)
        self.base_origin = origin_of(seed)
        self.state = CrawlState.RUNNING

        try:
            fetcher = await self._open_fetcher()
        except Exception:
            self.state = CrawlState.FAILED
            raise

        if self._aborted:
            await fetcher.close()
            self.state = CrawlState.COMPLETED
            logger.warning("Crawl aborted by caller before the first fetch")
            return []

        logger.info("Crawl started: %s (depth %d, max %d pages)", seed, self.max_depth, self.max_pages)
        start = time.monotonic()
        self._frontier = asyncio.Queue()
        self._slots = asyncio.Condition()
        self._enqueue(FrontierEntry(seed, 0))
        workers = [asyncio.create_task(self._worker(fetcher)) for _ in range(self.concurrency)]
        self._join = asyncio.ensure_future(self._frontier.join())
        try:
            await asyncio.wait([self._join, *workers], return_when=asyncio.FIRST_COMPLETED)
            crashed = [w for w in workers if w.done() and not w.cancelled() and w.exception()]
            if crashed:
                raise crashed[0].exception()
        except BaseException:
            self.state = CrawlState.FAILED
            raise
        finally:
            self._join.cancel()
            for w in workers:
                w.cancel()
            await asyncio.gather(self._join, *workers, return_exceptions=True)
            self._discard_frontier()
            await fetcher.close()

        if self._aborted:
            logger.warning("Crawl aborted by caller after %d pages", len(self.pages))

        self.state = CrawlState.COMPLETED
        duration = time.monotonic() - start
        logger.info(
            "Crawl completed: %d pages in %.2f s, %d failed",
            len(self.pages),
            duration,
            len(self.failed_pages),
        )
        return list(self.pages)

    def abort(self) -> None:
        """Cancel the in-flight fetch, stop dequeuing and drop the frontier."""
        if self.state is not CrawlState.RUNNING:
            return
        self._aborted = True
        if self._join is not None and not self._join.done():
            self._join.cancel()

    def get_stats(self) -> CrawlStats:
        if self.state is not CrawlState.COMPLETED:
            raise CrawlStateError(f"stats are available after crawl() returns (state: {self.state.value})")
        total_pages = len(self.pages)
        total_links = sum(len(p.links) for p in self.pages)
        total_code = sum(len(p.code_blocks) for p in self.pages)
        return CrawlStats(
            total_pages=total_pages,
            total_links=total_links,
            total_code_blocks=total_code,
            avg_links_per_page=_round_half_up(total_links, total_pages),
            avg_code_blocks_per_page=_round_half_up(total_code, total_pages),
        )

    # ------------------------------------------------------------------ #
    # internals                                                          #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_seed(seed: str) -> str:
        try:
            url = normalize_url(seed)
        except ParseError as exc:
            raise ConfigError(f"Invalid seed URL {seed!r}: {exc}") from exc
        if not url.startswith(("http://", "https://")):
            raise ConfigError(f"Seed URL must use http or https: {seed!r}")
        return url

    async def _open_fetcher(self) -> PageFetcher:
        if self.fetcher is None:
            self.fetcher = create_fetcher(self.config)
        try:
            await self.fetcher.open()
        except FetcherUnavailableError as exc:
            if self.fetcher.name == HTTP or not self.config.browser_fallback:
                raise
            logger.warning("%s; falling back to the http fetcher", exc)
            self.fetcher = create_fetcher(self.config, kind=HTTP)
            await self.fetcher.open()
        logger.debug("Using %s fetcher", self.fetcher.name)
        return self.fetcher

    def _enqueue(self, entry: FrontierEntry) -> None:
        if self._frontier is None:
            raise CrawlStateError("frontier used outside crawl()")
        self._queued.add(entry.url)
        self._frontier.put_nowait(entry)

    def _discard_frontier(self) -> None:
        if self._frontier is None:
            return
        while not self._frontier.empty():
            self._frontier.get_nowait()
            self._frontier.task_done()

    async def _worker(self, fetcher: PageFetcher) -> None:
        if self._frontier is None or self._slots is None:
            raise CrawlStateError("worker started outside crawl()")
        while True:
            entry = await self._frontier.get()
            try:
                await self._process(fetcher, entry)
            finally:
                self._frontier.task_done()

    async def _process(self, fetcher: PageFetcher, entry: FrontierEntry) -> None:
        if entry.depth > self.max_depth:
            return
        async with self._slots:
            # pages still in flight may fail and free their slot
            await self._slots.wait_for(
                lambda: len(self.pages) + self._in_flight < self.max_pages
                or len(self.pages) >= self.max_pages
            )
            if len(self.pages) >= self.max_pages:
                return
            # check-and-mark with no suspension point in between
            if entry.url in self.visited:
                return
            self.visited.add(entry.url)
            self._in_flight += 1

        try:
            try:
                content = await fetcher.fetch(entry.url, keep_links=entry.depth < self.max_depth)
            except FetchError as exc:
                self.failed_pages.append(entry.url)
                logger.warning("Failed to crawl %s: %s", entry.url, exc)
                return
            self.pages.append(
                PageRecord.from_content(
                    entry.url, entry.depth, content, datetime.now(timezone.utc).isoformat()
                )
            )
        finally:
            self._in_flight -= 1
            async with self._slots:
                self._slots.notify_all()
        logger.debug("Crawled [%d] %s", entry.depth, entry.url)

        if entry.depth < self.max_depth:
            await self._discover(fetcher, entry)

    async def _discover(self, fetcher: PageFetcher, entry: FrontierEntry) -> None:
        for raw in await fetcher.list_links(entry.url, self.base_origin):
            try:
                link = normalize_url(raw)
            except ParseError:
                continue
            if not is_eligible(
                link, self.base_origin, self.config.exclude_patterns, self.config.include_patterns
            ):
                continue
            if link in self.visited or link in self._queued:
                continue
            self._enqueue(FrontierEntry(link, entry.depth + 1))


def _round_half_up(total: int, count: int) -> int:
    return int(total / count + 0.5) if count else 0
