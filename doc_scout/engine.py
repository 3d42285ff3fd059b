# File: doc_scout/engine.py
"""doc_scout.engine: orchestration layer that runs a crawl and classifies the result."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from doc_scout.config import CrawlConfig, load_config
from doc_scout.crawler.crawler import CrawlController
from doc_scout.crawler.fetchers import PageFetcher
from doc_scout.crawler.models import CrawlStats, PageRecord
from doc_scout.knowledge import KnowledgeAggregate, KnowledgeClassifier
from doc_scout.logger import logger

__all__ = ["CrawlResult", "start_scan", "Engine"]


@dataclass(frozen=True, slots=True)
class CrawlResult:
    """Pages of one crawl, its statistics and the knowledge classified from them."""

    pages: Tuple[PageRecord, ...]
    stats: CrawlStats
    knowledge: KnowledgeAggregate
    failed_pages: Tuple[str, ...] = ()

    def summary(self) -> Dict[str, Any]:
        return {
            "stats": {
                "total_pages": self.stats.total_pages,
                "total_links": self.stats.total_links,
                "total_code_blocks": self.stats.total_code_blocks,
                "avg_links_per_page": self.stats.avg_links_per_page,
                "avg_code_blocks_per_page": self.stats.avg_code_blocks_per_page,
                "failed_pages": len(self.failed_pages),
            },
            "knowledge": self.knowledge.counts(),
        }


async def start_scan(
    config: CrawlConfig,
    fetcher: Optional[PageFetcher] = None,
    *,
    classifier: Optional[KnowledgeClassifier] = None,
) -> CrawlResult:
    """Crawl ``config.seed_url`` and classify every collected page once."""
    controller = CrawlController(config, fetcher)
    pages = await controller.crawl()
    knowledge = (classifier or KnowledgeClassifier()).classify(pages)
    return CrawlResult(
        pages=tuple(pages),
        stats=controller.get_stats(),
        knowledge=knowledge,
        failed_pages=tuple(controller.failed_pages),
    )


class Engine:
    """Facade for the CLI and tests: load the config, run the crawl, return the result."""

    @staticmethod
    def load_config(path: Optional[str], **overrides: Any) -> CrawlConfig:
        """Load the config from YAML/JSON, or use the defaults."""
        return load_config(path, **overrides)

    def __init__(self, config: CrawlConfig, *, scan_timeout: Optional[float] = None) -> None:
        self.config = config
        self.scan_timeout = scan_timeout

    def run(self, fetcher: Optional[PageFetcher] = None) -> CrawlResult:
        """Run the crawl on a fresh event loop, bounded by ``scan_timeout`` seconds if set."""
        logger.info("Starting crawl of %s", self.config.seed)
        try:
            return asyncio.run(
                asyncio.wait_for(start_scan(self.config, fetcher), timeout=self.scan_timeout)
            )
        except asyncio.TimeoutError:
            logger.error("Crawl did not finish within %s seconds", self.scan_timeout)
            raise
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
