# File: tests/conftest.py
import asyncio
import sys
from typing import Callable, Dict, List, Optional, Union

import pytest
from aiohttp.test_utils import unused_port

from doc_scout.config import CrawlConfig, build_config
from doc_scout.crawler.fetchers.base import PageFetcher
from doc_scout.exceptions import FetchError
from doc_scout.logger import configure
from doc_scout.parser.html_parser import ParsedPage, parse_page

SEED = "https://ex.com/docs"


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


def page(title: str, *links: str, body: str = "") -> str:
    """Minimal documentation page linking to *links*."""
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    return f"<html><head><title>{title}</title></head><body><main>{body}</main>{anchors}</body></html>"


class FakeFetcher(PageFetcher):
    """
    In-memory fetcher: *site* maps URL -> HTML or an exception to raise.
    Unknown URLs fail with a non-retryable 404.
    """

    name = "fake"

    def __init__(
        self,
        config: CrawlConfig,
        site: Dict[str, Union[str, Exception]],
        on_load: Optional[Callable[[str], None]] = None,
    ) -> None:
        super().__init__(config)
        self.site = site
        self.on_load = on_load
        self.loaded: List[str] = []
        self.opened = False
        self.closed = False

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        await super().close()
        self.closed = True

    async def _load(self, url: str) -> ParsedPage:
        self.loaded.append(url)
        await asyncio.sleep(0)
        if self.on_load is not None:
            self.on_load(url)
        outcome = self.site.get(url)
        if outcome is None:
            raise FetchError(url, "HTTP 404", status=404)
        if isinstance(outcome, Exception):
            raise outcome
        return parse_page(outcome, self.rules, url=url)


@pytest.fixture(autouse=True)
def reset_logging():
    """Keep the project logger on a live stream between tests."""
    configure(level="DEBUG", stream=sys.stderr)
    yield
    configure(level="INFO", stream=sys.stderr)


@pytest.fixture()
def make_config() -> Callable[..., CrawlConfig]:
    """
    Factory for a valid CrawlConfig with test-friendly defaults:
    no include filter and no backoff sleep between retries.
    """

    def _make(**overrides) -> CrawlConfig:
        data = {"seed_url": SEED, "include_patterns": [], "retry_backoff": 0}
        data.update(overrides)
        return build_config(data)

    return _make


@pytest.fixture()
def basic_config(make_config) -> CrawlConfig:
    return make_config(depth=2, max_pages=10)


@pytest.fixture()
def unused_tcp_port() -> int:
    return unused_port()
