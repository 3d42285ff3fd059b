# File: tests/test_crawler.py
# Test-suite for the DocScout crawl controller
from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from doc_scout.crawler.crawler import CrawlController, CrawlState
from doc_scout.crawler.models import FrontierEntry
from doc_scout.exceptions import ConfigError, CrawlStateError, FetcherUnavailableError, FetchError

from tests.conftest import SEED, FakeFetcher, page

#: number of seconds a “slow” handler sleeps in the concurrency test
SLOW_SLEEP: float = 0.5
#: number of pages created by the stress fixture / test (root + pages 1…200)
STRESS_PAGES: int = 201


def url(path: str) -> str:
    return f"https://ex.com{path}"


async def run_crawler(controller: CrawlController, expected_pages: int = 100):
    """Run the crawl inside a timeout scaled by *expected_pages*."""
    total_timeout = max(15.0, expected_pages * 0.1)
    return await asyncio.wait_for(controller.crawl(), timeout=total_timeout)


# --------------------------------------------------------------------------- #
#                        Controller on an in-memory site                       #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
@pytest.mark.parametrize("concurrency", [1, 4])
async def test_page_bound(make_config, concurrency):
    links = [f"/docs/p{i}" for i in range(20)]
    site = {SEED: page("Root", *links)}
    site.update({url(link): page(link) for link in links})
    fetcher = FakeFetcher(make_config(max_pages=5, concurrency=concurrency), site)

    pages = await run_crawler(CrawlController(fetcher.config, fetcher))

    assert len(pages) == 5
    assert pages[0].url == SEED


@pytest.mark.asyncio()
async def test_each_url_fetched_once(make_config):
    site = {
        SEED: page("Root", "/docs/a", "/docs/b", "/docs", "/docs#top"),
        url("/docs/a"): page("A", "/docs", "/docs/b", "/docs/a"),
        url("/docs/b"): page("B", "/docs/a", "https://EX.com:443/docs"),
    }
    fetcher = FakeFetcher(make_config(depth=5), site)
    controller = CrawlController(fetcher.config, fetcher)

    pages = await run_crawler(controller)

    urls = [p.url for p in pages]
    assert sorted(urls) == sorted(site)
    assert len(fetcher.loaded) == len(set(fetcher.loaded)) == 3
    assert controller.visited == set(site)


@pytest.mark.asyncio()
async def test_breadth_first_depth_accounting(make_config):
    site = {
        SEED: page("Root", "/docs/a", "/docs/b"),
        url("/docs/a"): page("A", "/docs/c"),
        url("/docs/b"): page("B"),
        url("/docs/c"): page("C", "/docs/d"),
        url("/docs/d"): page("D"),
    }
    fetcher = FakeFetcher(make_config(depth=2), site)

    pages = await run_crawler(CrawlController(fetcher.config, fetcher))

    assert [(p.url, p.depth) for p in pages] == [
        (SEED, 0),
        (url("/docs/a"), 1),
        (url("/docs/b"), 1),
        (url("/docs/c"), 2),
    ]
    # depth ceiling: nothing beyond depth 2 is even loaded
    assert url("/docs/d") not in fetcher.loaded


@pytest.mark.asyncio()
async def test_depth_zero_override_fetches_only_seed(make_config):
    fetcher = FakeFetcher(make_config(), {SEED: page("Root", "/docs/a"), url("/docs/a"): page("A")})
    controller = CrawlController(fetcher.config, fetcher, max_depth=0)

    pages = await run_crawler(controller)

    assert [p.url for p in pages] == [SEED]
    assert fetcher.loaded == [SEED]


def test_negative_depth_override_rejected(make_config):
    with pytest.raises(ConfigError):
        CrawlController(make_config(), max_depth=-1)


@pytest.mark.asyncio()
async def test_exclude_and_include_patterns(make_config):
    site = {
        SEED: page("Root", "/docs/blog/post", "/docs/guide", "/pricing", "https://other.org/docs/x"),
        url("/docs/blog/post"): page("Post"),
        url("/docs/guide"): page("Guide"),
        url("/pricing"): page("Pricing"),
    }
    cfg = make_config(exclude_patterns=["/blog"], include_patterns=["/docs"])
    fetcher = FakeFetcher(cfg, site)

    pages = await run_crawler(CrawlController(cfg, fetcher))

    assert [p.url for p in pages] == [SEED, url("/docs/guide")]
    assert fetcher.loaded == [SEED, url("/docs/guide")]


@pytest.mark.asyncio()
async def test_fetch_failure_skips_page(make_config):
    site = {
        SEED: page("Root", "/docs/b", "/docs/c"),
        url("/docs/b"): FetchError(url("/docs/b"), "HTTP 500", status=500),
        url("/docs/c"): page("C"),
    }
    fetcher = FakeFetcher(make_config(), site)
    controller = CrawlController(fetcher.config, fetcher)

    pages = await run_crawler(controller)

    assert [p.url for p in pages] == [SEED, url("/docs/c")]
    assert controller.failed_pages == [url("/docs/b")]
    assert controller.state is CrawlState.COMPLETED


@pytest.mark.asyncio()
async def test_failing_seed_yields_no_pages(make_config):
    fetcher = FakeFetcher(make_config(), {})
    controller = CrawlController(fetcher.config, fetcher)

    assert await run_crawler(controller) == []
    assert controller.get_stats().total_pages == 0
    assert controller.get_stats().avg_links_per_page == 0


@pytest.mark.asyncio()
async def test_stats_round_half_up(make_config):
    site = {
        SEED: page("Root", "/docs/a", "/docs/a#x"),
        url("/docs/a"): page("A", "/docs", body='<pre><code class="language-python">print("hello")</code></pre>'),
    }
    fetcher = FakeFetcher(make_config(), site)
    controller = CrawlController(fetcher.config, fetcher)
    await run_crawler(controller)

    stats = controller.get_stats()
    assert stats.total_pages == 2
    assert stats.total_links == 3
    assert stats.avg_links_per_page == 2
    assert stats.total_code_blocks == 1
    assert stats.avg_code_blocks_per_page == 1


@pytest.mark.asyncio()
async def test_page_records_are_complete(make_config):
    html = page("Guide", "/docs/a", body='<h2 id="setup">Setup</h2><p>Install it.</p>')
    fetcher = FakeFetcher(make_config(), {SEED: html})

    (record,) = await run_crawler(CrawlController(fetcher.config, fetcher, max_depth=0))

    assert record.title == "Guide"
    assert record.html == html
    assert record.headings[0].id == "setup"
    assert record.links[0].href == "/docs/a"
    assert record.timestamp.endswith("+00:00")


@pytest.mark.asyncio()
async def test_lifecycle_errors(make_config):
    fetcher = FakeFetcher(make_config(), {SEED: page("Root")})
    controller = CrawlController(fetcher.config, fetcher)
    with pytest.raises(CrawlStateError):
        controller.get_stats()

    await run_crawler(controller)
    assert fetcher.opened and fetcher.closed
    with pytest.raises(CrawlStateError):
        await controller.crawl()


@pytest.mark.asyncio()
@pytest.mark.parametrize("seed", ["not a url", "ftp://ex.com/docs"])
async def test_invalid_seed(make_config, seed):
    fetcher = FakeFetcher(make_config(), {})
    with pytest.raises(ConfigError):
        await CrawlController(fetcher.config, fetcher).crawl(seed)
    assert fetcher.loaded == []


@pytest.mark.asyncio()
async def test_abort_stops_crawl(make_config):
    chain = [f"/docs/p{i}" for i in range(1, 10)]
    site = {SEED: page("Root", chain[0])}
    for current, nxt in zip(chain, chain[1:] + [None]):
        site[url(current)] = page(current, *([nxt] if nxt else []))
    holder = {}

    def on_load(loaded_url):
        if loaded_url == url("/docs/p2"):
            holder["controller"].abort()

    fetcher = FakeFetcher(make_config(depth=20), site, on_load=on_load)
    controller = holder["controller"] = CrawlController(fetcher.config, fetcher)

    pages = await run_crawler(controller)

    assert controller.state is CrawlState.COMPLETED
    assert 2 <= len(pages) < len(site)
    assert fetcher.closed


def test_frontier_used_outside_crawl(make_config):
    controller = CrawlController(make_config())
    with pytest.raises(CrawlStateError):
        controller._enqueue(FrontierEntry(SEED, 0))


class SlowOpenFetcher(FakeFetcher):
    async def open(self) -> None:
        await asyncio.sleep(0.05)
        await super().open()


@pytest.mark.asyncio()
async def test_abort_while_fetcher_opens(make_config):
    fetcher = SlowOpenFetcher(make_config(), {SEED: page("Root", "/docs/a"), url("/docs/a"): page("A")})
    controller = CrawlController(fetcher.config, fetcher)

    task = asyncio.create_task(run_crawler(controller))
    await asyncio.sleep(0.01)
    controller.abort()
    pages = await task

    assert pages == []
    assert fetcher.loaded == []
    assert fetcher.closed
    assert controller.state is CrawlState.COMPLETED


@pytest.mark.asyncio()
async def test_failed_in_flight_page_frees_its_slot(make_config):
    site = {
        SEED: page("Root", "/docs/a", "/docs/b"),
        url("/docs/a"): FetchError(url("/docs/a"), "HTTP 404", status=404),
        url("/docs/b"): page("B"),
    }
    fetcher = FakeFetcher(make_config(max_pages=2, concurrency=2), site)
    controller = CrawlController(fetcher.config, fetcher)

    pages = await run_crawler(controller)

    assert [p.url for p in pages] == [SEED, url("/docs/b")]
    assert controller.failed_pages == [url("/docs/a")]


class BrokenFetcher(FakeFetcher):
    async def open(self) -> None:
        raise FetcherUnavailableError("cannot start")


@pytest.mark.asyncio()
async def test_unavailable_fetcher_is_fatal(make_config):
    fetcher = BrokenFetcher(make_config(), {SEED: page("Root")})
    fetcher.name = "http"
    controller = CrawlController(fetcher.config, fetcher)
    with pytest.raises(FetcherUnavailableError):
        await controller.crawl()
    assert controller.state is CrawlState.FAILED


@pytest.mark.asyncio()
async def test_browser_without_fallback_is_fatal(make_config):
    fetcher = BrokenFetcher(make_config(fetcher="browser", browser_fallback=False), {})
    fetcher.name = "browser"
    controller = CrawlController(fetcher.config, fetcher)
    with pytest.raises(FetcherUnavailableError):
        await controller.crawl()
    assert controller.state is CrawlState.FAILED


# --------------------------------------------------------------------------- #
#                         Live server with HttpFetcher                         #
# --------------------------------------------------------------------------- #


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


def html_response(title: str, *links: str) -> web.Response:
    return web.Response(text=page(title, *links), content_type="text/html")


@pytest_asyncio.fixture
async def test_server_docs(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def handle_root(_):
        return html_response("Home", "/docs/a", "/docs/missing", "https://other.org/docs")

    async def handle_a(_):
        return html_response("A", "/docs/b", "/")

    async def handle_b(_):
        return html_response("B", "/docs/c")

    async def handle_c(_):
        return html_response("C")

    app.router.add_get("/", handle_root)
    app.router.add_get("/docs/a", handle_a)
    app.router.add_get("/docs/b", handle_b)
    app.router.add_get("/docs/c", handle_c)

    async for base in _serve_app(app, unused_tcp_port):
        yield base


@pytest_asyncio.fixture
async def test_server_large(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def handle_root(_):
        return html_response("Home", *(f"/docs/page{i}" for i in range(1, STRESS_PAGES)))

    async def handle_page(_):
        return html_response("Page")

    app.router.add_get("/", handle_root)
    for i in range(1, STRESS_PAGES):
        app.router.add_get(f"/docs/page{i}", handle_page)

    async for base in _serve_app(app, unused_tcp_port):
        yield base


@pytest.mark.asyncio()
async def test_basic_http_crawl(make_config, test_server_docs: str):
    base = test_server_docs
    controller = CrawlController(make_config(seed_url=base, depth=2))

    pages = await run_crawler(controller)

    assert [p.url for p in pages] == [f"{base}/", f"{base}/docs/a", f"{base}/docs/b"]
    assert [p.title for p in pages] == ["Home", "A", "B"]
    assert controller.failed_pages == [f"{base}/docs/missing"]


@pytest.mark.asyncio()
async def test_redirected_page_resolves_relative_links(make_config, unused_tcp_port: int):
    app = web.Application()

    async def moved(_):
        raise web.HTTPMovedPermanently(location="/docs/")

    async def index(_):
        return html_response("Docs", "intro")

    async def intro(_):
        return html_response("Intro")

    app.router.add_get("/docs", moved)
    app.router.add_get("/docs/", index)
    app.router.add_get("/docs/intro", intro)

    async for base in _serve_app(app, unused_tcp_port):
        controller = CrawlController(make_config(seed_url=f"{base}/docs", depth=1))
        pages = await run_crawler(controller, expected_pages=2)

    assert [p.url for p in pages] == [f"{base}/docs", f"{base}/docs/intro"]
    assert [p.title for p in pages] == ["Docs", "Intro"]
    assert controller.failed_pages == []


@pytest.mark.asyncio()
async def test_browser_falls_back_to_http(make_config, test_server_docs: str):
    base = test_server_docs
    cfg = make_config(seed_url=base, fetcher="browser", browser_fallback=True)
    broken = BrokenFetcher(cfg, {})
    broken.name = "browser"
    controller = CrawlController(cfg, broken, max_depth=0)

    pages = await run_crawler(controller)

    assert [p.url for p in pages] == [f"{base}/"]
    assert controller.fetcher.name == "http"


@pytest.mark.asyncio()
async def test_concurrency(make_config, unused_tcp_port: int):
    """Ensure that two slow pages are fetched concurrently."""
    app = web.Application()

    async def slow(_):
        await asyncio.sleep(SLOW_SLEEP)
        return html_response("Slow")

    async def root(_):
        return html_response("Root", "/docs/slow1", "/docs/slow2")

    app.router.add_get("/", root)
    app.router.add_get("/docs/slow1", slow)
    app.router.add_get("/docs/slow2", slow)

    async for base in _serve_app(app, unused_tcp_port):
        controller = CrawlController(make_config(seed_url=base, depth=1, concurrency=2, timeout=5000))
        start = time.perf_counter()
        pages = await run_crawler(controller, expected_pages=3)
        elapsed = time.perf_counter() - start

    assert elapsed < SLOW_SLEEP * 1.8
    urls = {p.url for p in pages}
    assert f"{base}/docs/slow1" in urls
    assert f"{base}/docs/slow2" in urls


@pytest.mark.asyncio()
@pytest.mark.slow()
async def test_stress_crawl(make_config, test_server_large: str):
    base = test_server_large
    controller = CrawlController(
        make_config(seed_url=base, depth=1, max_pages=500, concurrency=8, timeout=5000)
    )
    pages = await run_crawler(controller, expected_pages=STRESS_PAGES)
    urls = {p.url for p in pages}

    assert len(urls) == len(pages) == STRESS_PAGES
    for i in range(1, STRESS_PAGES):
        assert f"{base}/docs/page{i}" in urls
