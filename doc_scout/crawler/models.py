# doc_scout/crawler/models.py
"""
Data models for the DocScout crawler.

Records are frozen and hold tuples, so a PageRecord cannot change once the
controller has appended it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True, slots=True)
class FrontierEntry:
    """A not-yet-fetched URL and the depth it was discovered at."""

    url: str
    depth: int


@dataclass(frozen=True, slots=True)
class Heading:
    level: int
    text: str
    id: str


@dataclass(frozen=True, slots=True)
class CodeBlock:
    language: str
    code: str


@dataclass(frozen=True, slots=True)
class Link:
    href: str
    text: str


@dataclass(frozen=True, slots=True)
class Navigation:
    """Anchors found inside navigation-like containers."""

    items: Tuple[Link, ...] = ()


@dataclass(frozen=True, slots=True)
class PageContent:
    """What a page fetcher returns for one URL."""

    title: str
    html: str
    text: str
    headings: Tuple[Heading, ...] = ()
    code_blocks: Tuple[CodeBlock, ...] = ()
    links: Tuple[Link, ...] = ()
    navigation: Navigation = field(default_factory=Navigation)


@dataclass(frozen=True, slots=True)
class PageRecord:
    """Fully extracted semantic representation of one fetched page."""

    url: str
    depth: int
    title: str
    text: str
    html: str
    headings: Tuple[Heading, ...]
    code_blocks: Tuple[CodeBlock, ...]
    links: Tuple[Link, ...]
    navigation: Navigation
    timestamp: str

    @classmethod
    def from_content(cls, url: str, depth: int, content: PageContent, timestamp: str) -> PageRecord:
        return cls(
            url=url,
            depth=depth,
            title=content.title,
            text=content.text,
            html=content.html,
            headings=tuple(content.headings),
            code_blocks=tuple(content.code_blocks),
            links=tuple(content.links),
            navigation=content.navigation,
            timestamp=timestamp,
        )


@dataclass(frozen=True, slots=True)
class CrawlStats:
    total_pages: int
    total_links: int
    total_code_blocks: int
    avg_links_per_page: int
    avg_code_blocks_per_page: int


__all__ = [
    "FrontierEntry",
    "Heading",
    "CodeBlock",
    "Link",
    "Navigation",
    "PageContent",
    "PageRecord",
    "CrawlStats",
]
