# === FILE: doc_scout/parser/html_parser.py ===
"""HTML semantic extraction for DocScout.

Turns the raw markup of one documentation page into a
:class:`~doc_scout.crawler.models.PageContent`:

* title: ``<title>``, else the first ``<h1>``, else a placeholder.
* text: main content text. Content containers are tried in order and the
  first one holding more than ``min_content_length`` characters wins.
  Otherwise the ``<body>`` is used.
* headings, code blocks, links (capped) and navigation anchors.

Every selector and threshold lives in :class:`ExtractionRules`, so a site
with unusual markup can be handled without touching the extractor.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from doc_scout.crawler.models import CodeBlock, Heading, Link, Navigation, PageContent

__all__: Sequence[str] = (
    "HEADING_TAGS",
    "ExtractionRules",
    "DEFAULT_RULES",
    "ParsedPage",
    "parse_page",
    "parse_html",
    "extract_hrefs",
    "clean_text",
    "slugify",
)

PLACEHOLDER_TITLE = "Documentation Page"

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
_INVISIBLE_TAGS = ("script", "style", "noscript", "template")
_LANGUAGE_CLASS_RE = re.compile(r"^(?:language|lang)-([\w-]+)$")
_NEWLINE_RUN_RE = re.compile(r"[^\S\n]*\n\s*")
_SPACE_RUN_RE = re.compile(r"[^\S\n]+")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s]")
_SLUG_SPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class ExtractionRules:
    """Selectors and limits used by :func:`parse_page`."""

    content_selectors: Tuple[str, ...] = (
        "main",
        ".content",
        ".documentation",
        "article",
        ".docs-content",
        "#content",
        ".main-content",
    )
    code_selector: str = 'pre code, .code-block, .highlight pre, [class*="language-"]'
    navigation_selector: str = "nav a, .nav a, .navigation a, .sidebar a, .menu a"
    excluded_href_prefixes: Tuple[str, ...] = ("#", "mailto:", "tel:", "javascript:")
    min_content_length: int = 100
    max_content_length: int = 10_000
    min_code_length: int = 10
    max_links: int = 50
    max_slug_length: int = 50

    @classmethod
    def from_selectors(cls, selectors) -> ExtractionRules:
        """Build rules from a :class:`~doc_scout.config.SelectorConfig`."""
        return cls(
            content_selectors=tuple(selectors.content),
            code_selector=selectors.code_blocks,
            navigation_selector=selectors.navigation,
        )


DEFAULT_RULES = ExtractionRules()


@dataclass(slots=True)
class ParsedPage:
    """Extracted page content plus every raw href, for link discovery."""

    content: PageContent
    hrefs: List[str] = field(default_factory=list)
    #: URL relative hrefs resolve against: the final URL, or <base href>
    base_url: Optional[str] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def clean_text(text: str, limit: Optional[int] = None) -> str:
    """Collapse whitespace runs to one newline (if the run had one) or one space."""
    text = _NEWLINE_RUN_RE.sub("\n", text)
    text = _SPACE_RUN_RE.sub(" ", text).strip()
    return text[:limit] if limit is not None else text


def slugify(text: str, max_length: int = 50) -> str:
    slug = _SLUG_STRIP_RE.sub("", text.lower())
    slug = _SLUG_SPACE_RE.sub("-", slug.strip())
    return slug[:max_length]


def _inline_text(tag: Tag) -> str:
    return " ".join(tag.get_text().split())


def _classes(tag: Optional[Tag]) -> List[str]:
    if tag is None:
        return []
    value = tag.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


def _language_of(tag: Tag) -> str:
    for candidate in (tag, tag.parent if isinstance(tag.parent, Tag) else None):
        for token in _classes(candidate):
            match = _LANGUAGE_CLASS_RE.match(token)
            if match:
                return match.group(1)
    return "text"


def _href_of(tag: Tag, rules: ExtractionRules) -> Optional[str]:
    href = tag.get("href")
    if not isinstance(href, str):
        return None
    href = href.strip()
    if not href or href.lower().startswith(rules.excluded_href_prefixes):
        return None
    return href


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------


def _title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    if title_tag is not None:
        title = _inline_text(title_tag)
        if title:
            return title
    h1 = soup.find("h1")
    if h1 is not None:
        text = _inline_text(h1)
        if text:
            return text
    return PLACEHOLDER_TITLE


def _main_text(soup: BeautifulSoup, rules: ExtractionRules) -> str:
    for selector in rules.content_selectors:
        text = "".join(el.get_text() for el in soup.select(selector)).strip()
        if len(text) > rules.min_content_length:
            return clean_text(text, rules.max_content_length)
    root = soup.body or soup
    return clean_text(root.get_text(), rules.max_content_length)


def _headings(soup: BeautifulSoup, rules: ExtractionRules) -> Tuple[Heading, ...]:
    headings: List[Heading] = []
    for tag in soup.find_all(list(HEADING_TAGS)):
        text = _inline_text(tag)
        if not text:
            continue
        existing = tag.get("id")
        ident = existing.strip() if isinstance(existing, str) and existing.strip() else ""
        headings.append(
            Heading(
                level=int(tag.name[1]),
                text=text,
                id=ident or slugify(text, rules.max_slug_length),
            )
        )
    return tuple(headings)


def _code_blocks(soup: BeautifulSoup, rules: ExtractionRules) -> Tuple[CodeBlock, ...]:
    matched = soup.select(rules.code_selector)
    matched_ids = {id(tag) for tag in matched}
    blocks: List[CodeBlock] = []
    for tag in matched:
        # a <pre> wrapping a matched <code> is reported once, through the inner element
        if any(id(inner) in matched_ids for inner in tag.find_all(True)):
            continue
        code = tag.get_text().strip()
        if len(code) < rules.min_code_length:
            continue
        blocks.append(CodeBlock(language=_language_of(tag), code=code))
    return tuple(blocks)


def _links(soup: BeautifulSoup, rules: ExtractionRules) -> Tuple[Link, ...]:
    links: List[Link] = []
    for tag in soup.find_all("a", href=True):
        href = _href_of(tag, rules)
        text = _inline_text(tag)
        if href and text:
            links.append(Link(href=href, text=text))
            if len(links) >= rules.max_links:
                break
    return tuple(links)


def _navigation(soup: BeautifulSoup, rules: ExtractionRules) -> Navigation:
    items: List[Link] = []
    for tag in soup.select(rules.navigation_selector):
        href = tag.get("href")
        text = _inline_text(tag)
        if isinstance(href, str) and href.strip() and text:
            items.append(Link(href=href.strip(), text=text))
    return Navigation(items=tuple(items))


def _hrefs(soup: BeautifulSoup, rules: ExtractionRules) -> List[str]:
    hrefs: List[str] = []
    for tag in soup.find_all("a", href=True):
        href = _href_of(tag, rules)
        if href:
            hrefs.append(href)
    return hrefs


def _base_url(soup: BeautifulSoup, url: Optional[str]) -> Optional[str]:
    tag = soup.find("base", href=True)
    href = tag["href"].strip() if isinstance(tag, Tag) else ""
    if not href:
        return url
    return urljoin(url or "", href)


# ---------------------------------------------------------------------------
# Public functions
# ---------------------------------------------------------------------------


def parse_page(
    html: str, rules: ExtractionRules = DEFAULT_RULES, url: Optional[str] = None
) -> ParsedPage:
    """
    Parse raw HTML into page content and the full list of raw hrefs.

    *url* is the address the markup was served from, after redirects.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for element in soup(list(_INVISIBLE_TAGS)):
        element.decompose()

    content = PageContent(
        title=_title(soup),
        html=html or "",
        text=_main_text(soup, rules),
        headings=_headings(soup, rules),
        code_blocks=_code_blocks(soup, rules),
        links=_links(soup, rules),
        navigation=_navigation(soup, rules),
    )
    return ParsedPage(content=content, hrefs=_hrefs(soup, rules), base_url=_base_url(soup, url))


def parse_html(html: str, rules: ExtractionRules = DEFAULT_RULES) -> PageContent:
    """Return only the :class:`PageContent` of *html*."""
    return parse_page(html, rules).content


def extract_hrefs(html: str, rules: ExtractionRules = DEFAULT_RULES) -> List[str]:
    """Every crawlable raw href of *html*, uncapped, in document order."""
    return parse_page(html, rules).hrefs
