# doc_scout/crawler/url_filter.py
"""
Link eligibility and URL normalization utilities for DocScout.
"""
from __future__ import annotations

from typing import Iterable, List
from urllib.parse import urljoin, urlsplit, urlunsplit

from doc_scout.exceptions import ParseError

_DEFAULT_PORTS = {"http": 80, "https": 443}
_CRAWLABLE_SCHEMES = ("http", "https")


def _split(url: str):
    try:
        parts = urlsplit(url.strip())
        port = parts.port  # raises ValueError on a bad port
    except (ValueError, AttributeError) as exc:
        raise ParseError(f"Malformed URL {url!r}: {exc}") from exc
    if not parts.scheme or not parts.hostname:
        raise ParseError(f"Not an absolute URL: {url!r}")
    return parts, port


def _netloc(scheme: str, hostname: str, port: int | None) -> str:
    host = f"[{hostname}]" if ":" in hostname else hostname
    if port is None or _DEFAULT_PORTS.get(scheme) == port:
        return host
    return f"{host}:{port}"


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` of *url* (default port dropped)."""
    parts, port = _split(url)
    scheme = parts.scheme.lower()
    return f"{scheme}://{_netloc(scheme, parts.hostname.lower(), port)}"


def normalize_url(url: str) -> str:
    """
    Normalize URL for the visited set: lower-case scheme and host, drop the
    fragment and a default port, empty path becomes ``/``; the query is kept.
    """
    parts, port = _split(url)
    scheme = parts.scheme.lower()
    netloc = _netloc(scheme, parts.hostname.lower(), port)
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def resolve_link(href: str, page_url: str) -> str:
    """Resolve *href* against *page_url* and return the normalized absolute URL."""
    try:
        absolute = urljoin(page_url, href.strip())
    except ValueError as exc:
        raise ParseError(f"Cannot resolve {href!r} against {page_url}: {exc}") from exc
    url = normalize_url(absolute)
    if urlsplit(url).scheme not in _CRAWLABLE_SCHEMES:
        raise ParseError(f"Not a crawlable scheme: {href!r}")
    return url


def is_eligible(
    url: str,
    base_origin: str,
    exclude_patterns: Iterable[str] = (),
    include_patterns: Iterable[str] = (),
) -> bool:
    """
    Decide whether a discovered link may be crawled.

    Rejected when it fails to parse, leaves *base_origin*, or its lower-cased
    path contains an exclude pattern. A non-empty *include_patterns* requires
    the path to contain at least one of them.
    """
    try:
        if origin_of(url) != base_origin:
            return False
        path = urlsplit(url).path.lower()
    except ParseError:
        return False

    if any(pattern and pattern.lower() in path for pattern in exclude_patterns):
        return False

    includes: List[str] = [p.lower() for p in include_patterns if p]
    if includes:
        return any(pattern in path for pattern in includes)
    return True


__all__ = ["origin_of", "normalize_url", "resolve_link", "is_eligible"]
