# doc_scout/exceptions.py
"""Exception hierarchy for DocScout."""
from __future__ import annotations

from typing import Optional


class DocScoutError(Exception):
    """Base exception class for DocScout errors."""


class ConfigError(DocScoutError, ValueError):
    """Invalid crawl configuration (bad seed URL, non-positive depth, ...)."""


class FetchError(DocScoutError):
    """A page could not be fetched: non-2xx response, timeout or transport failure."""

    def __init__(
        self,
        url: str,
        message: str,
        *,
        status: Optional[int] = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.status = status
        self.retryable = retryable


class ParseError(DocScoutError, ValueError):
    """Malformed URL met while resolving or filtering a link."""


class FetcherUnavailableError(DocScoutError):
    """A page fetch strategy could not be initialised."""


class CrawlStateError(DocScoutError, RuntimeError):
    """Controller operation called in the wrong lifecycle state."""


__all__ = [
    "DocScoutError",
    "ConfigError",
    "FetchError",
    "ParseError",
    "FetcherUnavailableError",
    "CrawlStateError",
]
