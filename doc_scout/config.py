# === FILE: doc_scout/config.py ===
"""
Loading and validation of the DocScout crawl configuration.
Pydantic describes the schema; every validation failure surfaces as
:class:`~doc_scout.exceptions.ConfigError` before any network activity.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

from doc_scout.exceptions import ConfigError

DEFAULT_USER_AGENT = "DocScout/1.0 (+https://github.com/doc-scout)"

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "/changelog",
    "/blog",
    "/news",
    "404",
    "search",
    "login",
    "signup",
)

DEFAULT_INCLUDE_PATTERNS: tuple[str, ...] = (
    "/docs",
    "/documentation",
    "/api",
    "/guide",
    "/tutorial",
    "/reference",
)


class SelectorConfig(BaseModel):
    """CSS selectors handed to the HTML semantic extractor."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    content: List[str] = Field(
        default_factory=lambda: [
            "main",
            ".content",
            ".documentation",
            "article",
            ".docs-content",
            "#content",
            ".main-content",
        ],
        description="Main-content containers, tried in order.",
    )
    code_blocks: str = Field(
        'pre code, .code-block, .highlight pre, [class*="language-"]',
        min_length=1,
        description="Code block elements.",
    )
    navigation: str = Field(
        "nav a, .nav a, .navigation a, .sidebar a, .menu a",
        min_length=1,
        description="Anchors inside navigation-like containers.",
    )


class CrawlConfig(BaseModel):
    """Configuration of one crawl invocation."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: HttpUrl = Field(..., description="Seed URL of the documentation site.")
    depth: int = Field(2, ge=1, description="Crawl depth ceiling.")
    max_pages: int = Field(50, ge=1, description="Upper bound on collected pages.")
    timeout: float = Field(30000, gt=0, description="Per-fetch timeout (milliseconds).")
    retries: int = Field(3, ge=0, description="Retries of a transient fetch failure.")
    retry_backoff: float = Field(1.0, ge=0, description="Base of the exponential backoff (seconds).")
    concurrency: int = Field(1, ge=1, description="Concurrent fetches; 1 keeps the crawl sequential.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent header.")
    exclude_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS),
        description="Path substrings that disqualify a link.",
    )
    include_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS),
        description="Path substrings of which a link must contain one (empty: any).",
    )
    fetcher: Literal["http", "browser"] = Field("http", description="Page fetch strategy.")
    browser_fallback: bool = Field(
        True, description="Fall back to the http strategy when the browser cannot be started."
    )
    headless: bool = Field(True, description="Run the automation browser headless.")
    selectors: SelectorConfig = Field(default_factory=SelectorConfig)

    @field_validator("exclude_patterns", "include_patterns")
    @classmethod
    def _lowercase_patterns(cls, v: List[str]) -> List[str]:
        return [p.lower() for p in v if p]

    @property
    def seed(self) -> str:
        return str(self.seed_url)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000.0


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Malformed YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Malformed JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "config"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def build_config(data: Optional[Mapping[str, Any]] = None, **overrides: Any) -> CrawlConfig:
    """Validate *data* merged with non-``None`` *overrides* into a CrawlConfig."""
    merged: Dict[str, Any] = dict(data or {})
    merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return CrawlConfig(**merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {_describe(exc)}") from exc


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> CrawlConfig:
    """
    Read YAML or JSON and return a validated CrawlConfig.

    Without *path* the default ``configs/default.yaml`` is used when present,
    otherwise only *overrides* are validated. An explicit path that does not
    exist raises FileNotFoundError.
    """
    data: dict[str, Any] = {}
    if path is None:
        if _DEFAULT_CFG.is_file():
            data = _read_file(_DEFAULT_CFG)
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))
        data = _read_file(path_obj)
    return build_config(data, **overrides)


def _read_file(path: Path) -> dict[str, Any]:
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path)
    if suffix == ".json":
        return _read_json(path)
    raise ValueError(f"Unsupported config format: {suffix}")


__all__ = [
    "CrawlConfig",
    "SelectorConfig",
    "build_config",
    "load_config",
    "DEFAULT_EXCLUDE_PATTERNS",
    "DEFAULT_INCLUDE_PATTERNS",
    "DEFAULT_USER_AGENT",
]
