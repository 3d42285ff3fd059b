# File: doc_scout/knowledge/models.py
"""doc_scout.knowledge.models: records of the knowledge aggregate."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional, Tuple

from doc_scout.crawler.models import Heading


@dataclass(frozen=True, slots=True)
class CodeExample:
    language: str
    code: str
    runnable: bool


@dataclass(frozen=True, slots=True)
class OverviewEntry:
    title: str
    url: str
    content: str
    headings: Tuple[Heading, ...]
    key_points: Tuple[str, ...]
    source_url: str


@dataclass(frozen=True, slots=True)
class MethodInfo:
    name: str
    signature: str
    description: str


@dataclass(frozen=True, slots=True)
class ParameterInfo:
    name: str
    description: Optional[str]
    required: bool


@dataclass(frozen=True, slots=True)
class Endpoint:
    method: str
    path: str


@dataclass(frozen=True, slots=True)
class ApiEntry:
    title: str
    url: str
    methods: Tuple[MethodInfo, ...]
    parameters: Tuple[ParameterInfo, ...]
    endpoints: Tuple[Endpoint, ...]
    examples: Tuple[CodeExample, ...]
    source_url: str


@dataclass(frozen=True, slots=True)
class ExampleEntry:
    title: str
    language: str
    code: str
    description: str
    category: str
    source_url: str


@dataclass(frozen=True, slots=True)
class ConceptEntry:
    title: str
    level: int
    content: str
    url: str
    tags: Tuple[str, ...]
    source_url: str


@dataclass(frozen=True, slots=True)
class PatternEntry:
    type: str
    description: str
    examples: Tuple[CodeExample, ...]
    source_url: str


@dataclass(frozen=True, slots=True)
class TroubleshootingEntry:
    title: str
    url: str
    issues: Tuple[str, ...]
    solutions: Tuple[str, ...]
    error_codes: Tuple[str, ...]
    source_url: str


@dataclass(frozen=True, slots=True)
class ConfigOption:
    name: str
    value: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class ConfigurationEntry:
    title: str
    url: str
    options: Tuple[ConfigOption, ...]
    prerequisites: Tuple[str, ...]
    examples: Tuple[CodeExample, ...]
    source_url: str


@dataclass(frozen=True, slots=True)
class KnowledgeAggregate:
    """Combined output of all classification passes; built once, never mutated."""

    overview: Tuple[OverviewEntry, ...] = ()
    apis: Tuple[ApiEntry, ...] = ()
    examples: Tuple[ExampleEntry, ...] = ()
    concepts: Tuple[ConceptEntry, ...] = ()
    patterns: Tuple[PatternEntry, ...] = ()
    troubleshooting: Tuple[TroubleshootingEntry, ...] = ()
    configuration: Tuple[ConfigurationEntry, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, *, pretty: bool = False) -> str:
        """JSON text of the aggregate; identical input gives identical output."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)

    def counts(self) -> Dict[str, int]:
        return {f.name: len(getattr(self, f.name)) for f in fields(self)}
