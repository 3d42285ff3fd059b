# doc_scout/knowledge/rules.py
"""
Indicator words, regexes, selectors and caps used by the knowledge passes.

Everything heuristic sits in :class:`ClassifierRules` so the passes in
:mod:`doc_scout.knowledge.classifier` stay free of literals.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Pattern, Tuple

_I = re.IGNORECASE


@dataclass(frozen=True, slots=True)
class ClassifierRules:
    # overview
    overview_paths: Tuple[str, ...] = (
        "/introduction",
        "/getting-started",
        "/overview",
        "/guide",
        "/docs/",
        "/docs/index",
    )
    overview_titles: Tuple[str, ...] = ("getting started", "introduction")
    key_point_cues: Tuple[str, ...] = ("important", "note", "remember")
    key_point_min_length: int = 20
    max_key_points: int = 5
    sentence_split: Pattern[str] = re.compile(r"[.!?]+")

    # apis
    api_path: str = "/api"
    api_titles: Tuple[str, ...] = ("api", "reference")
    method_selector: str = "code, .method, .function"
    parameter_selector: str = "table tr, .param, .parameter"
    parameter_split: Pattern[str] = re.compile(r"[:=]")
    endpoint_re: Pattern[str] = re.compile(r"(GET|POST|PUT|DELETE|PATCH)\s+(/[\w/-]+)", _I)
    max_methods: int = 20
    max_parameters: int = 20
    max_api_examples: int = 10
    max_signature_length: int = 200
    max_description_length: int = 300

    # examples
    example_categories: Tuple[str, ...] = ("api", "tutorial", "guide")
    example_description_probe: int = 50
    max_example_description: int = 200

    # concepts
    max_concept_level: int = 3
    max_section_length: int = 500
    concept_tags: Tuple[str, ...] = ("api", "config", "setup", "tutorial", "guide", "reference")

    # patterns
    pattern_indicators: Tuple[str, ...] = (
        "best practice",
        "pattern",
        "convention",
        "recommended",
        "should",
        "avoid",
        "prefer",
    )
    pattern_sentences: int = 2

    # troubleshooting
    troubleshooting_titles: Tuple[str, ...] = ("troubleshooting", "common issues", "faq")
    troubleshooting_terms: Tuple[str, ...] = ("error", "problem")
    issue_patterns: Tuple[Pattern[str], ...] = (
        re.compile(r"error[:\s]+(.+)", _I),
        re.compile(r"problem[:\s]+(.+)", _I),
        re.compile(r"issue[:\s]+(.+)", _I),
    )
    solution_patterns: Tuple[Pattern[str], ...] = (
        re.compile(r"solution[:\s]+(.+)", _I),
        re.compile(r"fix[:\s]+(.+)", _I),
        re.compile(r"resolve[:\s]+(.+)", _I),
    )
    error_code_re: Pattern[str] = re.compile(r"error\s+(\d{3,4}|[A-Z_]+\d+)", _I)
    matches_per_pattern: int = 3
    max_line_length: int = 300

    # configuration
    configuration_titles: Tuple[str, ...] = ("config", "setup", "installation")
    option_patterns: Tuple[Pattern[str], ...] = (
        re.compile(r"([\w_]+)\s*[=:]\s*(.+)"),
        re.compile(r"--([\w-]+)\s+(.+)"),
    )
    max_options: int = 10
    prerequisite_patterns: Tuple[Pattern[str], ...] = (
        re.compile(r"prerequisite(s)?[:\s]+(.+)", _I),
        re.compile(r"requirement(s)?[:\s]+(.+)", _I),
        re.compile(r"before you begin[:\s]+(.+)", _I),
    )

    # code examples attached to records
    runnable_languages: Tuple[str, ...] = ("javascript", "js", "python", "bash", "sh")
    min_runnable_length: int = 10
    elision_marker: str = "..."


DEFAULT_RULES = ClassifierRules()

__all__ = ["ClassifierRules", "DEFAULT_RULES"]
