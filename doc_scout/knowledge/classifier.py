# doc_scout/knowledge/classifier.py
"""
Seven classification passes over the collected PageRecords.

Every pass is a pure function ``f(pages, rules) -> tuple``: no pass reads
another's output or mutates its input, so they may run in any order.
:func:`classify` runs all of them and bundles the results into a
:class:`~doc_scout.knowledge.models.KnowledgeAggregate`.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from doc_scout.crawler.models import CodeBlock, PageRecord
from doc_scout.knowledge import html_scan
from doc_scout.knowledge.models import (
    ApiEntry,
    CodeExample,
    ConceptEntry,
    ConfigOption,
    ConfigurationEntry,
    Endpoint,
    ExampleEntry,
    KnowledgeAggregate,
    OverviewEntry,
    PatternEntry,
    TroubleshootingEntry,
)
from doc_scout.knowledge.rules import DEFAULT_RULES, ClassifierRules
from doc_scout.logger import logger

__all__ = [
    "extract_overview",
    "extract_apis",
    "extract_examples",
    "extract_concepts",
    "extract_patterns",
    "extract_troubleshooting",
    "extract_configuration",
    "classify",
    "KnowledgeClassifier",
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _contains_any(haystack: str, needles: Iterable[str]) -> bool:
    return any(n in haystack for n in needles)


def _sentences(text: str, rules: ClassifierRules) -> List[str]:
    return rules.sentence_split.split(text)


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _matched_lines(text: str, patterns, per_pattern: int, limit: int) -> Tuple[str, ...]:
    found: List[str] = []
    for pattern in patterns:
        for i, match in enumerate(pattern.finditer(text)):
            if i >= per_pattern:
                break
            found.append(match.group(0).strip()[:limit])
    return tuple(found)


def is_runnable(block: CodeBlock, rules: ClassifierRules = DEFAULT_RULES) -> bool:
    """A snippet worth executing as-is: known language, non-trivial, not elided."""
    return (
        block.language.lower() in rules.runnable_languages
        and len(block.code) > rules.min_runnable_length
        and rules.elision_marker not in block.code
    )


def code_examples(blocks: Sequence[CodeBlock], rules: ClassifierRules = DEFAULT_RULES) -> Tuple[CodeExample, ...]:
    return tuple(
        CodeExample(language=b.language or "text", code=b.code, runnable=is_runnable(b, rules))
        for b in blocks
    )


def key_points(text: str, rules: ClassifierRules = DEFAULT_RULES) -> Tuple[str, ...]:
    points = []
    for sentence in _sentences(text, rules):
        sentence = sentence.strip()
        if len(sentence) <= rules.key_point_min_length:
            continue
        if _contains_any(sentence.lower(), rules.key_point_cues):
            points.append(sentence)
            if len(points) >= rules.max_key_points:
                break
    return tuple(points)


def endpoints(page: PageRecord, rules: ClassifierRules = DEFAULT_RULES) -> Tuple[Endpoint, ...]:
    seen = set()
    found: List[Endpoint] = []
    for source in (page.text, *(b.code for b in page.code_blocks)):
        for match in rules.endpoint_re.finditer(source):
            endpoint = Endpoint(method=match.group(1).upper(), path=match.group(2))
            if endpoint not in seen:
                seen.add(endpoint)
                found.append(endpoint)
    return tuple(found)


def example_category(page: PageRecord, block: CodeBlock, rules: ClassifierRules = DEFAULT_RULES) -> str:
    for keyword in rules.example_categories:
        if keyword in page.url:
            return keyword
    if block.language in ("javascript", "js"):
        return "javascript"
    if block.language == "python":
        return "python"
    return "general"


def example_title(page: PageRecord, block: CodeBlock) -> str:
    if block.language:
        return f"{page.title} - {block.language} Example"
    return f"{page.title} - Code Example"


def pattern_description(text: str, indicator: str, rules: ClassifierRules = DEFAULT_RULES) -> str:
    relevant = [s for s in _sentences(text, rules) if indicator in s.lower()]
    return ". ".join(relevant[: rules.pattern_sentences]).strip()


def error_codes(text: str, rules: ClassifierRules = DEFAULT_RULES) -> Tuple[str, ...]:
    codes: List[str] = []
    for match in rules.error_code_re.finditer(text):
        code = match.group(0)
        if code not in codes:
            codes.append(code)
    return tuple(codes)


def config_options(text: str, rules: ClassifierRules = DEFAULT_RULES) -> Tuple[ConfigOption, ...]:
    options: List[ConfigOption] = []
    for pattern in rules.option_patterns:
        for match in pattern.finditer(text):
            if len(options) >= rules.max_options:
                return tuple(options)
            options.append(ConfigOption(name=match.group(1), value=match.group(2).strip()))
    return tuple(options)


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------


def extract_overview(
    pages: Sequence[PageRecord], rules: ClassifierRules = DEFAULT_RULES
) -> Tuple[OverviewEntry, ...]:
    entries = []
    for page in pages:
        title = page.title.lower()
        if not (_contains_any(page.url, rules.overview_paths) or _contains_any(title, rules.overview_titles)):
            continue
        entries.append(
            OverviewEntry(
                title=page.title,
                url=page.url,
                content=_collapse(page.text),
                headings=page.headings,
                key_points=key_points(page.text, rules),
                source_url=page.url,
            )
        )
    return tuple(entries)


def extract_apis(pages: Sequence[PageRecord], rules: ClassifierRules = DEFAULT_RULES) -> Tuple[ApiEntry, ...]:
    entries = []
    for page in pages:
        title = page.title.lower()
        if rules.api_path not in page.url and not _contains_any(title, rules.api_titles):
            continue
        soup = html_scan.soup_of(page.html)
        entries.append(
            ApiEntry(
                title=page.title,
                url=page.url,
                methods=html_scan.extract_methods(soup, rules),
                parameters=html_scan.extract_parameters(soup, rules),
                endpoints=endpoints(page, rules),
                examples=code_examples(page.code_blocks[: rules.max_api_examples], rules),
                source_url=page.url,
            )
        )
    return tuple(entries)


def extract_examples(
    pages: Sequence[PageRecord], rules: ClassifierRules = DEFAULT_RULES
) -> Tuple[ExampleEntry, ...]:
    entries = []
    for page in pages:
        if not page.code_blocks:
            continue
        soup = html_scan.soup_of(page.html)
        for block in page.code_blocks:
            entries.append(
                ExampleEntry(
                    title=example_title(page, block),
                    language=block.language,
                    code=block.code,
                    description=html_scan.example_description(soup, block.code, rules),
                    category=example_category(page, block, rules),
                    source_url=page.url,
                )
            )
    return tuple(entries)


def extract_concepts(
    pages: Sequence[PageRecord], rules: ClassifierRules = DEFAULT_RULES
) -> Tuple[ConceptEntry, ...]:
    entries = []
    for page in pages:
        headings = [h for h in page.headings if h.level <= rules.max_concept_level]
        if not headings:
            continue
        soup = html_scan.soup_of(page.html)
        page_text = page.text.lower()
        for heading in headings:
            heading_text = heading.text.lower()
            tags = tuple(t for t in rules.concept_tags if t in heading_text or t in page_text)
            entries.append(
                ConceptEntry(
                    title=heading.text,
                    level=heading.level,
                    content=html_scan.section_content(soup, heading, rules),
                    url=f"{page.url}#{heading.id}",
                    tags=tags,
                    source_url=page.url,
                )
            )
    return tuple(entries)


def extract_patterns(
    pages: Sequence[PageRecord], rules: ClassifierRules = DEFAULT_RULES
) -> Tuple[PatternEntry, ...]:
    entries = []
    for page in pages:
        text = page.text.lower()
        examples = None
        for indicator in rules.pattern_indicators:
            if indicator not in text:
                continue
            if examples is None:
                examples = code_examples(page.code_blocks, rules)
            entries.append(
                PatternEntry(
                    type=indicator,
                    description=pattern_description(page.text, indicator, rules),
                    examples=examples,
                    source_url=page.url,
                )
            )
    return tuple(entries)


def extract_troubleshooting(
    pages: Sequence[PageRecord], rules: ClassifierRules = DEFAULT_RULES
) -> Tuple[TroubleshootingEntry, ...]:
    entries = []
    for page in pages:
        title, text = page.title.lower(), page.text.lower()
        if not (
            _contains_any(title, rules.troubleshooting_titles)
            or _contains_any(text, rules.troubleshooting_terms)
        ):
            continue
        per, limit = rules.matches_per_pattern, rules.max_line_length
        entries.append(
            TroubleshootingEntry(
                title=page.title,
                url=page.url,
                issues=_matched_lines(page.text, rules.issue_patterns, per, limit),
                solutions=_matched_lines(page.text, rules.solution_patterns, per, limit),
                error_codes=error_codes(page.text, rules),
                source_url=page.url,
            )
        )
    return tuple(entries)


def extract_configuration(
    pages: Sequence[PageRecord], rules: ClassifierRules = DEFAULT_RULES
) -> Tuple[ConfigurationEntry, ...]:
    entries = []
    for page in pages:
        if not _contains_any(page.title.lower(), rules.configuration_titles):
            continue
        entries.append(
            ConfigurationEntry(
                title=page.title,
                url=page.url,
                options=config_options(page.text, rules),
                prerequisites=_matched_lines(
                    page.text, rules.prerequisite_patterns, rules.matches_per_pattern, rules.max_line_length
                ),
                examples=code_examples(page.code_blocks, rules),
                source_url=page.url,
            )
        )
    return tuple(entries)


def classify(pages: Sequence[PageRecord], rules: ClassifierRules = DEFAULT_RULES) -> KnowledgeAggregate:
    """Run every pass over *pages* and return the combined aggregate."""
    snapshot = tuple(pages)
    knowledge = KnowledgeAggregate(
        overview=extract_overview(snapshot, rules),
        apis=extract_apis(snapshot, rules),
        examples=extract_examples(snapshot, rules),
        concepts=extract_concepts(snapshot, rules),
        patterns=extract_patterns(snapshot, rules),
        troubleshooting=extract_troubleshooting(snapshot, rules),
        configuration=extract_configuration(snapshot, rules),
    )
    logger.info(
        "Classified %d pages: %s",
        len(snapshot),
        ", ".join(f"{k}={v}" for k, v in knowledge.counts().items()),
    )
    return knowledge


class KnowledgeClassifier:
    """Holds a rule table and classifies page snapshots with it."""

    def __init__(self, rules: ClassifierRules = DEFAULT_RULES) -> None:
        self.rules = rules

    def classify(self, pages: Sequence[PageRecord]) -> KnowledgeAggregate:
        return classify(pages, self.rules)
