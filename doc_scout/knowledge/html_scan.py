# doc_scout/knowledge/html_scan.py
"""
DOM lookups used by the knowledge passes.

These helpers re-parse a page's stored markup; everything else in the
classifier works on the already extracted text and records.
"""
from __future__ import annotations

from typing import Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

from doc_scout.crawler.models import Heading
from doc_scout.knowledge.models import MethodInfo, ParameterInfo
from doc_scout.knowledge.rules import DEFAULT_RULES, ClassifierRules
from doc_scout.parser.html_parser import HEADING_TAGS


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def _text(tag: Optional[Tag]) -> str:
    if tag is None:
        return ""
    return " ".join(tag.get_text(" ").split())


def extract_methods(soup: BeautifulSoup, rules: ClassifierRules = DEFAULT_RULES) -> Tuple[MethodInfo, ...]:
    """Elements whose text looks like a call signature, e.g. ``client.get(url)``."""
    methods = []
    for el in soup.select(rules.method_selector):
        text = _text(el)
        if "(" not in text or ")" not in text:
            continue
        parent = el.parent if isinstance(el.parent, Tag) else None
        methods.append(
            MethodInfo(
                name=text.split("(", 1)[0].strip(),
                signature=text[: rules.max_signature_length],
                description=_text(parent)[: rules.max_description_length],
            )
        )
        if len(methods) >= rules.max_methods:
            break
    return tuple(methods)


def extract_parameters(
    soup: BeautifulSoup, rules: ClassifierRules = DEFAULT_RULES
) -> Tuple[ParameterInfo, ...]:
    """Table rows and param-like elements of the form ``name: description``."""
    params = []
    for el in soup.select(rules.parameter_selector):
        text = _text(el)
        parts = rules.parameter_split.split(text, maxsplit=1)
        if len(parts) < 2:
            continue
        description = parts[1].strip()[: rules.max_description_length]
        params.append(
            ParameterInfo(
                name=parts[0].strip(),
                description=description or None,
                required="required" in text.lower() or "*" in text,
            )
        )
        if len(params) >= rules.max_parameters:
            break
    return tuple(params)


def find_heading(soup: BeautifulSoup, heading: Heading) -> Optional[Tag]:
    """Locate *heading* by the id of a heading tag, else by level and text."""
    if heading.id:
        tag = soup.find(list(HEADING_TAGS), id=heading.id)
        if isinstance(tag, Tag):
            return tag
    for tag in soup.find_all(f"h{heading.level}"):
        # same normalisation the extractor applies to heading text
        if " ".join(tag.get_text().split()) == heading.text:
            return tag
    return None


def section_content(
    soup: BeautifulSoup, heading: Heading, rules: ClassifierRules = DEFAULT_RULES
) -> str:
    """Text of the elements following *heading* up to the next heading."""
    tag = find_heading(soup, heading)
    if tag is None:
        return ""
    parts = []
    for sibling in tag.find_next_siblings(True):
        if sibling.name in HEADING_TAGS:
            break
        text = _text(sibling)
        if text:
            parts.append(text)
    return " ".join(parts)[: rules.max_section_length]


def example_description(soup: BeautifulSoup, code: str, rules: ClassifierRules = DEFAULT_RULES) -> str:
    """Text next to the ``pre`` block holding *code*: the element before it, else after it."""
    probe = code[: rules.example_description_probe]
    for el in soup.select("pre code"):
        if probe not in el.get_text():
            continue
        wrapper = el.parent
        if not isinstance(wrapper, Tag):
            return ""
        text = _text(wrapper.find_previous_sibling(True)) or _text(wrapper.find_next_sibling(True))
        return text[: rules.max_example_description]
    return ""


__all__ = [
    "soup_of",
    "extract_methods",
    "extract_parameters",
    "find_heading",
    "section_content",
    "example_description",
]
