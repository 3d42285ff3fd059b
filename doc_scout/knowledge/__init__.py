"""Turns crawled PageRecords into a KnowledgeAggregate."""

from doc_scout.knowledge.classifier import (
    KnowledgeClassifier,
    classify,
    extract_apis,
    extract_concepts,
    extract_configuration,
    extract_examples,
    extract_overview,
    extract_patterns,
    extract_troubleshooting,
)
from doc_scout.knowledge.models import KnowledgeAggregate
from doc_scout.knowledge.rules import DEFAULT_RULES, ClassifierRules

__all__ = [
    "KnowledgeAggregate",
    "KnowledgeClassifier",
    "ClassifierRules",
    "DEFAULT_RULES",
    "classify",
    "extract_overview",
    "extract_apis",
    "extract_examples",
    "extract_concepts",
    "extract_patterns",
    "extract_troubleshooting",
    "extract_configuration",
]
