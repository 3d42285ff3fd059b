"""doc_scout.parser: HTML semantic extraction."""
