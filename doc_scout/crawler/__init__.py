"""doc_scout.crawler: breadth-first crawl controller, URL filtering and page fetchers."""
