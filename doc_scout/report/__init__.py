# File: doc_scout/report/__init__.py
"""doc_scout.report: serialization of crawl results used by the CLI and tests."""

from doc_scout.report.json_report import render_json, result_to_dict

__all__ = ["render_json", "result_to_dict"]
