# doc_scout/report/json_report.py

"""
JSON dump of a DocScout crawl result.

Writes the crawl statistics, the knowledge aggregate and a short summary of
every crawled page to one file.
"""
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from doc_scout.engine import CrawlResult


def result_to_dict(result: CrawlResult) -> Dict[str, Any]:
    return {
        "stats": asdict(result.stats),
        "failed_pages": list(result.failed_pages),
        "pages": [
            {
                "url": page.url,
                "depth": page.depth,
                "title": page.title,
                "headings": len(page.headings),
                "code_blocks": len(page.code_blocks),
                "links": len(page.links),
                "timestamp": page.timestamp,
            }
            for page in result.pages
        ],
        "knowledge": result.knowledge.to_dict(),
    }


def render_json(result: CrawlResult, output_path: Path | str, pretty: bool = True) -> Path:
    """
    Save *result* as JSON at *output_path*.

    :param result: the CrawlResult returned by the engine
    :param output_path: path of the JSON file; parent directories are created
    :param pretty: indent the output
    :return: Path of the written file

    Example:
    ```python
    from doc_scout.report.json_report import render_json
    report_path = render_json(result, 'reports/docs.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result_to_dict(result), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
