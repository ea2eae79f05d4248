# site_lingo/report/json_report.py

"""
JSON report of a crawl inventory.

Serializes a CrawlReport (domain + discovered pages) to a file.
"""
import json
from datetime import datetime, timezone
from pathlib import Path

from site_lingo.crawler.models import CrawlReport


def render_json(report: CrawlReport, output_path: Path | str) -> Path:
    """
    Save *report* as JSON at the given path.

    :param report: CrawlReport returned by a crawl
    :param output_path: path of the JSON file
    :return: Path of the saved file

    Example:
    ```python
    from site_lingo.report.json_report import render_json
    report_path = render_json(report, 'reports/pages.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = report.to_dict()
    data['generatedAt'] = datetime.now(timezone.utc).isoformat(timespec='seconds')

    with output.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output
