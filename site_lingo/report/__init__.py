"""site_lingo.report: writers for crawl inventories used by the CLI."""

from .json_report import render_json

__all__ = ["render_json"]
