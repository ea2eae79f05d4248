# site_lingo/crawler/models.py
"""
Data models for the SiteLingo crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class PageData:
    """Holds the final URL, body and status of a fetched page."""

    url: str
    content: str
    status: int = 200
    content_type: Optional[str] = None


@dataclass(slots=True)
class CrawlResult:
    """One discovered page of the crawl inventory."""

    path: str
    title: str
    text_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "title": self.title, "textCount": self.text_count}


@dataclass(slots=True)
class CrawlReport:
    """Pages found by one crawl of a domain."""

    domain: str
    pages: List[CrawlResult] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "pages": [page.to_dict() for page in self.pages],
            "totalPages": self.total_pages,
        }

