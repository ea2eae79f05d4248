# === FILE: site_lingo/parser/html_parser.py ===
"""HTML parsing helpers for SiteLingo.

:func:`parse_html` turns a fetched page into a :class:`ParsedPage` carrying
everything the crawler needs from one document:

* title: document ``<title>`` text or ``""`` if absent.
* links: same-host page paths discovered through ``<a href>``.
* text_count: the text-length heuristic reported by the crawl inventory.

The document is parsed once and shared by all extractors.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup

from site_lingo.crawler.link_extractor import extract_links
from site_lingo.parser.fragment_extractor import text_length

__all__: Sequence[str] = ("ParsedPage", "parse_html")


@dataclass(slots=True)
class ParsedPage:
    """Lightweight representation of an HTML page."""

    url: str
    title: str
    links: set[str] = field(default_factory=set)
    text_count: int = 0


def parse_html(page: Any, base_url: str | None = None) -> ParsedPage:
    """Parse raw HTML (string) or :class:`~site_lingo.crawler.models.PageData`.

    Parameters
    ----------
    page
        Either a *str* (HTML markup) **or** a ``PageData`` object with
        ``url`` and ``content`` attributes.
    base_url
        URL that relative links are resolved against; defaults to the page URL.
        Links are only collected when some base URL is known.
    """
    if hasattr(page, "content") and hasattr(page, "url"):
        html = page.content
        url = str(page.url)
    else:
        html = str(page)
        url = base_url or ""

    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    resolve_against = base_url or url
    links = extract_links(soup, resolve_against) if resolve_against else set()

    return ParsedPage(
        url=url,
        title=title,
        links=links,
        text_count=text_length(soup),
    )
