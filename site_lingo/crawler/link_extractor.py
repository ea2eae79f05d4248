# site_lingo/crawler/link_extractor.py
"""
Link discovery and page-path filtering for the SiteLingo crawler.
"""
from __future__ import annotations

import re
from typing import Pattern, Set, Tuple, Union
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_lingo.logger import logger
from site_lingo.utils import normalize_path

__all__ = ("is_valid_page_path", "extract_links", "normalize_path")

_IGNORED_PREFIXES: Tuple[str, ...] = ("mailto:", "tel:", "javascript:", "#")

_INVALID_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^mailto:"),
    re.compile(r"^tel:"),
    re.compile(r"^#"),
    re.compile(r"^javascript:"),
    re.compile(r"\.(jpg|jpeg|png|gif|ico|css|js|pdf|doc|docx|zip)$", re.IGNORECASE),
    re.compile(r"@"),
    # anything protocol-like before the first slash
    re.compile(r"^[^/]*:"),
)


def is_valid_page_path(path: str) -> bool:
    """
    Return True when *path* looks like a crawlable page.

    Rejects mail/phone/script/fragment references, static assets and documents,
    e-mail-like strings and scheme prefixes; accepts only '/', './' and '../' paths.
    """
    if any(pattern.search(path) for pattern in _INVALID_PATTERNS):
        return False
    return path.startswith(("/", "./", "../"))


def extract_links(markup: Union[str, bytes, BeautifulSoup], base_url: str) -> Set[str]:
    """
    Extract normalized same-host page paths from the anchors of *markup*.

    Hrefs are resolved against *base_url*; mailto:, tel:, javascript:,
    fragment-only and external links are ignored.
    """
    soup = markup if isinstance(markup, BeautifulSoup) else BeautifulSoup(markup, "html.parser")
    base_host = urlsplit(base_url).hostname
    links: Set[str] = set()
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.lower().startswith(_IGNORED_PREFIXES):
            continue
        try:
            parsed = urlsplit(urljoin(base_url, raw))
            host = parsed.hostname
        except ValueError:
            logger.debug("Unresolvable href skipped: %r", raw)
            continue
        if parsed.scheme not in ("http", "https") or host != base_host:
            continue
        path = parsed.path or "/"
        if not is_valid_page_path(path):
            continue
        links.add(normalize_path(path))
    return links
