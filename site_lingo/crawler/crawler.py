# === FILE: site_lingo/crawler/crawler.py ===
from __future__ import annotations

import time
from collections import deque
from typing import Deque, List, Optional, Set

from site_lingo.config import ProxyConfig
from site_lingo.crawler.fetcher import Fetcher
from site_lingo.crawler.models import CrawlReport, CrawlResult
from site_lingo.errors import InvalidInputError, UpstreamFetchError
from site_lingo.logger import get_logger
from site_lingo.parser.html_parser import parse_html
from site_lingo.utils import split_site_url

__all__ = ("SiteCrawler",)


class SiteCrawler:
    """
    Bounded breadth-first crawler over one site's internal link graph.

    Pages are fetched one at a time from a FIFO frontier until it empties or
    the page cap is reached. A page that fails to load still counts as visited.
    """

    def __init__(self, config: ProxyConfig, fetcher: Fetcher) -> None:
        self.config = config
        self.fetcher = fetcher
        self.visited: Set[str] = set()
        self.failed_pages: List[str] = []
        self.logger = get_logger("crawler")

    async def crawl(self, seed_url: str, max_pages: Optional[int] = None) -> CrawlReport:
        _, domain, seed_path, origin = split_site_url(seed_url)
        cap = max_pages if max_pages is not None else self.config.max_pages
        if cap < 1:
            raise InvalidInputError("max_pages must be >= 1", field="maxPages")

        self.visited = set()
        self.failed_pages = []
        frontier: Deque[str] = deque([seed_path])
        queued: Set[str] = {seed_path}
        report = CrawlReport(domain=domain)

        self.logger.info("Crawl started: %s (cap %d pages)", origin + seed_path, cap)
        start = time.monotonic()

        while frontier and len(self.visited) < cap:
            path = frontier.popleft()
            queued.discard(path)
            if path in self.visited:
                continue
            self.visited.add(path)

            try:
                page = await self.fetcher.fetch(f"{origin}{path}", timeout=self.config.crawl_timeout)
            except UpstreamFetchError as exc:
                self.failed_pages.append(path)
                self.logger.warning("Error scanning page %s: %s", path, exc.reason)
                continue

            parsed = parse_html(page.content, base_url=f"{origin}{path}")
            report.pages.append(CrawlResult(path=path, title=parsed.title or path, text_count=parsed.text_count))

            for link in sorted(parsed.links):
                if link not in self.visited and link not in queued:
                    queued.add(link)
                    frontier.append(link)

        duration = time.monotonic() - start
        self.logger.info(
            "Crawl finished: %d pages of %s in %.2f s (%d failed, %d left in frontier)",
            report.total_pages,
            domain,
            duration,
            len(self.failed_pages),
            len(frontier),
        )
        return report
