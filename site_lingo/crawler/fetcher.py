# site_lingo/crawler/fetcher.py
"""
Fetcher module: single HTTP GET of an upstream page with a per-call timeout.

Every failure (connection error, timeout, non-2xx status, undecodable body)
is reported as :class:`~site_lingo.errors.UpstreamFetchError`; callers decide
whether to absorb it (crawl) or surface it (ingestion, proxy-render).
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_lingo.config import ProxyConfig
from site_lingo.crawler.models import PageData
from site_lingo.errors import UpstreamFetchError
from site_lingo.logger import get_logger


class Fetcher:
    """Fetches HTML pages of the target site through a shared ClientSession."""

    def __init__(self, session: ClientSession, config: ProxyConfig) -> None:
        self.session = session
        self.config = config
        self.logger = get_logger("fetcher")

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": self.config.accept_language,
        }

    async def fetch(self, url: str, timeout: Optional[float] = None) -> PageData:
        """
        GET *url* and return its decoded body.

        Raises UpstreamFetchError on any network failure, timeout or non-2xx status.
        """
        client_timeout = ClientTimeout(total=timeout or self.config.render_timeout)
        self.logger.debug("GET %s (timeout %.1fs)", url, client_timeout.total)
        try:
            async with self.session.get(
                url, headers=self.headers, timeout=client_timeout, raise_for_status=False
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise UpstreamFetchError(url, f"HTTP {resp.status} {resp.reason or ''}".strip(), resp.status)
                ctype = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                body = await resp.read()
                charset = resp.charset or "utf-8"
                try:
                    text = body.decode(charset, errors="replace")
                except LookupError:
                    text = body.decode("utf-8", errors="replace")
                return PageData(url=str(resp.url), content=text, status=resp.status, content_type=ctype or None)
        except asyncio.TimeoutError as exc:
            raise UpstreamFetchError(url, f"timed out after {client_timeout.total:g}s") from exc
        except ClientError as exc:
            raise UpstreamFetchError(url, str(exc) or type(exc).__name__) from exc
