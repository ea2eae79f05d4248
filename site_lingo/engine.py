# File: site_lingo/engine.py
"""site_lingo.engine: orchestration of the ingestion, translation-fill and proxy-render flows."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Set

from aiohttp import ClientSession

from site_lingo.config import ProxyConfig
from site_lingo.crawler.crawler import SiteCrawler
from site_lingo.crawler.fetcher import Fetcher
from site_lingo.crawler.models import CrawlReport
from site_lingo.errors import InvalidInputError, NotFoundError, PersistenceError
from site_lingo.logger import logger
from site_lingo.parser.fragment_extractor import extract_fragments
from site_lingo.rewriter.rewriter import ContentRewriter, TranslationTuple, translation_tuples
from site_lingo.storage.models import Fragment, Site
from site_lingo.storage.repository import TranslationRepository
from site_lingo.storage.sqlite_repository import SqliteTranslationRepository
from site_lingo.translation.client import TranslationClient
from site_lingo.utils import (
    normalize_language,
    normalize_path,
    origin_for_domain,
    remove_duplicates,
    split_site_url,
)

__all__ = ["TranslationProxy", "IngestResult", "TranslateResult"]

# largest rowid SQLite can store
MAX_SITE_ID = 2**63 - 1


@dataclass(slots=True)
class IngestResult:
    """Outcome of storing the fragments of the selected pages."""

    message: str
    website_id: int
    domain: str
    translations_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "websiteId": self.website_id,
            "domain": self.domain,
            "translationsCount": self.translations_count,
        }


@dataclass(slots=True)
class TranslateResult:
    """Outcome of one translation-fill run."""

    message: str
    translated_count: int
    failed_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "translatedCount": self.translated_count,
            "failedCount": self.failed_count,
        }


class TranslationProxy:
    """Facade used by the HTTP layer and the CLI.

    Holds the process-scoped collaborators (repository, HTTP session,
    translation client, rewriter) and exposes one coroutine per operation.
    """

    def __init__(
        self,
        config: ProxyConfig,
        repository: TranslationRepository,
        session: ClientSession,
        translator: Optional[TranslationClient] = None,
        rewriter: Optional[ContentRewriter] = None,
    ) -> None:
        self.config = config
        self.repository = repository
        self.fetcher = Fetcher(session, config)
        self.translator = translator or TranslationClient(
            str(config.translate_api_url),
            timeout=config.translate_timeout,
            api_key=config.translate_api_key,
            session=session,
        )
        self.rewriter = rewriter or ContentRewriter(config.proxy_prefix, wrap_body=config.wrap_body)

    @classmethod
    @asynccontextmanager
    async def running(
        cls, config: ProxyConfig, repository: Optional[TranslationRepository] = None
    ) -> AsyncIterator["TranslationProxy"]:
        """Open the repository and an HTTP session for the lifetime of the block."""
        repo = repository or SqliteTranslationRepository(config.database_path)
        async with ClientSession() as session:
            await repo.open()
            try:
                yield cls(config, repo, session)
            finally:
                await repo.close()

    # ------------------------------------------------------------------ #
    # Crawl                                                              #
    # ------------------------------------------------------------------ #

    async def map_website(self, url: str, max_pages: Optional[int] = None) -> CrawlReport:
        """Crawl *url* breadth-first and return the page inventory."""
        crawler = SiteCrawler(self.config, self.fetcher)
        return await crawler.crawl(url, max_pages=max_pages)

    # ------------------------------------------------------------------ #
    # Ingestion                                                          #
    # ------------------------------------------------------------------ #

    async def fetch_website(self, url: str, selected_pages: Sequence[str]) -> IngestResult:
        """Fetch the selected pages and store their fragments as untranslated."""
        if not url or not selected_pages:
            raise InvalidInputError("URL and selected pages are required", field="selectedPages" if url else "url")
        _, domain, _, origin = split_site_url(url)
        pages = remove_duplicates([normalize_path(p.strip()) for p in selected_pages if p and p.strip()])
        if not pages:
            raise InvalidInputError("URL and selected pages are required", field="selectedPages")

        site = await self.repository.get_or_create_site(domain)
        logger.info("Processing %s: %d selected pages (website id %s)", domain, len(pages), site.id)

        total = 0
        for path in pages:
            page = await self.fetcher.fetch(f"{origin}{path}", timeout=self.config.ingest_timeout)
            inserted = 0
            for fragment in extract_fragments(page.content):
                try:
                    stored = await self.repository.insert_if_absent(
                        site.id, fragment.text, self.config.source_language, path, fragment.element_kind
                    )
                except PersistenceError as exc:
                    logger.error("Error inserting fragment %r on %s: %s", fragment.text[:50], path, exc)
                    continue
                if stored is not None:
                    inserted += 1
            logger.debug("Stored %d fragments for %s%s", inserted, domain, path)
            total += inserted

        return IngestResult(
            message="Website content stored successfully",
            website_id=site.id,
            domain=site.domain,
            translations_count=total,
        )

    # ------------------------------------------------------------------ #
    # Translation fill                                                   #
    # ------------------------------------------------------------------ #

    async def translate_website(self, website_id: int, target_language: str) -> TranslateResult:
        """Translate every untranslated fragment of a site, one backend call at a time.

        The backend receives the code as given (``zh-Hans`` stays mixed case);
        fragments are stored under its normalized form.
        """
        requested = (target_language or "").strip()
        language = normalize_language(requested)
        if not language:
            raise InvalidInputError("targetLanguage is required", field="targetLanguage")
        site = await self._site_by_id(website_id)

        untranslated = await self.repository.find_untranslated(site.id)
        logger.info("Translating %d fragments of %s to %s", len(untranslated), site.domain, language)

        translated = failed = 0
        for item in untranslated:
            text = await self.translator.translate(item.original_text, requested)
            try:
                await self.repository.update_translation(item.id, text, language)
            except PersistenceError as exc:
                failed += 1
                logger.error("Error saving translation of fragment %s: %s", item.id, exc)
                continue
            translated += 1

        return TranslateResult("Website translated successfully", translated, failed)

    # ------------------------------------------------------------------ #
    # Read side                                                          #
    # ------------------------------------------------------------------ #

    async def get_translation(self, domain: str, path: str, language: str) -> List[Fragment]:
        language = normalize_language(language)
        if not domain or not path or not language:
            raise InvalidInputError("domain, path and language are required")
        site = await self._site_by_domain(domain)
        return await self.repository.find_by_path_and_language(site.id, normalize_path(path), language)

    async def list_websites(self) -> List[Site]:
        return await self.repository.list_sites()

    async def list_fragments(self, website_id: int) -> List[Fragment]:
        site = await self._site_by_id(website_id)
        return await self.repository.list_fragments(site.id)

    # ------------------------------------------------------------------ #
    # Proxy-render                                                       #
    # ------------------------------------------------------------------ #

    async def render_view(self, domain: str, path: str, language: str, query: str = "") -> str:
        """Fetch the upstream page and return it rewritten in *language*.

        Raises NotFoundError before any fetch when the domain is unknown and
        UpstreamFetchError when the page cannot be loaded.
        """
        site = await self._site_by_domain(domain.lower())
        path = normalize_path(path)
        language = normalize_language(language) or self.config.default_language
        origin = origin_for_domain(site.domain, self.config.plain_http_hosts)
        page_url = f"{origin}{path}" + (f"?{query}" if query else "")

        logger.info("Serving translated page: %s (%s)", page_url, language)
        page = await self.fetcher.fetch(page_url, timeout=self.config.render_timeout)

        fragments = await self.repository.find_by_path_and_language(site.id, path, language)
        tuples = translation_tuples(fragments)
        if self.config.sitewide_fallback:
            known = {f.original_text for f in fragments}
            tuples.extend(await self._sitewide_tuples(site, page.content, language, known))
        logger.debug("Found %d translations for %s%s", len(tuples), site.domain, path)

        return self.rewriter.rewrite(page.content, page_url, language, tuples)

    async def _sitewide_tuples(
        self, site: Site, html: str, language: str, known: Set[str]
    ) -> List[TranslationTuple]:
        tuples: List[TranslationTuple] = []
        looked_up: Set[str] = set(known)
        for fragment in extract_fragments(html):
            if fragment.text in looked_up:
                continue
            looked_up.add(fragment.text)
            translated = await self.repository.find_translation_by_text(site.domain, fragment.text, language)
            if translated is not None:
                tuples.append((fragment.text, translated, fragment.element_kind))
        return tuples

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    async def _site_by_domain(self, domain: str) -> Site:
        site = await self.repository.find_site_by_domain(domain)
        if site is None:
            raise NotFoundError(f"Website not found: {domain}")
        return site

    async def _site_by_id(self, website_id: int) -> Site:
        site = None
        if 0 < website_id <= MAX_SITE_ID:
            site = await self.repository.find_site_by_id(website_id)
        if site is None:
            raise NotFoundError(f"Website not found: {website_id}")
        return site
