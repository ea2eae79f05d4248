"""site_lingo.storage.repository: abstract store of sites and translation fragments.

The rest of the package only talks to this interface; the concrete engine
(:class:`~site_lingo.storage.sqlite_repository.SqliteTranslationRepository`)
is chosen once at startup and injected.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from site_lingo.storage.models import Fragment, Site


class TranslationRepository(ABC):
    """Async repository of (site, original text, language, path, element kind) → translation."""

    async def __aenter__(self) -> "TranslationRepository":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @abstractmethod
    async def open(self) -> None:
        """Acquire the underlying handle and make sure the schema exists."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying handle."""

    # -- sites --------------------------------------------------------------

    @abstractmethod
    async def get_or_create_site(self, domain: str) -> Site:
        """Find the site for *domain* or create it, atomically."""

    @abstractmethod
    async def find_site_by_domain(self, domain: str) -> Optional[Site]:
        ...

    @abstractmethod
    async def find_site_by_id(self, site_id: int) -> Optional[Site]:
        ...

    @abstractmethod
    async def list_sites(self) -> List[Site]:
        """All sites, newest first."""

    # -- fragments ----------------------------------------------------------

    @abstractmethod
    async def insert(
        self,
        site_id: int,
        original_text: str,
        translated_text: Optional[str],
        language_code: str,
        path: str,
        element_kind: str,
    ) -> Fragment:
        """Append a fragment record; never overwrites."""

    @abstractmethod
    async def insert_if_absent(
        self,
        site_id: int,
        original_text: str,
        language_code: str,
        path: str,
        element_kind: str,
    ) -> Optional[Fragment]:
        """Insert an untranslated fragment unless (site, text, language, path, kind) is already on record.

        Returns the new fragment, or ``None`` when it was skipped.
        """

    @abstractmethod
    async def find_untranslated(self, site_id: int) -> List[Fragment]:
        ...

    @abstractmethod
    async def update_translation(self, fragment_id: int, translated_text: str, language_code: str) -> None:
        ...

    @abstractmethod
    async def find_by_path_and_language(self, site_id: int, path: str, language_code: str) -> List[Fragment]:
        ...

    @abstractmethod
    async def find_translation_by_text(self, domain: str, original_text: str, language_code: str) -> Optional[str]:
        """First non-null translation of *original_text* anywhere on *domain*."""

    @abstractmethod
    async def list_fragments(self, site_id: int) -> List[Fragment]:
        """All fragments of a site joined with its domain, newest first."""
