"""site_lingo.errors: exception hierarchy shared by the crawler, storage and proxy layers."""

from __future__ import annotations

from typing import Optional

__all__ = [
    "SiteLingoError",
    "NotFoundError",
    "InvalidInputError",
    "UpstreamFetchError",
    "PersistenceError",
    "TranslationBackendError",
]


class SiteLingoError(Exception):
    """Base class of every error raised by SiteLingo."""


class NotFoundError(SiteLingoError):
    """Unknown site, domain or fragment."""


class InvalidInputError(SiteLingoError, ValueError):
    """Missing or malformed caller input (URL, selected pages, language...)."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class UpstreamFetchError(SiteLingoError):
    """The target site could not be fetched (network error, timeout, non-2xx status)."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class PersistenceError(SiteLingoError):
    """A repository operation failed."""


class TranslationBackendError(SiteLingoError):
    """The translation backend failed; absorbed inside the translation client."""
