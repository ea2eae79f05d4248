# File: site_lingo/utils.py
"""site_lingo.utils: helpers for domains, origins and site-relative paths."""

from __future__ import annotations

import posixpath
from typing import Collection, Iterable, List, Optional, Sequence
from urllib.parse import urlsplit

from site_lingo.errors import InvalidInputError
from site_lingo.logger import logger

__all__: Sequence[str] = (
    "normalize_path",
    "split_site_url",
    "origin_for_domain",
    "hostname_of",
    "normalize_language",
    "remove_duplicates",
)


def normalize_path(path: str) -> str:
    """Collapse dot segments and duplicate slashes; keep a trailing slash; always start with '/'."""
    raw = path or "/"
    trailing = raw.endswith("/")
    norm = posixpath.normpath("/" + raw.lstrip("/"))
    if trailing and not norm.endswith("/"):
        norm += "/"
    return norm


def split_site_url(url: str) -> tuple[str, str, str, str]:
    """Split *url* into ``(scheme, netloc, path, origin)``.

    Raises :class:`InvalidInputError` for anything that is not an absolute http(s) URL.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidInputError("URL is required", field="url")
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError as exc:
        raise InvalidInputError(f"Invalid URL {url!r}: {exc}", field="url") from exc
    if parts.scheme.lower() not in ("http", "https") or not hostname:
        raise InvalidInputError(f"Invalid URL {url!r}: an absolute http(s) URL is expected", field="url")
    scheme = parts.scheme.lower()
    netloc = parts.netloc.lower().rsplit("@", 1)[-1]
    path = normalize_path(parts.path)
    return scheme, netloc, path, f"{scheme}://{netloc}"


def normalize_language(code: Optional[str]) -> str:
    """Stored form of a language code: trimmed and lowercase (``" ES "`` and ``"es"`` are one language)."""
    return (code or "").strip().lower()


def hostname_of(domain: str) -> str:
    """Hostname part of a stored domain (``example.com:8080`` → ``example.com``)."""
    return (urlsplit(f"//{domain}").hostname or domain).lower()


def origin_for_domain(domain: str, plain_http_hosts: Iterable[str] = ()) -> str:
    """Origin used to re-fetch pages of *domain*: https unless the host is listed as plain http."""
    scheme = "http" if hostname_of(domain) in set(plain_http_hosts) else "https"
    return f"{scheme}://{domain}"


def remove_duplicates(items: Collection[str]) -> List[str]:
    """Remove duplicates while keeping order."""
    unique = list(dict.fromkeys(items))
    removed = len(items) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate entries", removed)
    return unique
