"""site_lingo.translation.client: client of a LibreTranslate-compatible backend.

The backend is a black box: ``POST {api_url}/translate`` with
``{q, source: "auto", target, format: "text"}`` answers ``{translatedText}``.
A failed call never propagates: the original text is returned so a batch
degrades to "untranslated" instead of aborting.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_lingo.errors import TranslationBackendError
from site_lingo.logger import get_logger

__all__ = ["TranslationClient"]


class TranslationClient:
    """Translates single texts; usable as an async context manager."""

    def __init__(
        self,
        api_url: str,
        *,
        timeout: float = 30.0,
        api_key: Optional[str] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.endpoint = f"{str(api_url).rstrip('/')}/translate"
        self.timeout = ClientTimeout(total=timeout)
        self.api_key = api_key
        self.session = session
        self._owns_session = session is None
        self.logger = get_logger("translation")

    async def __aenter__(self) -> "TranslationClient":
        if self.session is None:
            self.session = ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def translate(self, text: str, target_language: str) -> str:
        """Return *text* translated to *target_language*, or *text* itself on any failure."""
        if not text or not text.strip():
            return text
        try:
            return await self._request(text, target_language)
        except TranslationBackendError as exc:
            self.logger.error("Translation error (%s): %s", target_language, exc)
            return text

    async def _request(self, text: str, target_language: str) -> str:
        if self.session is None or self.session.closed:
            raise TranslationBackendError("client session is not open")
        payload: Dict[str, Any] = {
            "q": text,
            "source": "auto",
            "target": target_language,
            "format": "text",
        }
        if self.api_key:
            payload["api_key"] = self.api_key
        try:
            async with self.session.post(self.endpoint, json=payload, timeout=self.timeout) as resp:
                if resp.status != 200:
                    body = (await resp.text())[:200]
                    raise TranslationBackendError(f"HTTP {resp.status}: {body}")
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError as exc:
            raise TranslationBackendError(f"timed out after {self.timeout.total:g}s") from exc
        except ClientError as exc:
            raise TranslationBackendError(str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise TranslationBackendError(f"malformed response: {exc}") from exc

        translated = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(translated, str):
            raise TranslationBackendError(f"malformed response: {str(data)[:200]}")
        return translated
