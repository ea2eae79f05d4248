"""site_lingo.translation: access to the external translation backend."""

from .client import TranslationClient

__all__ = ["TranslationClient"]
