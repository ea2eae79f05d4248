"""site_lingo.storage: sites and translation fragments."""

from .models import Fragment, Site
from .repository import TranslationRepository
from .sqlite_repository import SqliteTranslationRepository

__all__ = ["Site", "Fragment", "TranslationRepository", "SqliteTranslationRepository"]
