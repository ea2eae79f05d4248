"""site_lingo.rewriter: rewrites upstream HTML for the translated proxy."""

from .rewriter import ContentRewriter, TranslationTuple

__all__ = ["ContentRewriter", "TranslationTuple"]
