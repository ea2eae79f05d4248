"""site_lingo.storage.models: persisted entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(slots=True)
class Site:
    """A crawled target, identified by its domain (host[:port])."""

    id: int
    domain: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "domain": self.domain, "created_at": self.created_at}


@dataclass(slots=True)
class Fragment:
    """One extracted text unit and its optional translation."""

    id: int
    site_id: int
    original_text: str
    translated_text: Optional[str]
    language_code: str
    path: str
    element_kind: str
    created_at: str
    domain: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "website_id": self.site_id,
            "original_text": self.original_text,
            "translated_text": self.translated_text,
            "language": self.language_code,
            "path": self.path,
            "element_type": self.element_kind,
            "created_at": self.created_at,
        }
        if self.domain is not None:
            data["domain"] = self.domain
        return data
