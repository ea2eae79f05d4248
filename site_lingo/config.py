# === FILE: site_lingo/config.py ===
"""
Loading and validation of the SiteLingo configuration.
The schema is described and checked with Pydantic.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

from site_lingo.utils import normalize_language

__all__ = ["ProxyConfig", "load_config", "DEFAULT_USER_AGENT"]

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class ProxyConfig(BaseModel):
    """Settings shared by the crawler, the translation client and the proxy server."""
    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    translate_api_url: HttpUrl = Field(
        "http://localhost:5050", description="Base URL of the LibreTranslate-compatible backend."
    )
    translate_api_key: Optional[str] = Field(None, description="API key sent with every translate call.")
    database_path: str = Field("translations.db", min_length=1, description="SQLite file (or ':memory:').")

    max_pages: int = Field(20, ge=1, description="Page cap of one crawl.")
    crawl_timeout: float = Field(5.0, gt=0, description="Timeout of one crawl fetch (seconds).")
    ingest_timeout: float = Field(10.0, gt=0, description="Timeout of one ingestion fetch (seconds).")
    render_timeout: float = Field(10.0, gt=0, description="Timeout of one proxy-render fetch (seconds).")
    translate_timeout: float = Field(30.0, gt=0, description="Timeout of one backend call (seconds).")

    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent header for upstream fetches.")
    accept_language: str = Field("en-US,en;q=0.5", description="Accept-Language header for upstream fetches.")

    source_language: str = Field("en", min_length=2, description="Language code stored on ingested fragments.")
    default_language: str = Field("en", min_length=2, description="Language used by /view when ?lang is absent.")

    proxy_prefix: str = Field("/view", description="Route prefix of the proxied pages.")
    wrap_body: bool = Field(True, description="Wrap the proxied <body> in an isolation <div>.")
    sitewide_fallback: bool = Field(
        False, description="Resolve texts without a path-scoped record by site-wide text lookup."
    )
    plain_http_hosts: List[str] = Field(
        default_factory=lambda: ["localhost", "127.0.0.1"],
        description="Hosts proxied over http:// instead of https://.",
    )

    host: str = Field("0.0.0.0", description="Bind address of the proxy server.")
    port: int = Field(3001, ge=0, le=65535, description="Port of the proxy server.")

    @field_validator("translate_api_url", mode="before")
    def _strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("proxy_prefix")
    def _normalize_prefix(cls, v: str) -> str:
        v = "/" + v.strip("/")
        if v == "/":
            raise ValueError("proxy_prefix must not be the site root")
        return v

    @field_validator("source_language", "default_language")
    def _normalize_language(cls, v: str) -> str:
        return normalize_language(v)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ProxyConfig:
    """
    Read a YAML or JSON file and return a validated ProxyConfig.
    Raises FileNotFoundError when the file (or the default config) is missing.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    try:
        return ProxyConfig(**data)
    except ValidationError:
        raise
