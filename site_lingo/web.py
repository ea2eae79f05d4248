# File: site_lingo/web.py
"""site_lingo.web: aiohttp application exposing the JSON API and the translated proxy.

Routes
------
``POST /api/map-website``          crawl a site, list its pages
``POST /api/fetch-website``        store fragments of the selected pages
``POST /api/translate-website``    fill in translations for a site
``GET  /api/get-translation``      fragments of (domain, path, language)
``GET  /api/websites``             all sites, newest first
``GET  /api/translations/{id}``    all fragments of a site, newest first
``GET  {prefix}/{domain}[/{path}]`` translated proxy of an upstream page
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlencode

from aiohttp import web
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from site_lingo.config import ProxyConfig
from site_lingo.engine import TranslationProxy
from site_lingo.errors import (
    InvalidInputError,
    NotFoundError,
    PersistenceError,
    UpstreamFetchError,
)
from site_lingo.logger import logger
from site_lingo.storage.repository import TranslationRepository

__all__ = ["create_app", "run_server", "PROXY_KEY", "CONFIG_KEY"]

PROXY_KEY = web.AppKey("proxy", TranslationProxy)
CONFIG_KEY = web.AppKey("config", ProxyConfig)
REPOSITORY_KEY = web.AppKey("repository", TranslationRepository)

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


# --------------------------------------------------------------------------- #
# Request schemas                                                             #
# --------------------------------------------------------------------------- #


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class MapWebsiteRequest(_Request):
    url: str = Field(..., min_length=1)
    max_pages: Optional[int] = Field(None, ge=1, alias="maxPages")


class FetchWebsiteRequest(_Request):
    url: str = Field(..., min_length=1)
    selected_pages: List[str] = Field(..., min_length=1, alias="selectedPages")


class TranslateWebsiteRequest(_Request):
    website_id: int = Field(..., alias="websiteId")
    target_language: str = Field(..., min_length=2, alias="targetLanguage")


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err.get("loc", ())) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


async def _read_body(request: web.Request) -> Dict[str, Any]:
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidInputError(f"Malformed JSON body: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidInputError("JSON body must be an object")
    return data


# --------------------------------------------------------------------------- #
# Middlewares                                                                 #
# --------------------------------------------------------------------------- #


def _error_response(request: web.Request, status: int, message: str) -> web.Response:
    if request.path.startswith("/api/"):
        return web.json_response({"error": message}, status=status)
    return web.Response(text=message, status=status, content_type="text/plain")


@web.middleware
async def cors_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=_CORS_HEADERS)
    response = await handler(request)
    response.headers.update(_CORS_HEADERS)
    return response


@web.middleware
async def error_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ValidationError as exc:
        return _error_response(request, 400, _validation_message(exc))
    except InvalidInputError as exc:
        return _error_response(request, 400, f"{exc.field}: {exc}" if exc.field else str(exc))
    except NotFoundError as exc:
        return _error_response(request, 404, str(exc))
    except UpstreamFetchError as exc:
        logger.error("Upstream fetch failed for %s: %s", request.path, exc)
        prefix = "" if request.path.startswith("/api/") else "Error loading translated website: "
        return _error_response(request, 500, f"{prefix}{exc}")
    except PersistenceError as exc:
        logger.error("Storage failure on %s: %s", request.path, exc)
        return _error_response(request, 500, f"Storage failure: {exc}")


# --------------------------------------------------------------------------- #
# Handlers                                                                    #
# --------------------------------------------------------------------------- #


async def map_website(request: web.Request) -> web.Response:
    body = MapWebsiteRequest.model_validate(await _read_body(request))
    report = await request.app[PROXY_KEY].map_website(body.url, max_pages=body.max_pages)
    return web.json_response(report.to_dict())


async def fetch_website(request: web.Request) -> web.Response:
    body = FetchWebsiteRequest.model_validate(await _read_body(request))
    result = await request.app[PROXY_KEY].fetch_website(body.url, body.selected_pages)
    return web.json_response(result.to_dict())


async def translate_website(request: web.Request) -> web.Response:
    body = TranslateWebsiteRequest.model_validate(await _read_body(request))
    result = await request.app[PROXY_KEY].translate_website(body.website_id, body.target_language)
    return web.json_response(result.to_dict())


async def get_translation(request: web.Request) -> web.Response:
    missing = [name for name in ("domain", "path", "language") if not request.query.get(name)]
    if missing:
        raise InvalidInputError(f"missing query parameter(s): {', '.join(missing)}")
    fragments = await request.app[PROXY_KEY].get_translation(
        request.query["domain"], request.query["path"], request.query["language"]
    )
    return web.json_response({"translations": [f.to_dict() for f in fragments]})


async def list_websites(request: web.Request) -> web.Response:
    sites = await request.app[PROXY_KEY].list_websites()
    return web.json_response([s.to_dict() for s in sites])


async def list_translations(request: web.Request) -> web.Response:
    website_id = int(request.match_info["website_id"])
    fragments = await request.app[PROXY_KEY].list_fragments(website_id)
    return web.json_response([f.to_dict() for f in fragments])


async def view_page(request: web.Request) -> web.Response:
    proxy = request.app[PROXY_KEY]
    domain = request.match_info["domain"]
    path = "/" + request.match_info.get("path", "")
    language = request.query.get("lang") or proxy.config.default_language
    query = urlencode([(k, v) for k, v in request.query.items() if k != "lang"])
    html = await proxy.render_view(domain, path, language, query)
    return web.Response(text=html, content_type="text/html", charset="utf-8")


# --------------------------------------------------------------------------- #
# Application                                                                 #
# --------------------------------------------------------------------------- #


async def _proxy_context(app: web.Application):
    async with TranslationProxy.running(app[CONFIG_KEY], app.get(REPOSITORY_KEY)) as proxy:
        app[PROXY_KEY] = proxy
        logger.info("SiteLingo proxy ready (translation backend %s)", app[CONFIG_KEY].translate_api_url)
        yield


def create_app(config: ProxyConfig, repository: Optional[TranslationRepository] = None) -> web.Application:
    """Build the aiohttp application; the repository defaults to SQLite at ``config.database_path``."""
    app = web.Application(middlewares=[cors_middleware, error_middleware])
    app[CONFIG_KEY] = config
    if repository is not None:
        app[REPOSITORY_KEY] = repository
    app.cleanup_ctx.append(_proxy_context)

    prefix = config.proxy_prefix
    app.router.add_post("/api/map-website", map_website)
    app.router.add_post("/api/fetch-website", fetch_website)
    app.router.add_post("/api/translate-website", translate_website)
    app.router.add_get("/api/get-translation", get_translation)
    app.router.add_get("/api/websites", list_websites)
    app.router.add_get(r"/api/translations/{website_id:\d+}", list_translations)
    app.router.add_get(prefix + "/{domain}", view_page)
    app.router.add_get(prefix + "/{domain}/{path:.*}", view_page)
    return app


def run_server(config: ProxyConfig, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the application until interrupted."""
    bind_host = host or config.host
    bind_port = port if port is not None else config.port
    logger.info("Server running on %s:%d", bind_host, bind_port)
    web.run_app(create_app(config), host=bind_host, port=bind_port, print=None)
