# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from aiohttp import ClientSession, web

from site_lingo.config import ProxyConfig
from site_lingo.crawler.fetcher import Fetcher
from site_lingo.storage.sqlite_repository import SqliteTranslationRepository

HOST = "127.0.0.1"

HOME_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Home</title>
  <link rel="stylesheet" href="/static/site.css">
  <style>body { color: red; }</style>
</head>
<body>
  <h1>Welcome</h1>
  <p>Hello world</p>
  <a href="/a">Page A</a>
  <a href="/b">Page B</a>
  <a href="mailto:team@example.com">Mail</a>
  <a href="https://external.test/">Out</a>
  <img src="img/logo.png" alt="Hello world">
</body>
</html>"""

PAGE_A_HTML = "<html><head><title>About</title></head><body><p>About us</p></body></html>"

PAGE_B_HTML = '<html><body><p>Hello world</p><a href="/a">Page A</a></body></html>'

FAKE_TRANSLATIONS = {
    ("Hello world", "es"): "Hola mundo",
    ("Welcome", "es"): "Bienvenido",
    ("About us", "es"): "Sobre nosotros",
}


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, HOST, port)
    await site.start()
    try:
        yield f"http://{HOST}:{port}"
    finally:
        await runner.cleanup()


@pytest.fixture()
def serve_app(unused_tcp_port_factory) -> Callable[[web.Application], AsyncIterator[str]]:
    """Return an async generator factory serving an aiohttp app on a free port."""

    def _serve(app: web.Application) -> AsyncIterator[str]:
        return _serve_app(app, unused_tcp_port_factory())

    return _serve


def html_response(text: str) -> Callable[[web.Request], Awaitable[web.Response]]:
    async def handler(_):
        return web.Response(text=text, content_type="text/html")

    return handler


@pytest_asyncio.fixture
async def target_site(serve_app) -> AsyncIterator[str]:
    """A small site: / links to /a and /b, /b links back to /a, /broken answers 500."""
    app = web.Application()

    async def broken(_):
        return web.Response(status=500, text="boom")

    app.router.add_get("/", html_response(HOME_HTML))
    app.router.add_get("/a", html_response(PAGE_A_HTML))
    app.router.add_get("/b", html_response(PAGE_B_HTML))
    app.router.add_get("/broken", broken)

    async for url in serve_app(app):
        yield url


@pytest_asyncio.fixture
async def translator(serve_app) -> AsyncIterator[Dict[str, Any]]:
    """Fake LibreTranslate backend; records every payload it receives."""
    calls: List[Dict[str, Any]] = []
    app = web.Application()

    async def translate(request: web.Request) -> web.Response:
        payload = await request.json()
        calls.append(payload)
        text, target = payload["q"], payload["target"]
        if text == "explode":
            return web.json_response({"error": "internal"}, status=500)
        if text == "garbage":
            return web.Response(text="<html>not json</html>", content_type="text/html")
        translated = FAKE_TRANSLATIONS.get((text, target), f"{text} ({target})")
        return web.json_response({"translatedText": translated})

    app.router.add_post("/translate", translate)

    async for url in serve_app(app):
        yield {"url": url, "calls": calls}


@pytest.fixture()
def proxy_config() -> ProxyConfig:
    return ProxyConfig(
        database_path=":memory:",
        crawl_timeout=2.0,
        ingest_timeout=2.0,
        render_timeout=2.0,
        translate_timeout=2.0,
    )


@pytest_asyncio.fixture
async def repository() -> AsyncIterator[SqliteTranslationRepository]:
    repo = SqliteTranslationRepository(":memory:")
    async with repo:
        yield repo


@pytest_asyncio.fixture
async def fetcher(proxy_config) -> AsyncIterator[Fetcher]:
    async with ClientSession() as session:
        yield Fetcher(session, proxy_config)
