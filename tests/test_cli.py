# File: tests/test_cli.py
"""Tests of the CLI (`site_lingo.cli`) with click.testing.CliRunner.

The proxy operations are patched out; the commands are checked for argument
handling, output format and error reporting.
"""
import asyncio
import importlib
import json

import pytest
from click.testing import CliRunner

cli_module = importlib.import_module("site_lingo.cli")
from site_lingo.cli import cli
from site_lingo.crawler.models import CrawlReport, CrawlResult
from site_lingo.engine import IngestResult, TranslateResult
from site_lingo.errors import NotFoundError, UpstreamFetchError


class FakeProxy:
    """Records calls and returns canned results."""

    def __init__(self):
        self.calls = []

    async def map_website(self, url, max_pages=None):
        self.calls.append(("map", url, max_pages))
        return CrawlReport("example.com", [CrawlResult("/", "Home", 42)])

    async def fetch_website(self, url, pages):
        self.calls.append(("fetch", url, pages))
        return IngestResult("Website content stored successfully", 1, "example.com", 3)

    async def translate_website(self, website_id, language):
        self.calls.append(("translate", website_id, language))
        if website_id == 404:
            raise NotFoundError("Website not found: 404")
        return TranslateResult("Website translated successfully", 3)


@pytest.fixture(autouse=True)
def fake_proxy(monkeypatch, tmp_path):
    """Patch run_operation to drive a FakeProxy; run from an empty directory."""
    proxy = FakeProxy()

    def fake_run(cfg, operation):
        return asyncio.run(operation(proxy))

    monkeypatch.setattr(cli_module, "run_operation", fake_run)
    monkeypatch.chdir(tmp_path)
    return proxy


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteLingo" in result.output


def test_show_config_from_file(tmp_path):
    cfg_file = tmp_path / "custom.yaml"
    cfg_file.write_text("port: 8088\nmax_pages: 7\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["port"] == 8088
    assert data["max_pages"] == 7


def test_show_config_defaults_without_file():
    result = CliRunner().invoke(cli, ["config"])
    assert result.exit_code == 0
    assert json.loads(result.output)["proxy_prefix"] == "/view"


def test_invalid_config_is_reported(tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("max_pages: -1\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Failed to load configuration" in result.output


def test_map_stdout(fake_proxy):
    result = CliRunner().invoke(cli, ["map", "https://example.com", "--limit", "5"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data == {
        "domain": "example.com",
        "pages": [{"path": "/", "title": "Home", "textCount": 42}],
        "totalPages": 1,
    }
    assert fake_proxy.calls == [("map", "https://example.com", 5)]


def test_map_json_file(tmp_path):
    out = tmp_path / "reports" / "pages.json"
    result = CliRunner().invoke(cli, ["map", "https://example.com", "--json", str(out)])
    assert result.exit_code == 0
    assert out.exists()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["totalPages"] == 1
    assert "generatedAt" in data


def test_map_rejects_bad_limit(fake_proxy):
    result = CliRunner().invoke(cli, ["map", "https://example.com", "--limit", "0"])
    assert result.exit_code == 1
    assert fake_proxy.calls == []


def test_map_failure(monkeypatch):
    def failing(cfg, operation):
        raise UpstreamFetchError("https://example.com/", "timed out after 5s")

    monkeypatch.setattr(cli_module, "run_operation", failing)
    result = CliRunner().invoke(cli, ["map", "https://example.com"])
    assert result.exit_code == 1
    assert "Crawl failed" in result.output


def test_fetch_command(fake_proxy):
    result = CliRunner().invoke(cli, ["fetch", "https://example.com", "/", "/about"])
    assert result.exit_code == 0
    assert json.loads(result.output)["translationsCount"] == 3
    assert fake_proxy.calls == [("fetch", "https://example.com", ["/", "/about"])]


def test_fetch_requires_pages():
    result = CliRunner().invoke(cli, ["fetch", "https://example.com"])
    assert result.exit_code == 2


def test_translate_command(fake_proxy):
    result = CliRunner().invoke(cli, ["translate", "1", "es"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "message": "Website translated successfully",
        "translatedCount": 3,
        "failedCount": 0,
    }


def test_translate_unknown_site():
    result = CliRunner().invoke(cli, ["translate", "404", "es"])
    assert result.exit_code == 1
    assert "Website not found" in result.output


def test_serve_uses_overrides(monkeypatch):
    captured = {}
    monkeypatch.setattr(
        cli_module, "run_server", lambda cfg, host=None, port=None: captured.update(host=host, port=port)
    )
    result = CliRunner().invoke(cli, ["serve", "--host", "127.0.0.1", "--port", "9000"])
    assert result.exit_code == 0
    assert captured == {"host": "127.0.0.1", "port": 9000}
