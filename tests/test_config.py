# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_lingo.config import ProxyConfig, load_config
from site_lingo.translation.client import TranslationClient


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("translate_api_url: http://translator.local:5050/\nmax_pages: 5", ".yaml", None),
        (json.dumps({"translate_api_url": "http://translator.local:5050/", "max_pages": 5}), ".json", None),
        ("max_pages: 0", ".yaml", ValidationError),
        ("unknown_option: 1", ".yaml", ValidationError),
        ("- just\n- a list", ".yaml", TypeError),
        ("key: [unclosed", ".yaml", ValueError),
        ("{broken json", ".json", ValueError),
        ("max_pages = 5", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, ProxyConfig)
        assert cfg.max_pages == 5
        assert TranslationClient(str(cfg.translate_api_url)).endpoint == "http://translator.local:5050/translate"


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_load_config_default_present(tmp_path, monkeypatch):
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("port: 8080\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert load_config(None).port == 8080


def test_load_config_explicit_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_empty_yaml_gives_defaults(tmp_path):
    cfg = load_config(write_file(tmp_path, "", ".yaml"))
    assert cfg == ProxyConfig()


def test_defaults():
    cfg = ProxyConfig()
    assert TranslationClient(str(cfg.translate_api_url)).endpoint == "http://localhost:5050/translate"
    assert cfg.max_pages == 20
    assert (cfg.crawl_timeout, cfg.ingest_timeout, cfg.render_timeout, cfg.translate_timeout) == (5, 10, 10, 30)
    assert cfg.proxy_prefix == "/view"
    assert cfg.port == 3001
    assert cfg.sitewide_fallback is False


def test_shipped_default_config_matches_model_defaults():
    shipped = Path(__file__).resolve().parent.parent / "configs" / "default.yaml"
    assert load_config(shipped) == ProxyConfig()


@pytest.mark.parametrize("prefix,expected", [("view", "/view"), ("/proxy/", "/proxy"), ("/a/b/", "/a/b")])
def test_proxy_prefix_is_normalized(prefix, expected):
    assert ProxyConfig(proxy_prefix=prefix).proxy_prefix == expected


def test_proxy_prefix_cannot_be_root():
    with pytest.raises(ValidationError):
        ProxyConfig(proxy_prefix="/")


def test_languages_are_lowercased():
    cfg = ProxyConfig(source_language=" EN ", default_language="Es")
    assert (cfg.source_language, cfg.default_language) == ("en", "es")


@pytest.mark.parametrize("field", ["crawl_timeout", "render_timeout", "translate_timeout"])
def test_timeouts_must_be_positive(field):
    with pytest.raises(ValidationError):
        ProxyConfig(**{field: 0})


def test_config_is_frozen():
    cfg = ProxyConfig()
    with pytest.raises(ValidationError):
        cfg.max_pages = 3
