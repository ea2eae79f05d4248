# File: tests/test_utils.py
import pytest

from site_lingo.errors import InvalidInputError
from site_lingo.utils import (
    hostname_of,
    normalize_language,
    normalize_path,
    origin_for_domain,
    remove_duplicates,
    split_site_url,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("", "/"),
        ("/", "/"),
        ("about", "/about"),
        ("/a/./b/../c", "/a/c"),
        ("//a///b", "/a/b"),
        ("/docs/", "/docs/"),
        ("/../..", "/"),
    ],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


def test_split_site_url():
    assert split_site_url("HTTPS://Example.COM:8443/a/../b?x=1") == (
        "https",
        "example.com:8443",
        "/b",
        "https://example.com:8443",
    )
    assert split_site_url("http://user:pw@Example.com/")[1] == "example.com"


@pytest.mark.parametrize("url", ["", "   ", "example.com", "mailto:a@b.c", "http://", None])
def test_split_site_url_rejects(url):
    with pytest.raises(InvalidInputError) as info:
        split_site_url(url)
    assert info.value.field == "url"


def test_origin_for_domain():
    assert origin_for_domain("example.com", ["localhost"]) == "https://example.com"
    assert origin_for_domain("localhost:3000", ["localhost"]) == "http://localhost:3000"
    assert hostname_of("Example.com:80") == "example.com"


def test_remove_duplicates_keeps_order():
    assert remove_duplicates(["/b", "/a", "/b", "/"]) == ["/b", "/a", "/"]


@pytest.mark.parametrize("raw,expected", [("es", "es"), (" ES ", "es"), ("zh-Hans", "zh-hans"), ("", ""), (None, "")])
def test_normalize_language(raw, expected):
    assert normalize_language(raw) == expected
