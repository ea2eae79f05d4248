"""site_lingo.rewriter.rewriter: turns an upstream page into its translated proxy rendition.

The rewrite works on the parsed tree and never on raw markup:

* translated text is substituted inside text nodes only, so attribute values,
  comments and ``<script>``/``<style>`` bodies are left alone;
* internal ``<a href>`` links are routed back through the proxy;
* relative asset URLs, including ``url()`` values of inline ``style``
  attributes, become absolute URLs of the original site;
* the ``<head>`` receives a ``<base>`` pointing at the original origin plus
  charset/viewport metas when missing.

Every step is idempotent: rewriting an already rewritten page changes nothing.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Doctype, NavigableString, PreformattedString, Tag

from site_lingo.logger import get_logger
from site_lingo.utils import hostname_of

__all__ = [
    "ContentRewriter",
    "TranslationTuple",
    "translation_tuples",
    "absolutize",
    "ASSET_TAGS",
    "ASSET_ATTRIBUTES",
    "WRAPPER_CLASS",
]

#: (original text, translated text or None, element kind)
TranslationTuple = Tuple[str, Optional[str], str]

ASSET_TAGS: Tuple[str, ...] = ("img", "script", "link", "source", "video", "audio", "track")
ASSET_ATTRIBUTES: Tuple[str, ...] = ("src", "href", "poster")
WRAPPER_CLASS = "website-translation-wrapper"

_OPAQUE_PREFIXES: Tuple[str, ...] = ("data:", "blob:", "#", "//", "javascript:", "about:", "mailto:", "tel:")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_CSS_URL_RE = re.compile(r"""url\(\s*(['"]?)(.*?)\1\s*\)""", re.IGNORECASE)
_SKIPPED_CONTAINERS = frozenset({"script", "style", "template", "noscript", "textarea"})
_WRAPPER_STYLE_ID = "website-translation-wrapper-style"
_WRAPPER_CSS = f".{WRAPPER_CLASS} {{ display: contents; }}"


def _is_text_node(node: object) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def absolutize(value: str, base_url: str) -> str:
    """Resolve a relative URL against *base_url*; data:, fragment, protocol-relative and absolute URLs pass through."""
    candidate = value.strip()
    if not candidate or candidate.lower().startswith(_OPAQUE_PREFIXES) or _SCHEME_RE.match(candidate):
        return value
    try:
        return urljoin(base_url, candidate)
    except ValueError:
        return value


class ContentRewriter:
    """Rewrites fetched HTML for the translated proxy."""

    def __init__(self, proxy_prefix: str = "/view", wrap_body: bool = True) -> None:
        self.proxy_prefix = "/" + proxy_prefix.strip("/")
        self.wrap_body = wrap_body
        self.logger = get_logger("rewriter")

    # ------------------------------------------------------------------ #
    # Entry point                                                        #
    # ------------------------------------------------------------------ #

    def rewrite(
        self,
        html: str,
        page_url: str,
        language: str,
        translations: Iterable[TranslationTuple] = (),
    ) -> str:
        """Return the proxied rendition of *html*, fetched from *page_url*, in *language*."""
        soup = BeautifulSoup(html, "html.parser")
        parts = urlsplit(page_url)
        domain = parts.netloc.lower()
        origin = f"{parts.scheme}://{domain}"
        base_url = self.effective_base_url(soup, page_url)

        replaced = self.substitute_text(soup, translations)
        links = self.rewrite_links(soup, base_url, domain, language)
        assets = self.rewrite_assets(soup, base_url)
        if self.wrap_body:
            self.wrap_body_contents(soup)
        self.ensure_head(soup, origin)

        self.logger.debug(
            "Rewrote %s: %d text nodes, %d links, %d asset URLs", page_url, replaced, links, assets
        )
        return str(soup)

    @staticmethod
    def effective_base_url(soup: BeautifulSoup, page_url: str) -> str:
        """Page URL adjusted by the document's own ``<base href>``, if any."""
        tag = soup.find("base", href=True)
        if isinstance(tag, Tag):
            href = tag.get("href")
            if isinstance(href, str) and href.strip():
                return urljoin(page_url, href.strip())
        return page_url

    # ------------------------------------------------------------------ #
    # 1. Text substitution                                               #
    # ------------------------------------------------------------------ #

    def substitute_text(self, soup: BeautifulSoup, translations: Iterable[TranslationTuple]) -> int:
        """Replace recorded originals by their translations inside matching elements' text nodes.

        The first tuple per (original, kind) wins. Matching is substring
        containment of the trimmed original in the element text.
        """
        seen: Set[Tuple[str, str]] = set()
        # id(text node) -> originals already substituted into it
        applied: Dict[int, Set[str]] = {}
        count = 0
        for original, translated, kind in translations:
            original = (original or "").strip()
            if not original or not kind or (original, kind) in seen:
                continue
            seen.add((original, kind))
            if not translated or translated == original:
                continue
            for element in soup.find_all(kind):
                if isinstance(element, Tag) and original in element.get_text():
                    count += self._replace_in_text_nodes(element, original, translated, applied)
        return count

    @staticmethod
    def _replace_in_text_nodes(
        element: Tag,
        original: str,
        translated: str,
        applied: Dict[int, Set[str]],
    ) -> int:
        count = 0
        stack: List[object] = [element]
        while stack:
            node = stack.pop()
            if isinstance(node, Tag):
                if node.name in _SKIPPED_CONTAINERS:
                    continue
                stack.extend(reversed(node.contents))
                continue
            if not _is_text_node(node):
                continue
            done = applied.get(id(node), set())
            if original in done or original not in node:
                continue
            replacement = NavigableString(str(node).replace(original, translated))
            node.replace_with(replacement)
            applied.pop(id(node), None)
            applied[id(replacement)] = done | {original}
            count += 1
        return count

    # ------------------------------------------------------------------ #
    # 2. Internal links                                                  #
    # ------------------------------------------------------------------ #

    def proxy_root(self, domain: str) -> str:
        return f"{self.proxy_prefix}/{domain}"

    def proxy_url(self, domain: str, path: str, language: str, query: str = "", fragment: str = "") -> str:
        """Proxy route of *path* on *domain*, carrying *language* as ``lang``."""
        params = [(k, v) for k, v in parse_qsl(query, keep_blank_values=True) if k != "lang"]
        params.append(("lang", language))
        url = f"{self.proxy_root(domain)}{path or '/'}?{urlencode(params)}"
        return f"{url}#{fragment}" if fragment else url

    def rewrite_links(self, soup: BeautifulSoup, base_url: str, domain: str, language: str) -> int:
        """Point same-host anchors at the proxy; external and fragment-only links are kept."""
        host = hostname_of(domain)
        root = self.proxy_root(domain)
        count = 0
        for anchor in soup.find_all("a", href=True):
            href = anchor.get("href")
            if not isinstance(href, str):
                continue
            href = href.strip()
            if not href or href.startswith("#"):
                continue
            if href == root or href.startswith((root + "/", root + "?")):
                continue
            try:
                target = urlsplit(urljoin(base_url, href))
                target_host = target.hostname
            except ValueError:
                self.logger.debug("Invalid href: %r", href)
                continue
            if target.scheme not in ("http", "https") or target_host != host:
                continue
            anchor["href"] = self.proxy_url(domain, target.path, language, target.query, target.fragment)
            count += 1
        return count

    # ------------------------------------------------------------------ #
    # 3. Assets                                                          #
    # ------------------------------------------------------------------ #

    def rewrite_assets(self, soup: BeautifulSoup, base_url: str) -> int:
        """Make relative src/href/poster/srcset of asset elements and inline style url() values absolute.

        ``<style>`` blocks are left verbatim.
        """
        count = 0
        for tag in soup.find_all(list(ASSET_TAGS)):
            for attr in ASSET_ATTRIBUTES:
                value = tag.get(attr)
                if not isinstance(value, str):
                    continue
                absolute = absolutize(value, base_url)
                if absolute != value:
                    tag[attr] = absolute
                    count += 1
            srcset = tag.get("srcset")
            if isinstance(srcset, str) and srcset.strip():
                rewritten = self._rewrite_srcset(srcset, base_url)
                if rewritten != srcset:
                    tag["srcset"] = rewritten
                    count += 1
        for tag in soup.find_all(style=True):
            style = tag.get("style")
            if not isinstance(style, str) or "url(" not in style.lower():
                continue
            rewritten = _CSS_URL_RE.sub(lambda m: self._absolute_css_url(m, base_url), style)
            if rewritten != style:
                tag["style"] = rewritten
                count += 1
        return count

    @staticmethod
    def _absolute_css_url(match: "re.Match[str]", base_url: str) -> str:
        quote, value = match.group(1), match.group(2)
        return f"url({quote}{absolutize(value, base_url)}{quote})"

    @staticmethod
    def _rewrite_srcset(srcset: str, base_url: str) -> str:
        if "data:" in srcset:
            return srcset
        candidates: List[str] = []
        changed = False
        for candidate in srcset.split(","):
            pieces = candidate.strip().split()
            if not pieces:
                continue
            absolute = absolutize(pieces[0], base_url)
            changed = changed or absolute != pieces[0]
            candidates.append(" ".join([absolute, *pieces[1:]]))
        return ", ".join(candidates) if changed else srcset

    # ------------------------------------------------------------------ #
    # 4. Body isolation                                                  #
    # ------------------------------------------------------------------ #

    def wrap_body_contents(self, soup: BeautifulSoup) -> None:
        """Move the body's children, in order, into an isolation wrapper ``<div>``."""
        body = soup.body
        if body is None:
            return
        elements = [child for child in body.contents if isinstance(child, Tag)]
        if len(elements) == 1 and WRAPPER_CLASS in (elements[0].get("class") or []):
            return
        wrapper = soup.new_tag("div", attrs={"class": WRAPPER_CLASS})
        for child in list(body.contents):
            wrapper.append(child.extract())
        body.append(wrapper)

    # ------------------------------------------------------------------ #
    # 5. Head                                                            #
    # ------------------------------------------------------------------ #

    def ensure_head(self, soup: BeautifulSoup, origin: str) -> Tag:
        """Guarantee ``<head>`` with charset, a single ``<base>`` at *origin* and a viewport meta."""
        head = soup.head
        if head is None:
            head = soup.new_tag("head")
            if soup.html is not None:
                soup.html.insert(0, head)
            else:
                position = 0
                for index, node in enumerate(soup.contents):
                    if isinstance(node, Doctype):
                        position = index + 1
                soup.insert(position, head)

        for stale in soup.find_all("base"):
            stale.decompose()

        index = 0
        charset = head.find("meta", charset=True)
        if charset is None:
            charset = soup.new_tag("meta", attrs={"charset": "UTF-8"})
            head.insert(0, charset)
        if charset.parent is head:
            index = next(i for i, node in enumerate(head.contents) if node is charset) + 1

        head.insert(index, soup.new_tag("base", attrs={"href": f"{origin}/"}))

        if soup.find("meta", attrs={"name": "viewport"}) is None:
            head.insert(
                index + 1,
                soup.new_tag("meta", attrs={"name": "viewport", "content": "width=device-width, initial-scale=1.0"}),
            )

        if self.wrap_body and soup.body is not None and head.find("style", id=_WRAPPER_STYLE_ID) is None:
            style = soup.new_tag("style", attrs={"id": _WRAPPER_STYLE_ID})
            style.string = _WRAPPER_CSS
            head.append(style)
        return head


def translation_tuples(fragments: Sequence[Any]) -> List[TranslationTuple]:
    """Build rewriter input from objects with original_text / translated_text / element_kind."""
    return [(f.original_text, f.translated_text, f.element_kind) for f in fragments]
