"""site_lingo.parser.fragment_extractor: pulls translatable text out of a parsed page.

Only a fixed vocabulary of elements is considered (headings, paragraphs,
spans, anchors and buttons).  Every matching element yields its flattened,
trimmed text in document order; nested matches (a ``<span>`` inside a
``<p>``) are emitted separately and de-duplication is left to storage.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = (
    "EXTRACTABLE_KINDS",
    "ExtractedFragment",
    "iter_extractable",
    "extract_fragments",
    "text_length",
    "make_soup",
)

EXTRACTABLE_KINDS: Tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6", "p", "span", "a", "button")


@dataclass(slots=True, frozen=True)
class ExtractedFragment:
    """A trimmed piece of visible text and the element kind it came from."""

    text: str
    element_kind: str


def make_soup(markup: Union[str, bytes, BeautifulSoup]) -> BeautifulSoup:
    """Parse *markup* with the stdlib-backed parser, or return it if it is already parsed."""
    if isinstance(markup, BeautifulSoup):
        return markup
    return BeautifulSoup(markup, "html.parser")


def iter_extractable(soup: BeautifulSoup) -> Iterator[Tag]:
    """Yield every element of an extractable kind in document order."""
    for tag in soup.find_all(list(EXTRACTABLE_KINDS)):
        if isinstance(tag, Tag):
            yield tag


def extract_fragments(markup: Union[str, bytes, BeautifulSoup]) -> List[ExtractedFragment]:
    """Return the non-empty trimmed text of every extractable element."""
    fragments: List[ExtractedFragment] = []
    for tag in iter_extractable(make_soup(markup)):
        text = tag.get_text().strip()
        if text:
            fragments.append(ExtractedFragment(text=text, element_kind=tag.name))
    return fragments


def text_length(markup: Union[str, bytes, BeautifulSoup]) -> int:
    """Length of the concatenated text of all extractable elements, trimmed."""
    joined = "".join(tag.get_text() for tag in iter_extractable(make_soup(markup)))
    return len(joined.strip())
