"""HTML helpers for post content (BeautifulSoup, html.parser backend)."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

# Elements removed together with their contents
_STRIP_ELEMENTS = ("script", "style", "noscript")

# Attributes removed from every remaining element (plus any on* handler)
_STRIP_ATTRIBUTES = ("style", "class")

BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "div", "dl", "figure",
    "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr",
    "img", "li", "main", "nav", "ol", "p", "pre", "section", "table", "ul",
})

_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_html(html: str) -> str:
    """Drop script/style/noscript elements and style, class, on* attributes."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_STRIP_ELEMENTS):
        tag.decompose()
    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            if attr in _STRIP_ATTRIBUTES or attr.lower().startswith("on"):
                del tag.attrs[attr]
    return str(soup).strip()


def strip_tags(html: str) -> str:
    """Visible text with whitespace collapsed."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_STRIP_ELEMENTS):
        tag.decompose()
    text = soup.get_text(" ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def has_block_tags(html: str) -> bool:
    if not html or "<" not in html:
        return False
    soup = BeautifulSoup(html, "html.parser")
    return soup.find(lambda tag: tag.name in BLOCK_TAGS) is not None
