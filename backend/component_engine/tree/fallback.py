"""Synthesize a builder tree from a plain document when no stored tree exists.

Output is always exactly one root container:

    container (boxed, column, 20px gap/padding)
    ├── heading        if the document has a title
    ├── image          if it references featured media
    ├── html | text-editor   from content (or excerpt when content is empty)
    └── placeholder    only when nothing above was produced
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .html_utils import has_block_tags, sanitize_html, strip_tags
from .model import (
    WIDGET_HEADING,
    WIDGET_HTML,
    WIDGET_IMAGE,
    WIDGET_TEXT,
    NodeKind,
    TreeNode,
    generate_element_id,
)
from .normalizer import normalize_tree
from .payload import RemoteDocument

logger = logging.getLogger(__name__)

PLACEHOLDER_HTML = "<p><em>No content available for this component.</em></p>"

ROOT_CONTAINER_SETTINGS: Dict[str, Any] = {
    "content_width": "boxed",
    "flex_direction": "column",
    "gap": {"unit": "px", "size": 20},
    "padding": {"unit": "px", "top": 20, "right": 20, "bottom": 20, "left": 20},
}


def _widget(widget_kind: str, settings: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": generate_element_id(),
        "elType": NodeKind.WIDGET.value,
        "widgetType": widget_kind,
        "settings": settings,
        "elements": [],
    }


def _content_widget(document: RemoteDocument) -> Optional[Dict[str, Any]]:
    content = document.content_html.strip()
    if content:
        if has_block_tags(content):
            markup = sanitize_html(content)
            if markup:
                return _widget(WIDGET_HTML, {"html": markup})
        text = strip_tags(content)
        if text:
            return _widget(WIDGET_TEXT, {"editor": text})

    excerpt = strip_tags(document.excerpt_html)
    if excerpt:
        return _widget(WIDGET_TEXT, {"editor": excerpt})
    return None


def synthesize_fallback(
    document: RemoteDocument,
    warnings: Optional[List[str]] = None,
) -> List[TreeNode]:
    """Build one root container from title, featured media and content. Total."""
    children: List[Dict[str, Any]] = []

    title = strip_tags(document.title)
    if title:
        children.append(_widget(WIDGET_HEADING, {"title": title, "header_size": "h2"}))

    media = document.featured_media
    if media is not None:
        image: Dict[str, Any] = {"url": media.url}
        if media.media_id is not None:
            image["id"] = media.media_id
        children.append(_widget(WIDGET_IMAGE, {"image": image, "image_alt": title}))

    content = _content_widget(document)
    if content is not None:
        children.append(content)

    if not children:
        children.append(_widget(WIDGET_TEXT, {"editor": PLACEHOLDER_HTML}))

    root = {
        "id": generate_element_id(),
        "elType": NodeKind.CONTAINER.value,
        "settings": dict(ROOT_CONTAINER_SETTINGS),
        "elements": children,
    }
    logger.info(
        "Synthesized fallback tree for document %s (%d widgets)",
        document.id, len(children),
    )
    return normalize_tree([root], warnings)
