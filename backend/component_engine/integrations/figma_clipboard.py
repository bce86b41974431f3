"""Figma clipboard HTML encoder.

Figma reads pasted HTML for two comment-wrapped, base64-encoded spans:

    <div>
      <span data-metadata="<!--(figmeta)BASE64_METADATA(figmeta)-->"></span>
      <span data-buffer="<!--(figma)BASE64_SCENE(figma)-->"></span>
      <p>Title</p>
    </div>

The real buffer is Figma's binary scene format. We embed a JSON scene
instead, so Figma may reject the paste or accept it only partially.
"""

from __future__ import annotations

import base64
import html
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict

from .. import settings
from ..clipboard.item import MIME_HTML, MIME_PLAIN, ClipboardItem
from .figma_converter import generate_figma_id

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "WordPress Component"

_HTML_TEMPLATE = (
    "<div>\n"
    '  <span data-metadata="<!--(figmeta){metadata}(figmeta)-->"></span>\n'
    '  <span data-buffer="<!--(figma){buffer}(figma)-->"></span>\n'
    "  <p>{title}</p>\n"
    "</div>"
)


@dataclass(frozen=True)
class ForeignClipboardPayload:
    html: str
    plain_text: str
    metadata: Dict[str, Any]
    scene: Dict[str, Any]

    def clipboard_item(self) -> ClipboardItem:
        return ClipboardItem({MIME_HTML: self.html, MIME_PLAIN: self.plain_text})


def _b64_json(record: Dict[str, Any]) -> str:
    text = json.dumps(record, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def build_metadata() -> Dict[str, Any]:
    return {
        "fileKey": generate_figma_id() + generate_figma_id(),
        "pasteID": generate_figma_id() + generate_figma_id(),
        "dataType": "scene",
        "version": settings.FIGMA_METADATA_VERSION,
    }


def build_scene(root: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "version": settings.FIGMA_SCENE_VERSION,
        "timestamp": int(time.time() * 1000),
        "document": {
            "id": "0:0",
            "name": "Document",
            "type": "DOCUMENT",
            "children": [{
                "id": "0:1",
                "name": "Page 1",
                "type": "CANVAS",
                "children": [root],
            }],
        },
    }


def plain_text_fallback(title: str, has_native_data: bool) -> str:
    origin = "Elementor" if has_native_data else "Generic"
    return f"Component: {title} ({origin})"


def encode_figma_clipboard(
    root: Dict[str, Any],
    title: str,
    has_native_data: bool,
) -> ForeignClipboardPayload:
    """Encode a root frame into Figma's clipboard HTML plus a plain-text fallback."""
    title = title or DEFAULT_TITLE
    metadata = build_metadata()
    scene = build_scene(root)
    markup = _HTML_TEMPLATE.format(
        metadata=_b64_json(metadata),
        buffer=_b64_json(scene),
        title=html.escape(title),
    )
    logger.info(
        "Encoded Figma clipboard for %r (%d chars html, native=%s)",
        title, len(markup), has_native_data,
    )
    return ForeignClipboardPayload(
        html=markup,
        plain_text=plain_text_fallback(title, has_native_data),
        metadata=metadata,
        scene=scene,
    )
