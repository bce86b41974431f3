"""Native builder clipboard payloads.

Single component (what the builder's "Paste" reads):
    {"type": "elementor", "siteurl": "https://example.org", "elements": [...]}

Several components (importable page template):
    {"content": [...], "page_settings": [], "version": "0.4", "title": "...", "type": "page"}
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from .. import settings
from ..tree.model import TreeNode

CLIPBOARD_TYPE = "elementor"
PAGE_TEMPLATE_VERSION = "0.4"


def native_envelope(nodes: Sequence[TreeNode], site_url: str) -> Dict[str, Any]:
    return {
        "type": CLIPBOARD_TYPE,
        "siteurl": (site_url or "").rstrip("/"),
        "elements": [node.to_dict() for node in nodes],
    }


def format_native_clipboard(nodes: Sequence[TreeNode], site_url: str) -> str:
    return json.dumps(
        native_envelope(nodes, site_url),
        indent=settings.NATIVE_CLIPBOARD_INDENT,
        ensure_ascii=False,
    )


def page_template(nodes: Sequence[TreeNode], title: str) -> Dict[str, Any]:
    content: List[Dict[str, Any]] = [node.to_dict() for node in nodes]
    return {
        "content": content,
        "page_settings": [],
        "version": PAGE_TEMPLATE_VERSION,
        "title": title,
        "type": "page",
    }


def format_page_template(nodes: Sequence[TreeNode], title: str) -> str:
    return json.dumps(
        page_template(nodes, title),
        indent=settings.NATIVE_CLIPBOARD_INDENT,
        ensure_ascii=False,
    )
