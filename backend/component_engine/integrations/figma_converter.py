"""Builder tree → Figma scene node converter.

Produces a layout approximation, not a pixel-accurate render: every node
is 320 wide, TEXT nodes are 50 tall and frames 120 (recomputed from their
children), stacked by index. Styling is read from common builder settings:

- background_color            → fills (frames default to white)
- title_color / color         → text fills (per-kind defaults)
- border_color + border_width → strokes / strokeWeight
- border_radius               → cornerRadius
- padding                     → padding* (default 24)
- title_size / align          → text style
"""

from __future__ import annotations

import random
import re
import string
from typing import Any, Dict, List, Optional

from ..tree.html_utils import strip_tags
from ..tree.model import WIDGET_HEADING, WIDGET_TEXT, TreeNode

FIGMA_ID_LENGTH = 10
_BASE36 = string.digits + string.ascii_lowercase

NODE_WIDTH = 320
TEXT_HEIGHT = 50
FRAME_HEIGHT = 120
CHILD_ROW_HEIGHT = 70
TOP_LEVEL_ROW_HEIGHT = 140
ROW_HEIGHT = CHILD_ROW_HEIGHT

ITEM_SPACING = 16
DEFAULT_PADDING = 24

ROOT_WIDTH = 375
ROOT_PADDING = 24
ROOT_SPACING = 24
ROOT_CORNER_RADIUS = 12
ROOT_MIN_HEIGHT = 200

FONT_FAMILY = "Inter"
HEADING_FONT_SIZE = 24
TEXT_FONT_SIZE = 16

WHITE = {"r": 1.0, "g": 1.0, "b": 1.0}
HEADING_COLOR = {"r": 0.12, "g": 0.16, "b": 0.22}
TEXT_COLOR = {"r": 0.42, "g": 0.45, "b": 0.50}

TEXT_WIDGET_KINDS = frozenset({"text", WIDGET_TEXT, WIDGET_HEADING})

_ALIGNMENTS = {
    "left": "LEFT",
    "start": "LEFT",
    "center": "CENTER",
    "right": "RIGHT",
    "end": "RIGHT",
    "justify": "JUSTIFIED",
    "justified": "JUSTIFIED",
}

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_NUMBER_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def generate_figma_id() -> str:
    return "".join(random.choices(_BASE36, k=FIGMA_ID_LENGTH))


def hex_to_figma_color(value: Any) -> Optional[Dict[str, float]]:
    """'#1e293b' → {"r", "g", "b"[, "a"]} in 0..1; None when not a hex colour."""
    if not isinstance(value, str):
        return None
    match = _HEX_RE.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    channels = [int(digits[i:i + 2], 16) / 255 for i in range(0, len(digits), 2)]
    color = {"r": channels[0], "g": channels[1], "b": channels[2]}
    if len(channels) == 4:
        color["a"] = channels[3]
    return color


def _number(value: Any) -> Optional[float]:
    """Read 12, "12", "12px" or {"size": 12}."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, dict):
        return _number(value.get("size"))
    if isinstance(value, str):
        match = _NUMBER_RE.match(value)
        if match:
            return float(match.group(1))
    return None


def _int_or(value: Any, default: int) -> int:
    number = _number(value)
    return int(number) if number is not None else default


def _solid(color: Dict[str, float]) -> Dict[str, Any]:
    rgb = {k: color[k] for k in ("r", "g", "b")}
    return {"type": "SOLID", "color": rgb, "opacity": color.get("a", 1)}


def _padding(settings: Dict[str, Any]) -> Dict[str, int]:
    padding = settings.get("padding")
    if not isinstance(padding, dict):
        padding = {}
    return {
        f"padding{side.capitalize()}": _int_or(padding.get(side), DEFAULT_PADDING)
        for side in ("left", "right", "top", "bottom")
    }


def _stroke_weight(border_width: Any) -> Optional[float]:
    if isinstance(border_width, dict) and "size" not in border_width:
        widths = [_number(border_width.get(side)) for side in ("top", "right", "bottom", "left")]
        widths = [w for w in widths if w is not None]
        return max(widths) if widths else None
    return _number(border_width)


def is_text_node(node: TreeNode) -> bool:
    return node.is_widget and node.widget_kind in TEXT_WIDGET_KINDS


def text_characters(settings: Dict[str, Any]) -> str:
    for key in ("title", "text"):
        value = settings.get(key)
        if isinstance(value, str) and value.strip():
            return strip_tags(value) or value.strip()
    editor = settings.get("editor")
    if isinstance(editor, str):
        text = strip_tags(editor)
        if text:
            return text
    return "Text Element"


def _text_style(node: TreeNode) -> Dict[str, Any]:
    settings = node.settings
    heading = node.widget_kind == WIDGET_HEADING
    align = settings.get("align")
    return {
        "fontFamily": FONT_FAMILY,
        "fontSize": _int_or(
            settings.get("title_size"), HEADING_FONT_SIZE if heading else TEXT_FONT_SIZE
        ),
        "fontWeight": 700 if heading else 400,
        "textAlignHorizontal": _ALIGNMENTS.get(str(align).lower(), "LEFT") if align else "LEFT",
        "textAlignVertical": "CENTER",
    }


def convert_node(node: TreeNode, index: int = 0, row_height: int = ROW_HEIGHT) -> Dict[str, Any]:
    """Convert one tree node (recursively) into a Figma TEXT or FRAME node."""
    settings = node.settings
    text = is_text_node(node)
    figma_node: Dict[str, Any] = {
        "id": generate_figma_id(),
        "type": "TEXT" if text else "FRAME",
        "name": node.widget_kind or node.kind.value,
        "absoluteBoundingBox": {
            "x": 0,
            "y": index * row_height,
            "width": NODE_WIDTH,
            "height": TEXT_HEIGHT if text else FRAME_HEIGHT,
        },
        "constraints": {"horizontal": "LEFT_RIGHT", "vertical": "TOP"},
    }

    if text:
        figma_node["characters"] = text_characters(settings)
        figma_node["style"] = _text_style(node)
        color = hex_to_figma_color(settings.get("title_color") or settings.get("color"))
        if color is None:
            color = HEADING_COLOR if node.widget_kind == WIDGET_HEADING else TEXT_COLOR
        figma_node["fills"] = [_solid(color)]
    else:
        figma_node.update({
            "layoutMode": "VERTICAL",
            "primaryAxisSizingMode": "AUTO",
            "counterAxisSizingMode": "FIXED",
            "itemSpacing": ITEM_SPACING,
        })
        figma_node.update(_padding(settings))
        background = hex_to_figma_color(settings.get("background_color"))
        figma_node["fills"] = [_solid(background or WHITE)]
        if settings.get("border_radius") not in (None, "", {}):
            figma_node["cornerRadius"] = _int_or(settings.get("border_radius"), 0)

        children = [
            convert_node(child, i, CHILD_ROW_HEIGHT)
            for i, child in enumerate(node.children)
        ]
        figma_node["children"] = children
        if children:
            box = figma_node["absoluteBoundingBox"]
            box["height"] = (
                sum(c["absoluteBoundingBox"]["height"] for c in children)
                + (len(children) - 1) * ITEM_SPACING
                + figma_node["paddingTop"]
                + figma_node["paddingBottom"]
            )

    border = hex_to_figma_color(settings.get("border_color"))
    weight = _stroke_weight(settings.get("border_width"))
    if border is not None and weight:
        figma_node["strokes"] = [_solid(border)]
        figma_node["strokeWeight"] = weight

    return figma_node


def build_root_frame(nodes: List[TreeNode], title: str) -> Dict[str, Any]:
    """Wrap converted top-level nodes in the component's root frame."""
    children = [
        convert_node(node, i, TOP_LEVEL_ROW_HEIGHT) for i, node in enumerate(nodes)
    ]
    return {
        "id": generate_figma_id(),
        "type": "FRAME",
        "name": title,
        "children": children,
        "absoluteBoundingBox": {
            "x": 0,
            "y": 0,
            "width": ROOT_WIDTH,
            "height": max(ROOT_MIN_HEIGHT, len(children) * TOP_LEVEL_ROW_HEIGHT + 2 * ROOT_PADDING),
        },
        "constraints": {"horizontal": "LEFT_RIGHT", "vertical": "TOP"},
        "layoutMode": "VERTICAL",
        "primaryAxisSizingMode": "AUTO",
        "counterAxisSizingMode": "FIXED",
        "itemSpacing": ROOT_SPACING,
        "paddingLeft": ROOT_PADDING,
        "paddingRight": ROOT_PADDING,
        "paddingTop": ROOT_PADDING,
        "paddingBottom": ROOT_PADDING,
        "fills": [_solid(WHITE)],
        "cornerRadius": ROOT_CORNER_RADIUS,
    }
