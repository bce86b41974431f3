"""Layout tree model: the builder's element tree as immutable values.

Wire format (builder clipboard / _elementor_data):
    {"id": "3f9a2c1", "elType": "widget", "widgetType": "heading",
     "isInner": false, "isLocked": false, "settings": {...}, "elements": [...]}
"""

from __future__ import annotations

import random
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

_ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 7

# Widget sub-kinds the engine itself produces or reasons about
WIDGET_HEADING = "heading"
WIDGET_TEXT = "text-editor"
WIDGET_IMAGE = "image"
WIDGET_HTML = "html"

# Keys carried through verbatim from source elements
PASSTHROUGH_KEYS = ("defaultEditSettings", "editSettings", "htmlCache")


class NodeKind(str, Enum):
    CONTAINER = "container"
    SECTION = "section"
    COLUMN = "column"
    WIDGET = "widget"

    @classmethod
    def parse(cls, value: Any) -> Optional["NodeKind"]:
        """Case-insensitive lookup; None for anything outside the closed set."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def generate_element_id() -> str:
    """7-char lowercase alphanumeric id, locally legible rather than globally unique."""
    return "".join(random.choices(_ID_ALPHABET, k=ID_LENGTH))


@dataclass(frozen=True)
class TreeNode:
    """One layout element. Children are owned exclusively by their parent."""
    id: str
    kind: NodeKind
    settings: Dict[str, Any] = field(default_factory=dict)
    children: Tuple["TreeNode", ...] = ()
    widget_kind: Optional[str] = None
    is_inner: bool = False
    is_locked: bool = False
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_widget(self) -> bool:
        return self.kind is NodeKind.WIDGET

    def walk(self) -> Iterator["TreeNode"]:
        """Pre-order traversal (self first, then children in paint order)."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize into the builder's element wire format."""
        data: Dict[str, Any] = {
            "id": self.id,
            "elType": self.kind.value,
            "isInner": self.is_inner,
            "isLocked": self.is_locked,
            "settings": self.settings,
            "elements": [child.to_dict() for child in self.children],
        }
        if self.widget_kind:
            data["widgetType"] = self.widget_kind
        for key in PASSTHROUGH_KEYS:
            if key in self.extras:
                data[key] = self.extras[key]
        return data


def count_nodes(nodes) -> int:
    """Total number of nodes across a forest."""
    return sum(1 for root in nodes for _ in root.walk())
