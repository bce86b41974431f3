"""Repair raw builder elements into TreeNodes that satisfy the builder's invariants.

Rules applied top-down, each node independently of its siblings:

- non-object elements and elements without a kind are dropped
- unknown kinds are dropped, unless a widget type is present (then: widget)
- widgets always get a widget type (inferred from settings when missing)
- containers get content_width / gap, sections get structure / gap,
  columns get _column_size
- a section left without children gets one full-width column
- missing or sibling-duplicate ids are regenerated
- children nested deeper than settings.TREE_MAX_DEPTH are cut off

The normalizer never raises; problems are appended to ``warnings``.
Normalizing its own output (via ``TreeNode.to_dict``) is the identity.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Set

from .. import settings as engine_settings
from .model import (
    PASSTHROUGH_KEYS,
    WIDGET_HEADING,
    WIDGET_IMAGE,
    WIDGET_TEXT,
    NodeKind,
    TreeNode,
    generate_element_id,
)

logger = logging.getLogger(__name__)

CONTAINER_DEFAULTS: Dict[str, Any] = {
    "content_width": "boxed",
    "gap": {"unit": "px", "size": 20},
}
SECTION_GAP_DEFAULT = "default"
COLUMN_SIZE_DEFAULT = 100
MAX_SECTION_COLUMNS = 6


def infer_widget_kind(settings: Dict[str, Any]) -> str:
    """Guess a widget type from its settings keys."""
    if "title" in settings:
        return WIDGET_HEADING
    if "editor" in settings or "content" in settings:
        return WIDGET_TEXT
    if "image" in settings:
        return WIDGET_IMAGE
    return WIDGET_TEXT


def _first(element: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in element:
            return element[key]
    return None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == {} or value == []


class TreeNormalizer:
    """Stateless apart from the warnings list it appends to."""

    def __init__(self, warnings: Optional[List[str]] = None):
        self.warnings = warnings if warnings is not None else []

    def _warn(self, message: str) -> None:
        logger.debug(message)
        self.warnings.append(message)

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def normalize(self, raw: Any) -> List[TreeNode]:
        if isinstance(raw, dict):
            raw = [raw]
        if not isinstance(raw, list):
            self._warn(f"Expected a list of elements, got {type(raw).__name__}")
            return []
        return self._normalize_siblings(raw, path="root", depth=0)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _normalize_siblings(
        self, elements: List[Any], path: str, depth: int
    ) -> List[TreeNode]:
        nodes: List[TreeNode] = []
        used_ids: Set[str] = set()
        for index, element in enumerate(elements):
            node = self._normalize_element(element, f"{path}[{index}]", used_ids, depth)
            if node is not None:
                used_ids.add(node.id)
                nodes.append(node)
        return nodes

    def _normalize_element(
        self, element: Any, path: str, used_ids: Set[str], depth: int
    ) -> Optional[TreeNode]:
        if not isinstance(element, dict):
            self._warn(f"{path}: dropped non-object element ({type(element).__name__})")
            return None

        widget_kind = _text(_first(element, "widgetType", "widget_kind"))
        raw_kind = _first(element, "elType", "kind")
        kind = NodeKind.parse(raw_kind)
        if kind is None:
            if widget_kind is None:
                if raw_kind is None:
                    self._warn(f"{path}: dropped element without a kind")
                else:
                    self._warn(f"{path}: dropped element of unknown kind {raw_kind!r}")
                return None
            if raw_kind is not None:
                self._warn(f"{path}: unknown kind {raw_kind!r} treated as widget")
            kind = NodeKind.WIDGET

        settings = self._settings(element.get("settings"), path)
        raw_children = _first(element, "elements", "children")
        if raw_children is None:
            raw_children = []
        elif not isinstance(raw_children, list):
            self._warn(f"{path}: ignored non-list children")
            raw_children = []
        elif raw_children and depth + 1 >= engine_settings.TREE_MAX_DEPTH:
            self._warn(
                f"{path}: dropped children nested deeper than {engine_settings.TREE_MAX_DEPTH} levels"
            )
            raw_children = []
        children = self._normalize_siblings(raw_children, path, depth + 1)

        if kind is NodeKind.WIDGET:
            if widget_kind is None:
                widget_kind = infer_widget_kind(settings)
                self._warn(f"{path}: inferred widget type '{widget_kind}'")
        else:
            widget_kind = None

        if kind is NodeKind.CONTAINER:
            for key, default in CONTAINER_DEFAULTS.items():
                if _is_blank(settings.get(key)):
                    settings[key] = dict(default) if isinstance(default, dict) else default
        elif kind is NodeKind.SECTION:
            if not children:
                self._warn(f"{path}: empty section, added a full-width column")
                children = [self._default_column()]
            if _is_blank(settings.get("structure")):
                columns = min(max(len(children), 1), MAX_SECTION_COLUMNS)
                settings["structure"] = f"{columns}0"
            if _is_blank(settings.get("gap")):
                settings["gap"] = SECTION_GAP_DEFAULT
        elif kind is NodeKind.COLUMN:
            if _is_blank(settings.get("_column_size")):
                settings["_column_size"] = COLUMN_SIZE_DEFAULT

        node_id = element.get("id")
        if isinstance(node_id, int) and not isinstance(node_id, bool):
            node_id = str(node_id)
        node_id = _text(node_id)
        if node_id is None or node_id in used_ids:
            if node_id is not None:
                self._warn(f"{path}: duplicate id '{node_id}' regenerated")
            node_id = self._fresh_id(used_ids)

        return TreeNode(
            id=node_id,
            kind=kind,
            settings=settings,
            children=tuple(children),
            widget_kind=widget_kind,
            is_inner=bool(_first(element, "isInner", "is_inner")),
            is_locked=bool(_first(element, "isLocked", "is_locked")),
            extras={k: element[k] for k in PASSTHROUGH_KEYS if k in element},
        )

    def _settings(self, value: Any, path: str) -> Dict[str, Any]:
        if isinstance(value, dict):
            return dict(value)
        # PHP serializes an empty associative array as []
        if value is None or value == []:
            return {}
        self._warn(f"{path}: ignored malformed settings ({type(value).__name__})")
        return {}

    @staticmethod
    def _fresh_id(used_ids: Set[str]) -> str:
        while True:
            candidate = generate_element_id()
            if candidate not in used_ids:
                return candidate

    @staticmethod
    def _default_column() -> TreeNode:
        return TreeNode(
            id=generate_element_id(),
            kind=NodeKind.COLUMN,
            settings={"_column_size": COLUMN_SIZE_DEFAULT},
        )


def normalize_tree(raw: Any, warnings: Optional[List[str]] = None) -> List[TreeNode]:
    """Normalize raw elements (list or single object) into TreeNodes."""
    return TreeNormalizer(warnings).normalize(raw)
