"""Locate the builder tree inside a document's loosely typed metadata.

Field priority is data: FIELD_PRIORITY is scanned top to bottom by one
generic loop, and the first field whose decoded value passes
``is_substantive_tree`` wins. Extra ``meta`` keys mentioning "elementor"
are appended in sorted order so the outcome never depends on dict order.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .payload import RemoteDocument

logger = logging.getLogger(__name__)

SCOPE_META = "meta"
SCOPE_ACF = "acf"
SCOPE_BODY = "body"

KIND_KEYS = ("elType", "kind")
WIDGET_KEYS = ("widgetType", "widget_kind")
CHILDREN_KEYS = ("elements", "children")


@dataclass(frozen=True)
class FieldRef:
    scope: str
    key: str

    @property
    def name(self) -> str:
        """Meta fields are named by key alone; other scopes are qualified."""
        if self.scope == SCOPE_META:
            return self.key
        return f"{self.scope}.{self.key}"


FIELD_PRIORITY: Tuple[FieldRef, ...] = (
    # Known builder fields
    FieldRef(SCOPE_META, "_elementor_data"),
    FieldRef(SCOPE_META, "elementor_data"),
    FieldRef(SCOPE_META, "_elementor_page_settings"),
    FieldRef(SCOPE_META, "_elementor_css"),
    FieldRef(SCOPE_META, "_elementor_version"),
    # Speculative: plugins and custom exports
    FieldRef(SCOPE_META, "_elementor_template_data"),
    FieldRef(SCOPE_META, "pagebuilder_data"),
    FieldRef(SCOPE_ACF, "_elementor_data"),
    FieldRef(SCOPE_ACF, "elementor_data"),
    FieldRef(SCOPE_BODY, "_elementor_data"),
    FieldRef(SCOPE_BODY, "elementor_data"),
)


@dataclass(frozen=True)
class LocatedTree:
    field_name: str
    elements: List[Any]
    raw_size: int


def _scope_of(document: RemoteDocument, scope: str) -> Dict[str, Any]:
    if scope == SCOPE_META:
        return document.meta
    if scope == SCOPE_ACF:
        return document.acf
    return document.raw


def candidate_fields(
    document: RemoteDocument,
    priority: Tuple[FieldRef, ...] = FIELD_PRIORITY,
) -> Iterator[Tuple[FieldRef, Any]]:
    """Present (non-None) fields in scan order."""
    seen = set()
    for ref in priority:
        seen.add(ref)
        value = _scope_of(document, ref.scope).get(ref.key)
        if value is not None:
            yield ref, value

    for key in sorted(document.meta):
        ref = FieldRef(SCOPE_META, key)
        if ref in seen or "elementor" not in key.lower():
            continue
        value = document.meta[key]
        if value is not None:
            yield ref, value


def looks_like_json(value: Any) -> bool:
    return isinstance(value, str) and value.strip()[:1] in ("[", "{")


def decode_field_value(value: Any) -> Optional[List[Any]]:
    """Decode a field value into a list of raw elements.

    Returns None when the value cannot hold a tree. Raises ValueError when
    the value looks like JSON but does not parse, including input nested
    too deeply for the decoder.
    """
    if looks_like_json(value):
        try:
            value = json.loads(value.strip())
        except RecursionError as e:
            raise ValueError("JSON nested too deeply") from e
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return value
    return None


def _has_key(element: Dict[str, Any], keys) -> bool:
    for key in keys:
        value = element.get(key)
        if isinstance(value, str) and value.strip():
            return True
    return False


def is_substantive_element(element: Any) -> bool:
    """An element with a kind and real content (settings, children or a widget type)."""
    if not isinstance(element, dict):
        return False
    has_widget = _has_key(element, WIDGET_KEYS)
    if not (_has_key(element, KIND_KEYS) or has_widget):
        return False
    settings = element.get("settings")
    if isinstance(settings, dict) and settings:
        return True
    for key in CHILDREN_KEYS:
        children = element.get(key)
        if isinstance(children, list) and children:
            return True
    return has_widget


def is_substantive_tree(elements: Optional[List[Any]]) -> bool:
    return bool(elements) and any(is_substantive_element(e) for e in elements)


def _raw_size(value: Any) -> int:
    if isinstance(value, str):
        return len(value)
    try:
        return len(json.dumps(value, ensure_ascii=False, default=str))
    except (ValueError, RecursionError):
        return 0


def locate_tree(
    document: RemoteDocument,
    priority: Tuple[FieldRef, ...] = FIELD_PRIORITY,
) -> Optional[LocatedTree]:
    """First field holding a substantive tree, or None ("not found" is not an error)."""
    for ref, value in candidate_fields(document, priority):
        try:
            elements = decode_field_value(value)
        except ValueError as e:
            logger.info("Skipping %s: invalid JSON (%s)", ref.name, e)
            continue

        if not is_substantive_tree(elements):
            logger.debug("Skipping %s: no substantive elements", ref.name)
            continue

        logger.info("Tree found in %s (%d top-level elements)", ref.name, len(elements))
        return LocatedTree(
            field_name=ref.name,
            elements=elements,
            raw_size=_raw_size(value),
        )

    return None

