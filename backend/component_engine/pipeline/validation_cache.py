"""Component validation with an explicit, service-owned cache.

Records are keyed by component id and live until ``clear()``; aggregate
stats are memoized by the sorted id list and cleared together with the
records. Inserts are last-writer-wins and there is no per-key locking,
so two concurrent validations of one id may both compute; the lock only
keeps the dicts consistent across threads.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..errors import ExtractionError
from ..tree.locator import (
    candidate_fields,
    decode_field_value,
    locate_tree,
    looks_like_json,
)
from ..tree.payload import RemoteDocument, parse_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationRecord:
    is_valid: bool
    has_tree_data: bool
    has_well_formed_json: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationStats:
    total: int = 0
    valid: int = 0
    invalid: int = 0
    missing_tree_data: int = 0
    malformed_json: int = 0
    empty_components: int = 0


def _as_document(component: Any) -> Optional[RemoteDocument]:
    if isinstance(component, RemoteDocument):
        return component
    try:
        return parse_document(component)
    except ExtractionError:
        return None


def component_key(component: Any) -> Optional[int]:
    document = _as_document(component)
    return document.id if document is not None else None


def validate_component(component: Any) -> ValidationRecord:
    """Check one REST component (raw dict or RemoteDocument) for copyability."""
    document = _as_document(component)
    if document is None:
        return ValidationRecord(
            is_valid=False,
            has_tree_data=False,
            has_well_formed_json=False,
            errors=("Component is not an object",),
        )

    errors: List[str] = []
    warnings: List[str] = []

    if document.id is None:
        errors.append("Component missing ID")
    if not document.title:
        warnings.append("Component missing title")

    well_formed = True
    for ref, value in candidate_fields(document):
        if not looks_like_json(value):
            continue
        try:
            decode_field_value(value)
        except ValueError:
            well_formed = False
            warnings.append(f"Field {ref.name} contains malformed JSON")

    has_tree_data = locate_tree(document) is not None
    if not has_tree_data:
        warnings.append("No builder data found - will use fallback structure")

    return ValidationRecord(
        is_valid=document.id is not None and bool(document.title) and not errors,
        has_tree_data=has_tree_data,
        has_well_formed_json=well_formed,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )


class ValidationCache:
    def __init__(self):
        self._records: Dict[int, ValidationRecord] = {}
        self._stats: Dict[str, ValidationStats] = {}
        self._lock = threading.Lock()

    def get(self, component_id: int) -> Optional[ValidationRecord]:
        with self._lock:
            return self._records.get(component_id)

    def insert(self, component_id: int, record: ValidationRecord) -> None:
        with self._lock:
            self._records[component_id] = record

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._stats.clear()
        logger.info("Validation cache cleared")

    def size(self) -> Dict[str, int]:
        with self._lock:
            return {
                "validation_cache_size": len(self._records),
                "stats_cache_size": len(self._stats),
            }

    def get_or_validate(self, component: Any) -> ValidationRecord:
        key = component_key(component)
        if key is not None:
            cached = self.get(key)
            if cached is not None:
                return cached

        record = validate_component(component)
        if key is not None:
            self.insert(key, record)
        if not record.is_valid:
            logger.warning(
                "Component %s is not copyable: errors=%s warnings=%s",
                key, list(record.errors), list(record.warnings),
            )
        return record

    def stats(self, components: Iterable[Any]) -> ValidationStats:
        components = list(components)
        cache_key = ",".join(sorted(str(component_key(c)) for c in components))
        with self._lock:
            cached = self._stats.get(cache_key)
        if cached is not None:
            return cached

        counts = dict(
            total=len(components), valid=0, invalid=0,
            missing_tree_data=0, malformed_json=0, empty_components=0,
        )
        for component in components:
            record = self.get_or_validate(component)
            counts["valid" if record.is_valid else "invalid"] += 1
            if not record.has_tree_data:
                counts["missing_tree_data"] += 1
            if not record.has_well_formed_json:
                counts["malformed_json"] += 1
            document = _as_document(component)
            if document is None or not document.title:
                counts["empty_components"] += 1

        stats = ValidationStats(**counts)
        with self._lock:
            self._stats[cache_key] = stats
        return stats
