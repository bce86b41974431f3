"""WordPress REST document: typed accessors over an untyped JSON body.

The REST API returns loosely typed data: ``title`` may be a string or
``{"rendered": ...}``, ``meta`` is ``[]`` when empty, media may be an id,
an embedded object, or a plugin-specific URL field. Every read goes
through a fallible accessor here; nothing else in the engine indexes the
raw body directly.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..errors import ErrorKind, ExtractionError


def as_dict(value: Any) -> Dict[str, Any]:
    """Mapping values pass through; anything else (incl. PHP's empty []) is {}."""
    return value if isinstance(value, dict) else {}


def as_text(value: Any) -> str:
    """Read a string or a ``{"rendered"|"raw": str}`` wrapper."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in ("rendered", "raw"):
            inner = value.get(key)
            if isinstance(inner, str):
                return inner
    return ""


def as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


@dataclass(frozen=True)
class FeaturedMedia:
    media_id: Optional[int] = None
    url: str = ""


@dataclass(frozen=True)
class RemoteDocument:
    """Recognized shape of one REST document; ``raw`` keeps the opaque body."""
    id: Optional[int]
    title: str
    meta: Dict[str, Any]
    acf: Dict[str, Any]
    content_html: str
    excerpt_html: str
    featured_media: Optional[FeaturedMedia]
    raw: Dict[str, Any] = field(repr=False, default_factory=dict)

    @property
    def payload_size(self) -> int:
        """Length of the body's JSON text (diagnostics only)."""
        try:
            return len(json.dumps(self.raw, ensure_ascii=False, default=str))
        except (ValueError, RecursionError):
            return 0


def parse_document(body: Any) -> RemoteDocument:
    """Recognize a REST document, raising MalformedResponse for non-objects."""
    if not isinstance(body, dict):
        raise ExtractionError(
            ErrorKind.MALFORMED_RESPONSE,
            f"Expected a JSON object, got {type(body).__name__}",
        )

    return RemoteDocument(
        id=as_int(body.get("id")),
        title=as_text(body.get("title")).strip(),
        meta=as_dict(body.get("meta")),
        acf=as_dict(body.get("acf")),
        content_html=as_text(body.get("content")),
        excerpt_html=as_text(body.get("excerpt")),
        featured_media=_read_featured_media(body),
        raw=body,
    )


def _read_featured_media(body: Dict[str, Any]) -> Optional[FeaturedMedia]:
    media_id = as_int(body.get("featured_media"))
    if media_id is not None and media_id <= 0:
        media_id = None

    url = ""
    embedded = as_dict(body.get("_embedded")).get("wp:featuredmedia")
    if isinstance(embedded, list) and embedded:
        url = as_text(as_dict(embedded[0]).get("source_url"))
    if not url:
        for key in ("jetpack_featured_media_url", "featured_image_url"):
            candidate = body.get(key)
            if isinstance(candidate, str) and candidate.strip():
                url = candidate.strip()
                break

    if media_id is None and not url:
        return None
    return FeaturedMedia(media_id=media_id, url=url)
