"""Clipboard payloads as MIME-typed representations of one item."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, runtime_checkable

MIME_HTML = "text/html"
MIME_PLAIN = "text/plain"


@dataclass(frozen=True)
class ClipboardItem:
    """One clipboard entry; all representations are written together."""
    representations: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def plain(cls, text: str) -> "ClipboardItem":
        return cls({MIME_PLAIN: text})

    def get(self, mime_type: str) -> Optional[str]:
        return self.representations.get(mime_type)

    @property
    def mime_types(self):
        return tuple(self.representations)

    @property
    def text(self) -> str:
        return self.representations.get(MIME_PLAIN, "")

    @property
    def html(self) -> Optional[str]:
        return self.representations.get(MIME_HTML)


@runtime_checkable
class ClipboardWriter(Protocol):
    """Platform clipboard. ``write`` receives every representation in one call."""

    async def write(self, item: ClipboardItem) -> None:
        ...
