"""Retry scheduling and caller-held cancellation for extraction runs.

Classification lives in errors.is_retryable; this module only answers
"how many attempts" and "how long to wait", and lets the caller abort a
run between or during waits.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from .. import settings


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget plus exponential backoff: delay before attempt n+1 is base ** n."""
    max_attempts: int = settings.EXTRACTION_MAX_ATTEMPTS
    backoff_base: float = settings.EXTRACTION_BACKOFF_BASE

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt ``attempt`` (1-based): 2s, 4s, ..."""
        return self.backoff_base ** attempt

    def has_attempts_left(self, attempt: int) -> bool:
        return attempt < self.max_attempts


class CancellationToken:
    """Cooperative cancellation signal shared between a caller and a run.

    The underlying event is created on first await, so a token may be built
    outside the event loop that later uses it.
    """

    def __init__(self):
        self._cancelled = False
        self._event: Optional[asyncio.Event] = None

    def _get_event(self) -> asyncio.Event:
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        return self._event

    def cancel(self) -> None:
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    async def wait(self) -> None:
        await self._get_event().wait()

    async def sleep(self, delay: float) -> bool:
        """Sleep up to ``delay`` seconds. Returns True if cancelled meanwhile."""
        if self.is_cancelled:
            return True
        try:
            await asyncio.wait_for(self._get_event().wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True
