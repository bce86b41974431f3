"""Extraction orchestrator: fetch → locate → normalize, or synthesize.

State machine per run:

    Attempting(1) ─ok──────────────────────────────→ Succeeded
         │ TransportError (attempts left): backoff 2s
    Attempting(2) ─ok──────────────────────────────→ Succeeded
         │ TransportError: backoff 4s
    Attempting(3) ─TransportError──────────────────→ Failed
    any other ErrorKind ───────────────────────────→ Failed
    token fired (before/after fetch, around backoff) → Cancelled

Any other exception from the fetcher is reported as a TransportError;
only task cancellation propagates. Only the fetch is ever retried. Locating, normalizing and synthesizing
are local and deterministic, so a found-nothing document goes straight
to the synthesizer instead of back to the network.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol

from ..errors import ErrorKind, ExtractionError, is_retryable, user_message
from ..tree.fallback import synthesize_fallback
from ..tree.html_utils import strip_tags
from ..tree.locator import locate_tree
from ..tree.model import TreeNode, count_nodes
from ..tree.normalizer import normalize_tree
from ..tree.payload import RemoteDocument
from .retry import CancellationToken, RetryPolicy

logger = logging.getLogger(__name__)


class DocumentFetcher(Protocol):
    async def fetch_document(self, component_id) -> RemoteDocument:
        ...


class ExtractionState(str, Enum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class SourceKind(str, Enum):
    NATIVE_FIELD = "native_field"
    SYNTHETIC_FALLBACK = "synthetic_fallback"


@dataclass(frozen=True)
class DataSource:
    """Where the tree came from: a named metadata field, or the synthesizer."""
    kind: SourceKind
    field_name: Optional[str] = None

    @classmethod
    def native_field(cls, name: str) -> "DataSource":
        return cls(SourceKind.NATIVE_FIELD, name)

    @classmethod
    def synthetic_fallback(cls) -> "DataSource":
        return cls(SourceKind.SYNTHETIC_FALLBACK)

    @property
    def is_native(self) -> bool:
        return self.kind is SourceKind.NATIVE_FIELD


@dataclass
class ExtractionDiagnostics:
    """Informational only; never drives control flow."""
    attempts: int = 0
    raw_payload_size: int = 0
    elements_before: int = 0
    elements_after: int = 0
    warnings: List[str] = field(default_factory=list)


@dataclass
class ExtractionResult:
    component_id: object
    state: ExtractionState
    nodes: List[TreeNode] = field(default_factory=list)
    source: Optional[DataSource] = None
    error: Optional[ExtractionError] = None
    title: str = ""
    diagnostics: ExtractionDiagnostics = field(default_factory=ExtractionDiagnostics)

    @property
    def ok(self) -> bool:
        return self.state is ExtractionState.SUCCEEDED

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    @property
    def user_message(self) -> Optional[str]:
        if self.error is None:
            return None
        detail = self.error.message if self.error.kind is ErrorKind.INVALID_CONFIGURATION else None
        return user_message(self.error.kind, detail)


class ExtractionOrchestrator:
    """Drives one extraction per call; holds no per-run state."""

    def __init__(self, fetcher: DocumentFetcher, policy: Optional[RetryPolicy] = None):
        self.fetcher = fetcher
        self.policy = policy or RetryPolicy()

    async def extract(
        self,
        component_id,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExtractionResult:
        diagnostics = ExtractionDiagnostics()
        attempt = 0

        while True:
            attempt += 1
            if cancel_token is not None and cancel_token.is_cancelled:
                return self._cancelled(component_id, diagnostics)

            diagnostics.attempts = attempt
            logger.info(
                "Extraction %s: %s(%d/%d)",
                component_id, ExtractionState.ATTEMPTING.value, attempt, self.policy.max_attempts,
            )
            error: Optional[ExtractionError] = None
            try:
                document = await self._fetch(component_id, cancel_token)
            except ExtractionError as e:
                error = e
            except Exception as e:
                logger.exception("Extraction %s: fetcher raised unexpectedly", component_id)
                error = ExtractionError(
                    ErrorKind.TRANSPORT_ERROR, f"Fetcher failed: {type(e).__name__}: {e}"
                )

            if error is not None:
                if error.kind is ErrorKind.CANCELLED:
                    return self._cancelled(component_id, diagnostics)
                if not (is_retryable(error.kind) and self.policy.has_attempts_left(attempt)):
                    logger.error(
                        "Extraction %s failed after %d attempt(s): %s",
                        component_id, attempt, error.message,
                    )
                    return ExtractionResult(
                        component_id=component_id,
                        state=ExtractionState.FAILED,
                        error=error,
                        diagnostics=diagnostics,
                    )

                delay = self.policy.delay_for(attempt)
                logger.warning(
                    "Extraction %s: attempt %d failed (%s), retrying in %.1fs",
                    component_id, attempt, error.message, delay,
                )
                if cancel_token is not None and cancel_token.is_cancelled:
                    return self._cancelled(component_id, diagnostics)
                if await self._backoff(delay, cancel_token):
                    return self._cancelled(component_id, diagnostics)
                continue

            if cancel_token is not None and cancel_token.is_cancelled:
                return self._cancelled(component_id, diagnostics)
            return self._build_result(component_id, document, diagnostics)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _fetch(
        self,
        component_id,
        cancel_token: Optional[CancellationToken],
    ) -> RemoteDocument:
        """Fetch, abandoning the in-flight request as soon as the token fires."""
        if cancel_token is None:
            return await self.fetcher.fetch_document(component_id)

        fetch_task = asyncio.ensure_future(self.fetcher.fetch_document(component_id))
        cancel_task = asyncio.ensure_future(cancel_token.wait())
        try:
            done, _ = await asyncio.wait(
                {fetch_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (fetch_task, cancel_task):
                if not task.done():
                    task.cancel()

        if fetch_task in done:
            return fetch_task.result()
        raise ExtractionError(ErrorKind.CANCELLED, "Extraction cancelled during fetch")

    async def _backoff(
        self,
        delay: float,
        cancel_token: Optional[CancellationToken],
    ) -> bool:
        """Wait before the next attempt. Returns True if cancelled meanwhile."""
        if cancel_token is None:
            await asyncio.sleep(delay)
            return False
        return await cancel_token.sleep(delay)

    def _build_result(
        self,
        component_id,
        document: RemoteDocument,
        diagnostics: ExtractionDiagnostics,
    ) -> ExtractionResult:
        nodes: List[TreeNode] = []
        source: Optional[DataSource] = None

        located = locate_tree(document)
        if located is not None:
            diagnostics.raw_payload_size = located.raw_size
            diagnostics.elements_before = len(located.elements)
            nodes = normalize_tree(located.elements, diagnostics.warnings)
            if nodes:
                source = DataSource.native_field(located.field_name)
            else:
                diagnostics.warnings.append(
                    f"Tree in {located.field_name} normalized to nothing; using fallback"
                )
        else:
            diagnostics.raw_payload_size = document.payload_size

        if source is None:
            nodes = synthesize_fallback(document, diagnostics.warnings)
            source = DataSource.synthetic_fallback()

        if not nodes:
            return ExtractionResult(
                component_id=component_id,
                state=ExtractionState.FAILED,
                error=ExtractionError(
                    ErrorKind.NO_USABLE_DATA, "No tree found and nothing to synthesize"
                ),
                title=strip_tags(document.title),
                diagnostics=diagnostics,
            )

        diagnostics.elements_after = count_nodes(nodes)
        logger.info(
            "Extraction %s succeeded from %s (%d nodes, %d warnings)",
            component_id,
            source.field_name or source.kind.value,
            diagnostics.elements_after,
            len(diagnostics.warnings),
        )
        return ExtractionResult(
            component_id=component_id,
            state=ExtractionState.SUCCEEDED,
            nodes=nodes,
            source=source,
            title=strip_tags(document.title),
            diagnostics=diagnostics,
        )

    @staticmethod
    def _cancelled(component_id, diagnostics: ExtractionDiagnostics) -> ExtractionResult:
        logger.info("Extraction %s cancelled", component_id)
        return ExtractionResult(
            component_id=component_id,
            state=ExtractionState.CANCELLED,
            error=ExtractionError(ErrorKind.CANCELLED, "Extraction cancelled"),
            diagnostics=diagnostics,
        )
