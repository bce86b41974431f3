"""ComponentCopyService: the engine's public entry point.

Composes fetcher → orchestrator → clipboard formatter for one paste
target, and owns the validation cache. Every failure comes back as a
result object carrying an ErrorKind and a user-facing message; nothing
below this layer is allowed to raise through it except task cancellation.

Usage:
    async with ComponentCopyService(ConnectionConfig.from_env()) as service:
        result = await service.copy(42, target=PasteTarget.FIGMA, writer=clipboard)
        if not result.ok:
            show_toast(result.message)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from .clipboard.item import ClipboardItem, ClipboardWriter
from .clipboard.native import format_native_clipboard, format_page_template
from .errors import ErrorKind, ExtractionError, user_message
from .integrations.figma_clipboard import DEFAULT_TITLE, encode_figma_clipboard
from .integrations.figma_converter import build_root_frame
from .integrations.wordpress_client import WordPressClient
from .logging_config import get_engine_logger
from .pipeline.orchestrator import (
    DocumentFetcher,
    ExtractionOrchestrator,
    ExtractionResult,
    ExtractionState,
)
from .pipeline.retry import CancellationToken, RetryPolicy
from .pipeline.validation_cache import ValidationCache, ValidationRecord, ValidationStats
from .schemas import ConnectionConfig
from .tree.model import TreeNode

logger = logging.getLogger(__name__)

MULTI_COMPONENT_TITLE = "Multiple Components"


class PasteTarget(str, Enum):
    BUILDER = "builder"
    FIGMA = "figma"


@dataclass
class CopyResult:
    target: PasteTarget
    item: Optional[ClipboardItem] = None
    extractions: List[ExtractionResult] = field(default_factory=list)
    failed_ids: List[Any] = field(default_factory=list)
    error: Optional[ExtractionError] = None
    written: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.item is not None

    @property
    def extraction(self) -> Optional[ExtractionResult]:
        return self.extractions[0] if self.extractions else None

    @property
    def message(self) -> Optional[str]:
        """User-facing text for the failure, if any."""
        if self.error is None:
            return None
        detail = self.error.message if self.error.kind is ErrorKind.INVALID_CONFIGURATION else None
        return user_message(self.error.kind, detail)


class ComponentCopyService:
    """Copy WordPress components into builder or Figma clipboard payloads.

    Args:
        connection: ConnectionConfig, a dict of its fields, or None to read WP_* env vars.
        fetcher: Optional document fetcher (defaults to a WordPressClient).
        policy: Retry policy for the fetch stage.
        timeout: Per-attempt HTTP timeout in seconds.
        transport: Optional httpx transport for the default client.
        configure_logging: Attach the engine's file/console log handlers.
    """

    def __init__(
        self,
        connection: Union[ConnectionConfig, Dict[str, Any], None] = None,
        *,
        fetcher: Optional[DocumentFetcher] = None,
        policy: Optional[RetryPolicy] = None,
        timeout: Optional[float] = None,
        transport=None,
        configure_logging: bool = False,
    ):
        if configure_logging:
            get_engine_logger()

        self.connection: Optional[ConnectionConfig] = None
        self._config_error: Optional[ExtractionError] = None
        try:
            if isinstance(connection, ConnectionConfig):
                self.connection = connection
            elif isinstance(connection, dict):
                self.connection = ConnectionConfig.build(**connection)
            else:
                self.connection = ConnectionConfig.from_env()
        except ExtractionError as e:
            logger.error("Component copy service misconfigured: %s", e.message)
            self._config_error = e

        self._client: Optional[WordPressClient] = None
        if fetcher is None and self.connection is not None:
            self._client = WordPressClient(self.connection, timeout=timeout, transport=transport)
            fetcher = self._client

        self._orchestrator = (
            ExtractionOrchestrator(fetcher, policy) if fetcher is not None else None
        )
        self.validation_cache = ValidationCache()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def __aenter__(self) -> "ComponentCopyService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def site_url(self) -> str:
        return self.connection.base_url if self.connection else ""

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    async def extract(
        self,
        component_id,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExtractionResult:
        if self._orchestrator is None:
            error = self._config_error or ExtractionError(
                ErrorKind.INVALID_CONFIGURATION, "No WordPress connection configured"
            )
            return ExtractionResult(
                component_id=component_id,
                state=ExtractionState.FAILED,
                error=error,
            )
        return await self._orchestrator.extract(component_id, cancel_token)

    # ------------------------------------------------------------------
    # Copy
    # ------------------------------------------------------------------

    async def copy(
        self,
        component_id,
        target: PasteTarget = PasteTarget.BUILDER,
        cancel_token: Optional[CancellationToken] = None,
        writer: Optional[ClipboardWriter] = None,
    ) -> CopyResult:
        """Extract one component and serialize it for ``target``."""
        extraction = await self.extract(component_id, cancel_token)
        if not extraction.ok:
            return CopyResult(target=target, extractions=[extraction], error=extraction.error)

        if target is PasteTarget.FIGMA:
            item = self._figma_item(extraction)
        else:
            item = ClipboardItem.plain(format_native_clipboard(extraction.nodes, self.site_url))

        return await self._deliver(
            CopyResult(target=target, item=item, extractions=[extraction]), writer
        )

    async def copy_many(
        self,
        component_ids: Iterable[Any],
        cancel_token: Optional[CancellationToken] = None,
        writer: Optional[ClipboardWriter] = None,
        title: str = MULTI_COMPONENT_TITLE,
    ) -> CopyResult:
        """Extract components one by one into a single page-template payload.

        Failed components are skipped and listed in ``failed_ids``; the
        copy itself fails only when nothing could be extracted.
        """
        result = CopyResult(target=PasteTarget.BUILDER)
        nodes: List[TreeNode] = []

        for component_id in component_ids:
            extraction = await self.extract(component_id, cancel_token)
            result.extractions.append(extraction)
            if extraction.state is ExtractionState.CANCELLED:
                result.error = extraction.error
                return result
            if not extraction.ok:
                logger.warning(
                    "Skipping component %s: %s",
                    component_id, extraction.error.message if extraction.error else "unknown",
                )
                result.failed_ids.append(component_id)
                continue
            nodes.extend(extraction.nodes)

        if not nodes:
            result.error = ExtractionError(
                ErrorKind.NO_USABLE_DATA,
                f"None of {len(result.extractions)} components could be extracted",
            )
            return result

        result.item = ClipboardItem.plain(format_page_template(nodes, title))
        logger.info(
            "Copied %d components (%d failed) into one page template",
            len(result.extractions) - len(result.failed_ids), len(result.failed_ids),
        )
        return await self._deliver(result, writer)

    def _figma_item(self, extraction: ExtractionResult) -> ClipboardItem:
        title = extraction.title or DEFAULT_TITLE
        root = build_root_frame(extraction.nodes, title)
        payload = encode_figma_clipboard(
            root,
            title,
            has_native_data=bool(extraction.source and extraction.source.is_native),
        )
        return payload.clipboard_item()

    @staticmethod
    async def _deliver(result: CopyResult, writer: Optional[ClipboardWriter]) -> CopyResult:
        if writer is not None and result.item is not None:
            try:
                await writer.write(result.item)
            except Exception as e:
                # item stays on the result so the caller can offer a manual copy
                logger.warning("Clipboard write failed: %s: %s", type(e).__name__, e)
                result.error = ExtractionError(
                    ErrorKind.CLIPBOARD_WRITE_FAILED,
                    f"Clipboard write failed: {type(e).__name__}",
                )
                return result
            result.written = True
        return result

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, component: Any) -> ValidationRecord:
        return self.validation_cache.get_or_validate(component)

    def validation_stats(self, components: Iterable[Any]) -> ValidationStats:
        return self.validation_cache.stats(components)
