"""WordPress REST API client for component documents.

Fetches a single document (post, page, template, ...) in edit context so
protected builder meta is included. Authentication uses WordPress
Application Passwords over HTTP Basic auth.

Request:
    GET {base_url}/wp-json/wp/v2/{resource_type}/{id}?context=edit&_fields=id,title,meta

A 401 with credentials gets exactly one retry as a public view (no
``context=edit``, no Authorization header). The client never sleeps or
retries otherwise; that belongs to the orchestrator.

Usage:
    async with WordPressClient(ConnectionConfig.build(base_url="https://example.org")) as wp:
        document = await wp.fetch_document(42)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

import httpx

from .. import config, settings
from ..errors import ErrorKind, ExtractionError, error_kind_for_status
from ..schemas import ConnectionConfig
from ..tree.payload import RemoteDocument, parse_document

logger = logging.getLogger(__name__)

ComponentId = Union[int, str]


def coerce_component_id(component_id: ComponentId) -> int:
    """Positive integer id, or InvalidConfiguration."""
    if isinstance(component_id, bool):
        component_id = None
    if isinstance(component_id, str) and component_id.strip().isdigit():
        component_id = int(component_id.strip())
    if not isinstance(component_id, int) or component_id <= 0:
        raise ExtractionError(
            ErrorKind.INVALID_CONFIGURATION,
            f"Component id must be a positive integer (got {component_id!r})",
        )
    return component_id


class WordPressClient:
    """Async WordPress REST client.

    Args:
        connection: Validated connection parameters.
        timeout: Per-request timeout in seconds (default WP_HTTP_TIMEOUT).
        transport: Optional httpx transport (e.g. httpx.MockTransport in tests).
    """

    def __init__(
        self,
        connection: ConnectionConfig,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.connection = connection
        self._timeout = timeout if timeout is not None else settings.WP_HTTP_TIMEOUT
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.connection.base_url,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
                limits=httpx.Limits(
                    max_connections=settings.WP_HTTP_MAX_CONNECTIONS,
                    max_keepalive_connections=settings.WP_HTTP_MAX_KEEPALIVE,
                ),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "WordPressClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def document_path(self, component_id: int) -> str:
        root = config.WP_API_ROOT.strip("/")
        return f"{root}/{self.connection.resource_type}/{component_id}"

    def _auth(self) -> Optional[httpx.BasicAuth]:
        if not self.connection.has_credentials:
            return None
        return httpx.BasicAuth(
            self.connection.username, self.connection.application_password
        )

    async def _get(
        self,
        path: str,
        params: Dict[str, str],
        auth: Optional[httpx.BasicAuth],
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            if auth is None:
                return await client.get(path, params=params)
            return await client.get(path, params=params, auth=auth)
        except httpx.TimeoutException as e:
            raise ExtractionError(
                ErrorKind.TRANSPORT_ERROR, f"WordPress request timed out: {path}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ExtractionError(
                ErrorKind.TRANSPORT_ERROR,
                f"WordPress connection error: {type(e).__name__}",
            ) from e

    async def fetch_document(self, component_id: ComponentId) -> RemoteDocument:
        """Fetch one document, raising ExtractionError on any failure."""
        component_id = coerce_component_id(component_id)
        path = self.document_path(component_id)
        fields = {"_fields": settings.WP_REQUEST_FIELDS}
        auth = self._auth()

        resp = await self._get(path, {"context": "edit", **fields}, auth)

        if resp.status_code == 401 and auth is not None:
            logger.warning(
                "Authenticated request for %s returned 401, retrying as public view",
                component_id,
            )
            resp = await self._get(path, dict(fields), None)

        if not resp.is_success:
            kind = error_kind_for_status(resp.status_code)
            logger.warning(
                "WordPress returned %s for %s (%s)",
                resp.status_code, component_id, kind.value,
            )
            raise ExtractionError(
                kind,
                f"WordPress API error {resp.status_code} for {path}",
                status_code=resp.status_code,
            )

        try:
            body: Any = resp.json()
        except (ValueError, RecursionError) as e:
            raise ExtractionError(
                ErrorKind.MALFORMED_RESPONSE,
                f"WordPress response for {path} is not JSON",
                status_code=resp.status_code,
            ) from e

        document = parse_document(body)
        logger.info(
            "fetch_document: id=%s, bytes=%d, meta_keys=%d",
            component_id, len(resp.content), len(document.meta),
        )
        return document
