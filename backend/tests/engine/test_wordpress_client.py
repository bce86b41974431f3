"""Tests for component_engine.integrations.wordpress_client."""

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from component_engine.errors import ErrorKind, ExtractionError
from component_engine.integrations.wordpress_client import WordPressClient


def _status_sequence(*responses):
    """MockTransport replaying (status, body) pairs in order; records requests."""
    requests = []
    queue = list(responses)

    def handler(request):
        requests.append(request)
        status, body = queue.pop(0)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler), requests


class TestRequestShape:

    @pytest.mark.asyncio
    async def test_edit_context_with_fields(self, connection, heading_response, wordpress_transport):
        transport, requests = wordpress_transport({42: heading_response})
        async with WordPressClient(connection, transport=transport) as client:
            doc = await client.fetch_document(42)

        assert doc.id == 42
        assert doc.title == "Pricing"
        (request,) = requests
        assert request.url.path == "/wp-json/wp/v2/posts/42"
        assert request.url.params["context"] == "edit"
        assert request.url.params["_fields"] == "id,title,meta"
        assert "authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_basic_auth_attached(self, authed_connection, heading_response, wordpress_transport):
        transport, requests = wordpress_transport({42: heading_response})
        client = WordPressClient(authed_connection, transport=transport)
        await client.fetch_document("42")
        await client.close()

        expected = base64.b64encode(b"editor:abcd efgh ijkl mnop").decode()
        assert requests[0].headers["authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_resource_type_in_path(self, heading_response, wordpress_transport):
        from component_engine.schemas import ConnectionConfig

        conn = ConnectionConfig(base_url="https://example.org/", resource_type="elementor_library")
        transport, requests = wordpress_transport({42: heading_response})
        async with WordPressClient(conn, transport=transport) as client:
            await client.fetch_document(42)
        assert requests[0].url.path == "/wp-json/wp/v2/elementor_library/42"


class TestAuthFallback:

    @pytest.mark.asyncio
    async def test_401_with_credentials_retries_once_as_public(self, authed_connection, heading_response):
        transport, requests = _status_sequence((401, {"code": "rest_forbidden"}), (200, heading_response))
        async with WordPressClient(authed_connection, transport=transport) as client:
            doc = await client.fetch_document(42)

        assert doc.id == 42
        assert len(requests) == 2
        fallback = requests[1]
        assert "authorization" not in fallback.headers
        assert "context" not in fallback.url.params
        assert fallback.url.params["_fields"] == "id,title,meta"

    @pytest.mark.asyncio
    async def test_fallback_401_is_authentication_failed(self, authed_connection):
        transport, requests = _status_sequence((401, {}), (401, {}))
        async with WordPressClient(authed_connection, transport=transport) as client:
            with pytest.raises(ExtractionError) as exc_info:
                await client.fetch_document(42)
        assert exc_info.value.kind is ErrorKind.AUTHENTICATION_FAILED
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_401_without_credentials_fails_immediately(self, connection):
        transport, requests = _status_sequence((401, {}))
        async with WordPressClient(connection, transport=transport) as client:
            with pytest.raises(ExtractionError) as exc_info:
                await client.fetch_document(42)
        assert exc_info.value.kind is ErrorKind.AUTHENTICATION_FAILED
        assert exc_info.value.status_code == 401
        assert len(requests) == 1


class TestErrorMapping:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,kind", [
        (403, ErrorKind.ACCESS_DENIED),
        (404, ErrorKind.NOT_FOUND),
        (408, ErrorKind.TRANSPORT_ERROR),
        (429, ErrorKind.TRANSPORT_ERROR),
        (500, ErrorKind.TRANSPORT_ERROR),
        (503, ErrorKind.TRANSPORT_ERROR),
    ])
    async def test_status_codes(self, connection, status, kind):
        transport, _ = _status_sequence((status, {"code": "x"}))
        async with WordPressClient(connection, transport=transport) as client:
            with pytest.raises(ExtractionError) as exc_info:
                await client.fetch_document(42)
        assert exc_info.value.kind is kind

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self, connection):
        transport, _ = _status_sequence((200, "<html>Maintenance</html>"))
        async with WordPressClient(connection, transport=transport) as client:
            with pytest.raises(ExtractionError) as exc_info:
                await client.fetch_document(42)
        assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_json_array_is_malformed(self, connection):
        transport, _ = _status_sequence((200, [{"id": 42}]))
        async with WordPressClient(connection, transport=transport) as client:
            with pytest.raises(ExtractionError) as exc_info:
                await client.fetch_document(42)
        assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_deeply_nested_body_is_malformed(self, connection):
        transport, _ = _status_sequence((200, "[" * 100000 + "]" * 100000))
        async with WordPressClient(connection, transport=transport) as client:
            with pytest.raises(ExtractionError) as exc_info:
                await client.fetch_document(42)
        assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE

    @pytest.mark.asyncio
    async def test_invalid_url_is_transport_error(self, connection):
        client = WordPressClient(connection)
        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = MagicMock()
            mock_http.get = AsyncMock(side_effect=httpx.InvalidURL("bad host"))
            mock_get_client.return_value = mock_http

            with pytest.raises(ExtractionError) as exc_info:
                await client.fetch_document(42)
        assert exc_info.value.kind is ErrorKind.TRANSPORT_ERROR

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self, connection):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = WordPressClient(connection, transport=httpx.MockTransport(handler))
        with pytest.raises(ExtractionError) as exc_info:
            await client.fetch_document(42)
        await client.close()
        assert exc_info.value.kind is ErrorKind.TRANSPORT_ERROR

    @pytest.mark.asyncio
    async def test_connect_error_is_transport_error(self, connection):
        client = WordPressClient(connection)
        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = MagicMock()
            mock_http.get = AsyncMock(side_effect=httpx.ConnectError("refused"))
            mock_get_client.return_value = mock_http

            with pytest.raises(ExtractionError) as exc_info:
                await client.fetch_document(42)
        assert exc_info.value.kind is ErrorKind.TRANSPORT_ERROR
        assert "refused" not in exc_info.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", [0, -1, "abc", None, True])
    async def test_invalid_component_id(self, connection, bad_id):
        client = WordPressClient(connection)
        with pytest.raises(ExtractionError) as exc_info:
            await client.fetch_document(bad_id)
        assert exc_info.value.kind is ErrorKind.INVALID_CONFIGURATION


class TestClientLifecycle:

    @pytest.mark.asyncio
    async def test_client_reused_and_closed(self, connection):
        client = WordPressClient(connection, timeout=5.0)
        first = await client._get_client()
        assert await client._get_client() is first
        assert first.timeout.read == 5.0
        await client.close()
        assert first.is_closed
        assert client._client is None
