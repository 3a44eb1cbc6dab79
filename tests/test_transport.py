"""Tests for the document transports."""

import json

import httpx
import pytest

from extrased.retry import with_retry
from extrased.transport import (
    AuthenticationError,
    GoogleDocsTransport,
    NotFoundError,
    PermanentServiceError,
    TransientServiceError,
    TransportError,
    api_error,
    extract_document_id,
)


async def google_transport(handler) -> GoogleDocsTransport:
    """A GoogleDocsTransport whose HTTP calls go to ``handler``."""
    transport = GoogleDocsTransport("tok")
    headers = transport._client.headers
    await transport._client.aclose()
    transport._client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), headers=headers
    )
    return transport


def test_extract_document_id():
    url = "https://docs.google.com/document/d/abc_123-X/edit#heading=h.1"
    assert extract_document_id(url) == "abc_123-X"
    assert extract_document_id("  abc123 ") == "abc123"


def test_api_error_split():
    assert isinstance(api_error("x", 503), TransientServiceError)
    assert isinstance(api_error("x", 429), TransientServiceError)
    assert isinstance(api_error("x", 400), PermanentServiceError)


class TestGoogleDocsTransport:
    @pytest.mark.asyncio
    async def test_get_document(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={"documentId": "d1", "title": "Notes", "body": {}}
            )

        transport = await google_transport(handler)
        try:
            data = await transport.get_document("d1")
        finally:
            await transport.close()

        assert data.document_id == "d1"
        assert data.title == "Notes"
        assert data.raw["body"] == {}
        assert seen[0].url.path == "/v1/documents/d1"
        assert seen[0].headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_batch_update_posts_requests(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            assert request.url.path == "/v1/documents/d1:batchUpdate"
            return httpx.Response(200, json={"replies": [{}]})

        requests = [{"insertText": {"location": {"index": 1}, "text": "hi"}}]
        transport = await google_transport(handler)
        try:
            result = await transport.batch_update("d1", requests)
        finally:
            await transport.close()

        assert result == {"replies": [{}]}
        assert bodies == [{"requests": requests}]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,error",
        [
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, NotFoundError),
            (429, TransientServiceError),
            (503, TransientServiceError),
            (400, PermanentServiceError),
        ],
    )
    async def test_status_mapping(self, status, error):
        transport = await google_transport(
            lambda request: httpx.Response(status, text="nope")
        )
        try:
            with pytest.raises(error):
                await transport.get_document("d1")
        finally:
            await transport.close()

    @pytest.mark.asyncio
    async def test_api_error_keeps_status_and_body(self):
        transport = await google_transport(
            lambda request: httpx.Response(400, text="Invalid requests[0]")
        )
        try:
            with pytest.raises(PermanentServiceError) as exc:
                await transport.batch_update("d1", [])
        finally:
            await transport.close()
        assert exc.value.status_code == 400
        assert str(exc.value) == "API error (400): Invalid requests[0]"

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = await google_transport(handler)
        try:
            with pytest.raises(TransportError, match="Network error"):
                await transport.get_document("d1")
        finally:
            await transport.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", ["rateLimitExceeded", "userRateLimitExceeded"])
    async def test_quota_403_is_transient(self, reason):
        body = {"error": {"code": 403, "errors": [{"reason": reason}]}}
        transport = await google_transport(
            lambda request: httpx.Response(403, json=body)
        )
        try:
            with pytest.raises(TransientServiceError) as exc:
                await transport.batch_update("d1", [])
        finally:
            await transport.close()
        assert exc.value.status_code == 403
        assert reason in str(exc.value)

    @pytest.mark.asyncio
    async def test_other_403_is_access_denied(self):
        body = {"error": {"code": 403, "errors": [{"reason": "forbidden"}]}}
        transport = await google_transport(
            lambda request: httpx.Response(403, json=body)
        )
        try:
            with pytest.raises(AuthenticationError, match="Access denied"):
                await transport.get_document("d1")
        finally:
            await transport.close()

    @pytest.mark.asyncio
    async def test_quota_403_is_retried(self, policy, sleeps):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(
                    403, json={"errors": [{"reason": "rateLimitExceeded"}]}
                )
            return httpx.Response(200, json={"documentId": "d1", "title": "Notes"})

        transport = await google_transport(handler)
        try:
            data = await with_retry(lambda: transport.get_document("d1"), policy)
        finally:
            await transport.close()
        assert data.title == "Notes"
        assert len(calls) == 2
        assert len(sleeps.delays) == 1
