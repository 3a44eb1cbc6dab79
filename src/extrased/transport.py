"""HTTP access to the Google Docs API.

:class:`Transport` is the two-call surface the engine needs (fetch a
document, send a batchUpdate). :class:`GoogleDocsTransport` implements
it over httpx and maps HTTP failures onto the error classes below;
rate limits and 5xx responses become :class:`TransientServiceError`
so the retry policy can back off.

The in-memory transport used by the engine tests lives in
:mod:`extrased.mock`.
"""

from __future__ import annotations

import re
import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import certifi
import httpx

# API constants
API_BASE = "https://docs.googleapis.com/v1/documents"
DEFAULT_TIMEOUT = 60

# Status codes worth retrying: rate limiting and transient server failures
TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503})

_DOC_URL_RE = re.compile(r"/document/d/([A-Za-z0-9_-]+)")


class TransportError(Exception):
    """Base exception for transport errors."""


class AuthenticationError(TransportError):
    """Raised when authentication fails (401/403)."""


class NotFoundError(TransportError):
    """Raised when document is not found (404)."""


class APIError(TransportError):
    """Raised when the API returns an error."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientServiceError(APIError):
    """Rate limiting or a transient server failure; safe to retry."""


class PermanentServiceError(APIError):
    """Any other API failure; retrying will not help."""


def api_error(message: str, status_code: int) -> APIError:
    """The :class:`APIError` subclass matching ``status_code``."""
    if status_code in TRANSIENT_STATUS_CODES:
        return TransientServiceError(message, status_code)
    return PermanentServiceError(message, status_code)


def _error_reasons(response: httpx.Response) -> list[str]:
    """``errors[].reason`` values of a Google API error body."""
    try:
        payload = response.json()
    except ValueError:
        return []
    if not isinstance(payload, dict):
        return []
    error = payload.get("error")
    errors = (error if isinstance(error, dict) else payload).get("errors") or []
    return [str(item.get("reason", "")) for item in errors if isinstance(item, dict)]


def _is_rate_limited(response: httpx.Response) -> bool:
    """True for the 403 quota errors (rateLimitExceeded, userRateLimitExceeded)."""
    return any(
        reason.lower().endswith("ratelimitexceeded")
        for reason in _error_reasons(response)
    )


def extract_document_id(value: str) -> str:
    """Accept a bare document id or a full Google Docs URL."""
    m = _DOC_URL_RE.search(value)
    return m.group(1) if m else value.strip()


@dataclass(frozen=True)
class DocumentData:
    """A fetched document: its id, title and the raw documents.get body."""

    document_id: str
    title: str
    raw: dict[str, Any]  # Full API response


class Transport(ABC):
    """Fetch and batchUpdate for one document service.

    The engine only ever calls these two operations, so tests can swap
    in :class:`~extrased.mock.MockDocsTransport`.
    """

    @abstractmethod
    async def get_document(self, document_id: str) -> DocumentData:
        """Fetch complete document data.

        Args:
            document_id: The document identifier

        Returns:
            DocumentData with full document contents
        """
        ...

    @abstractmethod
    async def batch_update(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Apply batchUpdate requests to a document.

        Args:
            document_id: The document identifier
            requests: List of batchUpdate request objects

        Returns:
            API response containing replies for each request
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        ...


class GoogleDocsTransport(Transport):
    """Production transport backed by the Google Docs API.

    Handles authentication, SSL, and HTTP communication.
    """

    def __init__(
        self,
        access_token: str,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the transport.

        Args:
            access_token: OAuth2 access token with the documents scope
            timeout: Request timeout in seconds
        """
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        self._client = httpx.AsyncClient(
            timeout=timeout,
            verify=ssl_context,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )

    async def get_document(self, document_id: str) -> DocumentData:
        """Fetch document data from Google Docs API."""
        url = f"{API_BASE}/{document_id}"
        response = await self._request(url)

        return DocumentData(
            document_id=response.get("documentId", document_id),
            title=response.get("title", ""),
            raw=response,
        )

    async def batch_update(
        self, document_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Apply batchUpdate requests to Google Docs API."""
        url = f"{API_BASE}/{document_id}:batchUpdate"
        body = {"requests": requests}
        return await self._post_request(url, body)

    async def _request(self, url: str) -> dict[str, Any]:
        """Make an authenticated GET request."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            result: dict[str, Any] = response.json()
            return result
        except httpx.HTTPStatusError as e:
            self._handle_http_error(e)
            raise  # unreachable, but makes type checker happy
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}") from e

    async def _post_request(self, url: str, body: dict[str, Any]) -> dict[str, Any]:
        """Make an authenticated POST request."""
        try:
            response = await self._client.post(url, json=body)
            response.raise_for_status()
            result: dict[str, Any] = response.json()
            return result
        except httpx.HTTPStatusError as e:
            self._handle_http_error(e)
            raise  # unreachable, but makes type checker happy
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}") from e

    def _handle_http_error(self, e: httpx.HTTPStatusError) -> None:
        """Handle HTTP errors and raise appropriate exceptions."""
        status = e.response.status_code
        if status == 401:
            raise AuthenticationError("Invalid or expired access token") from e
        if status == 403:
            if _is_rate_limited(e.response):
                raise TransientServiceError(
                    f"API error (403): {e.response.text}", status
                ) from e
            raise AuthenticationError(
                "Access denied. Check your scopes and permissions."
            ) from e
        if status == 404:
            raise NotFoundError(
                "Document not found. Check the ID and sharing permissions."
            ) from e
        body = e.response.text
        raise api_error(f"API error ({status}): {body}", status) from e

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
