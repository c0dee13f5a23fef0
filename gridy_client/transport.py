"""
HTTP transports.

A transport sends a ``SignedRequest`` and returns a ``RawResponse``.
Response header names are lowercased.
Transports never raise on HTTP status codes; only failures that produced
no response at all surface, as ``TransportError``.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx
import requests

from .exceptions import TransportError, TransportTimeoutError
from .request import SignedRequest


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def normalize_headers(headers) -> Dict[str, str]:
    """Lowercase header names so every transport reports them the same way."""
    return {name.lower(): value for name, value in headers.items()}


class RequestsTransport:
    """Blocking transport on top of ``requests.Session``."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = 30):
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, request: SignedRequest) -> RawResponse:
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body or None,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise TransportTimeoutError(f"HTTP request timed out: {e}", cause=e)
        except requests.RequestException as e:
            raise TransportError(f"HTTP request failed: {e}", cause=e)

        return RawResponse(response.status_code, normalize_headers(response.headers), response.content)

    def close(self):
        """Close HTTP session."""
        if self._owns_session and self.session:
            self.session.close()


class AsyncHttpxTransport:
    """Asynchronous transport on top of ``httpx.AsyncClient``."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = 30):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.timeout = timeout

    async def send(self, request: SignedRequest) -> RawResponse:
        try:
            response = await self.client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body or None,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(f"HTTP request timed out: {e}", cause=e)
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP request failed: {e}", cause=e)

        return RawResponse(response.status_code, normalize_headers(response.headers), response.content)

    async def aclose(self):
        """Close the underlying HTTP client."""
        if self._owns_client:
            await self.client.aclose()
