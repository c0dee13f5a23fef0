"""
Gridy ID service client.

Every operation goes through one pipeline: the request is assembled and
signed right before sending, handed to a transport, and the raw response
is decoded into an ``Outcome``. The blocking and asyncio entry points share
assembly and decoding and differ only in how the transport is awaited.
"""

from typing import Any, Dict, Mapping, Optional, Tuple, Type

import structlog
from pydantic import BaseModel

from .configuration import Configuration
from .constants import HEADER_AUTHORIZATION, HEADER_CNONCE
from .exceptions import ApiError, ConfigurationError, TransportError
from .headers import HeaderSelector
from .operations import OperationDescriptor, get_operation
from .request import RequestAssembler, SignedRequest
from .response import ApiFailure, Outcome, ResponseDecoder, Success, TransportFailure
from .signing import NonceSource, SystemClock
from .transport import AsyncHttpxTransport, RawResponse, RequestsTransport

logger = structlog.get_logger(__name__)

HttpInfo = Tuple[Any, int, Dict[str, str]]


class GridyClient:
    """
    Client for the Gridy ID multi-factor-authentication service.

    Provides ``challenge``, ``status``, ``time``, ``verify`` and ``blocked``
    in blocking and ``*_async`` forms. Every request is signed with
    HMAC-SHA512 over a fresh timestamp and nonce.
    """

    def __init__(
        self,
        configuration: Configuration,
        transport: Optional[RequestsTransport] = None,
        async_transport: Optional[AsyncHttpxTransport] = None,
        clock: Optional[SystemClock] = None,
        nonces: Optional[NonceSource] = None,
        header_selector: Optional[HeaderSelector] = None,
        decoder: Optional[ResponseDecoder] = None,
        host_index: Optional[int] = None,
    ):
        """
        Initialize the client.

        Args:
            configuration: Credentials, host and header templates
            transport: Blocking transport; a ``RequestsTransport`` is created on first use
            async_transport: Async transport; an ``AsyncHttpxTransport`` is created on first use
            clock: Timestamp source (defaults to the system clock)
            nonces: Nonce source (defaults to ``secrets``-backed nonces)
            header_selector: Accept/Content-Type negotiator
            decoder: Response decoder
            host_index: Select a named environment (0 production, 1 UAT)
        """
        if configuration is None:
            raise ConfigurationError("configuration is required")
        if host_index is not None:
            configuration = configuration.with_host_index(host_index)

        self.configuration = configuration
        self.assembler = RequestAssembler(configuration, clock, nonces, header_selector)
        self.decoder = decoder or ResponseDecoder()
        self._transport = transport
        self._async_transport = async_transport

    @property
    def transport(self) -> RequestsTransport:
        if self._transport is None:
            self._transport = RequestsTransport(timeout=self.configuration.timeout)
        return self._transport

    @property
    def async_transport(self) -> AsyncHttpxTransport:
        if self._async_transport is None:
            self._async_transport = AsyncHttpxTransport(timeout=self.configuration.timeout)
        return self._async_transport

    # Pipeline

    def _build(self, descriptor, payload, content_type, query, headers) -> SignedRequest:
        request = self.assembler.build(descriptor, payload, content_type, query, headers)
        if self.configuration.debug:
            logger.debug(
                "gridy_request",
                operation=descriptor.name,
                method=request.method,
                url=request.url,
                headers=sorted(h for h in request.headers if h != HEADER_AUTHORIZATION),
                nonce=request.headers[HEADER_CNONCE],
                body_size=len(request.body),
            )
        return request

    def _transport_failed(self, descriptor, request, error: TransportError) -> TransportFailure:
        logger.warning(
            "gridy_transport_failed",
            operation=descriptor.name,
            url=request.url,
            error=str(error),
        )
        return TransportFailure(error)

    def _decode(self, descriptor, request, raw: RawResponse, response_model) -> Outcome:
        if self.configuration.debug:
            logger.debug(
                "gridy_response",
                operation=descriptor.name,
                url=request.url,
                status_code=raw.status_code,
                body_size=len(raw.body),
            )
        return self.decoder.decode(
            descriptor,
            raw.status_code,
            raw.headers,
            raw.body,
            url=request.url,
            response_model=response_model,
        )

    def invoke(
        self,
        descriptor: OperationDescriptor,
        payload: Any = None,
        content_type: Optional[str] = None,
        response_model: Optional[Type[BaseModel]] = None,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Outcome:
        """
        Run one operation and return its outcome without raising on API failures.

        Raises:
            InvalidArgumentError: If a required payload is missing (nothing is sent)
            DecodeError: If a JSON response body cannot be parsed
        """
        request = self._build(descriptor, payload, content_type, query, headers)
        try:
            raw = self.transport.send(request)
        except TransportError as e:
            return self._transport_failed(descriptor, request, e)
        return self._decode(descriptor, request, raw, response_model)

    async def invoke_async(
        self,
        descriptor: OperationDescriptor,
        payload: Any = None,
        content_type: Optional[str] = None,
        response_model: Optional[Type[BaseModel]] = None,
        query: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Outcome:
        """Asyncio form of ``invoke``."""
        request = self._build(descriptor, payload, content_type, query, headers)
        try:
            raw = await self.async_transport.send(request)
        except TransportError as e:
            return self._transport_failed(descriptor, request, e)
        return self._decode(descriptor, request, raw, response_model)

    @staticmethod
    def _unwrap(outcome: Outcome, url: Optional[str] = None) -> HttpInfo:
        if isinstance(outcome, Success):
            return outcome.payload, outcome.status_code, outcome.headers
        if isinstance(outcome, ApiFailure):
            raise ApiError.from_failure(outcome, url)
        raise outcome.cause

    def _url(self, descriptor: OperationDescriptor) -> str:
        return self.configuration.host + descriptor.path

    # Generic entry points

    def call_with_http_info(self, name: str, payload: Any = None,
                            content_type: Optional[str] = None, **kwargs) -> HttpInfo:
        """
        Call an operation by name.

        Returns:
            Tuple of (payload, status_code, headers)

        Raises:
            ApiError: If the service answered with a failure status
            TransportError: If no response was obtained
        """
        descriptor = get_operation(name)
        outcome = self.invoke(descriptor, payload, content_type, **kwargs)
        return self._unwrap(outcome, self._url(descriptor))

    def call(self, name: str, payload: Any = None, content_type: Optional[str] = None, **kwargs) -> Any:
        return self.call_with_http_info(name, payload, content_type, **kwargs)[0]

    async def call_with_http_info_async(self, name: str, payload: Any = None,
                                        content_type: Optional[str] = None, **kwargs) -> HttpInfo:
        descriptor = get_operation(name)
        outcome = await self.invoke_async(descriptor, payload, content_type, **kwargs)
        return self._unwrap(outcome, self._url(descriptor))

    async def call_async(self, name: str, payload: Any = None,
                         content_type: Optional[str] = None, **kwargs) -> Any:
        info = await self.call_with_http_info_async(name, payload, content_type, **kwargs)
        return info[0]

    # Operations

    def challenge(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> Any:
        """Create a new Gridy ID challenge."""
        return self.call("challenge", payload, content_type, **kwargs)

    def challenge_with_http_info(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> HttpInfo:
        return self.call_with_http_info("challenge", payload, content_type, **kwargs)

    async def challenge_async(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> Any:
        return await self.call_async("challenge", payload, content_type, **kwargs)

    def status(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> Any:
        """Check the status of a challenge."""
        return self.call("status", payload, content_type, **kwargs)

    def status_with_http_info(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> HttpInfo:
        return self.call_with_http_info("status", payload, content_type, **kwargs)

    async def status_async(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> Any:
        return await self.call_async("status", payload, content_type, **kwargs)

    def time(self, content_type: Optional[str] = None, **kwargs) -> Any:
        """Fetch the service time."""
        return self.call("time", None, content_type, **kwargs)

    def time_with_http_info(self, content_type: Optional[str] = None, **kwargs) -> HttpInfo:
        return self.call_with_http_info("time", None, content_type, **kwargs)

    async def time_async(self, content_type: Optional[str] = None, **kwargs) -> Any:
        return await self.call_async("time", None, content_type, **kwargs)

    def verify(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> Any:
        """Verify a Gridy ID authentication code."""
        return self.call("verify", payload, content_type, **kwargs)

    def verify_with_http_info(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> HttpInfo:
        return self.call_with_http_info("verify", payload, content_type, **kwargs)

    async def verify_async(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> Any:
        return await self.call_async("verify", payload, content_type, **kwargs)

    def blocked(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> Any:
        """Report or query a blocked user."""
        return self.call("blocked", payload, content_type, **kwargs)

    def blocked_with_http_info(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> HttpInfo:
        return self.call_with_http_info("blocked", payload, content_type, **kwargs)

    async def blocked_async(self, payload: Any, content_type: Optional[str] = None, **kwargs) -> Any:
        return await self.call_async("blocked", payload, content_type, **kwargs)

    # Resources

    def close(self):
        """Close the blocking transport."""
        if self._transport is not None:
            self._transport.close()

    async def aclose(self):
        """Close the async transport."""
        if self._async_transport is not None:
            await self._async_transport.aclose()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
