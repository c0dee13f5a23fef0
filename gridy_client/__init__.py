"""
Gridy ID Client Library

A Python client for the Gridy ID multi-factor-authentication service.
Requests are signed with HMAC-SHA512 over a per-request timestamp and
client nonce.

Example usage:
    from gridy_client import Configuration, GridyClient

    config = Configuration(api_user="your-api-user", api_secret="your-secret")
    with GridyClient(config) as client:
        server_time = client.time()
"""

from .client import GridyClient
from .configuration import Configuration
from .exceptions import (
    GridyClientError,
    ConfigurationError,
    InvalidArgumentError,
    ApiError,
    DecodeError,
    TransportError,
    TransportTimeoutError
)
from .constants import (
    HEADER_API_USER,
    HEADER_UTC_TIME,
    HEADER_CNONCE,
    HOST_PRODUCTION,
    HOST_UAT,
    DEFAULT_CONFIG,
    CLIENT_VERSION
)
from .headers import HeaderSelector
from .operations import ApiRequestType, OperationDescriptor, OPERATIONS
from .request import RequestAssembler, SignedRequest
from .response import ApiFailure, Outcome, ResponseDecoder, Success, TransportFailure
from .signing import ApiCredential, FixedClock, NonceSource, SystemClock, render_timestamp, sign_request
from .transport import AsyncHttpxTransport, RawResponse, RequestsTransport

__version__ = CLIENT_VERSION
__all__ = [
    "GridyClient",
    "Configuration",
    "GridyClientError",
    "ConfigurationError",
    "InvalidArgumentError",
    "ApiError",
    "DecodeError",
    "TransportError",
    "TransportTimeoutError",
    "HEADER_API_USER",
    "HEADER_UTC_TIME",
    "HEADER_CNONCE",
    "HOST_PRODUCTION",
    "HOST_UAT",
    "DEFAULT_CONFIG",
    "HeaderSelector",
    "ApiRequestType",
    "OperationDescriptor",
    "OPERATIONS",
    "RequestAssembler",
    "SignedRequest",
    "ApiFailure",
    "Outcome",
    "ResponseDecoder",
    "Success",
    "TransportFailure",
    "ApiCredential",
    "FixedClock",
    "NonceSource",
    "SystemClock",
    "render_timestamp",
    "sign_request",
    "AsyncHttpxTransport",
    "RawResponse",
    "RequestsTransport"
]
