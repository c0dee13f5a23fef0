"""
Custom exceptions for the Gridy ID client library.
"""

from typing import Any, Mapping, Optional


class GridyClientError(Exception):
    """Base exception for Gridy client errors."""
    pass


class ConfigurationError(GridyClientError):
    """Raised when client configuration is invalid."""
    pass


class InvalidArgumentError(GridyClientError, ValueError):
    """Raised when a required argument is missing or empty."""
    pass


class ApiError(GridyClientError):
    """
    Raised when the service answered with a failure status.

    Carries the status, headers and raw body of the response, plus the
    decoded error payload when the status is one the operation declares.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        headers: Optional[Mapping[str, str]] = None,
        raw_body: Optional[bytes] = None,
        payload: Any = None,
        url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.raw_body = raw_body
        self.payload = payload
        self.url = url
        super().__init__(f"[{status_code}] {message}")

    @classmethod
    def from_failure(cls, failure, url: Optional[str] = None) -> "ApiError":
        """Build an exception from an ``ApiFailure`` outcome."""
        return cls(
            f"{failure.reason} ({url})" if url else failure.reason,
            status_code=failure.status_code,
            headers=failure.headers,
            raw_body=failure.raw_body,
            payload=failure.payload,
            url=url,
        )


class DecodeError(ApiError):
    """Raised when a response body that should be JSON cannot be parsed."""
    pass


class TransportError(GridyClientError):
    """Raised when no HTTP response could be obtained."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class TransportTimeoutError(TransportError):
    """Raised when the transport gave up waiting for the service."""
    pass
