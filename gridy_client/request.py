"""
Assembly of signed requests.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

from pydantic import BaseModel

from .configuration import Configuration
from .constants import (
    HEADER_API_USER,
    HEADER_AUTHORIZATION,
    HEADER_CNONCE,
    HEADER_CONTENT_TYPE,
    HEADER_USER_AGENT,
    HEADER_UTC_TIME,
)
from .exceptions import InvalidArgumentError
from .headers import HeaderSelector, is_json_mime
from .operations import OperationDescriptor
from .signing import NonceSource, SystemClock, sign_request


@dataclass
class SignedRequest:
    """A fully assembled request, ready for a transport."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def is_missing(payload: Any) -> bool:
    """True for ``None`` and empty containers."""
    if payload is None:
        return True
    if isinstance(payload, (dict, list, tuple, set, frozenset, str, bytes, bytearray)):
        return len(payload) == 0
    return False


def sanitize_for_serialization(payload: Any) -> Any:
    """Turn pydantic models (at any depth) into JSON-ready data."""
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(payload, dict):
        return {k: sanitize_for_serialization(v) for k, v in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [sanitize_for_serialization(v) for v in payload]
    return payload


def serialize_body(payload: Any, content_type: str) -> bytes:
    """JSON-encode for JSON content types; other types take only str or bytes."""
    if payload is None:
        return b""
    if is_json_mime(content_type):
        return json.dumps(sanitize_for_serialization(payload), separators=(',', ':')).encode('utf-8')
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode('utf-8')
    raise InvalidArgumentError(
        f"Payload of type {type(payload).__name__} cannot be sent as {content_type}; pass str or bytes"
    )


class RequestAssembler:
    """
    Builds signed requests for operation descriptors.

    Timestamp and nonce are drawn inside ``build``, so a request must be
    built right before it is sent.
    """

    def __init__(
        self,
        configuration: Configuration,
        clock: Optional[SystemClock] = None,
        nonces: Optional[NonceSource] = None,
        header_selector: Optional[HeaderSelector] = None,
    ):
        self.configuration = configuration
        self.clock = clock or SystemClock()
        self.nonces = nonces or NonceSource()
        self.header_selector = header_selector or HeaderSelector()

    def build(
        self,
        descriptor: OperationDescriptor,
        payload: Any = None,
        content_type: Optional[str] = None,
        query: Optional[Mapping[str, Any]] = None,
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> SignedRequest:
        """
        Build a signed request.

        Args:
            descriptor: Operation to call
            payload: Request payload (required when the operation takes a body)
            content_type: Content type override; defaults to the operation's first type
            query: Optional query parameters
            extra_headers: Caller headers; they win over the default User-Agent but never
                over headers the assembler sets (names compared case-insensitively)

        Returns:
            SignedRequest

        Raises:
            InvalidArgumentError: If a required payload is missing or empty, or
                cannot be encoded for a non-JSON content type
        """
        if descriptor.requires_body and is_missing(payload):
            raise InvalidArgumentError(
                f"Missing the required parameter 'payload' when calling {descriptor.name}"
            )

        config = self.configuration
        headers = self.header_selector.select_headers(
            descriptor.accept,
            content_type or descriptor.default_content_type,
        )

        body = b""
        if descriptor.requires_body:
            body = serialize_body(payload, headers[HEADER_CONTENT_TYPE])

        headers[HEADER_API_USER] = config.api_user
        headers[HEADER_UTC_TIME] = self.clock.now()
        headers[HEADER_CNONCE] = self.nonces.next()
        headers[HEADER_AUTHORIZATION] = sign_request(
            config.credential,
            headers[HEADER_UTC_TIME],
            headers[HEADER_CNONCE],
            auth_template=config.auth_header_template,
            signed_template=config.signed_headers_template,
        )

        # header names are case-insensitive on the wire
        reserved = {name.lower() for name in headers}
        caller = {k: v for k, v in (extra_headers or {}).items() if k.lower() not in reserved}

        defaults = {}
        if config.user_agent and HEADER_USER_AGENT.lower() not in {k.lower() for k in caller}:
            defaults[HEADER_USER_AGENT] = config.user_agent
        headers = {**defaults, **caller, **headers}

        url = config.host + descriptor.path
        if query:
            url += "?" + urlencode(query, doseq=True)

        return SignedRequest(descriptor.method, url, headers, body)
