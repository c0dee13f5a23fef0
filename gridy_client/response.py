"""
Response decoding: status routing and payload parsing.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Type, Union

import structlog
from pydantic import BaseModel, ValidationError

from .exceptions import DecodeError
from .operations import OperationDescriptor

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Success:
    """Decoded payload of a 2xx response."""
    payload: Any
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ApiFailure:
    """
    The service answered, but not with success.

    ``payload`` holds the decoded error body for status codes the
    operation declares (e.g. 400/500); it is ``None`` otherwise.
    """
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    raw_body: bytes = b""
    payload: Any = None
    reason: str = "Error response from the API"


@dataclass(frozen=True)
class TransportFailure:
    """No HTTP response was obtained."""
    cause: BaseException


Outcome = Union[Success, ApiFailure, TransportFailure]


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code <= 299


class ResponseDecoder:
    """Maps (status, headers, body) to an ``Outcome``."""

    def decode(
        self,
        descriptor: OperationDescriptor,
        status_code: int,
        headers: Mapping[str, str],
        raw_body: bytes,
        url: Optional[str] = None,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Outcome:
        """
        Decode one response.

        Args:
            descriptor: Operation the response belongs to
            status_code: HTTP status
            headers: Response headers
            raw_body: Response body
            url: Request URL, used in error reports
            response_model: Optional pydantic model for the payload

        Returns:
            Success or ApiFailure

        Raises:
            DecodeError: If a 2xx JSON body could not be parsed
        """
        headers = dict(headers or {})
        raw_body = raw_body or b""

        if status_code in descriptor.expected_status_codes or is_success_status(status_code):
            payload = self.decode_payload(
                descriptor, status_code, headers, raw_body, url, response_model
            )
            if is_success_status(status_code):
                return Success(payload, status_code, headers)
            return ApiFailure(status_code, headers, raw_body, payload)

        return ApiFailure(
            status_code,
            headers,
            raw_body,
            reason="Unexpected status from the API",
        )

    def decode_payload(
        self,
        descriptor: OperationDescriptor,
        status_code: int,
        headers: Dict[str, str],
        raw_body: bytes,
        url: Optional[str] = None,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Any:
        """
        Parse a response body.

        Raises ``DecodeError`` only for 2xx responses; an undecodable error
        body gives ``None`` and a body that does not fit ``response_model``
        is returned as plain JSON.
        """
        if descriptor.return_type == "bytes":
            return raw_body
        if descriptor.return_type == "str":
            return raw_body.decode('utf-8', errors='replace')
        if not raw_body.strip():
            return None

        try:
            content = json.loads(raw_body)
        except ValueError as e:
            if not is_success_status(status_code):
                # error bodies are attached only when decodable
                logger.warning(
                    "error_body_not_json",
                    operation=descriptor.name,
                    status_code=status_code,
                    url=url,
                )
                return None
            logger.error(
                "response_decode_failed",
                operation=descriptor.name,
                status_code=status_code,
                url=url,
                error=str(e),
            )
            raise DecodeError(
                f"Error JSON decoding server response ({url})",
                status_code=status_code,
                headers=headers,
                raw_body=raw_body,
                url=url,
            ) from e

        if response_model is None:
            return content
        try:
            return response_model.model_validate(content)
        except ValidationError as e:
            if not is_success_status(status_code):
                return content
            raise DecodeError(
                f"Response does not match {response_model.__name__} ({url})",
                status_code=status_code,
                headers=headers,
                raw_body=raw_body,
                url=url,
            ) from e
