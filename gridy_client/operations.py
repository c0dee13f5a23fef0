"""
Operation table for the Gridy ID service.

Each endpoint is described once as data; the client drives every call
through the same signing and decoding path.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, FrozenSet, Tuple

from .constants import JSON, JSON_UTF8
from .exceptions import InvalidArgumentError


class ApiRequestType(IntEnum):
    """Request type codes carried inside Gridy ID request payloads."""
    CHALLENGE_NEW = 150
    CHALLENGE_CANCEL = 151
    VERIFY_AUTHCODE = 170
    VERIFY_CHECKSTATUS = 171
    VERIFY_CHECKSTATUS_ACK = 172


@dataclass(frozen=True)
class OperationDescriptor:
    """
    One logical API call.

    ``return_type`` is ``"json"`` for structured payloads, ``"str"`` for
    text, and ``"bytes"`` for raw streams passed through unparsed.
    """
    name: str
    method: str
    path: str
    expected_status_codes: FrozenSet[int]
    requires_body: bool = True
    content_types: Tuple[str, ...] = (JSON_UTF8,)
    accept: Tuple[str, ...] = (JSON_UTF8,)
    return_type: str = "json"

    @property
    def default_content_type(self) -> str:
        return self.content_types[0]


CHALLENGE = OperationDescriptor(
    name="challenge",
    method="POST",
    path="/v1/svc/challenge",
    expected_status_codes=frozenset({202, 400, 500}),
)

STATUS = OperationDescriptor(
    name="status",
    method="POST",
    path="/v1/svc/status",
    expected_status_codes=frozenset({200, 204, 400, 404, 500}),
)

TIME = OperationDescriptor(
    name="time",
    method="GET",
    path="/v1/svc/time",
    expected_status_codes=frozenset({200, 400, 500}),
    requires_body=False,
    content_types=(JSON,),
)

VERIFY = OperationDescriptor(
    name="verify",
    method="POST",
    path="/v1/svc/verify",
    expected_status_codes=frozenset({200, 400, 500}),
)

BLOCKED = OperationDescriptor(
    name="blocked",
    method="POST",
    path="/v1/svc/blocked",
    expected_status_codes=frozenset({200, 400, 500}),
)

OPERATIONS: Dict[str, OperationDescriptor] = {
    op.name: op for op in (CHALLENGE, STATUS, TIME, VERIFY, BLOCKED)
}


def get_operation(name: str) -> OperationDescriptor:
    try:
        return OPERATIONS[name]
    except KeyError:
        raise InvalidArgumentError(
            f"Unknown operation {name!r}; expected one of {', '.join(sorted(OPERATIONS))}"
        ) from None
