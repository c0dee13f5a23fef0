"""
HMAC-SHA512 request signing for the Gridy ID service.

Every authenticated request carries a timestamp and a client nonce in
``x-gridy-utctime`` / ``x-gridy-cnonce``; the Authorization header is an
HMAC-SHA512 over exactly those two header lines.
"""

import datetime
import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import AUTH_HEADER_TEMPLATE, NONCE_BYTES, SIGNED_HEADERS_TEMPLATE


@dataclass(frozen=True)
class ApiCredential:
    """API user and shared secret used to sign requests."""
    api_user: str
    api_secret: str

    def __repr__(self) -> str:
        return f"ApiCredential(api_user={self.api_user!r}, api_secret='***')"


def render_timestamp(instant: datetime.datetime) -> str:
    """
    Render an instant the way the service expects it.

    The value is whole seconds since the epoch followed by the zero-padded
    millisecond part, e.g. 1700000000 s + 7 ms -> ``"1700000000007"``.
    This is a string concatenation, not epoch milliseconds, although the
    two happen to coincide for the 3-digit millisecond field.
    Naive datetimes are taken to be UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=datetime.timezone.utc)
    instant = instant.astimezone(datetime.timezone.utc)
    epoch = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
    delta = instant - epoch
    seconds = delta.days * 86400 + delta.seconds
    millis = delta.microseconds // 1000
    return f"{seconds}{millis:03d}"


class SystemClock:
    """Default clock: the system UTC time."""

    def __init__(self, now: Optional[Callable[[], datetime.datetime]] = None):
        self._now = now or (lambda: datetime.datetime.now(datetime.timezone.utc))

    def now(self) -> str:
        return render_timestamp(self._now())


class FixedClock(SystemClock):
    """Clock frozen at a single instant."""

    def __init__(self, instant: datetime.datetime):
        super().__init__(lambda: instant)
        self.instant = instant


class NonceSource:
    """
    Cryptographically random client nonces.

    Nonces are 16 random bytes shaped like a UUID (8-4-4-4-12 hex groups).
    No version or variant bits are set. Stateless, so one instance can be
    shared between threads.
    """

    def __init__(self, nbytes: int = NONCE_BYTES):
        self.nbytes = nbytes

    def next(self) -> str:
        raw = secrets.token_bytes(self.nbytes).hex()
        return "-".join((raw[:8], raw[8:12], raw[12:16], raw[16:20], raw[20:]))


def canonical_headers(timestamp: str, nonce: str,
                      template: str = SIGNED_HEADERS_TEMPLATE) -> str:
    """Build the signed-header string fed into the HMAC."""
    return template.format(timestamp, nonce)


def compute_signature(secret: str, message: str) -> str:
    """
    Generate a hex-encoded HMAC-SHA512 signature.

    Args:
        secret: API secret used as the HMAC key (may be empty)
        message: Canonical signed-header string

    Returns:
        Lowercase hex digest
    """
    mac = hmac.new(
        (secret or "").encode('utf-8'),
        message.encode('utf-8'),
        hashlib.sha512
    )
    return mac.hexdigest()


def sign_request(
    credential: ApiCredential,
    timestamp: str,
    nonce: str,
    auth_template: str = AUTH_HEADER_TEMPLATE,
    signed_template: str = SIGNED_HEADERS_TEMPLATE,
) -> str:
    """
    Build the Authorization header value for one request.

    Pure and deterministic: the caller supplies the timestamp and nonce.

    Args:
        credential: API user and secret
        timestamp: Rendered ``x-gridy-utctime`` value
        nonce: ``x-gridy-cnonce`` value
        auth_template: Authorization format with (user, signature) slots
        signed_template: Canonical format with (timestamp, nonce) slots

    Returns:
        Authorization header value
    """
    message = canonical_headers(timestamp, nonce, signed_template)
    signature = compute_signature(credential.api_secret, message)
    return auth_template.format(credential.api_user, signature)
