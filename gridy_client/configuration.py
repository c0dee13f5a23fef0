"""
Client configuration.

A ``Configuration`` is built once and passed to the client explicitly.
Header templates are plain data and are checked here, once, instead of
on every request.
"""

import os
import platform
import string
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List

from .constants import (
    API_VERSION,
    AUTH_HEADER_TEMPLATE,
    DEFAULT_CONFIG,
    HOST_SETTINGS,
    SIGNED_HEADERS_TEMPLATE,
)
from .exceptions import ConfigurationError
from .signing import ApiCredential


def _placeholder_count(template: str) -> int:
    try:
        return sum(1 for _, name, _, _ in string.Formatter().parse(template) if name is not None)
    except ValueError as e:
        raise ConfigurationError(f"Malformed header template {template!r}: {e}")


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Configuration:
    """
    Connection and signing settings for a Gridy ID client.

    Args:
        api_user: API user sent in ``x-gridy-apiuser`` and the Authorization header
        api_secret: Shared secret used as the HMAC key
        host: Base URL, e.g. ``https://api.gridy.io/prod``
        user_agent: Default User-Agent; empty disables the header
        auth_header_template: Authorization format with two ``{}`` slots (user, signature)
        signed_headers_template: Canonical string format with two ``{}`` slots (timestamp, nonce)
        debug: Log every request and response at debug level
        timeout: Transport timeout in seconds
    """
    api_user: str = ""
    api_secret: str = field(default="", repr=False)
    host: str = DEFAULT_CONFIG['host']
    user_agent: str = DEFAULT_CONFIG['user_agent']
    auth_header_template: str = AUTH_HEADER_TEMPLATE
    signed_headers_template: str = SIGNED_HEADERS_TEMPLATE
    debug: bool = DEFAULT_CONFIG['debug']
    timeout: float = DEFAULT_CONFIG['timeout']

    def __post_init__(self):
        self.host = (self.host or "").rstrip('/')
        self._validate()

    def _validate(self):
        """Validate configuration."""
        if not self.host:
            raise ConfigurationError("host cannot be empty")

        if _placeholder_count(self.auth_header_template) != 2:
            raise ConfigurationError(
                "auth_header_template must have exactly two placeholders (user, signature)"
            )

        if _placeholder_count(self.signed_headers_template) != 2:
            raise ConfigurationError(
                "signed_headers_template must have exactly two placeholders (timestamp, nonce)"
            )

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    @property
    def credential(self) -> ApiCredential:
        return ApiCredential(self.api_user, self.api_secret)

    @classmethod
    def from_env(cls, prefix: str = "GRIDY_", **overrides) -> "Configuration":
        """
        Build a configuration from environment variables.

        Reads ``<prefix>API_USER``, ``<prefix>API_SECRET``, ``<prefix>HOST``,
        ``<prefix>USER_AGENT`` and ``<prefix>DEBUG``. Keyword arguments win
        over the environment.
        """
        values: Dict[str, Any] = {}
        env = os.environ
        if f"{prefix}API_USER" in env:
            values['api_user'] = env[f"{prefix}API_USER"]
        if f"{prefix}API_SECRET" in env:
            values['api_secret'] = env[f"{prefix}API_SECRET"]
        if f"{prefix}HOST" in env:
            values['host'] = env[f"{prefix}HOST"]
        if f"{prefix}USER_AGENT" in env:
            values['user_agent'] = env[f"{prefix}USER_AGENT"]
        if f"{prefix}DEBUG" in env:
            values['debug'] = _env_flag(env[f"{prefix}DEBUG"])
        values.update(overrides)
        return cls(**values)

    @staticmethod
    def host_settings() -> List[Dict[str, str]]:
        """Named environments: index 0 is production, index 1 is UAT."""
        return [dict(setting) for setting in HOST_SETTINGS]

    @classmethod
    def host_from_settings(cls, index: int) -> str:
        settings = cls.host_settings()
        if index < 0 or index >= len(settings):
            raise ConfigurationError(
                f"Invalid index {index} when selecting the host. Must be less than {len(settings)}"
            )
        return settings[index]['url']

    def with_host_index(self, index: int) -> "Configuration":
        """Return a copy pointing at one of the named environments."""
        return replace(self, host=self.host_from_settings(index))

    def to_debug_report(self) -> str:
        return "\n".join([
            "Python SDK (gridy_client) Debug Report:",
            f"    OS: {platform.platform()}",
            f"    Python Version: {platform.python_version()}",
            f"    The version of the Gridy API document: {API_VERSION}",
            f"    Host: {self.host}",
        ]) + "\n"
