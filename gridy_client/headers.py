"""
Accept / Content-Type negotiation.
"""

import re
from typing import Dict, Iterable, List, Optional

from .constants import HEADER_ACCEPT, HEADER_CONTENT_TYPE, JSON

_JSON_MIME = re.compile(r"(?i)^(application/json|[^;/ \t]+/[^;/ \t]+[+]json)[ \t]*(;.*)?$")


def is_json_mime(mime: str) -> bool:
    return bool(mime) and _JSON_MIME.match(mime) is not None


class HeaderSelector:
    """Pick concrete Accept and Content-Type headers for a request."""

    def select_headers(
        self,
        accept: Iterable[str],
        content_type: Optional[str],
        multipart: bool = False,
    ) -> Dict[str, str]:
        headers: Dict[str, str] = {}

        accept_value = self.select_accept(list(accept))
        if accept_value:
            headers[HEADER_ACCEPT] = accept_value

        if multipart:
            headers[HEADER_CONTENT_TYPE] = "multipart/form-data"
        else:
            headers[HEADER_CONTENT_TYPE] = content_type or JSON

        return headers

    @staticmethod
    def select_accept(accept: List[str]) -> Optional[str]:
        """Prefer JSON types when the operation offers any."""
        accept = [a for a in accept if a]
        if not accept:
            return None
        json_types = [a for a in accept if is_json_mime(a)]
        return ",".join(json_types or accept)
