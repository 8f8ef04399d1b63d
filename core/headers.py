"""Header construction for upstream requests."""

import json
from typing import Any


class HeaderSanitizer:
    """Build the forwarded header set from caller-supplied JSON."""

    def __init__(self, forwarded_headers: list[str]):
        self.forwarded_headers = {h.lower() for h in forwarded_headers}

    def parse_extra_headers(self, raw: str | None) -> dict[str, str]:
        """Decode the extra-headers blob, keeping only allow-listed string values.

        Missing or malformed input yields an empty set instead of an error.
        """
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, ValueError):
            return {}
        if not isinstance(data, dict):
            return {}
        return self.filter_headers(data)

    def filter_headers(self, headers: dict[str, Any]) -> dict[str, str]:
        """Keep allow-listed keys with string values, original casing preserved."""
        upstream: dict[str, str] = {}
        for key, value in headers.items():
            if str(key).lower() in self.forwarded_headers and isinstance(value, str):
                upstream[str(key)] = value
        return upstream
