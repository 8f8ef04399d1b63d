"""Target URL validation against the host allow-list."""

import httpx

from core.exceptions import DisallowedTarget, InvalidTarget, MissingTarget
from core.request_types import TargetDescriptor

ALLOWED_SCHEMES = ("http", "https")


class TargetPolicy:
    """Decide whether a caller-supplied URL may be forwarded."""

    def __init__(self, allowed_host_suffixes: list[str]):
        self.allowed_host_suffixes = [s.lower() for s in allowed_host_suffixes]

    def resolve(self, raw_url: str | None) -> TargetDescriptor:
        """Parse and validate a target URL.

        Raises:
            MissingTarget: no URL given.
            InvalidTarget: not an absolute URL.
            DisallowedTarget: scheme or host outside the allow-list.
        """
        if not raw_url:
            raise MissingTarget()

        try:
            url = httpx.URL(raw_url)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise InvalidTarget(f"Invalid target URL: {e}") from e

        if not url.scheme:
            raise InvalidTarget()
        if url.scheme not in ALLOWED_SCHEMES:
            raise DisallowedTarget()
        if not url.host:
            raise InvalidTarget()

        host = url.host.lower()
        if not self.is_allowed_host(host):
            raise DisallowedTarget()

        return TargetDescriptor(url=str(url), scheme=url.scheme, host=host)

    def is_allowed_host(self, host: str) -> bool:
        """Exact match or subdomain of an allowed suffix."""
        host = host.lower()
        return any(
            host == suffix or host.endswith(f".{suffix}")
            for suffix in self.allowed_host_suffixes
        )
