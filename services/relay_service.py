"""Request preparation for relay operations."""

from core.config import Config
from core.headers import HeaderSanitizer
from core.request_types import Operation, PreparedRequest
from core.target import TargetPolicy


class RelayService:
    """Validate inbound requests before anything goes upstream."""

    def __init__(
        self,
        config: Config,
        policy: TargetPolicy | None = None,
        sanitizer: HeaderSanitizer | None = None,
    ) -> None:
        self._policy = policy or TargetPolicy(config.relay.allowed_host_suffixes)
        self._sanitizer = sanitizer or HeaderSanitizer(config.relay.forwarded_headers)

    def prepare(
        self,
        operation: Operation,
        raw_url: str | None,
        raw_extra_headers: str | None,
    ) -> PreparedRequest:
        """Resolve the target and the forwarded header set.

        Raises TargetRejected before any outbound call is made.
        """
        target = self._policy.resolve(raw_url)
        headers = self._sanitizer.parse_extra_headers(raw_extra_headers)
        return PreparedRequest(operation=operation, target=target, headers=headers)
