"""Custom exception hierarchy for the relay."""


class RelayError(Exception):
    """Base exception for all relay errors."""


class TargetRejected(RelayError):
    """Raised when a caller-supplied target fails validation.

    Attributes:
        status_code: HTTP status returned to the caller
    """

    status_code = 400


class MissingTarget(TargetRejected):
    """The ``url`` query parameter is absent or empty."""

    def __init__(self, message: str = "Missing ?url=") -> None:
        super().__init__(message)


class InvalidTarget(TargetRejected):
    """The target is not an absolute URL."""

    def __init__(self, message: str = "Invalid target URL") -> None:
        super().__init__(message)


class DisallowedTarget(TargetRejected):
    """The target scheme or host is outside the allow-list."""

    status_code = 403

    def __init__(self, message: str = "Target URL not allowed by proxy whitelist") -> None:
        super().__init__(message)


class UpstreamError(RelayError):
    """Raised when the outbound call fails at the transport level.

    Attributes:
        message: Error message
        target: Target URL of the failed call (optional)
    """

    def __init__(self, message: str, target: str | None = None) -> None:
        super().__init__(message)
        self.target = target


class UpstreamTimeoutError(UpstreamError):
    """Raised when the outbound call exceeds the relay timeout."""

    def __init__(self, message: str = "proxy timeout", target: str | None = None) -> None:
        super().__init__(message, target=target)


class UpstreamConnectionError(UpstreamError):
    """Raised when the target cannot be reached."""
