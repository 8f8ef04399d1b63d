"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard or ConsoleLogger)."""

    def log_request(
        self,
        operation: str,
        status: int,
        target: str,
        *,
        byte_count: int | None = None,
        headers: dict[str, str] | None = None,
    ) -> None: ...
    def log_rejected(
        self,
        operation: str,
        status: int,
        message: str,
        *,
        target: str | None = None,
    ) -> None: ...
    def log_error(
        self,
        operation: str,
        status: int,
        message: str,
        *,
        detail: str | None = None,
    ) -> None: ...
