"""Shared request data types."""

from dataclasses import dataclass, field
from typing import Literal

Operation = Literal["fetch", "upload"]


@dataclass(frozen=True)
class TargetDescriptor:
    """Validated outbound target."""

    url: str
    scheme: str
    host: str


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    operation: Operation
    target: TargetDescriptor
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def method(self) -> str:
        return "GET" if self.operation == "fetch" else "PUT"
