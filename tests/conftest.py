"""Pytest configuration and fixtures for relay tests."""

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config, RelaySettings, ServerSettings


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.requests: list[dict[str, Any]] = []
        self.rejected: list[dict[str, Any]] = []
        self.errors: list[dict[str, Any]] = []

    def log_request(self, operation, status, target, *, byte_count=None, headers=None):
        self.requests.append(
            {
                "operation": operation,
                "status": status,
                "target": target,
                "byte_count": byte_count,
                "headers": headers,
            }
        )

    def log_rejected(self, operation, status, message, *, target=None):
        self.rejected.append(
            {"operation": operation, "status": status, "message": message, "target": target}
        )

    def log_error(self, operation, status, message, *, detail=None):
        self.errors.append(
            {"operation": operation, "status": status, "message": message, "detail": detail}
        )


class FakeUpstream:
    """Outbound transport handler that records requests.

    Tests swap ``handler`` to shape the upstream reply.
    """

    def __init__(self):
        self.calls: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], Any] = lambda request: httpx.Response(
            200, content=b"ok"
        )

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        response = self.handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


@pytest.fixture
def test_config() -> Config:
    """Create test configuration."""
    return Config(
        server=ServerSettings(host="127.0.0.1", port=8787),
        relay=RelaySettings(),
    )


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_client(logger, upstream):
    """Build a test client for a given configuration."""
    clients = []

    def _make(config: Config) -> TestClient:
        app = create_app(config, logger, transport=httpx.MockTransport(upstream))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, test_config) -> TestClient:
    """Create test client backed by the fake upstream."""
    return make_client(test_config)
