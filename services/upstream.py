"""HTTP forwarding to the validated target."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import UpstreamConnectionError, UpstreamTimeoutError
from core.protocols import RequestLogger
from core.request_types import PreparedRequest

ECHO_MEDIA_TYPE = "text/plain; charset=utf-8"
DEFAULT_DOWNLOAD_MEDIA_TYPE = "application/octet-stream"


class UpstreamClient:
    """Forward prepared requests with streaming support."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = 120.0,
        max_echo_bytes: int = 2000,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._max_echo_bytes = max_echo_bytes

    async def download(
        self,
        prepared: PreparedRequest,
        logger: RequestLogger,
    ) -> Response | StreamingResponse:
        """GET the target and stream the body back.

        The timeout bounds the exchange up to the response headers; the body
        is then piped through without buffering.
        """
        target = prepared.target.url
        request = self._build(prepared)
        async with self._bounded(target):
            response = await self._client.send(request, stream=True)
            if not response.is_success:
                reply = await self._echo(response)
                logger.log_request(
                    prepared.operation, reply.status_code, target, headers=prepared.headers
                )
                return reply

        headers = {
            "Content-Type": response.headers.get("content-type", DEFAULT_DOWNLOAD_MEDIA_TYPE),
        }
        content_length = response.headers.get("content-length")
        # httpx decodes content-encoding, so the upstream length no longer applies
        if content_length and _is_identity_encoded(response):
            headers["Content-Length"] = content_length

        logger.log_request(prepared.operation, 200, target, headers=prepared.headers)
        return StreamingResponse(
            response.aiter_bytes(),
            status_code=200,
            headers=headers,
            background=BackgroundTask(self._cleanup_streaming, response),
        )

    async def upload(
        self,
        prepared: PreparedRequest,
        body: bytes,
        logger: RequestLogger,
    ) -> Response:
        """PUT the buffered body and echo the truncated upstream reply."""
        target = prepared.target.url
        request = self._build(prepared, content=body)
        async with self._bounded(target):
            response = await self._client.send(request, stream=True)
            reply = await self._echo(response)

        logger.log_request(
            prepared.operation,
            reply.status_code,
            target,
            byte_count=len(body),
            headers=prepared.headers,
        )
        return reply

    def _build(self, prepared: PreparedRequest, content: bytes | None = None) -> httpx.Request:
        return self._client.build_request(
            prepared.method,
            prepared.target.url,
            headers=prepared.headers,
            content=content,
        )

    @asynccontextmanager
    async def _bounded(self, target: str) -> AsyncIterator[None]:
        """Apply the relay timeout and map transport failures."""
        try:
            async with asyncio.timeout(self._timeout):
                yield
        except (TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamTimeoutError(target=target) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(str(e) or type(e).__name__, target=target) from e

    async def _echo(self, response: httpx.Response) -> Response:
        """Return the upstream status with a capped plain-text body excerpt."""
        try:
            excerpt = await self._read_capped(response)
        finally:
            await response.aclose()
        return Response(
            content=excerpt,
            status_code=response.status_code,
            media_type=ECHO_MEDIA_TYPE,
        )

    async def _read_capped(self, response: httpx.Response) -> bytes:
        buf = bytearray()
        async for chunk in response.aiter_bytes():
            buf.extend(chunk)
            if len(buf) >= self._max_echo_bytes:
                break
        return bytes(buf[: self._max_echo_bytes])

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()


def _is_identity_encoded(response: httpx.Response) -> bool:
    encoding = response.headers.get("content-encoding", "identity").strip().lower()
    return encoding in ("", "identity")
