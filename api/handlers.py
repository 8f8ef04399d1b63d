"""FastAPI route handlers."""

import traceback

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import Config
from core.exceptions import TargetRejected
from core.protocols import RequestLogger
from core.request_types import Operation

ALLOWED_METHODS = "POST, OPTIONS"
METHOD_NOT_ALLOWED_MESSAGE = "Only POST is supported"
NOT_FOUND_MESSAGE = "Not found. Use POST /fetch?url=... or POST /upload?url=..."
RELAY_PATHS: dict[str, Operation] = {"/fetch": "fetch", "/upload": "upload"}


async def handle_fetch(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response | StreamingResponse:
    """Handle /fetch: GET the target and stream it back."""
    return await _relay(request, "fetch", config, logger)


async def handle_upload(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Handle /upload: PUT the request body to the target."""
    return await _relay(request, "upload", config, logger)


async def handle_not_found(request: Request, logger: RequestLogger) -> Response:
    """Reject unknown paths."""
    logger.log_rejected("route", 404, NOT_FOUND_MESSAGE, target=request.url.path)
    return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404)


async def handle_http_error(
    request: Request,
    exc: StarletteHTTPException,
    logger: RequestLogger,
) -> Response:
    """Turn framework-raised HTTP errors into the relay's plain-text replies.

    Methods no route is registered for surface here as 405; off the relay
    paths that is an unknown path.
    """
    operation = RELAY_PATHS.get(request.url.path)
    if exc.status_code == 405:
        if operation is None:
            return await handle_not_found(request, logger)
        return _method_not_allowed(request, operation, logger)
    message = str(exc.detail)
    logger.log_rejected(operation or "route", exc.status_code, message, target=request.url.path)
    return PlainTextResponse(message, status_code=exc.status_code)


def _method_not_allowed(
    request: Request,
    operation: Operation,
    logger: RequestLogger,
) -> Response:
    logger.log_rejected(
        operation, 405, METHOD_NOT_ALLOWED_MESSAGE, target=_target_param(request)
    )
    return PlainTextResponse(
        METHOD_NOT_ALLOWED_MESSAGE,
        status_code=405,
        headers={"Allow": ALLOWED_METHODS},
    )


def _target_param(request: Request) -> str | None:
    """First ``url`` query value, matching URLSearchParams.get."""
    values = request.query_params.getlist("url")
    return values[0] if values else None


async def _relay(
    request: Request,
    operation: Operation,
    config: Config,
    logger: RequestLogger,
) -> Response | StreamingResponse:
    if request.method != "POST":
        return _method_not_allowed(request, operation, logger)

    relay_service = request.app.state.relay_service
    upstream = request.app.state.upstream_client
    raw_url = _target_param(request)

    try:
        prepared = relay_service.prepare(
            operation,
            raw_url,
            request.headers.get(config.relay.extra_headers_header),
        )
        if operation == "upload":
            body = await request.body()
            return await upstream.upload(prepared, body, logger)
        return await upstream.download(prepared, logger)
    except TargetRejected as e:
        logger.log_rejected(operation, e.status_code, str(e), target=raw_url)
        return PlainTextResponse(str(e), status_code=e.status_code)
    except Exception as e:
        message = str(e) or type(e).__name__
        logger.log_error(operation, 500, message, detail=traceback.format_exc())
        return PlainTextResponse(f"Proxy error: {message}", status_code=500)
