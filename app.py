"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.handlers import handle_fetch, handle_http_error, handle_not_found, handle_upload
from core.config import Config
from core.protocols import RequestLogger
from services.relay_service import RelayService
from services.upstream import UpstreamClient

CORS_ALLOW_ORIGIN = "*"
CORS_ALLOW_METHODS = "POST,OPTIONS"
# OPTIONS never reaches a route; the middleware answers it. Other methods
# raise 405 in the router and are mapped by handle_http_error.
ROUTE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
        client = httpx.AsyncClient(
            timeout=config.relay.timeout_seconds,
            limits=limits,
            follow_redirects=True,
            transport=transport,
        )
        app.state.upstream_client = UpstreamClient(
            client,
            timeout=config.relay.timeout_seconds,
            max_echo_bytes=config.relay.max_echo_bytes,
        )
        app.state.relay_service = RelayService(config)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="APS Relay", version="0.1.0", lifespan=lifespan)
    cors_headers = {
        "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": f"Content-Type, {config.relay.extra_headers_header}",
    }

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return await handle_http_error(request, exc, logger)

    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)
        response.headers.update(cors_headers)
        return response

    @app.api_route("/fetch", methods=ROUTE_METHODS)
    async def relay_fetch(request: Request):
        return await handle_fetch(request, config, logger)

    @app.api_route("/upload", methods=ROUTE_METHODS)
    async def relay_upload(request: Request):
        return await handle_upload(request, config, logger)

    @app.api_route("/{path:path}", methods=ROUTE_METHODS)
    async def not_found(request: Request):
        return await handle_not_found(request, logger)

    return app
