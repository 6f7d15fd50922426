"""
ga4gh_identity.api.proxy

Single-upstream reverse proxy that swaps GA4GH bearer tokens for Google Cloud
access tokens before forwarding.

Responsibilities:
- Accept any method/path and rebuild it as an outbound httpx request.
- Run the request through `Director` and stream the upstream response back.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask
from starlette.status import HTTP_502_BAD_GATEWAY

from ga4gh_identity import __version__
from ga4gh_identity.api.errors import register_error_handlers
from ga4gh_identity.api.runtime import components, http_client
from ga4gh_identity.errors import ConfigurationError
from ga4gh_identity.evaluator import Evaluator
from ga4gh_identity.observability.logging import configure_logging, get_logger
from ga4gh_identity.observability.middleware import RequestContextMiddleware
from ga4gh_identity.proxy import Director, TokenSource
from ga4gh_identity.settings import Settings

log = get_logger(__name__)

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

# Connection-scoped headers (RFC 9110 section 7.6.1) are not forwarded.
HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


def _forwardable(items: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(k, v) for k, v in items if k.lower() not in HOP_BY_HOP]


async def forward(request: Request) -> Response:
    director: Director = request.app.state.director
    upstream: httpx.AsyncClient = request.app.state.upstream

    outbound = upstream.build_request(
        request.method,
        str(request.url),
        headers=_forwardable(request.headers.items()),
        content=await request.body(),
    )
    await director.direct(outbound)

    try:
        response = await upstream.send(outbound, stream=True)
    except httpx.RequestError as e:
        log.error("upstream_unavailable", host=outbound.url.host, error=str(e))
        return JSONResponse(
            status_code=HTTP_502_BAD_GATEWAY,
            content={"detail": "upstream unavailable"},
        )

    streamed = StreamingResponse(
        response.aiter_raw(),
        status_code=response.status_code,
        background=BackgroundTask(response.aclose),
    )
    # Repeated headers (set-cookie) stay separate lines.
    streamed.raw_headers = [
        (k.encode("latin-1"), v.encode("latin-1"))
        for k, v in _forwardable(response.headers.multi_items())
    ]
    return streamed


def create_app(
    *,
    settings: Settings,
    evaluator: Evaluator | None = None,
    warehouse: TokenSource | None = None,
    upstream: httpx.AsyncClient | None = None,
) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.env != "dev",
    )
    if not settings.target:
        raise ConfigurationError("GA4GH_TARGET must be set for the proxy")
    target = httpx.URL(settings.target)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, app="proxy", target=str(target))
        async with components(app, settings) as stack:
            if app.state.upstream is None:
                app.state.upstream = await stack.enter_async_context(http_client(settings))
            app.state.director = Director(
                target=target,
                evaluator=app.state.evaluator,
                warehouse=app.state.warehouse,
            )
            yield
        log.info("shutdown")

    app = FastAPI(title="GA4GH credential proxy", version=__version__, lifespan=lifespan)
    app.state.evaluator = evaluator
    app.state.warehouse = warehouse
    app.state.upstream = upstream
    if evaluator is not None and warehouse is not None:
        app.state.director = Director(target=target, evaluator=evaluator, warehouse=warehouse)

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)
    app.add_api_route("/{path:path}", forward, methods=METHODS, include_in_schema=False)
    return app
