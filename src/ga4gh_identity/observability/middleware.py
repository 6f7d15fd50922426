"""
ga4gh_identity.observability.middleware

Request-scoped logging context for the gate services.

Responsibilities:
- Accept or mint an `x-request-id` and echo it on the response.
- Bind request id, method and path into structlog contextvars for the duration
  of the request, then clear them.
"""

from __future__ import annotations

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "x-request-id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# --- Module Notes -----------------------------------------------------------
# The proxy forwards the caller's x-request-id upstream unchanged; a minted id
# exists only on this service's logs and response.
