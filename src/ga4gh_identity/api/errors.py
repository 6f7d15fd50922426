"""
ga4gh_identity.api.errors

Maps component exceptions that escape a route to HTTP responses.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR, HTTP_503_SERVICE_UNAVAILABLE

from ga4gh_identity.errors import ConfigurationError, ProviderError, RoleBindingMissingError
from ga4gh_identity.observability.logging import get_logger

log = get_logger(__name__)


async def _provider_error(_: Request, exc: Exception) -> JSONResponse:
    # Transient infrastructure failure, distinct from "not authorized".
    log.error("provider_error", error=str(exc), exc_type=type(exc).__name__)
    return JSONResponse(
        status_code=HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "upstream provider unavailable"},
    )


async def _configuration_error(_: Request, exc: Exception) -> JSONResponse:
    log.error("configuration_error", error=str(exc), exc_type=type(exc).__name__)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "internal server error"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProviderError, _provider_error)
    app.add_exception_handler(ConfigurationError, _configuration_error)
    # Also a ProviderError by inheritance; the more specific handler wins.
    app.add_exception_handler(RoleBindingMissingError, _configuration_error)
