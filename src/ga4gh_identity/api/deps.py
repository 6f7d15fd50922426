"""
ga4gh_identity.api.deps

FastAPI dependency functions for the identity gate.

Responsibilities:
- Expose the evaluator/warehouse built at startup (stored on app.state).
- Convert a bearer token into a validated `Identity`, or answer 401.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED

from ga4gh_identity.errors import AuthorizationError
from ga4gh_identity.evaluator import Evaluator
from ga4gh_identity.gcp.warehouse import AccountWarehouse
from ga4gh_identity.identity import Identity
from ga4gh_identity.observability.logging import get_logger

log = get_logger(__name__)

# auto_error=False: a missing or non-bearer header yields None and we answer 401
# ourselves (HTTPBearer would answer 403).
_bearer = HTTPBearer(auto_error=False)


def evaluator_from_app(request: Request) -> Evaluator:
    return request.app.state.evaluator  # type: ignore[no-any-return]


def warehouse_from_app(request: Request) -> AccountWarehouse:
    return request.app.state.warehouse  # type: ignore[no-any-return]


async def require_identity(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    evaluator: Evaluator = Depends(evaluator_from_app),
) -> Identity:
    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="authorization requires a bearer token",
        )

    try:
        identity = await evaluator.evaluate(creds.credentials)
    except AuthorizationError as e:
        # Malformed, untrusted and policy-rejected tokens look the same to callers.
        log.info("authorization_denied", reason=type(e).__name__, error=str(e))
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="not authorized") from e

    request.state.identity = identity
    structlog.contextvars.bind_contextvars(subject=identity.subject, issuer=identity.issuer)
    return identity


# --- Module Notes -----------------------------------------------------------
# Handlers downstream of `require_identity` can also read request.state.identity.
