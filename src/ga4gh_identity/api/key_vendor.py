"""
ga4gh_identity.api.key_vendor

Key vendor service: returns Google Cloud service account keys for external
GA4GH identities.

Responsibilities:
- Gate every route behind `require_identity`.
- Serve `/v1/GetAccountKey` with the raw key file of the caller's backing account.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI
from fastapi.responses import Response

from ga4gh_identity import __version__
from ga4gh_identity.api.deps import require_identity, warehouse_from_app
from ga4gh_identity.api.errors import register_error_handlers
from ga4gh_identity.api.routers.health import router as health_router
from ga4gh_identity.api.runtime import components
from ga4gh_identity.evaluator import Evaluator
from ga4gh_identity.gcp.warehouse import AccountWarehouse
from ga4gh_identity.identity import Identity
from ga4gh_identity.observability.logging import configure_logging, get_logger
from ga4gh_identity.observability.middleware import RequestContextMiddleware
from ga4gh_identity.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["keys"])


@router.api_route("/GetAccountKey", methods=["GET", "POST"])
async def get_account_key(
    identity: Identity = Depends(require_identity),
    warehouse: AccountWarehouse = Depends(warehouse_from_app),
) -> Response:
    key = await warehouse.get_account_key(identity.subject)
    log.info("account_key_issued")
    return Response(content=key, media_type="application/json")


def create_app(
    *,
    settings: Settings,
    evaluator: Evaluator | None = None,
    warehouse: AccountWarehouse | None = None,
) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.env != "dev",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, app="key-vendor")
        async with components(app, settings):
            yield
        log.info("shutdown")

    app = FastAPI(title="GA4GH key vendor", version=__version__, lifespan=lifespan)
    app.state.evaluator = evaluator
    app.state.warehouse = warehouse

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(router)
    return app


# --- Module Notes -----------------------------------------------------------
# Keys are long-lived credentials; previously issued keys are not revoked here.
