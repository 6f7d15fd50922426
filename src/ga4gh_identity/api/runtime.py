"""
ga4gh_identity.api.runtime

Startup composition of the evaluator and the account warehouse.

Responsibilities:
- Own the outbound HTTP clients for the lifetime of the app.
- Build components from Settings unless the app factory was handed prebuilt
  ones (tests, embedding).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

import httpx
from fastapi import FastAPI

from ga4gh_identity.builder import build_evaluator
from ga4gh_identity.gcp.credentials import GoogleAuth
from ga4gh_identity.gcp.warehouse import AccountWarehouse, AccountWarehouseOptions
from ga4gh_identity.observability.logging import get_logger
from ga4gh_identity.settings import Settings

log = get_logger(__name__)


def http_client(settings: Settings, **kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout), **kwargs)


@asynccontextmanager
async def components(app: FastAPI, settings: Settings) -> AsyncIterator[AsyncExitStack]:
    """
    Populates app.state.evaluator and app.state.warehouse when unset. Any
    failure (unreachable issuer, missing credentials) aborts startup.
    """

    async with AsyncExitStack() as stack:
        if getattr(app.state, "evaluator", None) is None:
            # Issuer metadata and keys are fetched once here; verifiers keep no client.
            async with http_client(settings) as oidc_http:
                app.state.evaluator = await build_evaluator(settings.evaluator, http=oidc_http)
            log.info("evaluator_built")

        if getattr(app.state, "warehouse", None) is None:
            gcp_http = await stack.enter_async_context(
                http_client(settings, auth=GoogleAuth.default())
            )
            app.state.warehouse = AccountWarehouse(
                http=gcp_http,
                options=AccountWarehouseOptions(
                    project=settings.project,
                    default_role=settings.role,
                    scopes=settings.scopes,
                ),
            )
            log.info("warehouse_built", project=settings.project, role=settings.role)

        yield stack

