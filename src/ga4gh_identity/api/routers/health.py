"""
ga4gh_identity.api.routers.health

Liveness endpoint for the key vendor.
"""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


# --- Module Notes -----------------------------------------------------------
# Readiness is implied: the app only starts serving once the evaluator and the
# warehouse have been built, which requires every issuer to be reachable.
