"""
ga4gh_identity.proxy

Request director for a single-host reverse proxy that rewrites GA4GH bearer
tokens into Google Cloud Platform access tokens.

Responsibilities:
- Translate `Authorization: Bearer <ga4gh token>` into a minted cloud token.
- Point the outbound request at the configured upstream.
"""

from __future__ import annotations

from typing import Protocol

import httpx

from ga4gh_identity.errors import Ga4ghError
from ga4gh_identity.evaluator import Evaluator
from ga4gh_identity.observability.logging import get_logger

log = get_logger(__name__)


class TokenSource(Protocol):
    async def get_access_token(self, subject: str) -> str: ...


class Director:
    def __init__(self, *, target: httpx.URL, evaluator: Evaluator, warehouse: TokenSource) -> None:
        self._target = target
        self._evaluator = evaluator
        self._warehouse = warehouse

    @property
    def target(self) -> httpx.URL:
        return self._target

    async def direct(self, request: httpx.Request) -> httpx.Request:
        """
        Rewrites `request` in place (and returns it) for forwarding upstream.

        Non-bearer authorization is forwarded untouched. When translation fails
        the original header is forwarded as well; the upstream decides whether
        it is acceptable.
        """

        auth = request.headers.get("authorization", "").split()
        if len(auth) == 2 and auth[0].lower() == "bearer":
            await self._swap_auth_header(request, auth[1])

        request.url = request.url.copy_with(
            scheme=self._target.scheme,
            host=self._target.host,
            port=self._target.port,
        )
        request.headers["host"] = request.url.netloc.decode("ascii")
        return request

    async def _swap_auth_header(self, request: httpx.Request, auth: str) -> None:
        try:
            identity = await self._evaluator.evaluate(auth)
        except Ga4ghError as e:
            log.warning("evaluation_failed", error=str(e))
            return

        try:
            token = await self._warehouse.get_access_token(identity.subject)
        except Ga4ghError as e:
            log.error("access_token_failed", subject=identity.subject, error=str(e))
            return

        request.headers["authorization"] = f"Bearer {token}"


# --- Module Notes -----------------------------------------------------------
# Paths, methods, query strings and bodies pass through unchanged; only the
# scheme/host/port, the Host header and (on success) Authorization change.
