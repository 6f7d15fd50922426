"""
ga4gh_identity.gcp.credentials

httpx authentication backed by google-auth credentials.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Generator
from typing import Any

import google.auth
import google.auth.transport.requests
import httpx

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class GoogleAuth(httpx.Auth):
    """
    Attaches an OAuth 2.0 bearer token from google-auth credentials to every
    request, refreshing it when expired.
    """

    def __init__(self, credentials: Any) -> None:
        self._credentials = credentials
        self._refresh_lock = asyncio.Lock()

    @classmethod
    def default(cls, scopes: tuple[str, ...] = (CLOUD_PLATFORM_SCOPE,)) -> GoogleAuth:
        # Application default credentials: env var, gcloud config or metadata server.
        credentials, _ = google.auth.default(scopes=list(scopes))
        return cls(credentials)

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        if not self._credentials.valid:
            self._credentials.refresh(google.auth.transport.requests.Request())
        self._credentials.apply(request.headers)
        yield request

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        if not self._credentials.valid:
            async with self._refresh_lock:
                if not self._credentials.valid:
                    # google-auth refreshes with a blocking HTTP call.
                    await asyncio.to_thread(
                        self._credentials.refresh, google.auth.transport.requests.Request()
                    )
        self._credentials.apply(request.headers)
        yield request
