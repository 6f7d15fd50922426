"""
ga4gh_identity.shim.elixir

Shim translating ELIXIR AAI identities into GA4GH identities.
"""

from __future__ import annotations

import httpx

from ga4gh_identity.identity import BoolValue, Identity
from ga4gh_identity.oidc import IdTokenVerifier, new_verifier

ELIXIR_ISSUER = "https://login.elixir-czech.org/oidc/"


class ElixirShim:
    def __init__(self, verifier: IdTokenVerifier) -> None:
        self._verifier = verifier

    @classmethod
    async def create(
        cls,
        client_id: str,
        *,
        http: httpx.AsyncClient,
        issuer: str = ELIXIR_ISSUER,
    ) -> ElixirShim:
        # Tokens whose audience is not `client_id` are rejected.
        return cls(await new_verifier(issuer, client_id, http=http))

    async def shim(self, auth: str) -> Identity:
        claims = self._verifier.verify(auth)

        bona_fide: tuple[BoolValue, ...] = ()
        if claims.get("bona_fide_status"):
            bona_fide = (BoolValue(value=True, source=self._verifier.issuer),)

        return Identity(
            subject=claims["sub"],
            issuer=claims["iss"],
            bona_fide=bona_fide,
        )
