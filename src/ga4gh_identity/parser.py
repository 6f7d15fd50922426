"""
ga4gh_identity.parser

Bearer token -> Identity.

Responsibilities:
- Try each configured shim in order; the first success wins.
- Otherwise route the token to the verifier of its (unverified) issuer and
  decode the fully verified claim set into an Identity.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import httpx
from pydantic import ValidationError

from ga4gh_identity.errors import AuthorizationError, InvalidIssuerError, MalformedTokenError
from ga4gh_identity.identity import Identity
from ga4gh_identity.observability.logging import get_logger
from ga4gh_identity.oidc import IdTokenVerifier, new_verifier, unverified_issuer
from ga4gh_identity.shim import Shim

log = get_logger(__name__)


class Parser:
    def __init__(self, shims: Sequence[Shim], verifiers: Mapping[str, IdTokenVerifier]) -> None:
        self._shims = tuple(shims)
        self._verifiers = dict(verifiers)

    @classmethod
    async def create(
        cls,
        shims: Sequence[Shim],
        issuers: Mapping[str, str],
        *,
        http: httpx.AsyncClient,
    ) -> Parser:
        """
        `issuers` maps OAuth 2.0 issuer base URLs to the client id expected as
        audience. Each issuer is resolved once; a failure raises
        ConfigurationError and the parser is not built.
        """

        verifiers = {}
        for issuer, client_id in issuers.items():
            verifiers[issuer] = await new_verifier(issuer, client_id, http=http)
        return cls(shims, verifiers)

    async def parse(self, auth: str) -> Identity:
        for shim in self._shims:
            try:
                return await shim.shim(auth)
            except AuthorizationError as e:
                log.debug("shim_declined", shim=type(shim).__name__, error=str(e))

        issuer = unverified_issuer(auth)
        verifier = self._verifiers.get(issuer)
        if verifier is None:
            raise InvalidIssuerError("invalid issuer")

        claims = verifier.verify(auth)
        try:
            # Token claims are read by their GA4GH names only; field names are for code.
            return Identity.model_validate(claims, by_alias=True, by_name=False)
        except ValidationError as e:
            raise MalformedTokenError(f"extracting claims: {e}") from e


# --- Module Notes -----------------------------------------------------------
# The parser is immutable after `create`, so one instance serves all requests.
