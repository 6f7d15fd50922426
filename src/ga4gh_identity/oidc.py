"""
ga4gh_identity.oidc

OpenID Connect provider resolution and ID token verification.

Responsibilities:
- Resolve an issuer's discovery document and signing keys once, at startup.
- Verify tokens with strict claim requirements (signature/iss/aud/exp/sub).
- Read claims without verification, only to route a token to its verifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import jwt
from jwt import InvalidTokenError, PyJWK, PyJWKSet

from ga4gh_identity.errors import ConfigurationError, MalformedTokenError, UntrustedTokenError

DEFAULT_ALGORITHMS = ("RS256",)


@dataclass(frozen=True, slots=True)
class ProviderMetadata:
    issuer: str
    jwks_uri: str
    algorithms: tuple[str, ...]


class IdTokenVerifier:
    """
    Verifies tokens for a single issuer and client id against a fixed key set.
    """

    def __init__(
        self,
        *,
        issuer: str,
        client_id: str,
        keys: PyJWKSet,
        algorithms: tuple[str, ...] = DEFAULT_ALGORITHMS,
    ) -> None:
        self._issuer = issuer
        self._client_id = client_id
        self._keys = keys
        self._algorithms = list(algorithms)

    @property
    def issuer(self) -> str:
        return self._issuer

    def verify(self, token: str) -> dict[str, Any]:
        try:
            header = jwt.get_unverified_header(token)
        except InvalidTokenError as e:
            raise MalformedTokenError(f"parsing JWT header: {e}") from e

        last: Exception | None = None
        for key in self._candidate_keys(header.get("kid"), header.get("alg")):
            try:
                # Each key verifies only with its own algorithm.
                return jwt.decode(
                    token,
                    key.key,
                    algorithms=[key.algorithm_name],
                    issuer=self._issuer,
                    audience=self._client_id,
                    options={"require": ["exp", "iss", "sub", "aud"]},
                )
            except jwt.InvalidSignatureError as e:
                last = e
            except (jwt.PyJWTError, TypeError, ValueError) as e:
                raise UntrustedTokenError(f"verifying token: {e}") from e
        raise UntrustedTokenError(f"verifying token: {last or 'no matching signing key'}")

    def _candidate_keys(self, kid: Any, alg: Any) -> list[PyJWK]:
        # Without a key id every published key is a candidate.
        return [
            k
            for k in self._keys.keys
            if (kid is None or k.key_id == kid)
            and k.algorithm_name == alg
            and alg in self._algorithms
        ]


async def discover(issuer: str, *, http: httpx.AsyncClient) -> ProviderMetadata:
    url = issuer.rstrip("/") + "/.well-known/openid-configuration"
    try:
        r = await http.get(url)
        r.raise_for_status()
        doc = r.json()
    except (httpx.HTTPError, ValueError) as e:
        raise ConfigurationError(f"fetching provider metadata for {issuer!r}: {e}") from e

    if doc.get("issuer") != issuer:
        raise ConfigurationError(
            f"issuer did not match the issuer returned by provider, "
            f"expected {issuer!r} got {doc.get('issuer')!r}"
        )
    if not doc.get("jwks_uri"):
        raise ConfigurationError(f"provider metadata for {issuer!r} has no jwks_uri")

    algorithms = tuple(doc.get("id_token_signing_alg_values_supported") or DEFAULT_ALGORITHMS)
    return ProviderMetadata(issuer=issuer, jwks_uri=doc["jwks_uri"], algorithms=algorithms)


async def new_verifier(issuer: str, client_id: str, *, http: httpx.AsyncClient) -> IdTokenVerifier:
    """
    Resolves `issuer` and returns a verifier bound to `client_id` as audience.
    Raises ConfigurationError on any resolution failure.
    """

    meta = await discover(issuer, http=http)
    try:
        r = await http.get(meta.jwks_uri)
        r.raise_for_status()
        keys = PyJWKSet.from_dict(r.json())
    except (httpx.HTTPError, ValueError, jwt.PyJWTError) as e:
        raise ConfigurationError(f"fetching signing keys for {issuer!r}: {e}") from e

    return IdTokenVerifier(
        issuer=meta.issuer,
        client_id=client_id,
        keys=keys,
        algorithms=meta.algorithms,
    )


def unverified_issuer(token: str) -> str:
    # Safe only because the caller re-verifies the whole token with the
    # verifier selected by this value.
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except InvalidTokenError as e:
        raise MalformedTokenError(f"parsing JWT: {e}") from e

    issuer = claims.get("iss")
    if not isinstance(issuer, str):
        raise MalformedTokenError("extracting base claims: missing issuer")
    return issuer


# --- Module Notes -----------------------------------------------------------
# Keys are resolved once per verifier; there is no refresh on unknown key ids.
