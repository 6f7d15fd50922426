"""
ga4gh_identity.shim

Shims convert bearer tokens that are _not_ in the GA4GH identity format into an
Identity, for interoperating with providers that do not issue GA4GH claims yet.

Responsibilities:
- Define the `Shim` contract used by the parser.
- Provide the static and ELIXIR implementations.
"""

from __future__ import annotations

from typing import Protocol

from ga4gh_identity.identity import Identity
from ga4gh_identity.shim.elixir import ElixirShim
from ga4gh_identity.shim.static import StaticShim


class Shim(Protocol):
    async def shim(self, auth: str) -> Identity:
        """
        Returns the Identity for `auth` or raises an AuthorizationError when the
        value is not in this shim's format or fails its verification.
        """
        ...


__all__ = ["ElixirShim", "Shim", "StaticShim"]


# --- Module Notes -----------------------------------------------------------
# A shim's success is authoritative: the parser never merges its result with
# other shims or with generic issuer verification.
