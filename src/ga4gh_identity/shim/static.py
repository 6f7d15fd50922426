"""
ga4gh_identity.shim.static

Shim returning one configured Identity for every authorization value.
"""

from __future__ import annotations

from dataclasses import dataclass

from ga4gh_identity.identity import Identity


@dataclass(frozen=True, slots=True)
class StaticShim:
    """
    Returns a single fixed Identity for any input. Used in tests and in
    fixed-identity deployments.
    """

    identity: Identity

    async def shim(self, auth: str) -> Identity:
        return self.identity
