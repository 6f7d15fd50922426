"""
ga4gh_identity.validator.constant

Fixed-outcome validator, for allow-all, deny-all and error injection.
"""

from __future__ import annotations

from dataclasses import dataclass

from ga4gh_identity.identity import Identity


@dataclass(frozen=True, slots=True)
class Constant:
    """
    Always returns `ok`, or raises `error` when one is set.
    """

    ok: bool = False
    error: Exception | None = None

    def validate(self, identity: Identity | None) -> bool:
        if self.error is not None:
            raise self.error
        return self.ok
