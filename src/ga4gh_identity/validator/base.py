"""
ga4gh_identity.validator.base

The `Validator` contract shared by every policy node.
"""

from __future__ import annotations

from typing import Protocol

from ga4gh_identity.identity import Identity


class Validator(Protocol):
    def validate(self, identity: Identity | None) -> bool:
        """
        Returns whether `identity` satisfies the predicate. Raises only for
        structural problems, never for a plain mismatch.
        """
        ...
