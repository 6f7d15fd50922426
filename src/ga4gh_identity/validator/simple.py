"""
ga4gh_identity.validator.simple

Claim-equality predicate.

Responsibilities:
- Resolve policy claim names against `identity.CLAIMS` when built, rejecting
  unknown names and values of the wrong type.
- Match scalar claims directly and slot claims on any assertion.
"""

from __future__ import annotations

from collections.abc import Mapping
from operator import attrgetter
from typing import Any

from ga4gh_identity.errors import ConfigurationError
from ga4gh_identity.identity import CLAIMS, Identity


class Simple:
    """
    Compares the claims of the incoming identity with the names and values it
    holds. For example, `Simple({"Role": "human"})` validates every identity with
    at least one Role assertion whose value is "human". Claim sources are not
    inspected.

    Claim names and value types are checked when the validator is built; a
    policy that could never match raises ConfigurationError instead of failing
    on every request.
    """

    __slots__ = ("_checks",)

    def __init__(self, claims: Mapping[str, Any]) -> None:
        checks = []
        for name, expected in claims.items():
            try:
                attr, multi, value_type = CLAIMS[name]
            except KeyError:
                raise ConfigurationError(f"no claim named {name!r} on Identity") from None
            # type() rather than isinstance(): True is an int, and "true" is not True.
            if type(expected) is not value_type:
                raise ConfigurationError(
                    f"claim {name!r} holds {value_type.__name__} values, "
                    f"got {type(expected).__name__} {expected!r}"
                )
            checks.append((attrgetter(attr), multi, expected))
        self._checks = tuple(checks)

    def validate(self, identity: Identity | None) -> bool:
        if self._checks and identity is None:
            return False
        for get, multi, expected in self._checks:
            field = get(identity)
            if multi:
                if not any(c.value == expected for c in field):
                    return False
            elif field != expected:
                return False
        return True
