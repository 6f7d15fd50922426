"""
ga4gh_identity.validator.boolean

Combinators over child validators.

Responsibilities:
- `And` and `Or` with in-order, short-circuit evaluation.
- Reject empty child lists when built.
"""

from __future__ import annotations

from collections.abc import Sequence

from ga4gh_identity.errors import ConfigurationError
from ga4gh_identity.identity import Identity
from ga4gh_identity.validator.base import Validator


class And:
    """
    True iff every child is true. Children are evaluated in order and the first
    false (or raised error) stops evaluation.
    """

    __slots__ = ("_validators",)

    def __init__(self, validators: Sequence[Validator]) -> None:
        if not validators:
            raise ConfigurationError("'And' validator requires at least one child")
        self._validators = tuple(validators)

    @property
    def validators(self) -> tuple[Validator, ...]:
        return self._validators

    def validate(self, identity: Identity | None) -> bool:
        for v in self._validators:
            if not v.validate(identity):
                return False
        return True


class Or:
    """
    True iff at least one child is true. Children are evaluated in order and the
    first true (or raised error) stops evaluation.
    """

    __slots__ = ("_validators",)

    def __init__(self, validators: Sequence[Validator]) -> None:
        if not validators:
            raise ConfigurationError("'Or' validator requires at least one child")
        self._validators = tuple(validators)

    @property
    def validators(self) -> tuple[Validator, ...]:
        return self._validators

    def validate(self, identity: Identity | None) -> bool:
        for v in self._validators:
            if v.validate(identity):
                return True
        return False
