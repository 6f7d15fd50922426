"""
ga4gh_identity.evaluator

Parsing and validation of authorization values as one decision.
"""

from __future__ import annotations

from dataclasses import dataclass

from ga4gh_identity.errors import MalformedTokenError, PolicyRejectedError
from ga4gh_identity.identity import Identity
from ga4gh_identity.parser import Parser
from ga4gh_identity.validator import Validator


@dataclass(frozen=True, slots=True)
class Evaluator:
    parser: Parser
    validator: Validator

    async def evaluate(self, auth: str) -> Identity:
        """
        Returns the Identity for `auth` only if it both parses and validates.

        Parser errors propagate with their own class (malformed vs untrusted);
        a parsed identity the validator rejects raises PolicyRejectedError.
        """

        if not auth:
            raise MalformedTokenError("empty authorization")

        identity = await self.parser.parse(auth)
        if not self.validator.validate(identity):
            raise PolicyRejectedError("validation failed")
        return identity
