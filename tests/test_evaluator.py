"""
tests.test_evaluator
"""

from __future__ import annotations

import asyncio

import pytest

from ga4gh_identity.errors import MalformedTokenError, PolicyRejectedError, UntrustedTokenError
from ga4gh_identity.evaluator import Evaluator
from ga4gh_identity.identity import Identity, StringValue
from ga4gh_identity.validator import Constant, Simple

ALICE = Identity(subject="alice", issuer="https://issuer.test", role=(StringValue(value="human"),))


class StubParser:
    def __init__(self, identity: Identity | None = ALICE, error: Exception | None = None) -> None:
        self.identity = identity
        self.error = error
        self.calls: list[str] = []

    async def parse(self, auth: str) -> Identity:
        self.calls.append(auth)
        if self.error is not None:
            raise self.error
        return self.identity


class CountingValidator:
    def __init__(self) -> None:
        self.calls = 0

    def validate(self, identity: Identity | None) -> bool:
        self.calls += 1
        return True


@pytest.mark.asyncio
async def test_empty_authorization_is_rejected_before_parsing() -> None:
    parser, validator = StubParser(), CountingValidator()
    evaluator = Evaluator(parser=parser, validator=validator)

    with pytest.raises(MalformedTokenError, match="empty authorization"):
        await evaluator.evaluate("")
    assert parser.calls == []
    assert validator.calls == 0


@pytest.mark.asyncio
async def test_returns_identity_when_policy_accepts() -> None:
    evaluator = Evaluator(parser=StubParser(), validator=Simple({"Role": "human"}))
    assert await evaluator.evaluate("token") == ALICE


@pytest.mark.asyncio
async def test_policy_rejection_is_its_own_error() -> None:
    evaluator = Evaluator(parser=StubParser(), validator=Constant(ok=False))
    with pytest.raises(PolicyRejectedError, match="validation failed"):
        await evaluator.evaluate("token")


@pytest.mark.asyncio
async def test_parser_errors_propagate_without_validation() -> None:
    validator = CountingValidator()
    evaluator = Evaluator(parser=StubParser(error=UntrustedTokenError("bad signature")), validator=validator)

    with pytest.raises(UntrustedTokenError, match="bad signature"):
        await evaluator.evaluate("token")
    assert validator.calls == 0


class HangingParser:
    def __init__(self) -> None:
        self.started = asyncio.Event()

    async def parse(self, auth: str) -> Identity:
        self.started.set()
        await asyncio.Event().wait()
        raise AssertionError("parse was not cancelled")


@pytest.mark.asyncio
async def test_cancellation_propagates_out_of_evaluate() -> None:
    parser, validator = HangingParser(), CountingValidator()
    evaluator = Evaluator(parser=parser, validator=validator)

    task = asyncio.create_task(evaluator.evaluate("token"))
    await asyncio.wait_for(parser.started.wait(), timeout=5)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert validator.calls == 0
