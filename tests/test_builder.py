"""
tests.test_builder

Evaluator configuration documents and the components built from them.
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from conftest import CLIENT_ID, ISSUER
from ga4gh_identity.builder import EvaluatorConfig, build_evaluator, build_validator
from ga4gh_identity.errors import ConfigurationError, PolicyRejectedError
from ga4gh_identity.validator import And, Constant, Or, Simple

EARTHLING = {
    "sub": "earthling",
    "iss": "static",
    "ga4gh.Role": [{"value": "human"}, {"value": "person"}],
    "ga4gh.IdentityOriginOrganization": [{"value": "Earth"}, {"value": "Mars"}],
}


def _config(validator: dict | None) -> EvaluatorConfig:
    doc: dict = {"parser": {"shims": [{"kind": "static", "identity": EARTHLING}]}}
    if validator is not None:
        doc["validator"] = validator
    return EvaluatorConfig.model_validate_json(json.dumps(doc))


@pytest.mark.asyncio
async def test_simple_policy_from_document_accepts(make_oidc_client) -> None:
    config = _config({"kind": "simple", "claims": {"OriginOrganization": "Mars", "Role": "person"}})
    async with make_oidc_client() as http:
        evaluator = await build_evaluator(config, http=http)

    identity = await evaluator.evaluate("anything")
    assert identity.subject == "earthling"


@pytest.mark.asyncio
async def test_or_policy_from_document_rejects(make_oidc_client) -> None:
    config = _config(
        {
            "kind": "or",
            "validators": [
                {"kind": "simple", "claims": {"Role": "robot"}},
                {"kind": "simple", "claims": {"Role": "toaster"}},
            ],
        }
    )
    async with make_oidc_client() as http:
        evaluator = await build_evaluator(config, http=http)

    with pytest.raises(PolicyRejectedError):
        await evaluator.evaluate("anything")


@pytest.mark.asyncio
async def test_missing_validator_denies_everything(make_oidc_client) -> None:
    async with make_oidc_client() as http:
        evaluator = await build_evaluator(_config(None), http=http)

    assert evaluator.validator == Constant(ok=False)
    with pytest.raises(PolicyRejectedError):
        await evaluator.evaluate("anything")


@pytest.mark.asyncio
async def test_issuers_are_resolved_at_build_time(issuer, make_oidc_client) -> None:
    config = EvaluatorConfig.model_validate(
        {
            "parser": {"issuers": {ISSUER: CLIENT_ID}},
            "validator": {"kind": "constant", "value": True},
        }
    )
    async with make_oidc_client(issuer) as http:
        evaluator = await build_evaluator(config, http=http)

    assert (await evaluator.evaluate(issuer.token(sub="carol"))).subject == "carol"


@pytest.mark.asyncio
async def test_unreachable_issuer_fails_build(make_oidc_client) -> None:
    config = EvaluatorConfig.model_validate({"parser": {"issuers": {ISSUER: CLIENT_ID}}})
    async with make_oidc_client() as http:
        with pytest.raises(ConfigurationError):
            await build_evaluator(config, http=http)


def test_nested_validator_tree_is_built_in_order() -> None:
    config = _config(
        {
            "kind": "and",
            "validators": [
                {"kind": "constant", "value": True},
                {"kind": "or", "validators": [{"kind": "simple", "claims": {"BonaFide": True}}]},
            ],
        }
    )
    built = build_validator(config.validator)

    assert isinstance(built, And)
    first, second = built.validators
    assert first == Constant(ok=True)
    assert isinstance(second, Or)
    assert isinstance(second.validators[0], Simple)


@pytest.mark.parametrize(
    "validator",
    [
        {"kind": "simple", "claims": {"Nickname": "al"}},
        {"kind": "simple", "claims": {"Role": True}},
        {"kind": "and", "validators": []},
        {"kind": "or", "validators": []},
    ],
    ids=["unknown-claim", "mistyped-claim", "empty-and", "empty-or"],
)
def test_invalid_policies_fail_at_build(validator) -> None:
    with pytest.raises(ConfigurationError):
        build_validator(_config(validator).validator)


@pytest.mark.parametrize(
    "doc",
    [
        {"validator": {"kind": "xor", "validators": []}},
        {"parser": {"shims": [{"kind": "kerberos"}]}},
        {"parser": {"shims": [{"kind": "elixir", "client_id": ""}]}},
        {"validator": {"kind": "constant", "value": True, "extra": 1}},
    ],
    ids=["unknown-validator", "unknown-shim", "empty-client-id", "extra-field"],
)
def test_malformed_documents_fail_validation(doc) -> None:
    with pytest.raises(ValidationError):
        EvaluatorConfig.model_validate(doc)
