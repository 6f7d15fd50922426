"""
ga4gh_identity.builder

Declarative evaluator configuration.

Responsibilities:
- Describe an Evaluator (shims, issuers, validator tree) as pydantic models so
  it can be stored as JSON and validated at load time.
- Build the runtime Evaluator from that description.
"""

from __future__ import annotations

from typing import Annotated, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ga4gh_identity.errors import ConfigurationError
from ga4gh_identity.evaluator import Evaluator
from ga4gh_identity.identity import Identity
from ga4gh_identity.parser import Parser
from ga4gh_identity.shim import ElixirShim, Shim, StaticShim
from ga4gh_identity.validator import And, Constant, Or, Simple, Validator


class _Config(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ElixirShimConfig(_Config):
    kind: Literal["elixir"] = "elixir"
    client_id: str = Field(min_length=1)


class StaticShimConfig(_Config):
    kind: Literal["static"] = "static"
    identity: Identity


ShimConfig = Annotated[ElixirShimConfig | StaticShimConfig, Field(discriminator="kind")]


class ParserConfig(_Config):
    shims: list[ShimConfig] = Field(default_factory=list)
    # Issuer base URL -> expected client id (audience).
    issuers: dict[str, str] = Field(default_factory=dict)


class ConstantValidatorConfig(_Config):
    kind: Literal["constant"] = "constant"
    value: bool


class SimpleValidatorConfig(_Config):
    kind: Literal["simple"] = "simple"
    claims: dict[str, str | bool] = Field(default_factory=dict)


class AndValidatorConfig(_Config):
    kind: Literal["and"] = "and"
    validators: list[ValidatorConfig]


class OrValidatorConfig(_Config):
    kind: Literal["or"] = "or"
    validators: list[ValidatorConfig]


ValidatorConfig = Annotated[
    ConstantValidatorConfig | SimpleValidatorConfig | AndValidatorConfig | OrValidatorConfig,
    Field(discriminator="kind"),
]

AndValidatorConfig.model_rebuild()
OrValidatorConfig.model_rebuild()


class EvaluatorConfig(_Config):
    parser: ParserConfig = Field(default_factory=ParserConfig)
    validator: ValidatorConfig | None = None


async def build_evaluator(config: EvaluatorConfig, *, http: httpx.AsyncClient) -> Evaluator:
    parser = await build_parser(config.parser, http=http)
    validator = build_validator(config.validator)
    return Evaluator(parser=parser, validator=validator)


async def build_parser(config: ParserConfig, *, http: httpx.AsyncClient) -> Parser:
    shims: list[Shim] = []
    for shim in config.shims:
        shims.append(await build_shim(shim, http=http))
    return await Parser.create(shims, config.issuers, http=http)


async def build_shim(config: ShimConfig, *, http: httpx.AsyncClient) -> Shim:
    match config:
        case ElixirShimConfig(client_id=client_id):
            return await ElixirShim.create(client_id, http=http)
        case StaticShimConfig(identity=identity):
            return StaticShim(identity)
        case _:
            raise ConfigurationError(f"unsupported {type(config).__name__} shim")


def build_validator(config: ValidatorConfig | None) -> Validator:
    # No validator configured means nothing is allowed through.
    if config is None:
        return Constant(ok=False)

    match config:
        case ConstantValidatorConfig(value=value):
            return Constant(ok=value)
        case SimpleValidatorConfig(claims=claims):
            return Simple(claims)
        case AndValidatorConfig(validators=children):
            return And([build_validator(c) for c in children])
        case OrValidatorConfig(validators=children):
            return Or([build_validator(c) for c in children])
        case _:
            raise ConfigurationError(f"unsupported {type(config).__name__} validator")


# --- Module Notes -----------------------------------------------------------
# Example (as stored in GA4GH_EVALUATOR):
# {"parser": {"shims": [{"kind": "elixir", "client_id": "abc"}],
#             "issuers": {"https://idp.example.org": "client-1"}},
#  "validator": {"kind": "and", "validators": [
#      {"kind": "simple", "claims": {"Role": "researcher"}},
#      {"kind": "simple", "claims": {"BonaFide": true}}]}}
