"""
ga4gh_identity.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the key vendor and proxy.
- Fail at startup when a required value is missing or malformed.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from ga4gh_identity.builder import EvaluatorConfig
from ga4gh_identity.gcp.credentials import CLOUD_PLATFORM_SCOPE
from ga4gh_identity.gcp.warehouse import parse_scopes


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GA4GH_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "prod"
    service_name: str = "ga4gh-identity"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080
    app: Literal["key-vendor", "proxy"] = "key-vendor"

    # JSON document, see `ga4gh_identity.builder`.
    evaluator: EvaluatorConfig

    # Account warehouse
    project: str
    role: str
    scopes: Annotated[tuple[str, ...], NoDecode] = (CLOUD_PLATFORM_SCOPE,)

    # Proxy upstream, e.g. https://storage.googleapis.com
    target: str | None = None

    # Outbound HTTP timeout in seconds; unset means callers' deadlines apply.
    http_timeout: float | None = None

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(cls, v: object) -> object:
        # SCOPES is comma-separated in the environment.
        if isinstance(v, str):
            return parse_scopes(v)
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


# --- Module Notes -----------------------------------------------------------
# `evaluator`, `project` and `role` are required: Settings() raises without them.
