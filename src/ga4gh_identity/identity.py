"""
ga4gh_identity.identity

GA4GH identity model as described by the Data Use and Researcher Identity
workstream.

Responsibilities:
- Define the claim schema shared by shims, the parser and validators.
- Decode a verified token claim set (JSON names such as `ga4gh.Role`).
- Publish the closed set of claim names usable in policy predicates.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StringValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    source: str = ""


class BoolValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: bool
    source: str = ""


class Identity(BaseModel):
    """
    Canonical claim record. Each claim slot keeps every assertion in the order
    it was produced; assertions are never de-duplicated.
    """

    model_config = ConfigDict(frozen=True, validate_by_alias=True, validate_by_name=True)

    subject: str = Field(default="", alias="sub")
    issuer: str = Field(default="", alias="iss")

    origin_organization: tuple[StringValue, ...] = Field(
        default=(), alias="ga4gh.IdentityOriginOrganization"
    )
    academic_institution_affiliations: tuple[StringValue, ...] = Field(
        default=(), alias="ga4gh.AcademicInstitutionAffiliations"
    )
    role: tuple[StringValue, ...] = Field(default=(), alias="ga4gh.Role")
    has_acknowledged_ethics_terms: tuple[StringValue, ...] = Field(
        default=(), alias="ga4gh.HasAcknowledgedEthicsTerms"
    )
    bona_fide: tuple[BoolValue, ...] = Field(default=(), alias="ga4gh.ResearcherStatus.BonaFide")

    @field_validator(
        "origin_organization",
        "academic_institution_affiliations",
        "role",
        "has_acknowledged_ethics_terms",
        "bona_fide",
        mode="before",
    )
    @classmethod
    def _null_is_empty(cls, v: Any) -> Any:
        # Issuers emit `null` for claims they know about but cannot assert.
        return () if v is None else v


# Policy claim name -> (Identity attribute, holds source-attributed assertions,
# type of the asserted value).
CLAIMS: dict[str, tuple[str, bool, type]] = {
    "Subject": ("subject", False, str),
    "Issuer": ("issuer", False, str),
    "OriginOrganization": ("origin_organization", True, str),
    "AcademicInstitutionAffiliations": ("academic_institution_affiliations", True, str),
    "Role": ("role", True, str),
    "HasAcknowledgedEthicsTerms": ("has_acknowledged_ethics_terms", True, str),
    "BonaFide": ("bona_fide", True, bool),
}


# --- Module Notes -----------------------------------------------------------
# Policy names are the CamelCase names used by existing evaluator configurations;
# validators resolve them against CLAIMS once, at construction time.
