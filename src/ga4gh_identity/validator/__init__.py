"""
ga4gh_identity.validator

Boolean policy predicates over an Identity.

Responsibilities:
- Define the `Validator` contract.
- Provide leaf (`Constant`, `Simple`) and combinator (`And`, `Or`) validators.
"""

from __future__ import annotations

from ga4gh_identity.validator.base import Validator
from ga4gh_identity.validator.boolean import And, Or
from ga4gh_identity.validator.constant import Constant
from ga4gh_identity.validator.simple import Simple

__all__ = ["And", "Constant", "Or", "Simple", "Validator"]


# --- Module Notes -----------------------------------------------------------
# Validator trees are built once at configuration time and shared by every
# request; implementations hold no mutable state and never modify the Identity.
