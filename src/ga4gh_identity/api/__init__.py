"""
ga4gh_identity.api

HTTP layer for the identity gate.

Responsibilities:
- FastAPI app factories for the key vendor and the credential-swapping proxy.
- Identity gate dependency and error-to-status mapping.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: bearer extraction + status mapping + delegation to
# the evaluator and warehouse.
