"""
ga4gh_identity.gcp

Google Cloud Platform integration.

Responsibilities:
- Create service account keys and access tokens for external identities.
- Authorize outbound Google API calls with application default credentials.
"""

from __future__ import annotations

from ga4gh_identity.gcp.credentials import CLOUD_PLATFORM_SCOPE, GoogleAuth
from ga4gh_identity.gcp.warehouse import AccountWarehouse, AccountWarehouseOptions

__all__ = ["AccountWarehouse", "AccountWarehouseOptions", "CLOUD_PLATFORM_SCOPE", "GoogleAuth"]
