"""
ga4gh_identity.errors

Exception hierarchy shared by every component.

Responsibilities:
- Separate per-request authorization outcomes from deployment defects and
  remote provider failures, so the HTTP layer can map each to a status code.
"""

from __future__ import annotations


class Ga4ghError(Exception):
    pass


class AuthorizationError(Ga4ghError):
    """
    Expected per-request outcome: the caller is not authorized.
    """


class MalformedTokenError(AuthorizationError):
    # Empty or undecodable bearer value.
    pass


class UntrustedTokenError(AuthorizationError):
    # Decodable token whose signature/audience/expiry/issuer does not verify.
    pass


class InvalidIssuerError(UntrustedTokenError):
    pass


class PolicyRejectedError(AuthorizationError):
    # Token verified, but the claims do not satisfy the validator tree.
    pass


class ConfigurationError(Ga4ghError):
    """
    Deployment defect. Retrying will not help; fix the configuration.
    """


class ProviderError(Ga4ghError):
    """
    A remote IAM/resource-manager call failed.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AccountLookupError(ProviderError):
    pass


class AccountCreationError(ProviderError):
    pass


class RoleBindingError(ProviderError):
    pass


class RoleBindingMissingError(RoleBindingError, ConfigurationError):
    # The role must be bound on the policy out-of-band before members can be added.
    pass


class CredentialMintError(ProviderError):
    pass


# --- Module Notes -----------------------------------------------------------
# Cancellation is not part of this hierarchy: asyncio.CancelledError propagates
# untouched from every component.
