"""
ga4gh_identity.gcp.warehouse

Google Cloud service accounts backing external GA4GH identities.

Responsibilities:
- Map an external subject to exactly one service account, created lazily.
- Keep that account bound to the configured role on the project IAM policy.
- Mint service account keys and short-lived access tokens for it.

Every method performs remote round trips through the injected, already
authorized `httpx.AsyncClient`. Nothing is cached and nothing is retried.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import hashlib
import weakref
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from ga4gh_identity.errors import (
    AccountCreationError,
    AccountLookupError,
    CredentialMintError,
    ProviderError,
    RoleBindingError,
    RoleBindingMissingError,
)
from ga4gh_identity.observability.logging import get_logger

IAM_URL = "https://iam.googleapis.com/v1"
IAM_CREDENTIALS_URL = "https://iamcredentials.googleapis.com/v1"
RESOURCE_MANAGER_URL = "https://cloudresourcemanager.googleapis.com/v1"

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AccountWarehouseOptions:
    project: str
    # Either "roles/<name>" or "projects/<id>/roles/<name>" for a custom role
    # owned by another project; the binding is made on that project's policy.
    default_role: str
    scopes: tuple[str, ...] = ()


class AccountWarehouse:
    def __init__(self, *, http: httpx.AsyncClient, options: AccountWarehouseOptions) -> None:
        self._http = http
        self._opts = options
        # One provisioning flow per subject at a time within this process.
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    @property
    def options(self) -> AccountWarehouseOptions:
        return self._opts

    async def get_account_key(self, subject: str) -> bytes:
        """
        Returns a new key, in Google credentials file format, for the service
        account associated with `subject`.
        """

        account = await self.get_backing_account(subject)

        # TODO: delete keys previously issued for `account` before creating new ones.
        result = await self._post(
            f"{IAM_URL}/{account_name('-', account)}/keys",
            {"privateKeyType": "TYPE_GOOGLE_CREDENTIALS_FILE"},
            error=CredentialMintError,
            what="creating key",
        )
        try:
            return base64.b64decode(result["privateKeyData"], validate=True)
        except (KeyError, binascii.Error) as e:
            raise CredentialMintError(f"decoding key: {e}") from e

    async def get_access_token(self, subject: str) -> str:
        """
        Returns a fresh access token, limited to the configured scopes, for the
        service account associated with `subject`.
        """

        account = await self.get_backing_account(subject)
        result = await self._post(
            f"{IAM_CREDENTIALS_URL}/{account_name('-', account)}:generateAccessToken",
            {"scope": list(self._opts.scopes)},
            error=CredentialMintError,
            what="generating access token",
        )
        try:
            return result["accessToken"]
        except KeyError as e:
            raise CredentialMintError("generating access token: response has no accessToken") from e

    async def get_backing_account(self, subject: str) -> str:
        """
        Returns the email of the service account for `subject`, creating it and
        binding its role first if needed. The role binding is re-checked on
        every call so out-of-band policy edits are repaired.
        """

        hid = hash_id(subject)
        lock = self._locks.get(hid)
        if lock is None:
            lock = self._locks[hid] = asyncio.Lock()

        async with lock:
            email = await self._get_account(hid)
            if email is not None:
                await self.configure_role(email)
                return email

            email = await self._create_account(hid, subject)
            await self.configure_role(email)
            return email

    async def configure_role(self, email: str) -> None:
        role = self._opts.default_role
        project = self._opts.project
        parts = role.split("/")
        if len(parts) == 4 and parts[0] == "projects":
            project = parts[1]

        policy = await self._post(
            f"{RESOURCE_MANAGER_URL}/projects/{project}:getIamPolicy",
            {},
            error=RoleBindingError,
            what=f"getting IAM policy for project {project!r}",
        )

        binding = next((b for b in policy.get("bindings", []) if b.get("role") == role), None)
        if binding is None:
            raise RoleBindingMissingError(f"no bindings for {role!r} in policy")

        member = f"serviceAccount:{email}"
        members = binding.setdefault("members", [])
        if member in members:
            return

        members.append(member)
        await self._post(
            f"{RESOURCE_MANAGER_URL}/projects/{project}:setIamPolicy",
            {"policy": policy},
            error=RoleBindingError,
            what=f"setting IAM policy for project {project!r}",
        )
        log.info("role_bound", project=project, role=role, account=email)

    async def _get_account(self, hid: str) -> str | None:
        project = self._opts.project
        email = f"{hid}@{project}.iam.gserviceaccount.com"
        try:
            r = await self._http.get(f"{IAM_URL}/{account_name(project, email)}")
        except httpx.RequestError as e:
            raise AccountLookupError(f"getting account: {e}") from e
        if r.status_code == httpx.codes.NOT_FOUND:
            return None
        if r.is_error:
            raise AccountLookupError(
                f"getting account: HTTP {r.status_code}", status_code=r.status_code
            )
        try:
            return r.json()["email"]
        except (ValueError, KeyError, TypeError) as e:
            raise AccountLookupError(f"getting account: malformed response: {e!r}") from e

    async def _create_account(self, hid: str, subject: str) -> str:
        project = self._opts.project
        try:
            created = await self._post(
                f"{IAM_URL}/projects/{project}/serviceAccounts",
                {"accountId": hid, "serviceAccount": {"displayName": subject}},
                error=AccountCreationError,
                what="creating backing account",
            )
        except AccountCreationError as e:
            # Another process created the account between our lookup and create.
            if e.status_code != httpx.codes.CONFLICT:
                raise
            email = await self._get_account(hid)
            if email is None:
                raise
            return email

        try:
            email = created["email"]
        except KeyError as e:
            raise AccountCreationError(
                f"creating backing account: malformed response: {e!r}"
            ) from e
        log.info("backing_account_created", account=email)
        return email

    async def _post(
        self,
        url: str,
        body: dict[str, Any],
        *,
        error: type[ProviderError],
        what: str,
    ) -> dict[str, Any]:
        try:
            r = await self._http.post(url, json=body)
        except httpx.RequestError as e:
            raise error(f"{what}: {e}") from e
        if r.is_error:
            raise error(f"{what}: HTTP {r.status_code}", status_code=r.status_code)
        try:
            result = r.json()
        except ValueError as e:
            raise error(f"{what}: malformed response: {e}", status_code=r.status_code) from e
        if not isinstance(result, dict):
            raise error(f"{what}: malformed response", status_code=r.status_code)
        return result


def hash_id(subject: str) -> str:
    # Service account ids are 6-30 chars, lowercase alphanumerics, starting with a letter.
    return "i" + hashlib.sha3_224(subject.encode()).hexdigest()[:29]


def account_name(project: str, account: str) -> str:
    return f"{project_name(project)}/serviceAccounts/{account}"


def project_name(project: str) -> str:
    return f"projects/{project}"


def parse_scopes(scopes: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(scopes, str):
        scopes = scopes.split(",")
    return tuple(s.strip() for s in scopes if s.strip())


# --- Module Notes -----------------------------------------------------------
# setIamPolicy sends back the etag read by getIamPolicy, so a concurrent policy
# edit makes the write fail with HTTP 409 (surfaced as RoleBindingError) rather
# than silently dropping the other writer's change.
