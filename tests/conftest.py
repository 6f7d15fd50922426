"""
tests.conftest

Shared fakes for the OIDC issuers and the Google Cloud APIs.

Responsibilities:
- Sign tokens with a throwaway RSA key and publish it through discovery/JWKS.
- Serve IAM, IAM Credentials and Resource Manager REST calls in-process and
  count the writes they receive.
"""

from __future__ import annotations

import base64
import copy
import json
import time
from typing import Any

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from jwt.algorithms import RSAAlgorithm

ISSUER = "https://issuer.test"
CLIENT_ID = "client-1"
PROJECT = "research-proj"
ROLE = "roles/storage.objectViewer"


class FakeIssuer:
    def __init__(self, issuer: str, private_key: Any, *, kid: str = "k1") -> None:
        self.issuer = issuer
        self.kid = kid
        self._private_key = private_key
        self.jwks_uri = issuer.rstrip("/") + "/jwks"

    def discovery(self) -> dict[str, Any]:
        return {
            "issuer": self.issuer,
            "jwks_uri": self.jwks_uri,
            "id_token_signing_alg_values_supported": ["RS256"],
        }

    def jwks(self) -> dict[str, Any]:
        jwk = RSAAlgorithm.to_jwk(self._private_key.public_key(), as_dict=True)
        jwk.update({"kid": self.kid, "use": "sig", "alg": "RS256"})
        return {"keys": [jwk]}

    def token(self, **claims: Any) -> str:
        now = int(time.time())
        payload = {
            "iss": self.issuer,
            "sub": "alice",
            "aud": CLIENT_ID,
            "iat": now,
            "exp": now + 300,
        }
        payload.update(claims)
        return jwt.encode(payload, self._private_key, algorithm="RS256", headers={"kid": self.kid})


def oidc_client(*issuers: FakeIssuer, documents: dict[str, Any] | None = None) -> httpx.AsyncClient:
    routes: dict[str, Any] = dict(documents or {})
    for iss in issuers:
        routes[iss.issuer.rstrip("/") + "/.well-known/openid-configuration"] = iss.discovery()
        routes[iss.jwks_uri] = iss.jwks()

    def handler(request: httpx.Request) -> httpx.Response:
        doc = routes.get(str(request.url))
        if doc is None:
            return httpx.Response(404)
        return httpx.Response(200, json=doc)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeGcp:
    """
    Minimal stand-in for the v1 IAM, IAM Credentials and Resource Manager APIs.
    """

    def __init__(self, *, project: str = PROJECT, roles: tuple[str, ...] = (ROLE,)) -> None:
        self.accounts: dict[str, dict[str, Any]] = {}
        self.policies: dict[str, dict[str, Any]] = {
            project: {
                "version": 1,
                "etag": "etag-0",
                "bindings": [{"role": r, "members": []} for r in roles],
            }
        }
        self.creates = 0
        self.policy_writes = 0
        self.keys_created = 0
        self.token_scopes: list[list[str]] = []
        self.lookup_status: int | None = None
        self.conflict_on_create = False
        self.key_data: str | None = None
        # Routes ("get", "create", "keys") answering 200 with a non-JSON body.
        self.garbled: set[str] = set()
        self.app = self._build()

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=self.app))

    def key_file(self, email: str) -> bytes:
        return json.dumps({"type": "service_account", "client_email": email}).encode()

    def _build(self) -> FastAPI:
        app = FastAPI()

        @app.get("/v1/projects/{project}/serviceAccounts/{email}")
        async def get_account(project: str, email: str):
            if "get" in self.garbled:
                return PlainTextResponse("<html>maintenance</html>")
            if self.lookup_status is not None:
                return JSONResponse({"error": "boom"}, status_code=self.lookup_status)
            account = self.accounts.get(email)
            if account is None:
                return JSONResponse({"error": "not found"}, status_code=404)
            return JSONResponse(account)

        @app.post("/v1/projects/{project}/serviceAccounts")
        async def create_account(project: str, request: Request):
            if "create" in self.garbled:
                return PlainTextResponse("<html>maintenance</html>")
            body = await request.json()
            email = f"{body['accountId']}@{project}.iam.gserviceaccount.com"
            if self.conflict_on_create:
                # Simulates another process winning the race.
                self.accounts[email] = {"email": email, "displayName": "other"}
            if email in self.accounts:
                return JSONResponse({"error": "already exists"}, status_code=409)
            self.creates += 1
            self.accounts[email] = {
                "email": email,
                "displayName": body["serviceAccount"]["displayName"],
            }
            return JSONResponse(self.accounts[email])

        @app.post("/v1/projects/{project}/serviceAccounts/{email}/keys")
        async def create_key(project: str, email: str, request: Request):
            if "keys" in self.garbled:
                return PlainTextResponse("<html>maintenance</html>")
            body = await request.json()
            assert body == {"privateKeyType": "TYPE_GOOGLE_CREDENTIALS_FILE"}
            self.keys_created += 1
            data = self.key_data or base64.b64encode(self.key_file(email)).decode()
            return JSONResponse({"name": f"{email}/keys/{self.keys_created}", "privateKeyData": data})

        @app.post("/v1/projects/{project}/serviceAccounts/{email}:generateAccessToken")
        async def generate_access_token(project: str, email: str, request: Request) -> JSONResponse:
            body = await request.json()
            self.token_scopes.append(body["scope"])
            return JSONResponse(
                {"accessToken": f"ya29.{email}.{len(self.token_scopes)}", "expireTime": "2030-01-01T00:00:00Z"}
            )

        @app.post("/v1/projects/{project}:getIamPolicy")
        async def get_iam_policy(project: str) -> JSONResponse:
            policy = self.policies.get(project)
            if policy is None:
                return JSONResponse({"error": "permission denied"}, status_code=403)
            return JSONResponse(copy.deepcopy(policy))

        @app.post("/v1/projects/{project}:setIamPolicy")
        async def set_iam_policy(project: str, request: Request) -> JSONResponse:
            policy = (await request.json())["policy"]
            current = self.policies[project]
            if policy.get("etag") != current["etag"]:
                return JSONResponse({"error": "etag mismatch"}, status_code=409)
            self.policy_writes += 1
            policy["etag"] = f"etag-{self.policy_writes}"
            self.policies[project] = policy
            return JSONResponse(copy.deepcopy(policy))

        return app

    def members(self, project: str = PROJECT, role: str = ROLE) -> list[str]:
        for b in self.policies[project]["bindings"]:
            if b["role"] == role:
                return list(b["members"])
        raise AssertionError(f"no binding for {role}")


@pytest.fixture(scope="session")
def signing_key() -> Any:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture()
def issuer(signing_key: Any) -> FakeIssuer:
    return FakeIssuer(ISSUER, signing_key)


@pytest.fixture()
def make_issuer(signing_key: Any):
    def _make(url: str, *, key: Any = None, kid: str = "k1") -> FakeIssuer:
        return FakeIssuer(url, key or signing_key, kid=kid)

    return _make


@pytest.fixture()
def make_oidc_client():
    return oidc_client


@pytest.fixture()
def gcp() -> FakeGcp:
    return FakeGcp()


@pytest.fixture()
def make_gcp():
    return FakeGcp


# --- Module Notes -----------------------------------------------------------
# Fakes are reached through httpx transports only; no test opens a socket.
