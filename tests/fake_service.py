"""In-memory authentication service for tests.

Serves the session endpoints over ``httpx.MockTransport`` and enforces the
acknowledge / device binding / renew / revoke rules the real service does.
"""

from __future__ import annotations

import functools
import json
import time
import uuid
from dataclasses import dataclass
from typing import Any

import httpx
import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

ISSUER = "https://auth.example.com"
AUDIENCE = "session-guard-tests"


@functools.lru_cache(maxsize=8)
def rsa_private_key(name: str = "default") -> rsa.RSAPrivateKey:
    """Generate (once per name) an RSA private key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def public_pem(private_key: rsa.RSAPrivateKey, *, pkcs1: bool = True) -> str:
    """PEM of the public half, PKCS#1 by default as the service publishes it."""
    fmt = (
        serialization.PublicFormat.PKCS1
        if pkcs1
        else serialization.PublicFormat.SubjectPublicKeyInfo
    )
    return (
        private_key.public_key()
        .public_bytes(serialization.Encoding.PEM, fmt)
        .decode("ascii")
    )


def key_entry(key_id: str, private_key: rsa.RSAPrivateKey, **overrides: Any) -> dict[str, Any]:
    """Key listing entry in the service's wire format."""
    entry = {
        "keyId": key_id,
        "format": "PKCS#1",
        "publicKey": public_pem(private_key).replace("\n", "\r\n"),
        "algorithm": "RS256",
        "created": "2023-08-01T22:59:27.989Z",
    }
    entry.update(overrides)
    return entry


def mint_token(
    private_key: rsa.RSAPrivateKey,
    key_id: str | None,
    *,
    sub: str = "a@x.com",
    expires_in: int = 3600,
    roles: list[str] | None = None,
    permissions: list[str] | None = None,
    **extra: Any,
) -> str:
    """Sign an access token the way the service does."""
    now = int(time.time())
    claims: dict[str, Any] = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "iat": now,
        "exp": now + expires_in,
        "jti": str(uuid.uuid4()),
        "roles": roles if roles is not None else ["user"],
        "permissions": permissions if permissions is not None else ["read"],
    }
    claims.update(extra)
    headers = {"kid": key_id} if key_id is not None else {}
    return jwt.encode(claims, private_key, algorithm="RS256", headers=headers)


def problem(status: int, detail: str | None, title: str = "Bad Request") -> httpx.Response:
    body: dict[str, Any] = {"title": title, "type": "about:blank", "statusCode": status}
    if detail is not None:
        body["detail"] = detail
    return httpx.Response(status, json=body)


@dataclass
class Session:
    email: str
    access_token: str
    refresh_token: str
    claims: dict[str, Any]
    device_id: str | None = None
    acknowledged: bool = False
    revoked: bool = False


class FakeAuthService:
    """Minimal stand-in for the authentication service."""

    def __init__(self, key_id: str = "key-1") -> None:
        self.key_id = key_id
        self.private_key = rsa_private_key(key_id)
        self.published_keys: list[dict[str, Any]] = [key_entry(key_id, self.private_key)]
        self.accounts: dict[str, str] = {}
        self.roles: dict[str, list[str]] = {}
        self.magic_codes: dict[str, str] = {}
        self.social_tokens: dict[tuple[str, str], str] = {}
        self.sessions: dict[str, Session] = {}
        self.refresh_index: dict[str, str] = {}
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def add_account(self, email: str, password: str, roles: list[str] | None = None) -> None:
        self.accounts[email] = password
        self.roles[email] = roles or ["user"]

    def issue(self, email: str) -> dict[str, str]:
        access_token = mint_token(
            self.private_key,
            self.key_id,
            sub=email,
            roles=self.roles.get(email, ["user"]),
        )
        refresh_token = str(uuid.uuid4())
        claims = jwt.decode(access_token, options={"verify_signature": False})
        self.sessions[access_token] = Session(email, access_token, refresh_token, claims)
        self.refresh_index[refresh_token] = access_token
        return {"accessToken": access_token, "refreshToken": refresh_token}

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.lstrip("/")
        body = json.loads(request.content) if request.content else {}

        if request.method == "GET" and path == "keys":
            return httpx.Response(200, json=self.published_keys)
        if request.method == "GET" and path.startswith("passwordless/magic/request/"):
            return self._request_magic(path.rsplit("/", 1)[-1])

        routes = {
            "authentication/authenticate": self._authenticate,
            "passwordless/magic/authenticate": self._magic_authenticate,
            "passwordless/social/authenticate": self._social_authenticate,
            "authentication/acknowledge": self._acknowledge,
            "authentication/accesstoken/validate": self._validate,
            "authentication/renew": self._renew,
            "authentication/revoke": self._revoke,
        }
        route = routes.get(path)
        if request.method != "POST" or route is None:
            return problem(404, "Not found", title="Not Found")
        return route(body)

    def _authenticate(self, body: dict[str, Any]) -> httpx.Response:
        if self.accounts.get(body.get("email")) != body.get("password"):
            return problem(400, "Email or password is incorrect")
        return httpx.Response(200, json=self.issue(body["email"]))

    def _request_magic(self, email: str) -> httpx.Response:
        if email not in self.accounts:
            return problem(400, "Account does not exist")
        self.magic_codes[email] = "123456"
        return httpx.Response(204)

    def _magic_authenticate(self, body: dict[str, Any]) -> httpx.Response:
        email = body.get("email")
        if email is None or self.magic_codes.pop(email, None) != body.get("code"):
            return problem(400, "Magic code is invalid")
        return httpx.Response(200, json=self.issue(email))

    def _social_authenticate(self, body: dict[str, Any]) -> httpx.Response:
        email = self.social_tokens.get((body.get("provider"), body.get("socialToken")))
        if email is None:
            return problem(400, "Social token cannot be validated")
        return httpx.Response(200, json=self.issue(email))

    def _acknowledge(self, body: dict[str, Any]) -> httpx.Response:
        session = self.sessions.get(body.get("accessToken"))
        if (
            session is None
            or session.refresh_token != body.get("refreshToken")
            or session.email != body.get("email")
            or session.revoked
        ):
            return problem(400, "Tokens cannot be acknowledged")
        session.acknowledged = True
        session.device_id = body.get("deviceId")
        return httpx.Response(204)

    def _active_session(self, body: dict[str, Any], token: str | None) -> Session | None:
        session = self.sessions.get(token) if token else None
        if (
            session is None
            or not session.acknowledged
            or session.revoked
            or session.email != body.get("email")
            or session.device_id != body.get("deviceId")
        ):
            return None
        return session

    def _validate(self, body: dict[str, Any]) -> httpx.Response:
        session = self._active_session(body, body.get("token"))
        if session is None:
            return problem(401, "Token is not valid", title="Unauthorized")
        return httpx.Response(200, json=session.claims)

    def _renew(self, body: dict[str, Any]) -> httpx.Response:
        access_token = self.refresh_index.pop(body.get("token", ""), None)
        session = self._active_session(body, access_token)
        if session is None:
            return problem(401, "Refresh token is not valid", title="Unauthorized")
        session.revoked = True
        return httpx.Response(200, json=self.issue(session.email))

    def _revoke(self, body: dict[str, Any]) -> httpx.Response:
        session = self._active_session(body, body.get("token"))
        if session is None:
            return problem(401, "Token is not valid", title="Unauthorized")
        session.revoked = True
        self.refresh_index.pop(session.refresh_token, None)
        return httpx.Response(204)
