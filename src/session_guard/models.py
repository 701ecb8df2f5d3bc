"""Pydantic models for the session guard SDK.

Wire models use camelCase aliases matching the authentication service's
JSON; Python code uses the snake_case field names. All models are frozen.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
)

from .providers import SocialProvider


class AuthMethod(StrEnum):
    """Ways an account can prove its identity."""

    PASSWORD = "password"
    MAGIC_CODE = "magic_code"
    SOCIAL = "social"


class PasswordCredential(BaseModel):
    """Email and password."""

    model_config = ConfigDict(frozen=True)

    method: ClassVar[AuthMethod] = AuthMethod.PASSWORD

    email: str = Field(..., min_length=1)
    password: SecretStr


class MagicCodeCredential(BaseModel):
    """Email and the one-time code delivered by a magic link."""

    model_config = ConfigDict(frozen=True)

    method: ClassVar[AuthMethod] = AuthMethod.MAGIC_CODE

    email: str = Field(..., min_length=1)
    code: SecretStr


class SocialCredential(BaseModel):
    """Token issued by a federated identity provider."""

    model_config = ConfigDict(frozen=True)

    method: ClassVar[AuthMethod] = AuthMethod.SOCIAL

    provider: SocialProvider
    social_token: SecretStr


Credential = PasswordCredential | MagicCodeCredential | SocialCredential


class TokenPair(BaseModel):
    """Access and refresh token returned by authenticate and renew."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    access_token: str = Field(..., min_length=1, alias="accessToken")
    refresh_token: str = Field(..., min_length=1, alias="refreshToken")

    def __repr__(self) -> str:
        return "TokenPair(access_token='***', refresh_token='***')"


def _as_string_tuple(value: Any) -> Any:
    # A single-valued claim is often serialized as a bare string.
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return value


class AccessTokenClaims(BaseModel):
    """Claims carried by a verified access token."""

    model_config = ConfigDict(frozen=True, extra="allow")

    sub: str = Field(..., min_length=1, description="Subject identifier")
    exp: int | float = Field(..., description="Expiration time (Unix timestamp)")
    iss: str = Field(default="", description="Issuer")
    aud: str | list[str] = Field(default="", description="Audience")
    jti: str = Field(default="", description="Token ID")
    iat: int | float | None = Field(default=None, description="Issued at time")
    roles: tuple[str, ...] = ()
    permissions: tuple[str, ...] = ()

    @field_validator("roles", "permissions", mode="before")
    @classmethod
    def normalize_collection(cls, v: Any) -> Any:
        """Accept a bare string or null for a collection claim."""
        return _as_string_tuple(v)

    def has_role(self, role: str) -> bool:
        """Case-insensitive role membership."""
        return role.lower() in {r.lower() for r in self.roles}

    def has_permission(self, permission: str) -> bool:
        """Case-insensitive permission membership."""
        return permission.lower() in {p.lower() for p in self.permissions}

    @property
    def is_expired(self) -> bool:
        """Check if token claims indicate expiration."""
        return datetime.now(UTC).timestamp() >= self.exp

    @property
    def expires_at(self) -> datetime:
        """Get expiration as datetime."""
        return datetime.fromtimestamp(self.exp, tz=UTC)


class TokenHeader(BaseModel):
    """Unverified JOSE header of a signed token."""

    model_config = ConfigDict(frozen=True, extra="allow")

    kid: str = Field(..., min_length=1, description="Key ID")
    alg: str | None = None
    typ: str | None = None

    @property
    def key_id(self) -> str:
        return self.kid


class SigningKey(BaseModel):
    """Public key published by the service for token verification."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    key_id: str = Field(..., min_length=1, alias="keyId")
    public_key_pem: str = Field(..., min_length=1, alias="publicKey")
    algorithm: str = "RS256"
    format: str | None = None
    created_at: datetime | None = Field(default=None, alias="created")


class ErrorEnvelope(BaseModel):
    """Problem-details body returned with error statuses."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str | None = None
    detail: str | None = None
    type: str | None = None
    status_code: int | str | None = Field(default=None, alias="statusCode")
