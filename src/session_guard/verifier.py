"""Local access-token verification.

``ClientVerifier.verify_locally`` answers "is this token signed by a key we
trust and not yet expired" without a network call. It cannot see
revocation, logout or acknowledgment state: a token revoked on the service
keeps verifying locally until it expires or its key leaves the key store.
Callers that accept that must bound how long they trust a result (the
token's own ``exp`` is the natural bound) and refresh the key store on a
cadence of their choosing. Use ``SessionProtocol.validate_remote`` for
decisions that must observe revocation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .codec import TokenCodec
from .telemetry import get_logger, trace_operation

if TYPE_CHECKING:
    from .keystore import KeyStore
    from .models import AccessTokenClaims


def has_role(role: str, claims: AccessTokenClaims) -> bool:
    """Case-insensitive role check on verified claims."""
    return claims.has_role(role)


def has_permission(permission: str, claims: AccessTokenClaims) -> bool:
    """Case-insensitive permission check on verified claims."""
    return claims.has_permission(permission)


class ClientVerifier:
    """Verify access tokens against the keys in a KeyStore."""

    def __init__(self, key_store: KeyStore, codec: TokenCodec | None = None) -> None:
        self._key_store = key_store
        self._codec = codec or TokenCodec()
        self._logger = get_logger()

    @property
    def key_store(self) -> KeyStore:
        return self._key_store

    def verify_locally(self, access_token: str) -> AccessTokenClaims:
        """Verify the token's signature and expiry and return its claims.

        Raises:
            MalformedTokenError: If the token or its claims do not parse.
            UnknownKeyError: If the token's key id is not in the key store.
            SignatureInvalidError: If the signature does not verify.
            TokenExpiredError: If the token has expired.
        """
        with trace_operation("verify_locally") as span:
            header = self._codec.decode_header(access_token)
            span.set_attribute("token.kid", header.kid)

            trusted = self._key_store.resolve(header.kid)
            claims = self._codec.verify_and_decode_claims(
                access_token, trusted.public_key
            )

        self._logger.debug("Token verified locally", kid=header.kid, sub=claims.sub)
        return claims

    def has_role(self, role: str, claims: AccessTokenClaims) -> bool:
        return has_role(role, claims)

    def has_permission(self, permission: str, claims: AccessTokenClaims) -> bool:
        return has_permission(permission, claims)
