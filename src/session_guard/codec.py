"""Structural decoding and signature verification of access tokens.

The codec never returns claims from a token whose signature has not been
checked; the only unverified read it offers is the header.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import load_pem_public_key
from pydantic import ValidationError as PydanticValidationError

from .errors import (
    AuthRejectedError,
    MalformedTokenError,
    SignatureInvalidError,
    TokenExpiredError,
)
from .models import AccessTokenClaims, TokenHeader

if TYPE_CHECKING:
    from .config import VerificationConfig

# Tokens are always signed with RSA PKCS#1 v1.5 over SHA-256.
SIGNING_ALGORITHM = "RS256"


def load_public_key(pem: str) -> rsa.RSAPublicKey:
    """Load an RSA public key from PKCS#1 or SubjectPublicKeyInfo PEM.

    Raises:
        ValueError: If the PEM is not an RSA public key.
    """
    normalized = pem.replace("\r\n", "\n").replace("\r", "\n").strip()
    try:
        key = load_pem_public_key(normalized.encode("ascii"))
    except (UnicodeEncodeError, UnsupportedAlgorithm) as e:
        raise ValueError(f"Unreadable public key: {e}") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError(f"Expected an RSA public key, got {type(key).__name__}")
    return key


class TokenCodec:
    """Decode token headers and verify signed claims."""

    def __init__(self, verification: VerificationConfig | None = None) -> None:
        self._verify_expiry = verification.verify_expiry if verification else True
        self._leeway = verification.leeway_seconds if verification else 0
        self._audience = verification.audience if verification else None
        self._issuer = verification.issuer if verification else None

    def decode_header(self, token: str) -> TokenHeader:
        """Parse the token header without verifying the signature.

        Raises:
            MalformedTokenError: If the token is not a well-formed JWS or
                carries no key id.
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.exceptions.InvalidTokenError as e:
            raise MalformedTokenError(f"Invalid token format: {e}") from e

        if not header.get("kid"):
            raise MalformedTokenError("Token header has no key id")

        try:
            return TokenHeader.model_validate(header)
        except PydanticValidationError as e:
            raise MalformedTokenError(f"Invalid token header: {e}") from e

    def verify_and_decode_claims(
        self,
        token: str,
        public_key: rsa.RSAPublicKey,
    ) -> AccessTokenClaims:
        """Verify the signature and return the token's claims.

        Raises:
            SignatureInvalidError: If the signature does not verify.
            TokenExpiredError: If the token's expiry has passed.
            AuthRejectedError: If the token is not yet valid, or audience
                or issuer do not match config.
            MalformedTokenError: If the token or its claims cannot be parsed.
        """
        decode_kwargs: dict[str, Any] = {
            "algorithms": [SIGNING_ALGORITHM],
            "leeway": self._leeway,
            "options": {
                "verify_signature": True,
                "verify_exp": self._verify_expiry,
                "verify_aud": self._audience is not None,
                "verify_iss": self._issuer is not None,
            },
        }
        if self._audience is not None:
            decode_kwargs["audience"] = self._audience
        if self._issuer is not None:
            decode_kwargs["issuer"] = self._issuer

        try:
            decoded = jwt.decode(token, public_key, **decode_kwargs)
        except jwt.exceptions.InvalidSignatureError as e:
            raise SignatureInvalidError() from e
        except jwt.exceptions.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.exceptions.ImmatureSignatureError as e:
            raise AuthRejectedError(f"Token not yet valid: {e}", status_code=401) from e
        except jwt.exceptions.InvalidAudienceError as e:
            raise AuthRejectedError(f"Invalid audience: {e}", status_code=401) from e
        except jwt.exceptions.InvalidIssuerError as e:
            raise AuthRejectedError(f"Invalid issuer: {e}", status_code=401) from e
        except jwt.exceptions.InvalidAlgorithmError as e:
            raise SignatureInvalidError(f"Unexpected signing algorithm: {e}") from e
        except jwt.exceptions.InvalidTokenError as e:
            raise MalformedTokenError(f"Invalid token: {e}") from e

        try:
            return AccessTokenClaims.model_validate(decoded)
        except PydanticValidationError as e:
            raise MalformedTokenError(f"Invalid token claims: {e}") from e
