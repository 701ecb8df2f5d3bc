"""Session guard SDK: token lifecycle and local verification client."""

__version__ = "0.1.0"

from .client import GuardClient
from .codec import TokenCodec
from .config import GuardConfig, TelemetryConfig, VerificationConfig
from .errors import (
    AuthRejectedError,
    ErrorCode,
    GuardError,
    InvalidConfigError,
    InvalidRequestError,
    MalformedTokenError,
    NetworkError,
    ProtocolError,
    RequestTimeoutError,
    SignatureInvalidError,
    TokenError,
    TokenExpiredError,
    UnknownKeyError,
)
from .keystore import KeySnapshot, KeyStore
from .models import (
    AccessTokenClaims,
    AuthMethod,
    MagicCodeCredential,
    PasswordCredential,
    SigningKey,
    SocialCredential,
    TokenHeader,
    TokenPair,
)
from .providers import SocialProvider
from .session import SessionProtocol
from .telemetry import configure_telemetry
from .verifier import ClientVerifier, has_permission, has_role

__all__ = [
    "GuardClient",
    "GuardConfig",
    "TelemetryConfig",
    "VerificationConfig",
    "configure_telemetry",
    "SessionProtocol",
    "KeyStore",
    "KeySnapshot",
    "TokenCodec",
    "ClientVerifier",
    "has_role",
    "has_permission",
    "AccessTokenClaims",
    "AuthMethod",
    "MagicCodeCredential",
    "PasswordCredential",
    "SigningKey",
    "SocialCredential",
    "SocialProvider",
    "TokenHeader",
    "TokenPair",
    "GuardError",
    "ErrorCode",
    "AuthRejectedError",
    "TokenExpiredError",
    "UnknownKeyError",
    "ProtocolError",
    "NetworkError",
    "RequestTimeoutError",
    "TokenError",
    "MalformedTokenError",
    "SignatureInvalidError",
    "InvalidConfigError",
    "InvalidRequestError",
]
