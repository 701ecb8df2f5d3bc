"""Error classes for the session guard SDK.

Implements a structured error hierarchy with error codes so callers can
tell an application-level rejection apart from a transport or contract
failure, and both apart from a bad token.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

UNKNOWN_ERROR = "Unknown error"


class ErrorCode(StrEnum):
    """Standardized error codes for the session guard SDK."""

    # Rejections (1xxx)
    AUTH_REJECTED = "AUTH_1001"
    TOKEN_EXPIRED = "AUTH_1002"
    UNKNOWN_KEY = "AUTH_1003"

    # Token structure / signature (2xxx)
    MALFORMED_TOKEN = "TOK_2001"
    SIGNATURE_INVALID = "TOK_2002"

    # Protocol / transport (3xxx)
    PROTOCOL_ERROR = "NET_3001"
    NETWORK_ERROR = "NET_3002"
    TIMEOUT_ERROR = "NET_3003"

    # Configuration (4xxx)
    INVALID_CONFIG = "CFG_4001"

    # Caller input (5xxx)
    INVALID_REQUEST = "REQ_5001"


class GuardError(Exception):
    """Base error for the session guard SDK with structured error information."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class AuthRejectedError(GuardError):
    """The service understood the request and declined it."""

    def __init__(
        self,
        reason: str = UNKNOWN_ERROR,
        *,
        status_code: int | None = None,
        title: str | None = None,
        code: ErrorCode = ErrorCode.AUTH_REJECTED,
    ) -> None:
        super().__init__(
            reason or UNKNOWN_ERROR,
            code,
            status_code=status_code,
            details={"title": title} if title else None,
        )
        self.reason = self.message


class TokenExpiredError(AuthRejectedError):
    """Token expiry claim is in the past."""

    def __init__(self, reason: str = "Token has expired") -> None:
        super().__init__(reason, status_code=401, code=ErrorCode.TOKEN_EXPIRED)


class UnknownKeyError(AuthRejectedError):
    """Token names a key id that is not in the current key snapshot."""

    def __init__(self, key_id: str) -> None:
        super().__init__(
            f"Unknown signing key: {key_id}",
            code=ErrorCode.UNKNOWN_KEY,
        )
        self.key_id = key_id
        self.details["key_id"] = key_id


class ProtocolError(GuardError):
    """Transport-level or contractual failure."""

    def __init__(
        self,
        message: str = UNKNOWN_ERROR,
        *,
        status_code: int | None = None,
        code: ErrorCode = ErrorCode.PROTOCOL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code,
            status_code=status_code,
            details=details,
        )


class NetworkError(ProtocolError):
    """Network request failed."""

    def __init__(
        self,
        message: str = "Network request failed",
        *,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.NETWORK_ERROR,
            details={"cause": str(cause)} if cause else None,
        )
        self.__cause__ = cause


class RequestTimeoutError(NetworkError):
    """Request exceeded the transport timeout."""

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.code = ErrorCode.TIMEOUT_ERROR.value


class TokenError(GuardError):
    """Token could not be decoded or verified."""


class MalformedTokenError(TokenError):
    """Token string does not decode into the expected structure."""

    def __init__(self, message: str = "Malformed token") -> None:
        super().__init__(message, ErrorCode.MALFORMED_TOKEN, status_code=401)


class SignatureInvalidError(TokenError):
    """Signature verification failed against the resolved key."""

    def __init__(self, message: str = "Token signature is invalid") -> None:
        super().__init__(message, ErrorCode.SIGNATURE_INVALID, status_code=401)


class InvalidConfigError(GuardError):
    """Invalid SDK configuration."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_CONFIG,
            details={"field": field} if field else None,
        )


class InvalidRequestError(GuardError):
    """Caller-supplied input cannot form a valid request."""

    def __init__(
        self,
        message: str,
        *,
        fields: list[str] | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_REQUEST,
            details={"fields": fields} if fields else None,
        )
