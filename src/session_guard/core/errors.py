"""Centralized error factory for the session guard SDK.

Turns HTTP responses and transport exceptions into the SDK's typed errors
so every endpoint reports failures the same way.
"""

from __future__ import annotations

import json

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..errors import (
    UNKNOWN_ERROR,
    AuthRejectedError,
    GuardError,
    NetworkError,
    ProtocolError,
    RequestTimeoutError,
)
from ..models import ErrorEnvelope


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class ErrorFactory:
    """Centralized error creation with consistent structure.

    Status mapping:
    - 4xx: AuthRejectedError, reason from the envelope detail when present.
    - 5xx with an envelope detail: AuthRejectedError with that detail.
    - anything else that is not 2xx: ProtocolError.
    """

    @staticmethod
    def parse_envelope(response: httpx.Response) -> ErrorEnvelope | None:
        """Extract the error envelope from a response body, if any."""
        if not response.content:
            return None
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        if not isinstance(body, dict):
            return None
        try:
            return ErrorEnvelope.model_validate(body)
        except PydanticValidationError:
            return None

    @staticmethod
    def from_http_response(response: httpx.Response) -> GuardError:
        """Create SDK error from a non-success HTTP response.

        Args:
            response: HTTP response object.

        Returns:
            AuthRejectedError or ProtocolError.
        """
        status = response.status_code
        envelope = ErrorFactory.parse_envelope(response)
        detail = envelope.detail if envelope and envelope.detail else None
        title = envelope.title if envelope else None

        if 400 <= status < 500:
            return AuthRejectedError(
                detail or UNKNOWN_ERROR,
                status_code=status,
                title=title,
            )

        if status >= 500 and detail:
            return AuthRejectedError(detail, status_code=status, title=title)

        return ProtocolError(
            detail or UNKNOWN_ERROR,
            status_code=status,
            details={"title": title} if title else None,
        )

    @staticmethod
    def from_exception(exc: Exception) -> GuardError:
        """Create SDK error from a transport exception.

        Args:
            exc: Original exception.

        Returns:
            Appropriate GuardError subclass.
        """
        if isinstance(exc, GuardError):
            return exc

        if isinstance(exc, httpx.TimeoutException):
            return RequestTimeoutError(f"Request timed out: {exc}", cause=exc)

        if isinstance(exc, httpx.ConnectError):
            return NetworkError(f"Connection failed: {exc}", cause=exc)

        if isinstance(exc, httpx.HTTPError):
            return NetworkError(f"HTTP error: {exc}", cause=exc)

        return NetworkError(f"Unexpected error: {exc}", cause=exc)
