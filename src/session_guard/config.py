"""Configuration for the session guard SDK.

Uses Pydantic v2 for validation with sensible defaults.
"""

from __future__ import annotations

import os
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from . import __version__
from .errors import InvalidConfigError


class TelemetryConfig(BaseModel):
    """Logging and tracing configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "session-guard-sdk"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level


class VerificationConfig(BaseModel):
    """Local token verification settings."""

    model_config = ConfigDict(frozen=True)

    verify_expiry: bool = True
    leeway_seconds: Annotated[int, Field(ge=0, le=300)] = 0
    audience: str | None = None
    issuer: str | None = None


class GuardConfig(BaseModel):
    """Main configuration for the session guard SDK."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    base_url: HttpUrl

    # HTTP settings
    timeout: Annotated[float, Field(gt=0, le=300)] = 30.0
    connect_timeout: Annotated[float, Field(gt=0, le=60)] = 10.0
    user_agent: str = f"session-guard-sdk/{__version__} Python"

    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)

    @property
    def base_url_str(self) -> str:
        """Get base URL as string with exactly one trailing slash.

        Endpoint paths are relative, so the slash keeps any path prefix
        in the base URL when httpx joins them.
        """
        return str(self.base_url).rstrip("/") + "/"

    def with_overrides(self, **kwargs: Any) -> Self:
        """Create new config with overridden values."""
        data = self.model_dump()
        data.update(kwargs)
        return self.__class__(**data)

    @classmethod
    def from_env(cls, prefix: str = "SESSION_GUARD_") -> Self:
        """Create config from environment variables."""

        def get_env(key: str, default: Any = None) -> Any:
            return os.environ.get(f"{prefix}{key}", default)

        base_url = get_env("BASE_URL")
        if not base_url:
            msg = f"{prefix}BASE_URL environment variable is required"
            raise InvalidConfigError(msg, field="base_url")

        try:
            timeout = float(get_env("TIMEOUT", "30.0"))
        except ValueError as e:
            msg = f"{prefix}TIMEOUT must be a number"
            raise InvalidConfigError(msg, field="timeout") from e

        return cls(
            base_url=base_url,
            timeout=timeout,
            telemetry=TelemetryConfig(log_level=get_env("LOG_LEVEL", "INFO")),
            verification=VerificationConfig(
                audience=get_env("AUDIENCE"),
                issuer=get_env("ISSUER"),
            ),
        )
