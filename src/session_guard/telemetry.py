"""Logging and tracing for the session guard SDK.

Log records and span attributes pass through the same redaction rule:
any key naming a credential or token has its value replaced before it is
rendered or exported.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from . import __version__

if TYPE_CHECKING:
    from collections.abc import Generator

    from .config import TelemetryConfig

INSTRUMENTATION_NAME = "session-guard-sdk"

REDACTED = "***"

SENSITIVE_KEYS = frozenset(
    {
        "token",
        "access_token",
        "refresh_token",
        "social_token",
        "password",
        "code",
        "authorization",
    }
)

_tracer: trace.Tracer | None = None
_logger: structlog.BoundLogger | None = None


def is_sensitive(key: str) -> bool:
    """Whether a log or span key names a secret.

    Matching ignores case and dotted prefixes, so ``http.authorization``
    and ``accessToken`` are both caught.
    """
    name = key.rsplit(".", 1)[-1].lower().replace("-", "_")
    if name in SENSITIVE_KEYS:
        return True
    # camelCase wire names: accessToken, refreshToken, socialToken
    return name.endswith("token") or name.endswith("password")


def redact(values: Mapping[str, Any]) -> dict[str, Any]:
    return {k: REDACTED if is_sensitive(k) else v for k, v in values.items()}


def redact_sensitive_fields(
    _logger: Any,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """structlog processor that masks credential and token values."""
    for key in list(event_dict):
        if key != "event" and is_sensitive(key):
            event_dict[key] = REDACTED
    return event_dict


def get_tracer() -> trace.Tracer:
    """Get or create the SDK tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(INSTRUMENTATION_NAME, __version__)
    return _tracer


def get_logger() -> structlog.BoundLogger:
    """Get or create the SDK logger."""
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(INSTRUMENTATION_NAME)
    return _logger


def configure_telemetry(config: TelemetryConfig) -> None:
    """Install JSON logging with redaction and select the tracer.

    With telemetry disabled no spans are recorded; logging configuration is
    left to the application.
    """
    global _tracer, _logger

    if not config.enabled:
        _tracer = trace.NoOpTracer()
        return

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_sensitive_fields,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[config.log_level]
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _tracer = trace.get_tracer(config.service_name, __version__)
    _logger = structlog.get_logger(config.service_name)


@contextmanager
def trace_operation(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """Run the block inside a span; failures are recorded and re-raised.

    ``None`` attribute values are dropped and sensitive keys are masked.
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as span:
        for key, value in redact(attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
