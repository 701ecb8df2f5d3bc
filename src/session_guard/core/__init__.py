"""Core components for the session guard SDK.

Shared transport plumbing used by the session protocol and the key store.
"""

from __future__ import annotations

from .errors import ErrorFactory
from .http_executor import AsyncHTTPExecutor

__all__ = [
    "ErrorFactory",
    "AsyncHTTPExecutor",
]
