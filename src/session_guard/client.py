"""Session guard client.

Single entry point sharing one HTTP connection pool between the session
protocol and the key store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from .codec import TokenCodec
from .core.http_executor import AsyncHTTPExecutor
from .http import create_async_http_client
from .keystore import KeyStore
from .session import SessionProtocol
from .verifier import ClientVerifier

if TYPE_CHECKING:
    import httpx

    from .config import GuardConfig


class GuardClient:
    """Asynchronous client for an authentication service."""

    def __init__(
        self,
        config: GuardConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: SDK configuration.
            http_client: Pre-built HTTP client; created from config if omitted.
                The client is closed by ``close`` either way.
        """
        self.config = config
        self._http = http_client or create_async_http_client(config)
        self._executor = AsyncHTTPExecutor(self._http)
        self.session = SessionProtocol(self._executor)
        self.keys = KeyStore(self._executor)
        self.verifier = ClientVerifier(self.keys, TokenCodec(config.verification))

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http.aclose()
