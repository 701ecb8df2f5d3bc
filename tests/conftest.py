"""
Shared test fixtures for session guard SDK tests.

Provides configuration, an in-memory authentication service and a client
wired to it through httpx.MockTransport.
"""

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio

from session_guard.client import GuardClient
from session_guard.config import GuardConfig, TelemetryConfig
from session_guard.core.http_executor import AsyncHTTPExecutor
from session_guard.keystore import KeyStore
from session_guard.session import SessionProtocol

from tests.fake_service import FakeAuthService

EMAIL = "a@x.com"
PASSWORD = "p1"
DEVICE_ID = "device-a"


@pytest.fixture
def base_config() -> GuardConfig:
    """Provide a basic SDK configuration for testing."""
    return GuardConfig(
        base_url="https://auth.example.com",
        telemetry=TelemetryConfig(enabled=False),
    )


@pytest.fixture
def service() -> FakeAuthService:
    """Provide a fake service with one account."""
    fake = FakeAuthService()
    fake.add_account(EMAIL, PASSWORD, roles=["Admin", "user"])
    return fake


@pytest_asyncio.fixture
async def http_client(
    base_config: GuardConfig, service: FakeAuthService
) -> AsyncIterator[httpx.AsyncClient]:
    """Provide an async HTTP client routed to the fake service."""
    async with httpx.AsyncClient(
        base_url=base_config.base_url_str,
        transport=service.transport,
    ) as client:
        yield client


@pytest.fixture
def executor(http_client: httpx.AsyncClient) -> AsyncHTTPExecutor:
    return AsyncHTTPExecutor(http_client)


@pytest.fixture
def session(executor: AsyncHTTPExecutor) -> SessionProtocol:
    return SessionProtocol(executor)


@pytest.fixture
def key_store(executor: AsyncHTTPExecutor) -> KeyStore:
    return KeyStore(executor)


@pytest_asyncio.fixture
async def guard(
    base_config: GuardConfig, service: FakeAuthService
) -> AsyncIterator[GuardClient]:
    """Provide a GuardClient talking to the fake service."""
    client = httpx.AsyncClient(
        base_url=base_config.base_url_str,
        transport=service.transport,
    )
    async with GuardClient(base_config, http_client=client) as guard_client:
        yield guard_client
