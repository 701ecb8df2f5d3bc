"""Centralized HTTP execution for the session guard SDK.

Every remote call goes through AsyncHTTPExecutor so transport failures,
error statuses and response bodies are handled in one place. Requests are
never retried here.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..errors import ProtocolError
from ..telemetry import get_logger, trace_operation
from .errors import ErrorFactory, is_success

T = TypeVar("T")

NO_CONTENT = "No content"


class AsyncHTTPExecutor:
    """Asynchronous HTTP executor mapping outcomes to SDK errors."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize async HTTP executor.

        Args:
            client: Async HTTP client.
        """
        self._client = client
        self._logger = get_logger()

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def execute(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute a single request, converting transport failures.

        Args:
            method: HTTP method.
            url: Request URL, relative to the client's base URL.
            **kwargs: Additional request arguments.

        Returns:
            HTTP response, whatever its status.

        Raises:
            RequestTimeoutError: On transport timeout.
            NetworkError: On any other transport failure.
        """
        with trace_operation(
            "http_request",
            attributes={"http.method": method, "http.url": url},
        ) as span:
            try:
                response = await self._client.request(method, url, **kwargs)
            except httpx.HTTPError as e:
                self._logger.warning(
                    "Request failed",
                    method=method,
                    url=url,
                    error=str(e),
                )
                raise ErrorFactory.from_exception(e) from e

            span.set_attribute("http.status_code", response.status_code)
            self._logger.debug(
                "Request completed",
                method=method,
                url=url,
                status_code=response.status_code,
            )
            return response

    async def send(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute a request and raise on any non-success status.

        Raises:
            AuthRejectedError: If the service declined the request.
            ProtocolError: On transport failure or unexpected status.
        """
        response = await self.execute(method, url, **kwargs)
        if not is_success(response.status_code):
            raise ErrorFactory.from_http_response(response)
        return response

    async def send_for_model(
        self,
        method: str,
        url: str,
        adapter: TypeAdapter[T],
        **kwargs: Any,
    ) -> T:
        """Execute a request whose success body must parse as ``adapter``.

        Raises:
            AuthRejectedError: If the service declined the request.
            ProtocolError: On transport failure, empty or unparseable body.
        """
        response = await self.send(method, url, **kwargs)
        if not response.content:
            raise ProtocolError(NO_CONTENT, status_code=response.status_code)

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProtocolError(
                f"Response body is not valid JSON: {e}",
                status_code=response.status_code,
            ) from e

        try:
            return adapter.validate_python(data)
        except PydanticValidationError as e:
            errors = e.errors(
                include_url=False, include_context=False, include_input=False
            )
            raise ProtocolError(
                f"Unexpected response shape: {e.error_count()} validation error(s)",
                status_code=response.status_code,
                details={"errors": errors},
            ) from e
