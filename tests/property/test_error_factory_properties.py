"""Property tests for ErrorFactory status mapping.

Every non-success response becomes a typed error with a non-empty reason.
"""

from __future__ import annotations

import httpx
from hypothesis import given, settings
from hypothesis import strategies as st

from session_guard.core.errors import ErrorFactory
from session_guard.errors import UNKNOWN_ERROR, AuthRejectedError, GuardError, ProtocolError

client_statuses = st.integers(min_value=400, max_value=499)
server_statuses = st.integers(min_value=500, max_value=599)
details = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",)),
    min_size=1,
    max_size=100,
)
bodies = st.one_of(
    st.none(),
    st.just(b"<html>oops</html>"),
    st.just(b"[]"),
    st.just(b'{"title": "Error"}'),
)


def response(status: int, body: bytes | None = None, detail: str | None = None) -> httpx.Response:
    if detail is not None:
        return httpx.Response(status, json={"title": "Error", "detail": detail})
    return httpx.Response(status, content=body or b"")


class TestErrorFactoryProperties:
    """Property tests for ErrorFactory."""

    @given(status=client_statuses, detail=details)
    @settings(max_examples=100)
    def test_client_errors_carry_detail(self, status: int, detail: str) -> None:
        error = ErrorFactory.from_http_response(response(status, detail=detail))

        assert isinstance(error, AuthRejectedError)
        assert error.reason == detail
        assert error.status_code == status

    @given(status=client_statuses, body=bodies)
    @settings(max_examples=100)
    def test_client_errors_without_detail(self, status: int, body: bytes | None) -> None:
        error = ErrorFactory.from_http_response(response(status, body))

        assert isinstance(error, AuthRejectedError)
        assert error.reason == UNKNOWN_ERROR

    @given(status=server_statuses, detail=details)
    @settings(max_examples=100)
    def test_server_errors_with_detail_are_rejections(self, status: int, detail: str) -> None:
        error = ErrorFactory.from_http_response(response(status, detail=detail))

        assert isinstance(error, AuthRejectedError)
        assert error.reason == detail

    @given(status=server_statuses, body=bodies)
    @settings(max_examples=100)
    def test_server_errors_without_detail_are_protocol_errors(
        self, status: int, body: bytes | None
    ) -> None:
        error = ErrorFactory.from_http_response(response(status, body))

        assert type(error) is ProtocolError
        assert error.message == UNKNOWN_ERROR

    @given(status=st.integers(min_value=300, max_value=599), body=bodies)
    @settings(max_examples=100)
    def test_always_guard_error_with_message(self, status: int, body: bytes | None) -> None:
        error = ErrorFactory.from_http_response(response(status, body))

        assert isinstance(error, GuardError)
        assert error.message
