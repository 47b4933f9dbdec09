"""HTTP 전송 계층 테스트."""

from __future__ import annotations

import asyncio

import pytest
import requests

from thereyet.core.errors import ErrorKind, TransportError
from thereyet.services.http_transport import HttpTransport


class _FakeResponse:
    def __init__(self, status_code: int, body=None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ("" if body is None else str(body))

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


class _FakeSession:
    def __init__(self, outcome) -> None:
        self._outcome = outcome
        self.calls: list[dict] = []
        self.closed = False

    def __enter__(self) -> _FakeSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome


def _transport(outcome) -> tuple[HttpTransport, _FakeSession]:
    session = _FakeSession(outcome)
    transport = HttpTransport(
        user_agent="AreWeThereYet/1.0 (https://thereyetapp.com)",
        timeout_seconds=10,
        referer="https://thereyetapp.com",
        accept_language="en",
        session_factory=lambda: session,
    )
    return transport, session


def test_get_json_sends_identifying_headers() -> None:
    transport, session = _transport(_FakeResponse(200, [{"place_id": 1}]))

    result = asyncio.run(transport.get_json("https://nominatim.example.org/search", {"q": "Sydney"}))

    assert result == [{"place_id": 1}]
    call = session.calls[0]
    assert call["params"] == {"q": "Sydney"}
    assert call["headers"]["User-Agent"] == "AreWeThereYet/1.0 (https://thereyetapp.com)"
    assert call["headers"]["Accept"] == "application/json"
    assert call["headers"]["Referer"] == "https://thereyetapp.com"
    assert call["headers"]["Accept-Language"] == "en"
    assert call["timeout"] == (3.0, 7.0)


def test_user_agent_is_required() -> None:
    with pytest.raises(ValueError):
        HttpTransport(user_agent="  ")


@pytest.mark.parametrize(
    ("status_code", "kind"),
    [
        (429, ErrorKind.RATE_LIMITED),
        (404, ErrorKind.NOT_FOUND),
        (400, ErrorKind.CLIENT_ERROR),
        (503, ErrorKind.SERVER_ERROR),
    ],
)
def test_http_error_status_is_classified(status_code: int, kind: ErrorKind) -> None:
    transport, _ = _transport(_FakeResponse(status_code, {"code": "NoRoute"}))

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(transport.get_json("https://osrm.example.org/route"))

    assert exc_info.value.kind == kind
    assert exc_info.value.status_code == status_code
    assert exc_info.value.payload == {"code": "NoRoute"}


@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (requests.Timeout("read timed out"), ErrorKind.TIMEOUT),
        (requests.ConnectionError("dns failure"), ErrorKind.NETWORK),
        (requests.exceptions.InvalidURL("bad url"), ErrorKind.CLIENT_ERROR),
    ],
)
def test_request_exceptions_are_classified(error: Exception, kind: ErrorKind) -> None:
    transport, _ = _transport(error)

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(transport.get_json("https://nominatim.example.org/search"))

    assert exc_info.value.kind == kind


def test_malformed_json_is_invalid_response() -> None:
    transport, _ = _transport(_FakeResponse(200, None, text="<html>oops</html>"))

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(transport.get_json("https://nominatim.example.org/search"))

    assert exc_info.value.kind == ErrorKind.INVALID_RESPONSE
    assert exc_info.value.retryable is False


def test_each_request_opens_and_closes_its_own_session() -> None:
    sessions: list[_FakeSession] = []

    def _factory() -> _FakeSession:
        session = _FakeSession(_FakeResponse(200, []))
        sessions.append(session)
        return session

    transport = HttpTransport(user_agent="AreWeThereYet/1.0", session_factory=_factory)

    async def _run() -> None:
        await asyncio.gather(
            transport.get_json("https://nominatim.example.org/search", {"q": "Sydney"}),
            transport.get_json("https://nominatim.example.org/search", {"q": "Melbourne"}),
        )

    asyncio.run(_run())

    assert len(sessions) == 2
    assert all(session.closed for session in sessions)
    assert sorted(session.calls[0]["params"]["q"] for session in sessions) == ["Melbourne", "Sydney"]


def test_session_is_closed_when_request_fails() -> None:
    transport, session = _transport(requests.ConnectionError("dns failure"))

    with pytest.raises(TransportError):
        asyncio.run(transport.get_json("https://nominatim.example.org/search"))

    assert session.closed is True
