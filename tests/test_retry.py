"""지수 백오프 재시도 유틸 테스트."""

from __future__ import annotations

import asyncio

import pytest
import requests

from thereyet.core.errors import ErrorKind, TransportError
from thereyet.core.retry import RetryOptions, default_should_retry, make_retryable, retry_with_backoff


def _patch_sleep(monkeypatch) -> list[float]:
    sleep_delays: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        sleep_delays.append(delay)

    monkeypatch.setattr("thereyet.core.retry.asyncio.sleep", _fake_sleep)
    monkeypatch.setattr("thereyet.core.retry.random.random", lambda: 0.0)
    return sleep_delays


def test_retry_with_backoff_succeeds_on_third_attempt(monkeypatch) -> None:
    sleep_delays = _patch_sleep(monkeypatch)
    call_count = {"value": 0}

    async def _operation() -> str:
        call_count["value"] += 1
        if call_count["value"] < 3:
            raise TransportError(ErrorKind.SERVER_ERROR, "HTTP 503", status_code=503)
        return "ok"

    result = asyncio.run(retry_with_backoff(_operation, RetryOptions(max_attempts=3, initial_delay=1.0)))

    assert result == "ok"
    assert call_count["value"] == 3
    assert sleep_delays == pytest.approx([1.0, 2.0])


def test_retry_with_backoff_does_not_retry_not_found(monkeypatch) -> None:
    sleep_delays = _patch_sleep(monkeypatch)
    call_count = {"value": 0}

    async def _operation() -> str:
        call_count["value"] += 1
        raise TransportError(ErrorKind.NOT_FOUND, "HTTP 404", status_code=404)

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(retry_with_backoff(_operation, RetryOptions(max_attempts=3)))

    assert exc_info.value.kind == ErrorKind.NOT_FOUND
    assert call_count["value"] == 1
    assert sleep_delays == []


def test_retry_with_backoff_raises_last_error_when_exhausted(monkeypatch) -> None:
    sleep_delays = _patch_sleep(monkeypatch)
    call_count = {"value": 0}

    async def _operation() -> str:
        call_count["value"] += 1
        raise TransportError(ErrorKind.NETWORK, f"offline #{call_count['value']}")

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(retry_with_backoff(_operation, RetryOptions(max_attempts=3)))

    assert str(exc_info.value) == "offline #3"
    assert call_count["value"] == 3
    assert len(sleep_delays) == 2


def test_retry_delay_is_capped_and_jittered(monkeypatch) -> None:
    sleep_delays: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        sleep_delays.append(delay)

    monkeypatch.setattr("thereyet.core.retry.asyncio.sleep", _fake_sleep)
    monkeypatch.setattr("thereyet.core.retry.random.random", lambda: 0.5)

    async def _operation() -> str:
        raise requests.ConnectionError("connection reset")

    options = RetryOptions(max_attempts=4, initial_delay=1.0, max_delay=3.0, backoff_factor=2.0, jitter_ratio=0.1)
    with pytest.raises(requests.ConnectionError):
        asyncio.run(retry_with_backoff(_operation, options))

    assert sleep_delays == pytest.approx([1.05, 2.1, 3.15])


def test_retry_on_retry_hook_receives_attempt_and_delay(monkeypatch) -> None:
    _patch_sleep(monkeypatch)
    seen: list[tuple[int, float, str]] = []
    call_count = {"value": 0}

    async def _operation() -> int:
        call_count["value"] += 1
        if call_count["value"] == 1:
            raise TransportError(ErrorKind.TIMEOUT, "slow")
        return 42

    options = RetryOptions(on_retry=lambda attempt, delay, exc: seen.append((attempt, delay, str(exc))))
    assert asyncio.run(retry_with_backoff(_operation, options)) == 42
    assert seen == [(1, 1.0, "slow")]


def test_retry_attempt_timeout_maps_to_timeout_error(monkeypatch) -> None:
    call_count = {"value": 0}

    async def _operation() -> str:
        call_count["value"] += 1
        await asyncio.Event().wait()
        return "never"

    options = RetryOptions(max_attempts=1, attempt_timeout=0.01)
    with pytest.raises(TransportError) as exc_info:
        asyncio.run(retry_with_backoff(_operation, options))

    assert exc_info.value.kind == ErrorKind.TIMEOUT
    assert call_count["value"] == 1


def test_custom_should_retry_overrides_default(monkeypatch) -> None:
    sleep_delays = _patch_sleep(monkeypatch)
    call_count = {"value": 0}

    async def _operation() -> str:
        call_count["value"] += 1
        raise TransportError(ErrorKind.SERVER_ERROR, "HTTP 500", status_code=500)

    options = RetryOptions(should_retry=lambda exc: False)
    with pytest.raises(TransportError):
        asyncio.run(retry_with_backoff(_operation, options))

    assert call_count["value"] == 1
    assert sleep_delays == []


def test_default_should_retry_classification() -> None:
    response_404 = requests.Response()
    response_404.status_code = 404
    response_502 = requests.Response()
    response_502.status_code = 502

    assert default_should_retry(TransportError(ErrorKind.NETWORK, "x")) is True
    assert default_should_retry(TransportError(ErrorKind.SERVER_ERROR, "x")) is True
    assert default_should_retry(TransportError(ErrorKind.RATE_LIMITED, "x")) is False
    assert default_should_retry(TransportError(ErrorKind.CLIENT_ERROR, "x")) is False
    assert default_should_retry(requests.Timeout()) is True
    assert default_should_retry(requests.HTTPError(response=response_404)) is False
    assert default_should_retry(requests.HTTPError(response=response_502)) is True
    assert default_should_retry(ValueError("bad")) is False


def test_make_retryable_passes_arguments(monkeypatch) -> None:
    _patch_sleep(monkeypatch)

    async def _add(a: int, b: int) -> int:
        return a + b

    wrapped = make_retryable(_add)

    assert asyncio.run(wrapped(2, 3)) == 5
    assert wrapped.__name__ == "_add"
