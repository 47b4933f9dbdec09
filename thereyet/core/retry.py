"""지수 백오프 + 지터 재시도 유틸리티."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import TypeVar

import requests

from thereyet.core.config import Settings
from thereyet.core.errors import ErrorKind, TransportError
from thereyet.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def default_should_retry(error: BaseException) -> bool:
    """네트워크 수준 실패와 5xx만 재시도합니다. 4xx는 일시적 오류가 아닙니다."""
    if isinstance(error, TransportError):
        return error.retryable

    if isinstance(error, (requests.Timeout, requests.ConnectionError, asyncio.TimeoutError)):
        return True

    if isinstance(error, requests.HTTPError):
        status_code = error.response.status_code if error.response is not None else None
        return status_code is None or status_code >= 500

    return False


def _noop_on_retry(attempt: int, delay: float, error: BaseException) -> None:
    return None


@dataclass(frozen=True, slots=True)
class RetryOptions:
    """재시도 정책. 지연 값은 초 단위입니다."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_factor: float = 2.0
    jitter_ratio: float = 0.1
    attempt_timeout: float | None = None
    should_retry: Callable[[BaseException], bool] = default_should_retry
    on_retry: Callable[[int, float, BaseException], None] = _noop_on_retry

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryOptions:
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            initial_delay=max(0.0, settings.RETRY_INITIAL_DELAY_SECONDS),
            max_delay=max(0.0, settings.RETRY_MAX_DELAY_SECONDS),
            backoff_factor=max(1.0, settings.RETRY_BACKOFF_FACTOR),
            jitter_ratio=settings.RETRY_JITTER_RATIO,
        )

    def with_overrides(self, **changes) -> RetryOptions:
        return replace(self, **changes)

    def base_delay(self, attempt: int) -> float:
        """`attempt`번째 실패 후의 지터 적용 전 지연."""
        return min(self.initial_delay * (self.backoff_factor ** (attempt - 1)), self.max_delay)


async def _run_attempt(operation: Callable[[], Awaitable[T]], attempt_timeout: float | None) -> T:
    if attempt_timeout is None:
        return await operation()

    try:
        return await asyncio.wait_for(operation(), timeout=attempt_timeout)
    except asyncio.TimeoutError as exc:
        raise TransportError(
            ErrorKind.TIMEOUT,
            f"Attempt timed out after {attempt_timeout:.1f}s",
        ) from exc


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    options: RetryOptions | None = None,
) -> T:
    """비동기 작업을 실행하고 재시도 가능한 실패는 지수 백오프로 다시 시도합니다.

    `should_retry`가 False를 반환하거나 시도 횟수를 모두 쓰면 마지막 예외를
    지연 없이 그대로 전파합니다. 호출자는 개별 시도의 실패를 보지 않습니다.
    """
    opts = options or RetryOptions()
    max_attempts = max(1, int(opts.max_attempts))

    for attempt in range(1, max_attempts + 1):
        try:
            return await _run_attempt(operation, opts.attempt_timeout)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            is_retryable = opts.should_retry(exc)
            is_last_attempt = attempt >= max_attempts

            if not is_retryable:
                logger.info("Operation failed with non-retryable error: attempt=%d error=%r", attempt, exc)
                raise
            if is_last_attempt:
                logger.error("Operation failed permanently: attempts=%d error=%r", attempt, exc)
                raise

            delay = opts.base_delay(attempt)
            delay += random.random() * delay * opts.jitter_ratio
            logger.warning(
                "Operation failed, retrying: attempt=%d/%d delay=%.2fs error=%r",
                attempt,
                max_attempts,
                delay,
                exc,
            )
            opts.on_retry(attempt, delay, exc)
            await asyncio.sleep(delay)

    raise RuntimeError("retry_with_backoff exited without a result")


def make_retryable(
    fn: Callable[..., Awaitable[T]],
    options: RetryOptions | None = None,
) -> Callable[..., Awaitable[T]]:
    """함수를 재시도 정책으로 감싼 코루틴 함수를 반환합니다."""

    async def _wrapped(*args, **kwargs) -> T:
        return await retry_with_backoff(lambda: fn(*args, **kwargs), options)

    _wrapped.__name__ = getattr(fn, "__name__", "retryable")
    _wrapped.__doc__ = fn.__doc__
    return _wrapped
