"""클라이언트 키별 슬라이딩 윈도우 요청 제한."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable


class SlidingWindowRateLimiter:
    """`window_seconds` 동안 키당 최대 `max_requests`건을 허용합니다.

    윈도우 안에 기록이 없는 키는 보관하지 않으며, 윈도우마다 한 번 전체 키를 정리합니다.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max(1, int(max_requests))
        self._window_seconds = max(0.001, float(window_seconds))
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._requests)

    def _prune(self, key: str, now: float) -> deque[float]:
        timestamps = self._requests.get(key)
        if timestamps is None:
            return deque()

        window_start = now - self._window_seconds
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()
        if not timestamps:
            del self._requests[key]
        return timestamps

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self._window_seconds:
            return
        self._last_sweep = now
        for key in list(self._requests):
            self._prune(key, now)

    def try_acquire(self, key: str) -> bool:
        """허용되면 요청을 기록하고 True, 한도를 넘으면 False를 반환합니다."""
        now = self._clock()
        self._sweep(now)
        timestamps = self._prune(key, now)
        if len(timestamps) >= self._max_requests:
            return False
        timestamps.append(now)
        self._requests[key] = timestamps
        return True

    def seconds_until_reset(self, key: str) -> float:
        now = self._clock()
        timestamps = self._prune(key, now)
        if not timestamps:
            return 0.0
        return max(0.0, timestamps[0] + self._window_seconds - now)

    def reset(self) -> None:
        self._requests.clear()
