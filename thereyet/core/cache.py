"""요청 서명 기반 인메모리 TTL 캐시."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from thereyet.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    """캐시에 저장된 값과 저장 시각."""

    value: T
    stored_at: float


class TTLCache(Generic[T]):
    """TTL이 지난 값은 절대 반환하지 않는 캐시.

    만료 항목은 `get`에서 미스로 취급만 하고 삭제는 `set`/`purge_expired`에서
    지연 처리합니다. 프로세스 재시작 사이에 공유되지 않습니다.
    """

    def __init__(
        self,
        ttl_seconds: float,
        *,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ) -> None:
        self._ttl_seconds = max(0.0, float(ttl_seconds))
        self._max_entries = max_entries if max_entries and max_entries > 0 else None
        self._clock = clock
        self._name = name
        self._entries: dict[str, CacheEntry[T]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.stored_at >= self._ttl_seconds

    def get(self, signature: str) -> T | None:
        """유효한 값을 반환하고, 없거나 만료됐으면 None을 반환합니다."""
        entry = self._entries.get(signature)
        if entry is None:
            logger.debug("Cache miss: cache=%s signature=%s", self._name, signature)
            return None

        if self._is_expired(entry, self._clock()):
            logger.debug("Cache expired: cache=%s signature=%s", self._name, signature)
            return None

        logger.debug("Cache hit: cache=%s signature=%s", self._name, signature)
        return entry.value

    def set(self, signature: str, value: T) -> None:
        """값을 저장합니다. 같은 서명의 기존 항목은 덮어씁니다."""
        if value is None:
            raise ValueError("TTLCache does not store None values.")

        now = self._clock()
        self._entries.pop(signature, None)
        self._entries[signature] = CacheEntry(value=value, stored_at=now)
        self._enforce_max_entries(now)

    def purge_expired(self) -> int:
        """만료 항목을 삭제하고 삭제 개수를 반환합니다."""
        now = self._clock()
        expired = [signature for signature, entry in self._entries.items() if self._is_expired(entry, now)]
        for signature in expired:
            del self._entries[signature]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def _enforce_max_entries(self, now: float) -> None:
        if self._max_entries is None or len(self._entries) <= self._max_entries:
            return

        for signature in [s for s, entry in self._entries.items() if self._is_expired(entry, now)]:
            del self._entries[signature]

        # 삽입 순서 == 저장 순서이므로 앞에서부터 가장 오래된 항목
        while len(self._entries) > self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
