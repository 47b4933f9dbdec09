"""동일 서명의 동시 요청을 하나의 네트워크 호출로 합치는 중복 제거기."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from thereyet.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_PENDING_AGE_SECONDS = 30.0


@dataclass(slots=True)
class PendingRequest:
    """진행 중인 요청과 시작 시각."""

    task: asyncio.Future[Any]
    started_at: float


class RequestDeduplicator:
    """서명별로 최대 하나의 in-flight 요청만 유지합니다.

    같은 서명으로 들어온 호출자는 같은 태스크의 결과(또는 예외)를 공유합니다.
    대기 중인 호출자 하나가 취소되어도 공유 태스크는 취소되지 않습니다.
    """

    def __init__(
        self,
        max_pending_age_seconds: float = DEFAULT_MAX_PENDING_AGE_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_pending_age_seconds = max(0.0, float(max_pending_age_seconds))
        self._clock = clock
        self._pending: dict[str, PendingRequest] = {}

    async def deduplicate(self, signature: str, request_factory: Callable[[], Awaitable[T]]) -> T:
        """진행 중인 동일 요청이 있으면 합류하고, 없으면 새 요청을 시작합니다."""
        self._evict_stale()

        pending = self._pending.get(signature)
        if pending is not None:
            logger.debug("Deduplicating request: signature=%s", signature)
        else:
            task = asyncio.ensure_future(request_factory())
            pending = PendingRequest(task=task, started_at=self._clock())
            # 태스크가 끝나기 전에 등록해야 같은 틱의 동시 호출자가 합류할 수 있다
            self._pending[signature] = pending
            task.add_done_callback(lambda done, entry=pending: self._on_settled(signature, entry, done))

        return await asyncio.shield(pending.task)

    def pending_count(self) -> int:
        self._evict_stale()
        return len(self._pending)

    def is_pending(self, signature: str) -> bool:
        return signature in self._pending

    def clear_pending(self) -> None:
        self._pending.clear()

    def _on_settled(self, signature: str, entry: PendingRequest, task: asyncio.Future[Any]) -> None:
        if self._pending.get(signature) is entry:
            del self._pending[signature]

        # 모든 대기자가 포기한 경우에도 "exception was never retrieved" 경고가 나지 않도록 소비
        if not task.cancelled():
            task.exception()

    def _evict_stale(self) -> None:
        now = self._clock()
        expired = [
            signature
            for signature, entry in self._pending.items()
            if now - entry.started_at > self._max_pending_age_seconds
        ]
        for signature in expired:
            del self._pending[signature]
            logger.warning("Removed expired pending request: signature=%s", signature)
