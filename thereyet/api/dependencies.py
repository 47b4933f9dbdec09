"""API 의존성 모음."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status

from thereyet.core.config import get_settings
from thereyet.core.rate_limit import SlidingWindowRateLimiter
from thereyet.services.location_client import LocationClient, get_location_client


def provide_location_client() -> LocationClient:
    """프로세스 단위 `LocationClient`를 제공합니다."""
    return get_location_client()


@lru_cache(maxsize=1)
def get_rate_limiter() -> SlidingWindowRateLimiter:
    settings = get_settings()
    return SlidingWindowRateLimiter(
        settings.RATE_LIMIT_MAX_REQUESTS,
        settings.RATE_LIMIT_WINDOW_SECONDS,
    )


def resolve_client_key(request: Request) -> str:
    """요청자 IP를 반환합니다. 신뢰 프록시의 `X-Forwarded-For`는 `ProxyHeadersMiddleware`가 반영합니다."""
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def enforce_rate_limit(
    request: Request,
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
) -> None:
    """요청자별 요청 한도를 검사합니다."""
    client_key = resolve_client_key(request)
    if limiter.try_acquire(client_key):
        return

    retry_after = max(1, int(round(limiter.seconds_until_reset(client_key))))
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Too many requests. Please try again later.",
        headers={"Retry-After": str(retry_after)},
    )
