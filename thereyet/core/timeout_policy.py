"""공급자별 호출 타임아웃 예산."""

from __future__ import annotations

from dataclasses import dataclass

from thereyet.core.config import Settings, get_settings

_MIN_TIMEOUT_SECONDS = 1
_MAX_CONNECT_TIMEOUT_SECONDS = 5.0
_CONNECT_TIMEOUT_RATIO = 0.3

GEOCODING = "geocoding"
ROUTING = "routing"


def _normalize_timeout(value: int | float | None, default: int, *, upper_bound: int | None = None) -> int:
    """타임아웃 값을 정수 초 단위로 정규화합니다."""
    try:
        seconds = int(value) if value is not None else int(default)
    except (TypeError, ValueError):
        seconds = int(default)

    seconds = max(_MIN_TIMEOUT_SECONDS, seconds)
    if upper_bound is not None:
        seconds = min(seconds, upper_bound)
    return seconds


@dataclass(frozen=True, slots=True)
class TimeoutPolicy:
    """요청 전체 > 외부 API > 공급자 순으로 좁아지는 타임아웃 예산.

    단말 위치 조회는 외부 API가 아니므로 요청 전체 예산만 따릅니다.
    """

    request_timeout_seconds: int
    external_api_timeout_seconds: int
    geocoding_timeout_seconds: int
    routing_timeout_seconds: int
    geolocation_timeout_seconds: int

    def for_provider(self, provider: str) -> int:
        if provider == GEOCODING:
            return self.geocoding_timeout_seconds
        if provider == ROUTING:
            return self.routing_timeout_seconds
        raise ValueError(f"Unknown provider: {provider!r}")

    def requests_timeout(self, provider: str) -> tuple[float, float]:
        return to_requests_timeout(self.for_provider(provider))


def build_timeout_policy(settings: Settings) -> TimeoutPolicy:
    """설정값으로부터 상위 예산을 넘지 않는 정책을 생성합니다."""
    request_timeout = _normalize_timeout(settings.REQUEST_TIMEOUT_SECONDS, default=30)
    external_timeout = _normalize_timeout(
        settings.EXTERNAL_API_TIMEOUT_SECONDS,
        default=15,
        upper_bound=request_timeout,
    )
    provider_timeouts = {
        provider: _normalize_timeout(value, default=10, upper_bound=external_timeout)
        for provider, value in (
            (GEOCODING, settings.GEOCODING_TIMEOUT_SECONDS),
            (ROUTING, settings.ROUTING_TIMEOUT_SECONDS),
        )
    }

    return TimeoutPolicy(
        request_timeout_seconds=request_timeout,
        external_api_timeout_seconds=external_timeout,
        geocoding_timeout_seconds=provider_timeouts[GEOCODING],
        routing_timeout_seconds=provider_timeouts[ROUTING],
        geolocation_timeout_seconds=_normalize_timeout(
            settings.GEOLOCATION_TIMEOUT_SECONDS,
            default=10,
            upper_bound=request_timeout,
        ),
    )


def get_timeout_policy(settings: Settings | None = None) -> TimeoutPolicy:
    """현재 설정을 기반으로 타임아웃 정책을 반환합니다."""
    return build_timeout_policy(settings or get_settings())


def to_requests_timeout(total_timeout_seconds: int) -> tuple[float, float]:
    """총 예산을 requests용 (connect, read) 튜플로 나눕니다. 연결은 최대 5초입니다."""
    total = float(max(_MIN_TIMEOUT_SECONDS, int(total_timeout_seconds)))
    connect_timeout = min(_MAX_CONNECT_TIMEOUT_SECONDS, max(1.0, total * _CONNECT_TIMEOUT_RATIO))
    if total <= connect_timeout:
        return (connect_timeout, max(0.5, total * 0.5))
    return (connect_timeout, max(1.0, total - connect_timeout))
