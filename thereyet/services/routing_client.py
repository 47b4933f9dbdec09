"""OSRM 기반 경로 거리/시간 계산 클라이언트."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from thereyet.core.cache import TTLCache
from thereyet.core.dedup import RequestDeduplicator
from thereyet.core.errors import (
    ErrorKind,
    InvalidInputError,
    RoutingError,
    RoutingErrorKind,
    TransportError,
)
from thereyet.core.geo import Coordinate
from thereyet.core.logger import get_logger
from thereyet.core.retry import RetryOptions, retry_with_backoff
from thereyet.core.signatures import route_signature
from thereyet.schemas.provider import OsrmRouteResponse
from thereyet.schemas.route import RouteResult, RoutingProfile
from thereyet.services.http_transport import HttpTransport

logger = get_logger(__name__)

CoordinateLike = Coordinate | tuple[float, float] | Mapping[str, float]


def _to_coordinate(value: CoordinateLike, label: str) -> Coordinate:
    """좌표 입력을 `Coordinate`로 변환합니다. 실패하면 네트워크 호출 전에 거부합니다."""
    if isinstance(value, Coordinate):
        return value

    try:
        if isinstance(value, Mapping):
            return Coordinate(latitude=value["latitude"], longitude=value["longitude"])
        latitude, longitude = value
        return Coordinate(latitude=latitude, longitude=longitude)
    except (InvalidInputError, KeyError, TypeError, ValueError) as exc:
        raise RoutingError(
            RoutingErrorKind.INVALID_COORDINATES,
            f"Invalid {label} coordinates: {value!r}",
            cause=ErrorKind.INVALID_INPUT,
        ) from exc


def parse_route_response(raw: Any) -> RouteResult:
    """OSRM 응답에서 첫 번째(최적) 경로를 꺼냅니다."""
    try:
        response = OsrmRouteResponse.model_validate(raw)
    except ValidationError as exc:
        raise RoutingError(
            RoutingErrorKind.SERVICE_UNAVAILABLE,
            f"Invalid response from routing provider: {exc.error_count()} validation error(s)",
            cause=ErrorKind.INVALID_RESPONSE,
        ) from exc

    if response.code != "Ok":
        raise RoutingError.from_provider_code(response.code, response.message)

    if not response.routes:
        raise RoutingError(
            RoutingErrorKind.NO_ROUTE,
            "No route found between the specified locations",
            cause=ErrorKind.NO_ROUTE,
            provider_code=response.code,
        )

    best = response.routes[0]
    return RouteResult.from_measurements(best.distance, best.duration)


class RoutingClient:
    """중복 제거 → (선택적 단기 캐시) → 재시도 → 전송으로 감싼 경로 클라이언트."""

    _ROUTE_PATH = "/route/v1"

    def __init__(
        self,
        transport: HttpTransport,
        *,
        base_url: str,
        deduplicator: RequestDeduplicator,
        cache: TTLCache[RouteResult] | None = None,
        retry_options: RetryOptions | None = None,
    ) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._deduplicator = deduplicator
        self._cache = cache if cache is not None and cache.ttl_seconds > 0 else None
        self._retry_options = retry_options or RetryOptions()

    async def calculate_route(
        self,
        origin: CoordinateLike,
        destination: CoordinateLike,
        profile: RoutingProfile | str = RoutingProfile.DRIVING,
        *,
        timeout_seconds: float | None = None,
    ) -> RouteResult:
        """두 좌표 사이의 거리/소요 시간을 계산합니다. `timeout_seconds`는 시도별 제한 시간입니다."""
        origin_coordinate = _to_coordinate(origin, "origin")
        destination_coordinate = _to_coordinate(destination, "destination")
        try:
            resolved_profile = RoutingProfile(profile)
        except ValueError as exc:
            raise InvalidInputError(f"Unsupported routing profile: {profile!r}", field="profile") from exc

        options = self._retry_options
        if timeout_seconds is not None:
            if timeout_seconds <= 0:
                raise InvalidInputError("timeout_seconds must be positive.", field="timeout_seconds")
            options = options.with_overrides(attempt_timeout=timeout_seconds)

        signature = route_signature(origin_coordinate, destination_coordinate, resolved_profile.value)
        if self._cache is not None:
            cached = self._cache.get(signature)
            if cached is not None:
                return cached

        coordinates = f"{origin_coordinate.to_lon_lat()};{destination_coordinate.to_lon_lat()}"
        url = f"{self._base_url}{self._ROUTE_PATH}/{resolved_profile.value}/{coordinates}"
        params = {"overview": "false", "steps": "false", "alternatives": "false"}

        async def _fetch() -> RouteResult:
            try:
                raw = await retry_with_backoff(lambda: self._transport.get_json(url, params), options)
            except TransportError as exc:
                raise RoutingError.from_transport(exc) from exc

            route = parse_route_response(raw)
            if self._cache is not None:
                self._cache.set(signature, route)
            logger.info(
                "Route calculated: profile=%s distance_m=%.0f duration_s=%.0f",
                resolved_profile.value,
                route.distance_meters,
                route.duration_seconds,
            )
            return route

        return await self._deduplicator.deduplicate(signature, _fetch)

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()
