"""Nominatim 기반 정/역 지오코딩 클라이언트."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from thereyet.core.cache import TTLCache
from thereyet.core.dedup import RequestDeduplicator
from thereyet.core.errors import (
    GeocodingError,
    GeocodingErrorKind,
    InvalidInputError,
    TransportError,
)
from thereyet.core.geo import Coordinate, validate_coordinates
from thereyet.core.logger import get_logger
from thereyet.core.retry import RetryOptions, retry_with_backoff
from thereyet.core.signatures import (
    forward_geocode_signature,
    normalize_country_codes,
    reverse_geocode_signature,
)
from thereyet.schemas.place import PlaceResult
from thereyet.services.http_transport import HttpTransport
from thereyet.services.place_mapping import parse_place, parse_place_list

logger = get_logger(__name__)

MAX_RESULT_LIMIT = 50

Viewbox = tuple[float, float, float, float]


def format_viewbox(viewbox: Viewbox) -> str:
    """(서경, 남위, 동경, 북위) 상자를 Nominatim `x1,y1,x2,y2` 문자열로 만듭니다."""
    try:
        west, south, east, north = viewbox
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("viewbox must have four numbers.", field="viewbox") from exc

    if not (validate_coordinates(south, west) and validate_coordinates(north, east)):
        raise InvalidInputError("viewbox corners must be valid coordinates.", field="viewbox")
    return ",".join(f"{float(value):.6f}".rstrip("0").rstrip(".") for value in (west, south, east, north))


class GeocodingClient:
    """캐시 → 중복 제거 → 재시도 → 전송 순서로 감싼 지오코딩 클라이언트.

    캐시 적중 시 네트워크와 중복 제거기를 거치지 않습니다.
    결과가 0건인 검색은 오류가 아니라 빈 리스트입니다.
    """

    _SEARCH_PATH = "/search"
    _REVERSE_PATH = "/reverse"

    def __init__(
        self,
        transport: HttpTransport,
        *,
        base_url: str,
        cache: TTLCache[Any],
        deduplicator: RequestDeduplicator,
        retry_options: RetryOptions | None = None,
        min_query_length: int = 2,
        default_limit: int = 5,
    ) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._cache = cache
        self._deduplicator = deduplicator
        self._retry_options = retry_options or RetryOptions()
        self._min_query_length = max(1, min_query_length)
        self._default_limit = default_limit

    def _validate_query(self, query: object) -> str:
        if not isinstance(query, str):
            raise InvalidInputError("Search query must be a string.", field="query")
        trimmed = query.strip()
        if len(trimmed) < self._min_query_length:
            raise InvalidInputError(
                f"Search query must be at least {self._min_query_length} characters long.",
                field="query",
            )
        return trimmed

    def _validate_limit(self, limit: int | None) -> int:
        resolved = self._default_limit if limit is None else limit
        if isinstance(resolved, bool) or not isinstance(resolved, int) or not 1 <= resolved <= MAX_RESULT_LIMIT:
            raise InvalidInputError(f"limit must be between 1 and {MAX_RESULT_LIMIT}.", field="limit")
        return resolved

    def _options_for(self, timeout_seconds: float | None) -> RetryOptions:
        if timeout_seconds is None:
            return self._retry_options
        if timeout_seconds <= 0:
            raise InvalidInputError("timeout_seconds must be positive.", field="timeout_seconds")
        return self._retry_options.with_overrides(attempt_timeout=timeout_seconds)

    async def geocode(
        self,
        query: str,
        *,
        limit: int | None = None,
        addressdetails: bool = True,
        countrycodes: Sequence[str] | None = None,
        viewbox: Viewbox | None = None,
        bounded: bool = False,
        timeout_seconds: float | None = None,
    ) -> list[PlaceResult]:
        """자유 텍스트로 장소를 검색합니다.

        `viewbox`는 상자 안쪽 결과를 우선하고, `bounded=True`면 상자 밖 결과를 제외합니다.
        `timeout_seconds`는 시도마다 적용되는 제한 시간입니다.
        """
        trimmed = self._validate_query(query)
        resolved_limit = self._validate_limit(limit)
        codes = normalize_country_codes(countrycodes)
        if bounded and viewbox is None:
            raise InvalidInputError("bounded search requires a viewbox.", field="bounded")
        box = format_viewbox(viewbox) if viewbox is not None else None
        options = self._options_for(timeout_seconds)

        signature = forward_geocode_signature(
            trimmed,
            limit=resolved_limit,
            addressdetails=addressdetails,
            countrycodes=countrycodes,
            viewbox=box,
            bounded=bounded,
        )
        cached = self._cache.get(signature)
        if cached is not None:
            return list(cached)

        params: dict[str, Any] = {
            "format": "json",
            "q": trimmed,
            "limit": resolved_limit,
            "addressdetails": 1 if addressdetails else 0,
        }
        if codes:
            params["countrycodes"] = codes
        if box:
            params["viewbox"] = box
            if bounded:
                params["bounded"] = 1

        url = f"{self._base_url}{self._SEARCH_PATH}"

        async def _fetch() -> list[PlaceResult]:
            try:
                raw = await retry_with_backoff(lambda: self._transport.get_json(url, params), options)
                places = parse_place_list(raw)
            except TransportError as exc:
                raise GeocodingError.from_transport(exc) from exc

            self._cache.set(signature, places)
            logger.info("Geocoding search completed: result_count=%d countrycodes=%s", len(places), codes)
            return places

        places = await self._deduplicator.deduplicate(signature, _fetch)
        return list(places)

    async def reverse_geocode(self, coordinate: Coordinate, *, timeout_seconds: float | None = None) -> PlaceResult:
        """좌표를 사람이 읽을 수 있는 장소로 변환합니다."""
        if not isinstance(coordinate, Coordinate):
            raise InvalidInputError("reverse_geocode requires a Coordinate.", field="coordinate")
        options = self._options_for(timeout_seconds)

        signature = reverse_geocode_signature(coordinate)
        cached = self._cache.get(signature)
        if cached is not None:
            return cached

        params = {
            "format": "json",
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "addressdetails": 1,
        }
        url = f"{self._base_url}{self._REVERSE_PATH}"

        async def _fetch() -> PlaceResult:
            try:
                raw = await retry_with_backoff(lambda: self._transport.get_json(url, params), options)
            except TransportError as exc:
                raise GeocodingError.from_transport(exc) from exc

            # 바다 한가운데 등은 200 응답에 {"error": "Unable to geocode"}로 온다
            if isinstance(raw, dict) and raw.get("error"):
                raise GeocodingError(
                    GeocodingErrorKind.NOT_FOUND,
                    f"Reverse geocoding found no place: {raw['error']}",
                )

            try:
                place = parse_place(raw)
            except TransportError as exc:
                raise GeocodingError.from_transport(exc) from exc

            self._cache.set(signature, place)
            return place

        return await self._deduplicator.deduplicate(signature, _fetch)

    def clear_cache(self) -> None:
        self._cache.clear()
