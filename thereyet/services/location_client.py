"""지오코딩/경로 클라이언트를 하나로 묶는 구성 루트."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from thereyet.core.cache import TTLCache
from thereyet.core.config import Settings, get_settings
from thereyet.core.dedup import RequestDeduplicator
from thereyet.core.logger import get_logger
from thereyet.core.retry import RetryOptions
from thereyet.core.timeout_policy import GEOCODING, ROUTING, get_timeout_policy
from thereyet.schemas.route import RouteResult
from thereyet.services.geocoding_client import GeocodingClient
from thereyet.services.http_transport import HttpTransport
from thereyet.services.location_service import DEFAULT_POSITION_TIMEOUT_SECONDS, LocationService
from thereyet.services.routing_client import RoutingClient

logger = get_logger(__name__)


class LocationClient:
    """캐시와 in-flight 요청 맵을 인스턴스 단위로 소유하는 클라이언트.

    `geocoding`, `routing`, `location` 세 진입점이 같은 중복 제거기와 재시도 정책을 공유합니다.
    운영에서는 프로세스당 하나를 만들어 주입하고, 테스트는 매번 새로 만듭니다.
    """

    def __init__(
        self,
        *,
        geocoding_transport: HttpTransport,
        routing_transport: HttpTransport,
        nominatim_base_url: str,
        osrm_base_url: str,
        geocoding_cache: TTLCache[Any],
        routing_cache: TTLCache[RouteResult] | None,
        deduplicator: RequestDeduplicator,
        retry_options: RetryOptions,
        min_query_length: int = 2,
        default_limit: int = 5,
        position_timeout_seconds: float = DEFAULT_POSITION_TIMEOUT_SECONDS,
    ) -> None:
        self._geocoding_cache = geocoding_cache
        self._routing_cache = routing_cache
        self.deduplicator = deduplicator
        self.geocoding = GeocodingClient(
            geocoding_transport,
            base_url=nominatim_base_url,
            cache=geocoding_cache,
            deduplicator=deduplicator,
            retry_options=retry_options,
            min_query_length=min_query_length,
            default_limit=default_limit,
        )
        self.routing = RoutingClient(
            routing_transport,
            base_url=osrm_base_url,
            deduplicator=deduplicator,
            cache=routing_cache,
            retry_options=retry_options,
        )
        self.location = LocationService(self.geocoding, position_timeout_seconds=position_timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LocationClient:
        """애플리케이션 설정으로 클라이언트를 생성합니다."""
        resolved = settings or get_settings()
        timeout_policy = get_timeout_policy(resolved)

        def _transport(provider: str) -> HttpTransport:
            return HttpTransport(
                user_agent=resolved.CLIENT_USER_AGENT,
                timeout_seconds=timeout_policy.for_provider(provider),
                referer=resolved.CLIENT_REFERER,
                accept_language=resolved.ACCEPT_LANGUAGE,
            )

        routing_cache = None
        if resolved.ROUTING_CACHE_TTL_SECONDS > 0:
            routing_cache = TTLCache(
                resolved.ROUTING_CACHE_TTL_SECONDS,
                max_entries=resolved.CACHE_MAX_ENTRIES,
                name="routing",
            )

        logger.info(
            "Location client configured: geocoding_ttl=%.0fs routing_ttl=%.0fs max_attempts=%d",
            resolved.GEOCODING_CACHE_TTL_SECONDS,
            resolved.ROUTING_CACHE_TTL_SECONDS,
            resolved.RETRY_MAX_ATTEMPTS,
        )
        return cls(
            geocoding_transport=_transport(GEOCODING),
            routing_transport=_transport(ROUTING),
            nominatim_base_url=resolved.NOMINATIM_BASE_URL,
            osrm_base_url=resolved.OSRM_BASE_URL,
            geocoding_cache=TTLCache(
                resolved.GEOCODING_CACHE_TTL_SECONDS,
                max_entries=resolved.CACHE_MAX_ENTRIES,
                name="geocoding",
            ),
            routing_cache=routing_cache,
            deduplicator=RequestDeduplicator(resolved.PENDING_REQUEST_MAX_AGE_SECONDS),
            retry_options=RetryOptions.from_settings(resolved),
            min_query_length=resolved.SEARCH_MIN_QUERY_LENGTH,
            default_limit=resolved.SEARCH_DEFAULT_LIMIT,
            position_timeout_seconds=timeout_policy.geolocation_timeout_seconds,
        )

    def clear_caches(self) -> None:
        self._geocoding_cache.clear()
        if self._routing_cache is not None:
            self._routing_cache.clear()

    def close(self) -> None:
        """캐시와 진행 중 요청 맵을 비웁니다. 세션은 요청마다 닫히므로 따로 정리하지 않습니다."""
        self.clear_caches()
        self.deduplicator.clear_pending()

    def __enter__(self) -> LocationClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@lru_cache(maxsize=1)
def get_location_client() -> LocationClient:
    """프로세스 단위 싱글톤 클라이언트를 반환합니다."""
    return LocationClient.from_settings()


def release_location_client() -> None:
    """생성된 싱글톤이 있으면 정리하고 다음 호출 때 새로 만들도록 합니다."""
    if get_location_client.cache_info().currsize:
        get_location_client().close()
        logger.info("Location client released")
    get_location_client.cache_clear()
