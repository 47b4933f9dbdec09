"""애플리케이션 전역 설정을 관리하는 모듈."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수 기반 설정 모델."""

    NOMINATIM_BASE_URL: str = "https://nominatim.openstreetmap.org"
    OSRM_BASE_URL: str = "https://router.project-osrm.org"
    CLIENT_USER_AGENT: str = "AreWeThereYet/1.0 (https://thereyetapp.com)"
    CLIENT_REFERER: str | None = None
    ACCEPT_LANGUAGE: str = "en"
    REQUEST_TIMEOUT_SECONDS: int = 30
    EXTERNAL_API_TIMEOUT_SECONDS: int = 15
    GEOCODING_TIMEOUT_SECONDS: int = 10
    ROUTING_TIMEOUT_SECONDS: int = 10
    GEOLOCATION_TIMEOUT_SECONDS: int = 10
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_INITIAL_DELAY_SECONDS: float = 1.0
    RETRY_MAX_DELAY_SECONDS: float = 30.0
    RETRY_BACKOFF_FACTOR: float = 2.0
    RETRY_JITTER_RATIO: float = 0.1
    GEOCODING_CACHE_TTL_SECONDS: float = 300.0
    ROUTING_CACHE_TTL_SECONDS: float = 60.0
    CACHE_MAX_ENTRIES: int = 100
    PENDING_REQUEST_MAX_AGE_SECONDS: float = 30.0
    SEARCH_MIN_QUERY_LENGTH: int = 2
    SEARCH_MAX_QUERY_LENGTH: int = 200
    SEARCH_DEFAULT_LIMIT: int = 5
    RATE_LIMIT_MAX_REQUESTS: int = 60
    RATE_LIMIT_WINDOW_SECONDS: float = 60.0
    DOCS_MODE: str = "disabled"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = ""
    CORS_ALLOW_METHODS: str = "GET,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Content-Type"
    SECURITY_HEADERS_ENABLED: bool = True
    PROXY_HEADERS_ENABLED: bool = True
    PROXY_TRUSTED_HOSTS: str = "127.0.0.1"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("RETRY_MAX_ATTEMPTS", mode="before")
    @classmethod
    def _clamp_retry_max_attempts(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 3
        except (TypeError, ValueError):
            numeric = 3
        return min(10, max(1, numeric))

    @field_validator("RETRY_JITTER_RATIO", mode="before")
    @classmethod
    def _clamp_retry_jitter_ratio(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 0.1
        except (TypeError, ValueError):
            numeric = 0.1
        return min(1.0, max(0.0, numeric))

    @field_validator(
        "GEOCODING_CACHE_TTL_SECONDS",
        "ROUTING_CACHE_TTL_SECONDS",
        "PENDING_REQUEST_MAX_AGE_SECONDS",
        mode="before",
    )
    @classmethod
    def _clamp_non_negative_seconds(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 0.0
        except (TypeError, ValueError):
            numeric = 0.0
        return max(0.0, numeric)

    @field_validator("SEARCH_DEFAULT_LIMIT", mode="before")
    @classmethod
    def _clamp_search_default_limit(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 5
        except (TypeError, ValueError):
            numeric = 5
        return min(50, max(1, numeric))


@lru_cache
def get_settings() -> Settings:
    """Settings 인스턴스를 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return Settings()
