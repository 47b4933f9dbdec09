"""목적지 자유 텍스트 검색과 국가 편향 적용."""

from __future__ import annotations

from thereyet.core.config import get_settings
from thereyet.core.countries import get_country_code, query_contains_country
from thereyet.core.logger import get_logger
from thereyet.core.sanitization import sanitize_destination
from thereyet.schemas.place import PlaceResult
from thereyet.services.geocoding_client import GeocodingClient

logger = get_logger(__name__)


def resolve_country_bias(query: str, user_country: str | None) -> list[str] | None:
    """사용자 국가를 알고 검색어에 국가 언급이 없다고 판단되면 `[ISO 코드]`를 반환합니다."""
    if not user_country:
        return None

    code = get_country_code(user_country)
    if code is None and len(user_country.strip()) == 2 and user_country.strip().isalpha():
        code = user_country.strip().upper()
    if code is None:
        return None

    if query_contains_country(query):
        return None
    return [code.lower()]


async def search_destination(
    client: GeocodingClient,
    query: str,
    *,
    user_country: str | None = None,
    limit: int | None = None,
) -> list[PlaceResult]:
    """검색어를 정제하고 필요하면 국가 편향을 걸어 목적지를 검색합니다."""
    settings = get_settings()
    sanitized = sanitize_destination(
        query,
        min_length=settings.SEARCH_MIN_QUERY_LENGTH,
        max_length=settings.SEARCH_MAX_QUERY_LENGTH,
    )
    countrycodes = resolve_country_bias(sanitized, user_country)
    if countrycodes:
        logger.debug("Applying country bias: countrycodes=%s", countrycodes)

    return await client.geocode(
        sanitized,
        limit=limit,
        addressdetails=True,
        countrycodes=countrycodes,
    )
