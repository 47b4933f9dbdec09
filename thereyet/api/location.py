"""위치 해석 API 엔드포인트."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from thereyet.api.dependencies import enforce_rate_limit, provide_location_client
from thereyet.core.config import get_settings
from thereyet.core.errors import InvalidInputError, LocationServiceError
from thereyet.core.geo import Coordinate
from thereyet.core.logger import get_logger
from thereyet.schemas.place import PlaceResult
from thereyet.schemas.route import RouteResult, RoutingProfile
from thereyet.services.destination_search import search_destination
from thereyet.services.location_client import LocationClient

router = APIRouter(prefix="/api/v1", tags=["location"], dependencies=[Depends(enforce_rate_limit)])
logger = get_logger(__name__)

NO_CACHE = "no-cache"

_STATUS_BY_KIND: dict[str, int] = {
    "INVALID_COORDINATES": 400,
    "NOT_FOUND": 404,
    "NO_ROUTE": 404,
    "INVALID_RESPONSE": 502,
    "SERVICE_UNAVAILABLE": 502,
    "NETWORK": 503,
}


def _cache_control(ttl_seconds: float) -> str:
    if ttl_seconds <= 0:
        return NO_CACHE
    return f"public, max-age={int(ttl_seconds)}"


def _error_response(exc: InvalidInputError | LocationServiceError) -> JSONResponse:
    """도메인 오류를 `{detail, kind}` 형태의 응답으로 변환합니다."""
    if isinstance(exc, InvalidInputError):
        status_code = 400
        content = {"detail": exc.message, "kind": exc.kind.value}
    else:
        status_code = _STATUS_BY_KIND.get(exc.kind.value, 502)
        content = exc.to_dict()

    if status_code >= 500:
        logger.warning("Upstream failure: %r", exc)
    return JSONResponse(status_code=status_code, content=content, headers={"Cache-Control": NO_CACHE})


@router.get("/geocode", response_model=list[PlaceResult])
async def geocode(
    response: Response,
    q: str = Query(..., description="검색어"),
    limit: int | None = Query(default=None, ge=1, le=50),
    country: str | None = Query(default=None, description="사용자 국가 (이름 또는 ISO 코드)"),
    client: LocationClient = Depends(provide_location_client),
):
    """자유 텍스트로 목적지를 검색합니다. 결과가 없으면 빈 리스트입니다."""
    try:
        places = await search_destination(client.geocoding, q, user_country=country, limit=limit)
    except (InvalidInputError, LocationServiceError) as exc:
        return _error_response(exc)

    response.headers["Cache-Control"] = _cache_control(get_settings().GEOCODING_CACHE_TTL_SECONDS)
    return places


@router.get("/reverse", response_model=PlaceResult)
async def reverse_geocode(
    response: Response,
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    client: LocationClient = Depends(provide_location_client),
):
    """좌표를 장소로 변환합니다."""
    try:
        place = await client.geocoding.reverse_geocode(Coordinate(latitude=lat, longitude=lon))
    except (InvalidInputError, LocationServiceError) as exc:
        return _error_response(exc)

    response.headers["Cache-Control"] = _cache_control(get_settings().GEOCODING_CACHE_TTL_SECONDS)
    return place


@router.get("/route", response_model=RouteResult)
async def calculate_route(
    response: Response,
    from_lat: float = Query(...),
    from_lon: float = Query(...),
    to_lat: float = Query(...),
    to_lon: float = Query(...),
    profile: RoutingProfile = Query(default=RoutingProfile.DRIVING),
    client: LocationClient = Depends(provide_location_client),
):
    """두 좌표 사이의 거리/소요 시간을 계산합니다."""
    try:
        route = await client.routing.calculate_route((from_lat, from_lon), (to_lat, to_lon), profile)
    except (InvalidInputError, LocationServiceError) as exc:
        return _error_response(exc)

    response.headers["Cache-Control"] = _cache_control(get_settings().ROUTING_CACHE_TTL_SECONDS)
    return route
