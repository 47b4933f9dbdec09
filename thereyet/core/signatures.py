"""캐시/중복 제거 키로 쓰는 요청 서명 생성."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from thereyet.core.geo import Coordinate

REVERSE_GEOCODE_PRECISION = 4
ROUTE_PRECISION = 3


def _normalize_endpoint(endpoint: str) -> str:
    normalized = endpoint.strip()
    if len(normalized) > 1:
        normalized = normalized.rstrip("/")
    return normalized


def _stringify(value: object) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def build_request_signature(
    method: str,
    endpoint: str,
    params: Mapping[str, object] | None = None,
) -> str:
    """메서드 + 정규화된 엔드포인트 + 정렬된 쿼리 파라미터로 결정적 서명을 만듭니다.

    값이 None인 파라미터는 제외합니다.
    """
    items = sorted((key, _stringify(value)) for key, value in (params or {}).items() if value is not None)
    query = "&".join(f"{key}={value}" for key, value in items)
    signature = f"{method.strip().upper()}:{_normalize_endpoint(endpoint)}"
    return f"{signature}?{query}" if query else signature


def normalize_query(query: str) -> str:
    return query.strip().lower()


def normalize_country_codes(countrycodes: Iterable[str] | None) -> str | None:
    if not countrycodes:
        return None
    codes = sorted({code.strip().lower() for code in countrycodes if code and code.strip()})
    return ",".join(codes) or None


def forward_geocode_signature(
    query: str,
    *,
    limit: int,
    addressdetails: bool,
    countrycodes: Iterable[str] | None = None,
    viewbox: str | None = None,
    bounded: bool = False,
) -> str:
    return build_request_signature(
        "GET",
        "/search",
        {
            "q": normalize_query(query),
            "limit": limit,
            "addressdetails": addressdetails,
            "countrycodes": normalize_country_codes(countrycodes),
            "viewbox": viewbox,
            "bounded": True if bounded else None,
        },
    )


def reverse_geocode_signature(coordinate: Coordinate) -> str:
    """약 11m 정밀도(소수 4자리)로 반올림한 역지오코딩 서명."""
    lat, lon = coordinate.signature_key(REVERSE_GEOCODE_PRECISION).split(",")
    return build_request_signature("GET", "/reverse", {"lat": lat, "lon": lon})


def route_signature(origin: Coordinate, destination: Coordinate, profile: str) -> str:
    """약 111m 정밀도(소수 3자리)로 반올림한 경로 서명."""
    return build_request_signature(
        "GET",
        f"/route/v1/{profile.strip().lower()}",
        {
            "from": origin.signature_key(ROUTE_PRECISION),
            "to": destination.signature_key(ROUTE_PRECISION),
        },
    )
