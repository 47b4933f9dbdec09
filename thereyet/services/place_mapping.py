"""Nominatim 원본 레코드를 `PlaceResult`로 변환하는 순수 함수 모음.

정방향/역방향 지오코딩이 같은 변환 경로를 사용합니다.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from thereyet.core.errors import ErrorKind, InvalidInputError, TransportError
from thereyet.core.geo import Coordinate
from thereyet.schemas.place import AddressComponents, PlaceResult
from thereyet.schemas.provider import NominatimAddress, NominatimPlace

# 대표 이름 우선순위: 명소/편의시설/관광/건물/레저/상점
_NAMED_FEATURE_KEYS = ("attraction", "amenity", "tourism", "building", "leisure", "shop")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _street_address(address: NominatimAddress) -> str | None:
    road = _clean(address.road)
    if not road:
        return None
    house_number = _clean(address.house_number)
    return f"{house_number} {road}" if house_number else road


def extract_address_components(address: NominatimAddress | None) -> AddressComponents | None:
    if address is None:
        return None

    return AddressComponents(
        street=_street_address(address),
        suburb=_clean(address.suburb) or _clean(address.neighbourhood),
        city=_clean(address.city) or _clean(address.town) or _clean(address.village),
        county=_clean(address.county),
        state=_clean(address.state),
        country=_clean(address.country),
        postcode=_clean(address.postcode),
    )


def primary_name(display_name: str, address: NominatimAddress | None) -> str:
    """명명된 장소 > 도로 주소 > 표시 이름 첫 구간 순으로 대표 이름을 고릅니다."""
    if address is not None:
        for key in _NAMED_FEATURE_KEYS:
            value = _clean(getattr(address, key))
            if value:
                return value

        street = _street_address(address)
        if street:
            return street

    first_segment = display_name.split(",")[0].strip()
    return first_segment or display_name.strip()


def _place_id(place: NominatimPlace) -> str:
    if place.place_id:
        return place.place_id
    if place.osm_type and place.osm_id:
        return f"{place.osm_type}:{place.osm_id}"
    return f"{place.lat:.6f},{place.lon:.6f}"


def to_place_result(place: NominatimPlace) -> PlaceResult:
    """표시 이름이 비어 있으면 주소 구성 요소, 그마저 없으면 좌표 문자열로 채웁니다."""
    coordinate = Coordinate(latitude=place.lat, longitude=place.lon)
    components = extract_address_components(place.address)
    display_name = (
        place.display_name.strip()
        or (format_address(components) if components is not None else "")
        or f"{place.lat:.6f},{place.lon:.6f}"
    )
    return PlaceResult(
        id=_place_id(place),
        display_name=display_name,
        primary_name=primary_name(display_name, place.address),
        coordinate=coordinate,
        address_components=components,
    )


def parse_place(raw: Any) -> PlaceResult:
    """원본 JSON 객체 하나를 검증 후 변환합니다. 형식 오류는 INVALID_RESPONSE입니다."""
    try:
        return to_place_result(NominatimPlace.model_validate(raw))
    except (ValidationError, InvalidInputError) as exc:
        raise TransportError(
            ErrorKind.INVALID_RESPONSE,
            f"Invalid place record from geocoding provider: {exc}",
        ) from exc


def parse_place_list(raw: Any) -> list[PlaceResult]:
    if not isinstance(raw, list):
        raise TransportError(
            ErrorKind.INVALID_RESPONSE,
            f"Expected a JSON array from geocoding provider, got {type(raw).__name__}",
        )
    return [parse_place(item) for item in raw]


def format_address(components: AddressComponents) -> str:
    """주소 구성 요소를 `도로, 동, 도시, 주 우편번호, 국가` 형식으로 합칩니다."""
    parts: list[str] = []
    if components.street:
        parts.append(components.street)
    if components.suburb:
        parts.append(components.suburb)
    if components.city:
        parts.append(components.city)
    if components.state and components.postcode:
        parts.append(f"{components.state} {components.postcode}")
    elif components.state or components.postcode:
        parts.append(components.state or components.postcode or "")
    if components.country:
        parts.append(components.country)
    return ", ".join(parts)
