"""좌표 값 타입과 검증 유틸리티."""

from __future__ import annotations

import math
from dataclasses import dataclass

from thereyet.core.errors import InvalidInputError

_MIN_LAT = -90.0
_MAX_LAT = 90.0
_MIN_LNG = -180.0
_MAX_LNG = 180.0


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_coordinates(latitude: object, longitude: object) -> bool:
    """위경도가 유한한 숫자이며 유효 범위 안에 있는지 반환합니다."""
    if not (_is_number(latitude) and _is_number(longitude)):
        return False

    lat = float(latitude)
    lng = float(longitude)
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False

    return _MIN_LAT <= lat <= _MAX_LAT and _MIN_LNG <= lng <= _MAX_LNG


def round_coordinate(value: float, decimals: int) -> float:
    """요청 서명용으로 좌표를 반올림합니다. `-0.0`은 `0.0`으로 맞춥니다."""
    return round(float(value), decimals) + 0.0


@dataclass(frozen=True, slots=True)
class Coordinate:
    """불변 위경도 좌표. 범위를 벗어난 값은 생성 시점에 거부합니다."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not validate_coordinates(self.latitude, self.longitude):
            raise InvalidInputError(
                f"Invalid coordinates: latitude={self.latitude!r} longitude={self.longitude!r}",
                field="coordinate",
            )
        object.__setattr__(self, "latitude", float(self.latitude))
        object.__setattr__(self, "longitude", float(self.longitude))

    def rounded(self, decimals: int) -> tuple[float, float]:
        return (
            round_coordinate(self.latitude, decimals),
            round_coordinate(self.longitude, decimals),
        )

    def signature_key(self, decimals: int) -> str:
        """지정한 소수 자릿수로 고정된 `lat,lon` 문자열."""
        lat, lng = self.rounded(decimals)
        return f"{lat:.{decimals}f},{lng:.{decimals}f}"

    def to_lon_lat(self) -> str:
        """OSRM 경로 URL 형식(`lon,lat`)으로 직렬화합니다."""
        return f"{self.longitude},{self.latitude}"
