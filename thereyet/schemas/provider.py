"""외부 공급자(Nominatim, OSRM) 원본 응답 검증 모델.

네트워크 경계에서만 사용하며, 검증을 통과한 값만 내부 모델로 변환됩니다.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NominatimAddress(BaseModel):
    """Nominatim `address` 객체. 알려지지 않은 키도 보존합니다."""

    model_config = ConfigDict(extra="allow")

    house_number: str | None = None
    road: str | None = None
    attraction: str | None = None
    amenity: str | None = None
    tourism: str | None = None
    building: str | None = None
    leisure: str | None = None
    shop: str | None = None
    suburb: str | None = None
    neighbourhood: str | None = None
    city: str | None = None
    town: str | None = None
    village: str | None = None
    county: str | None = None
    state: str | None = None
    country: str | None = None
    postcode: str | None = None


class NominatimPlace(BaseModel):
    """Nominatim search/reverse 결과 항목."""

    model_config = ConfigDict(extra="ignore")

    place_id: str | None = None
    osm_type: str | None = None
    osm_id: str | None = None
    lat: float
    lon: float
    display_name: str = ""
    address: NominatimAddress | None = None

    @field_validator("place_id", "osm_id", mode="before")
    @classmethod
    def _stringify_identifier(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value)


class OsrmRoute(BaseModel):
    """OSRM `routes[]` 항목."""

    model_config = ConfigDict(extra="ignore")

    distance: float = Field(..., ge=0)
    duration: float = Field(..., ge=0)


class OsrmRouteResponse(BaseModel):
    """OSRM `/route` 응답."""

    model_config = ConfigDict(extra="ignore")

    code: str
    message: str | None = None
    routes: list[OsrmRoute] = Field(default_factory=list)
