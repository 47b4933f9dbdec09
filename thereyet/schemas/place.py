"""지오코딩 결과를 표준화한 Place 모델."""

from pydantic import BaseModel, ConfigDict, Field

from thereyet.core.geo import Coordinate


class AddressComponents(BaseModel):
    """구조화된 주소 구성 요소."""

    model_config = ConfigDict(frozen=True)

    street: str | None = Field(default=None, description="도로명 (번지 포함 가능)")
    suburb: str | None = Field(default=None, description="동/근린 지역")
    city: str | None = Field(default=None, description="도시 (city/town/village)")
    county: str | None = Field(default=None, description="군/카운티")
    state: str | None = Field(default=None, description="주/도")
    country: str | None = Field(default=None, description="국가")
    postcode: str | None = Field(default=None, description="우편번호")


class PlaceResult(BaseModel):
    """정/역 지오코딩 공통 결과."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="공급자 장소 ID (불투명 문자열)")
    display_name: str = Field(..., description="전체 표시 주소")
    primary_name: str = Field(..., description="사람이 읽기 좋은 대표 이름")
    coordinate: Coordinate = Field(..., description="장소 좌표")
    address_components: AddressComponents | None = Field(default=None, description="구조화 주소")
