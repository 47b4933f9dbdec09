"""단말 위치와 현재 위치 해석 결과 모델."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from thereyet.core.geo import Coordinate
from thereyet.schemas.place import PlaceResult


class DevicePosition(BaseModel):
    """단말 위치 API가 돌려준 좌표."""

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate = Field(..., description="단말 좌표")
    accuracy_meters: float | None = Field(default=None, ge=0, description="정확도 반경 (m)")
    timestamp: datetime | None = Field(default=None, description="측정 시각")
    is_mock: bool = Field(default=False, description="모의 위치 여부")


class CurrentLocation(BaseModel):
    """현재 위치와 역지오코딩된 장소."""

    position: DevicePosition
    place: PlaceResult
