"""경로 계산 결과 모델."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from thereyet.core.formatting import format_distance, format_duration


class RoutingProfile(str, Enum):
    """OSRM 이동 수단 프로필."""

    DRIVING = "driving"
    WALKING = "walking"
    CYCLING = "cycling"


class RouteResult(BaseModel):
    """두 좌표 사이 최적 경로의 거리/시간."""

    model_config = ConfigDict(frozen=True)

    distance_meters: float = Field(..., ge=0, description="거리 (m)")
    duration_seconds: float = Field(..., ge=0, description="소요 시간 (초)")
    formatted_distance: str = Field(..., description="표시용 거리 (km, 소수 첫째 자리)")
    formatted_duration: str = Field(..., description="표시용 소요 시간")

    @classmethod
    def from_measurements(cls, distance_meters: float, duration_seconds: float) -> "RouteResult":
        return cls(
            distance_meters=distance_meters,
            duration_seconds=duration_seconds,
            formatted_distance=format_distance(distance_meters),
            formatted_duration=format_duration(duration_seconds),
        )
