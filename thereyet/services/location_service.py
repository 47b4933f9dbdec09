"""단말 위치 조회 → 역지오코딩으로 현재 위치를 해석하는 서비스."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from pydantic import ValidationError

from thereyet.core.errors import (
    GeolocationError,
    GeolocationErrorKind,
    InvalidInputError,
    classify_geolocation_error,
)
from thereyet.core.geo import Coordinate
from thereyet.core.logger import get_logger
from thereyet.schemas.location import CurrentLocation, DevicePosition
from thereyet.services.geocoding_client import GeocodingClient

logger = get_logger(__name__)

DEFAULT_POSITION_TIMEOUT_SECONDS = 10.0


class PositionUnavailable(Exception):
    """위치 제공자가 플랫폼 고유 실패 코드와 함께 발생시키는 예외."""

    def __init__(self, native_code: int | str | None, message: str | None = None) -> None:
        super().__init__(message or f"Position unavailable (code={native_code!r})")
        self.native_code = native_code


class PositionProvider(ABC):
    """단말 위치 API 추상 프로토콜."""

    @abstractmethod
    async def get_current_position(self) -> DevicePosition:
        """현재 위치를 반환합니다.

        Raises:
            PositionUnavailable: 권한 거부, 측정 실패 등 플랫폼 오류.
        """
        raise NotImplementedError


class StaticPositionProvider(PositionProvider):
    """고정 좌표를 돌려주는 모의 위치 제공자 (데모/테스트용)."""

    def __init__(self, latitude: float, longitude: float, *, accuracy_meters: float | None = 10.0) -> None:
        self._coordinate = Coordinate(latitude=latitude, longitude=longitude)
        self._accuracy_meters = accuracy_meters

    async def get_current_position(self) -> DevicePosition:
        return DevicePosition(
            coordinate=self._coordinate,
            accuracy_meters=self._accuracy_meters,
            timestamp=datetime.now(timezone.utc),
            is_mock=True,
        )


class LocationService:
    """현재 위치를 사람이 읽을 수 있는 장소로 해석합니다."""

    def __init__(
        self,
        geocoding: GeocodingClient,
        *,
        position_timeout_seconds: float = DEFAULT_POSITION_TIMEOUT_SECONDS,
    ) -> None:
        self._geocoding = geocoding
        self._position_timeout_seconds = position_timeout_seconds

    async def get_position(
        self,
        provider: PositionProvider | None,
        *,
        timeout_seconds: float | None = None,
    ) -> DevicePosition:
        """제공자에서 위치를 받아오고 실패를 `GeolocationError`로 분류합니다."""
        if provider is None:
            raise classify_geolocation_error(None)

        if timeout_seconds is None:
            timeout_seconds = self._position_timeout_seconds

        try:
            position = await asyncio.wait_for(provider.get_current_position(), timeout=timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise GeolocationError(
                GeolocationErrorKind.TIMEOUT,
                f"Position request timed out after {timeout_seconds:.1f}s",
            ) from exc
        except PositionUnavailable as exc:
            error = classify_geolocation_error(exc.native_code)
            logger.warning("Position lookup failed: kind=%s code=%r", error.kind.value, exc.native_code)
            raise error from exc
        except (InvalidInputError, ValidationError) as exc:
            raise GeolocationError(
                GeolocationErrorKind.POSITION_UNAVAILABLE,
                f"Device returned invalid coordinates: {exc}",
            ) from exc

        return position

    async def resolve_current_location(
        self,
        provider: PositionProvider | None,
        *,
        timeout_seconds: float | None = None,
    ) -> CurrentLocation:
        """위치를 조회한 뒤 역지오코딩합니다. 지오코딩 실패는 `GeocodingError`로 전파됩니다."""
        position = await self.get_position(provider, timeout_seconds=timeout_seconds)
        place = await self._geocoding.reverse_geocode(position.coordinate)
        return CurrentLocation(position=position, place=place)
