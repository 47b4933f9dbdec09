"""위치 해석 클라이언트의 오류 분류 체계.

전송 계층의 실패(`TransportError`)는 재시도 엔진 내부에서만 쓰이고,
클라이언트 경계를 넘는 오류는 `kind` 태그를 가진 `GeocodingError`,
`RoutingError`, `GeolocationError` 중 하나로 변환됩니다.
UI 계층은 `kind`로 분기하고 `user_message`를 그대로 노출할 수 있습니다.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """전송/검증 단계의 공통 오류 종류."""

    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    NOT_FOUND = "NOT_FOUND"
    NO_ROUTE = "NO_ROUTE"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    INVALID_INPUT = "INVALID_INPUT"


RETRYABLE_TRANSPORT_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.TIMEOUT, ErrorKind.SERVER_ERROR})


class TransportError(Exception):
    """HTTP 한 번의 시도가 실패했을 때 발생하는 예외."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_TRANSPORT_KINDS

    @classmethod
    def from_status(cls, status_code: int, message: str, *, payload: Any = None) -> TransportError:
        """HTTP 상태 코드로 오류 종류를 결정합니다."""
        if status_code == 429:
            kind = ErrorKind.RATE_LIMITED
        elif status_code == 404:
            kind = ErrorKind.NOT_FOUND
        elif status_code >= 500:
            kind = ErrorKind.SERVER_ERROR
        else:
            kind = ErrorKind.CLIENT_ERROR
        return cls(kind, message, status_code=status_code, payload=payload)

    def __repr__(self) -> str:
        return f"TransportError(kind={self.kind.value}, status_code={self.status_code}, message={self.message!r})"


class InvalidInputError(ValueError):
    """네트워크 호출 전에 입력 전제 조건이 깨졌을 때 발생하는 예외."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class GeocodingErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    NETWORK = "NETWORK"


class RoutingErrorKind(str, Enum):
    NO_ROUTE = "NO_ROUTE"
    INVALID_COORDINATES = "INVALID_COORDINATES"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    NETWORK = "NETWORK"


class GeolocationErrorKind(str, Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    POSITION_UNAVAILABLE = "POSITION_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"
    UNSUPPORTED = "UNSUPPORTED"


# kind별 (사용자 메시지, 재시도 가능 여부)
_GEOCODING_POLICY: dict[GeocodingErrorKind, tuple[str, bool]] = {
    GeocodingErrorKind.NOT_FOUND: (
        "No results found for that location. Please try a different search term.",
        False,
    ),
    GeocodingErrorKind.SERVICE_UNAVAILABLE: (
        "Something went wrong while looking up that location. Please try again.",
        True,
    ),
    GeocodingErrorKind.INVALID_RESPONSE: (
        "Unable to process location data. Please try again.",
        True,
    ),
    GeocodingErrorKind.NETWORK: (
        "You appear to be offline. Please check your internet connection and try again.",
        True,
    ),
}

_ROUTING_POLICY: dict[RoutingErrorKind, tuple[str, bool]] = {
    RoutingErrorKind.NO_ROUTE: (
        "No driving route exists to that destination. Please try a different location.",
        False,
    ),
    RoutingErrorKind.INVALID_COORDINATES: (
        "Invalid location coordinates. Please try a different destination.",
        False,
    ),
    RoutingErrorKind.SERVICE_UNAVAILABLE: (
        "Something went wrong while calculating the route. Please try again.",
        True,
    ),
    RoutingErrorKind.NETWORK: (
        "You appear to be offline. Please check your internet connection and try again.",
        True,
    ),
}

_GEOLOCATION_POLICY: dict[GeolocationErrorKind, tuple[str, bool]] = {
    GeolocationErrorKind.PERMISSION_DENIED: (
        "Location access was denied. Please enable location permissions to use this feature.",
        False,
    ),
    GeolocationErrorKind.POSITION_UNAVAILABLE: (
        "Your location is not available right now. Please try again or enter your location manually.",
        True,
    ),
    GeolocationErrorKind.TIMEOUT: (
        "Getting your location is taking longer than usual. Please try again.",
        True,
    ),
    GeolocationErrorKind.UNSUPPORTED: (
        "Location services are not supported on this device. Please enter your location manually.",
        False,
    ),
}


class LocationServiceError(Exception):
    """클라이언트 경계를 넘는 오류의 공통 형태."""

    _policy: dict[Any, tuple[str, bool]] = {}

    def __init__(
        self,
        kind: Enum,
        message: str | None = None,
        *,
        status_code: int | None = None,
        cause: ErrorKind | None = None,
    ) -> None:
        self.kind = kind
        self.message = message or self.user_message
        self.status_code = status_code
        self.cause = cause
        super().__init__(self.message)

    @property
    def user_message(self) -> str:
        return self._policy[self.kind][0]

    @property
    def retryable(self) -> bool:
        return self._policy[self.kind][1]

    def to_dict(self) -> dict[str, Any]:
        """API 응답용 직렬화."""
        return {"kind": self.kind.value, "detail": self.user_message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value}, message={self.message!r})"


class GeocodingError(LocationServiceError):
    """정/역 지오코딩 실패."""

    _policy = _GEOCODING_POLICY

    @classmethod
    def from_transport(cls, error: TransportError) -> GeocodingError:
        if error.kind in (ErrorKind.NETWORK, ErrorKind.TIMEOUT):
            kind = GeocodingErrorKind.NETWORK
        elif error.kind == ErrorKind.NOT_FOUND:
            kind = GeocodingErrorKind.NOT_FOUND
        elif error.kind == ErrorKind.INVALID_RESPONSE:
            kind = GeocodingErrorKind.INVALID_RESPONSE
        else:
            kind = GeocodingErrorKind.SERVICE_UNAVAILABLE
        return cls(
            kind,
            f"Geocoding failed: {error.message}",
            status_code=error.status_code,
            cause=error.kind,
        )


# OSRM 응답 code 분류
NO_ROUTE_PROVIDER_CODES = frozenset({"NoRoute", "NoSegment"})
INVALID_COORDINATE_PROVIDER_CODES = frozenset({"InvalidValue", "InvalidQuery", "InvalidUrl"})


class RoutingError(LocationServiceError):
    """경로 계산 실패."""

    _policy = _ROUTING_POLICY

    def __init__(
        self,
        kind: RoutingErrorKind,
        message: str | None = None,
        *,
        status_code: int | None = None,
        cause: ErrorKind | None = None,
        provider_code: str | None = None,
    ) -> None:
        super().__init__(kind, message, status_code=status_code, cause=cause)
        self.provider_code = provider_code

    @classmethod
    def from_provider_code(cls, provider_code: str, message: str | None = None) -> RoutingError:
        """공급자 응답의 상태 code를 분류합니다."""
        if provider_code in NO_ROUTE_PROVIDER_CODES:
            kind = RoutingErrorKind.NO_ROUTE
            cause = ErrorKind.NO_ROUTE
        elif provider_code in INVALID_COORDINATE_PROVIDER_CODES:
            kind = RoutingErrorKind.INVALID_COORDINATES
            cause = ErrorKind.CLIENT_ERROR
        else:
            kind = RoutingErrorKind.SERVICE_UNAVAILABLE
            cause = ErrorKind.INVALID_RESPONSE
        return cls(
            kind,
            message or f"Routing provider returned code {provider_code}",
            cause=cause,
            provider_code=provider_code,
        )

    @classmethod
    def from_transport(cls, error: TransportError) -> RoutingError:
        payload = error.payload if isinstance(error.payload, dict) else {}
        provider_code = payload.get("code")
        if error.kind in (ErrorKind.CLIENT_ERROR, ErrorKind.NOT_FOUND) and isinstance(provider_code, str):
            routing_error = cls.from_provider_code(provider_code, payload.get("message"))
            routing_error.status_code = error.status_code
            return routing_error

        if error.kind in (ErrorKind.NETWORK, ErrorKind.TIMEOUT):
            kind = RoutingErrorKind.NETWORK
        else:
            kind = RoutingErrorKind.SERVICE_UNAVAILABLE
        return cls(
            kind,
            f"Routing failed: {error.message}",
            status_code=error.status_code,
            cause=error.kind,
        )


_NATIVE_GEOLOCATION_CODES: dict[int | str, GeolocationErrorKind] = {
    1: GeolocationErrorKind.PERMISSION_DENIED,
    2: GeolocationErrorKind.POSITION_UNAVAILABLE,
    3: GeolocationErrorKind.TIMEOUT,
    "PERMISSION_DENIED": GeolocationErrorKind.PERMISSION_DENIED,
    "POSITION_UNAVAILABLE": GeolocationErrorKind.POSITION_UNAVAILABLE,
    "TIMEOUT": GeolocationErrorKind.TIMEOUT,
    "UNSUPPORTED": GeolocationErrorKind.UNSUPPORTED,
}


class GeolocationError(LocationServiceError):
    """단말 위치 조회 실패."""

    _policy = _GEOLOCATION_POLICY


def classify_geolocation_error(native_code: int | str | None, message: str | None = None) -> GeolocationError:
    """플랫폼 고유 실패 코드를 `GeolocationError`로 변환합니다.

    위치 API 자체가 없으면(`None`) UNSUPPORTED, 알 수 없는 코드는
    POSITION_UNAVAILABLE로 취급합니다.
    """
    if native_code is None:
        kind = GeolocationErrorKind.UNSUPPORTED
    else:
        key = native_code.strip().upper() if isinstance(native_code, str) else native_code
        kind = _NATIVE_GEOLOCATION_CODES.get(key, GeolocationErrorKind.POSITION_UNAVAILABLE)
    return GeolocationError(kind, message)
