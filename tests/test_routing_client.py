"""경로 계산 클라이언트 테스트."""

from __future__ import annotations

import asyncio

import pytest

from tests.mocks.fake_transport import OSRM_OK, FakeTransport
from thereyet.core.cache import TTLCache
from thereyet.core.dedup import RequestDeduplicator
from thereyet.core.errors import (
    ErrorKind,
    InvalidInputError,
    RoutingError,
    RoutingErrorKind,
    TransportError,
)
from thereyet.core.geo import Coordinate
from thereyet.core.retry import RetryOptions
from thereyet.services.routing_client import RoutingClient, parse_route_response

_NO_WAIT = RetryOptions(max_attempts=3, initial_delay=0.0, jitter_ratio=0.0)

SYDNEY = Coordinate(-33.8688, 151.2093)
MELBOURNE = Coordinate(-37.8136, 144.9631)


def _client(transport: FakeTransport, *, cache: TTLCache | None = None) -> RoutingClient:
    return RoutingClient(
        transport,
        base_url="https://osrm.example.org",
        deduplicator=RequestDeduplicator(),
        cache=cache,
        retry_options=_NO_WAIT,
    )


def test_calculate_route_uses_first_route() -> None:
    transport = FakeTransport(OSRM_OK)
    client = _client(transport)

    route = asyncio.run(client.calculate_route(SYDNEY, MELBOURNE))

    assert route.distance_meters == pytest.approx(877300.4)
    assert route.duration_seconds == pytest.approx(32400.0)
    assert route.formatted_distance == "877.3 km"
    assert route.formatted_duration == "9 hours"


def test_calculate_route_builds_lon_lat_url() -> None:
    transport = FakeTransport(OSRM_OK)
    client = _client(transport)

    asyncio.run(client.calculate_route((-33.8688, 151.2093), {"latitude": -37.8136, "longitude": 144.9631}, "walking"))

    url, params = transport.calls[0]
    assert url == "https://osrm.example.org/route/v1/walking/151.2093,-33.8688;144.9631,-37.8136"
    assert params == {"overview": "false", "steps": "false", "alternatives": "false"}


@pytest.mark.parametrize("provider_code", ["NoRoute", "NoSegment"])
def test_provider_no_route_codes_map_to_no_route(provider_code: str) -> None:
    transport = FakeTransport({"code": provider_code, "message": "Impossible route"})
    client = _client(transport)

    with pytest.raises(RoutingError) as exc_info:
        asyncio.run(client.calculate_route(SYDNEY, Coordinate(-17.7134, 178.0650)))

    assert exc_info.value.kind == RoutingErrorKind.NO_ROUTE
    assert exc_info.value.provider_code == provider_code
    assert exc_info.value.retryable is False
    assert len(transport.calls) == 1


def test_ok_with_empty_routes_is_no_route() -> None:
    transport = FakeTransport({"code": "Ok", "routes": []})
    client = _client(transport)

    with pytest.raises(RoutingError) as exc_info:
        asyncio.run(client.calculate_route(SYDNEY, MELBOURNE))

    assert exc_info.value.kind == RoutingErrorKind.NO_ROUTE


def test_http_400_with_no_route_body_is_not_retried() -> None:
    error = TransportError(
        ErrorKind.CLIENT_ERROR,
        "HTTP 400",
        status_code=400,
        payload={"code": "NoRoute", "message": "Impossible route between points"},
    )
    transport = FakeTransport(error)
    client = _client(transport)

    with pytest.raises(RoutingError) as exc_info:
        asyncio.run(client.calculate_route(SYDNEY, MELBOURNE))

    assert exc_info.value.kind == RoutingErrorKind.NO_ROUTE
    assert exc_info.value.status_code == 400
    assert len(transport.calls) == 1


def test_http_400_invalid_value_is_invalid_coordinates() -> None:
    error = TransportError(ErrorKind.CLIENT_ERROR, "HTTP 400", status_code=400, payload={"code": "InvalidValue"})
    client = _client(FakeTransport(error))

    with pytest.raises(RoutingError) as exc_info:
        asyncio.run(client.calculate_route(SYDNEY, MELBOURNE))

    assert exc_info.value.kind == RoutingErrorKind.INVALID_COORDINATES


def test_server_errors_are_retried_then_reported() -> None:
    transport = FakeTransport(TransportError(ErrorKind.SERVER_ERROR, "HTTP 502", status_code=502))
    client = _client(transport)

    with pytest.raises(RoutingError) as exc_info:
        asyncio.run(client.calculate_route(SYDNEY, MELBOURNE))

    assert exc_info.value.kind == RoutingErrorKind.SERVICE_UNAVAILABLE
    assert exc_info.value.retryable is True
    assert len(transport.calls) == 3


def test_network_failure_maps_to_network_kind() -> None:
    transport = FakeTransport(
        TransportError(ErrorKind.TIMEOUT, "slow"),
        TransportError(ErrorKind.NETWORK, "offline"),
        TransportError(ErrorKind.NETWORK, "offline"),
    )
    client = _client(transport)

    with pytest.raises(RoutingError) as exc_info:
        asyncio.run(client.calculate_route(SYDNEY, MELBOURNE))

    assert exc_info.value.kind == RoutingErrorKind.NETWORK


def test_per_call_timeout_surfaces_as_network_error() -> None:
    transport = FakeTransport(OSRM_OK, delay=0.5)
    client = _client(transport)

    with pytest.raises(RoutingError) as exc_info:
        asyncio.run(client.calculate_route(SYDNEY, MELBOURNE, timeout_seconds=0.01))

    assert exc_info.value.kind == RoutingErrorKind.NETWORK
    assert exc_info.value.cause == ErrorKind.TIMEOUT
    assert len(transport.calls) == 3


def test_per_call_timeout_must_be_positive() -> None:
    transport = FakeTransport(OSRM_OK)
    client = _client(transport)

    with pytest.raises(InvalidInputError):
        asyncio.run(client.calculate_route(SYDNEY, MELBOURNE, timeout_seconds=0))

    assert transport.calls == []


def test_invalid_coordinates_rejected_before_network() -> None:
    transport = FakeTransport(OSRM_OK)
    client = _client(transport)

    with pytest.raises(RoutingError) as exc_info:
        asyncio.run(client.calculate_route((91.0, 0.0), MELBOURNE))

    assert exc_info.value.kind == RoutingErrorKind.INVALID_COORDINATES
    assert exc_info.value.cause == ErrorKind.INVALID_INPUT
    assert transport.calls == []


def test_unknown_profile_is_invalid_input() -> None:
    transport = FakeTransport(OSRM_OK)
    client = _client(transport)

    with pytest.raises(InvalidInputError):
        asyncio.run(client.calculate_route(SYDNEY, MELBOURNE, "teleport"))

    assert transport.calls == []


def test_nearby_route_requests_share_cache_entry() -> None:
    transport = FakeTransport(OSRM_OK)
    client = _client(transport, cache=TTLCache(60))

    async def _run() -> None:
        await client.calculate_route(Coordinate(-33.86881, 151.20931), MELBOURNE)
        await client.calculate_route(Coordinate(-33.86879, 151.20929), MELBOURNE)

    asyncio.run(_run())

    assert len(transport.calls) == 1


def test_concurrent_route_requests_are_deduplicated() -> None:
    transport = FakeTransport(OSRM_OK, delay=0.01)
    client = _client(transport)

    async def _run():
        return await asyncio.gather(*(client.calculate_route(SYDNEY, MELBOURNE) for _ in range(3)))

    results = asyncio.run(_run())

    assert len(transport.calls) == 1
    assert results[0] is results[1] is results[2]


def test_parse_route_response_rejects_malformed_payload() -> None:
    with pytest.raises(RoutingError) as exc_info:
        parse_route_response({"routes": "nope"})

    assert exc_info.value.kind == RoutingErrorKind.SERVICE_UNAVAILABLE
    assert exc_info.value.cause == ErrorKind.INVALID_RESPONSE
