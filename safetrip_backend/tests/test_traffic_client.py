from __future__ import annotations

import httpx
import pytest

from safetrip.services.traffic_client import (
    TrafficClient,
    mock_area_traffic,
    mock_incidents,
    mock_route_traffic,
)


def build_client(handler, token: str = "pk.test") -> TrafficClient:
    transport = httpx.MockTransport(handler)
    return TrafficClient(access_token=token, client=httpx.AsyncClient(transport=transport))


def route_payload() -> dict:
    return {
        "routes": [
            {
                "duration": 185.4,
                "distance": 1234.0,
                "geometry": {"type": "LineString", "coordinates": [[78.48, 17.38], [78.49, 17.39]]},
                "legs": [
                    {
                        "annotation": {
                            "congestion": ["low", "heavy", "moderate"],
                            "speed": [10.0, 5.0, 0.0],
                            "duration": [12.0, 30.0, 0.0],
                        }
                    }
                ],
            }
        ]
    }


@pytest.mark.asyncio
async def test_area_traffic_aggregates_annotations() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.startswith("/directions/v5/mapbox/driving-traffic/")
        assert request.url.params["access_token"] == "pk.test"
        return httpx.Response(status_code=200, json=route_payload())

    traffic = await build_client(handler).get_area_traffic(17.38, 78.48)

    assert traffic["provider"] == "mapbox"
    assert traffic["worstSegment"] == "heavy"
    assert traffic["congestionLabel"] == "Heavy"
    assert traffic["drivingRisk"]["level"] == "MEDIUM"
    assert traffic["allCongestions"] == ["low", "heavy", "moderate"]
    # (10 + 5 + 0) / 3 m/s = 18 km/h
    assert traffic["avgSpeedKmh"] == 18
    assert traffic["totalDurationSec"] == 185
    assert traffic["totalDistanceKm"] == 1.23


@pytest.mark.asyncio
async def test_route_traffic_segments() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json=route_payload())

    traffic = await build_client(handler).get_route_traffic("78.48,17.38", "78.50,17.40")

    assert traffic["summary"] == {
        "congestionLabel": "Heavy",
        "drivingRisk": {"level": "MEDIUM", "message": "🟠 Heavy traffic. Reduce speed."},
        "totalDurationMin": 3,
        "totalDistanceKm": 1.23,
    }
    assert traffic["segments"][1] == {
        "leg": 0,
        "segment": 1,
        "congestion": "heavy",
        "speedMps": 5.0,
        "speedKmh": 18,
        "durationSec": 30.0,
        "risk": "MEDIUM",
    }
    assert traffic["segments"][2]["speedKmh"] is None
    assert traffic["segments"][2]["durationSec"] is None
    assert traffic["geometry"]["type"] == "LineString"


@pytest.mark.asyncio
async def test_empty_routes_fall_back_to_mock() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"routes": []})

    client = build_client(handler)

    assert await client.get_area_traffic(17.38, 78.48) == mock_area_traffic()
    assert await client.get_route_traffic("1,2", "3,4") == mock_route_traffic()


@pytest.mark.asyncio
async def test_upstream_error_falls_back_to_mock() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=401, json={"message": "Not Authorized - Invalid Token"})

    traffic = await build_client(handler).get_area_traffic(17.38, 78.48)

    assert traffic["provider"] == "mock"


@pytest.mark.asyncio
async def test_no_token_uses_mock() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("no upstream call expected")

    client = build_client(handler, token="")

    assert (await client.get_area_traffic(1.0, 2.0))["provider"] == "mock"
    assert (await client.get_route_traffic("1,2", "3,4"))["provider"] == "mock"


@pytest.mark.asyncio
async def test_incidents_are_offset_from_point() -> None:
    client = build_client(lambda _: httpx.Response(status_code=500))

    incidents = await client.get_incidents("17.0", "78.0")

    assert [i["type"] for i in incidents] == ["Traffic Jam", "Road Works", "Accident"]
    assert [i["severity"] for i in incidents] == ["high", "medium", "medium"]
    assert incidents[0]["geometry"]["coordinates"] == pytest.approx([78.002, 17.003])


def test_non_numeric_incident_coordinates_fall_back_to_zero() -> None:
    incidents = mock_incidents("abc", None)

    assert incidents[1]["geometry"]["coordinates"] == pytest.approx([-0.004, 0.001])
