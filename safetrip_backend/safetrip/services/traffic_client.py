"""
SafeTrip — Mapbox Traffic Client
Live congestion around a point and along a route, via the Mapbox
driving-traffic Directions API with congestion annotations.

APIs used:
  - Directions: GET /directions/v5/mapbox/driving-traffic/{lng,lat;lng,lat}
"""

import logging
from typing import Any, Optional

import httpx

from safetrip.core.config import is_configured, settings
from safetrip.engine.traffic_risk import congestion_info, get_worst_congestion
from safetrip.utils.rounding import round_half_up

logger = logging.getLogger("safetrip.traffic")

MAPBOX_DIRECTIONS_URL = "https://api.mapbox.com/directions/v5/mapbox/driving-traffic"

# ~500 m, used to sample a short segment around a single point
SAMPLE_OFFSET_DEG = 0.005


class UpstreamDataError(Exception):
    """Mapbox answered but returned no usable route."""


# ═══════════════════════════════════════════════════════════════
# Mock payloads
# ═══════════════════════════════════════════════════════════════

def mock_area_traffic() -> dict[str, Any]:
    return {
        "congestionLabel": "Moderate",
        "worstSegment": "moderate",
        "avgSpeedKmh": 42,
        "drivingRisk": congestion_info("moderate").risk.model_dump(mode="json"),
        "allCongestions": ["low", "moderate", "moderate", "low"],
        "totalDurationSec": 180,
        "totalDistanceKm": 1.2,
        "provider": "mock",
    }


def mock_route_traffic() -> dict[str, Any]:
    return {
        "summary": {
            "congestionLabel": "Moderate",
            "drivingRisk": congestion_info("moderate").risk.model_dump(mode="json"),
            "totalDurationMin": 25,
            "totalDistanceKm": 12.5,
        },
        "segments": [
            {"segment": 0, "congestion": "low", "speedKmh": 55, "risk": "LOW"},
            {"segment": 1, "congestion": "moderate", "speedKmh": 38, "risk": "LOW"},
            {"segment": 2, "congestion": "heavy", "speedKmh": 22, "risk": "MEDIUM"},
            {"segment": 3, "congestion": "moderate", "speedKmh": 40, "risk": "LOW"},
        ],
        "provider": "mock",
    }


def mock_incidents(lat: Any, lon: Any) -> list[dict[str, Any]]:
    """Deterministic incidents scattered around the given point."""
    base_lat = _to_float_or_zero(lat)
    base_lon = _to_float_or_zero(lon)
    return [
        {
            "type": "Traffic Jam",
            "description": "Heavy congestion reported",
            "severity": "high",
            "geometry": {"coordinates": [base_lon + 0.002, base_lat + 0.003]},
        },
        {
            "type": "Road Works",
            "description": "Lane closure due to construction",
            "severity": "medium",
            "geometry": {"coordinates": [base_lon - 0.004, base_lat + 0.001]},
        },
        {
            "type": "Accident",
            "description": "Minor collision, expect delays",
            "severity": "medium",
            "geometry": {"coordinates": [base_lon + 0.001, base_lat - 0.002]},
        },
    ]


def _to_float_or_zero(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _distance_km(meters: float) -> float:
    # Two decimals, the way the map overlay displays it
    return round_half_up(meters / 10) / 100


# ═══════════════════════════════════════════════════════════════
# Mapbox Client
# ═══════════════════════════════════════════════════════════════

class TrafficClient:
    """
    Async Mapbox traffic client.

    Usage:
        client = TrafficClient()
        area = await client.get_area_traffic(17.385, 78.4867)
        route = await client.get_route_traffic("78.48,17.38", "78.50,17.40")
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._token = settings.mapbox_token if access_token is None else access_token
        self._client = client or httpx.AsyncClient()

    @property
    def is_available(self) -> bool:
        return is_configured(self._token)

    async def close(self) -> None:
        await self._client.aclose()

    async def _fetch_route(self, coordinates: str, annotations: str, timeout: float) -> dict:
        params = {
            "annotations": annotations,
            "overview": "full",
            "geometries": "geojson",
            "access_token": self._token,
        }
        resp = await self._client.get(f"{MAPBOX_DIRECTIONS_URL}/{coordinates}", params=params, timeout=timeout)
        resp.raise_for_status()
        routes = resp.json().get("routes") or []
        if not routes:
            raise UpstreamDataError("No route data from Mapbox")
        return routes[0]

    # ─────────────────────────────────────────────────────────
    # Area traffic
    # ─────────────────────────────────────────────────────────

    async def get_area_traffic(self, lat: float, lon: float) -> dict[str, Any]:
        """Worst congestion and average speed on a ~500 m sample around a point."""
        if not self.is_available:
            logger.warning("Traffic API: using mock data (add MAPBOX_TOKEN to .env)")
            return mock_area_traffic()

        coordinates = f"{lon},{lat};{lon + SAMPLE_OFFSET_DEG},{lat + SAMPLE_OFFSET_DEG}"
        try:
            route = await self._fetch_route(
                coordinates, "congestion,speed,duration,distance", settings.traffic_timeout_seconds
            )
            congestions: list[str] = []
            speeds: list[float] = []
            for leg in route.get("legs") or []:
                annotation = leg.get("annotation") or {}
                congestions.extend(annotation.get("congestion") or [])
                speeds.extend(annotation.get("speed") or [])

            worst = get_worst_congestion(congestions)
            avg_speed = round_half_up(sum(speeds) / len(speeds) * 3.6) if speeds else None
            info = congestion_info(worst)

            traffic = {
                "congestionLabel": info.label,
                "worstSegment": worst,
                "avgSpeedKmh": avg_speed,
                "drivingRisk": info.risk.model_dump(mode="json"),
                "allCongestions": congestions,
                "totalDurationSec": round_half_up(route["duration"]),
                "totalDistanceKm": _distance_km(route["distance"]),
                "provider": "mapbox",
            }
        except (httpx.HTTPError, UpstreamDataError) as e:
            logger.error(f"Mapbox traffic error: {e}")
            return mock_area_traffic()
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Mapbox traffic returned an unexpected payload: {e}")
            return mock_area_traffic()

        logger.info(f"Mapbox traffic: {info.label} | Speed: {avg_speed} km/h")
        return traffic

    # ─────────────────────────────────────────────────────────
    # Route traffic
    # ─────────────────────────────────────────────────────────

    async def get_route_traffic(self, origin: str, destination: str) -> dict[str, Any]:
        """
        Per-segment congestion for a full route, for colour-coding on the map.

        Args:
            origin: "lng,lat"
            destination: "lng,lat"
        """
        if not self.is_available:
            return mock_route_traffic()

        try:
            route = await self._fetch_route(
                f"{origin};{destination}", "congestion,speed,duration", settings.route_traffic_timeout_seconds
            )
            segments = []
            for leg_idx, leg in enumerate(route.get("legs") or []):
                annotation = leg.get("annotation") or {}
                speeds = annotation.get("speed") or []
                durations = annotation.get("duration") or []
                for i, congestion in enumerate(annotation.get("congestion") or []):
                    speed = speeds[i] if i < len(speeds) else None
                    segments.append({
                        "leg": leg_idx,
                        "segment": i,
                        "congestion": congestion,
                        "speedMps": speed or None,
                        "speedKmh": round_half_up(speed * 3.6) if speed else None,
                        "durationSec": (durations[i] if i < len(durations) else None) or None,
                        "risk": congestion_info(congestion).risk.level.value,
                    })

            summary = congestion_info(get_worst_congestion(s["congestion"] for s in segments))
            return {
                "summary": {
                    "congestionLabel": summary.label,
                    "drivingRisk": summary.risk.model_dump(mode="json"),
                    "totalDurationMin": round_half_up(route["duration"] / 60),
                    "totalDistanceKm": _distance_km(route["distance"]),
                },
                "segments": segments,
                "geometry": route.get("geometry"),
            }
        except (httpx.HTTPError, UpstreamDataError) as e:
            logger.error(f"Mapbox route traffic error: {e}")
            return mock_route_traffic()
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Mapbox route traffic returned an unexpected payload: {e}")
            return mock_route_traffic()

    # ─────────────────────────────────────────────────────────
    # Incidents
    # ─────────────────────────────────────────────────────────

    async def get_incidents(self, lat: Any, lon: Any) -> list[dict[str, Any]]:
        # TODO: swap for a real incidents feed (TomTom / HERE); Mapbox has none
        return mock_incidents(lat, lon)
