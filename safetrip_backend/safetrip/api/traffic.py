"""
SafeTrip — Traffic API
Endpoints: /api/traffic, /api/traffic/route, /api/traffic/incidents
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from safetrip.api.deps import get_traffic_client
from safetrip.core.errors import ApiError
from safetrip.services.traffic_client import TrafficClient

router = APIRouter(prefix="/api/traffic", tags=["Traffic"])


@router.get("")
async def get_area_traffic(
    lat: Optional[float] = Query(default=None),
    lon: Optional[float] = Query(default=None),
    client: TrafficClient = Depends(get_traffic_client),
):
    """Live traffic flow around the given coordinates."""
    if lat is None or lon is None:
        raise ApiError(status_code=400, message="lat and lon are required query parameters")
    return await client.get_area_traffic(lat, lon)


@router.get("/route")
async def get_route_traffic(
    origin: Optional[str] = Query(default=None, description="lng,lat"),
    destination: Optional[str] = Query(default=None, description="lng,lat"),
    client: TrafficClient = Depends(get_traffic_client),
):
    """Congestion summary and per-segment breakdown for a full route."""
    if not origin or not destination:
        raise ApiError(status_code=400, message="origin and destination are required (format: lng,lat)")
    return await client.get_route_traffic(origin, destination)


@router.get("/incidents")
async def get_incidents(
    lat: Optional[str] = Query(default=None),
    lon: Optional[str] = Query(default=None),
    client: TrafficClient = Depends(get_traffic_client),
):
    """Traffic incidents (accidents, roadworks) near a location."""
    return {"incidents": await client.get_incidents(lat, lon)}
