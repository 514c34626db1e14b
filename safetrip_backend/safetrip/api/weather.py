"""
SafeTrip — Weather API
GET /api/weather?lat=17.385&lon=78.4867
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from safetrip.api.deps import get_weather_client
from safetrip.core.errors import ApiError
from safetrip.services.weather_client import WeatherClient

router = APIRouter(prefix="/api/weather", tags=["Weather"])


@router.get("")
async def get_weather(
    lat: Optional[float] = Query(default=None, description="Latitude"),
    lon: Optional[float] = Query(default=None, description="Longitude"),
    client: WeatherClient = Depends(get_weather_client),
):
    """Current weather for a location, with a driving-risk verdict."""
    if lat is None or lon is None:
        raise ApiError(status_code=400, message="lat and lon are required query parameters")
    return await client.get_current_weather(lat, lon)
