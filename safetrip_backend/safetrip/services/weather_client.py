"""
SafeTrip — OpenWeatherMap Client
Current conditions for a coordinate, annotated with a driving risk.
Falls back to a fixed mock payload when no key is configured or the
upstream call fails.
"""

import logging
from typing import Any, Optional

import httpx

from safetrip.core.config import is_configured, settings
from safetrip.engine.weather_risk import CLEAR_RISK, get_driving_risk
from safetrip.utils.rounding import round_half_up

logger = logging.getLogger("safetrip.weather")

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


def mock_weather() -> dict[str, Any]:
    return {
        "condition": "Clear",
        "description": "clear sky",
        "temp": 28,
        "feelsLike": 30,
        "humidity": 65,
        "windSpeed": 12,
        "visibility": 10,
        "city": "Mock City",
        "drivingRisk": CLEAR_RISK.model_dump(mode="json"),
        "isMock": True,
    }


class WeatherClient:
    """Async client for the OpenWeatherMap current-weather endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._api_key = settings.weather_api_key if api_key is None else api_key
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.http_timeout_seconds)

    @property
    def is_available(self) -> bool:
        return is_configured(self._api_key)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_current_weather(self, lat: float, lon: float) -> dict[str, Any]:
        if not self.is_available:
            logger.warning("Weather API: using mock data (no API key configured)")
            return mock_weather()

        params = {"lat": lat, "lon": lon, "appid": self._api_key, "units": "metric"}
        try:
            resp = await self._client.get(OPENWEATHER_URL, params=params)
            resp.raise_for_status()
            weather = self._parse(resp.json())
        except httpx.HTTPError as e:
            logger.error(f"Weather API error: {e}")
            return mock_weather()
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Weather API returned an unexpected payload: {e}")
            return mock_weather()

        logger.info(
            f"Weather fetched for [{lat}, {lon}]: {weather['condition']} | "
            f"Risk: {weather['drivingRisk']['level']}"
        )
        return weather

    @staticmethod
    def _parse(data: dict[str, Any]) -> dict[str, Any]:
        conditions = data.get("weather") or [{}]
        current = conditions[0]
        main = data.get("main") or {}
        wind = data.get("wind") or {}

        wind_ms = wind.get("speed") or 0
        visibility_m = data.get("visibility") or 10000
        risk = get_driving_risk(current.get("main"), wind_ms, data.get("visibility"))

        return {
            "condition": current.get("main") or "Clear",
            "description": current.get("description") or "clear sky",
            "temp": round_half_up(main.get("temp") or 25),
            "feelsLike": round_half_up(main.get("feels_like") or 25),
            "humidity": main.get("humidity") or 0,
            "windSpeed": round_half_up(wind_ms * 3.6),
            "visibility": round_half_up(visibility_m / 1000),
            "city": data.get("name") or "Unknown",
            "drivingRisk": risk.model_dump(mode="json"),
        }
