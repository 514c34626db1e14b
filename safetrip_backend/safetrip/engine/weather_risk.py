"""
SafeTrip — Weather Driving Risk
Maps a provider condition label plus wind / visibility readings onto a
four-level driving risk.
"""

from typing import Optional

from safetrip.models.schemas import DrivingRisk, DrivingRiskLevel

THUNDERSTORM_RISK = DrivingRisk(level=DrivingRiskLevel.EXTREME, message="🌩️ Thunderstorm! Avoid driving.")
SNOW_RISK = DrivingRisk(level=DrivingRiskLevel.HIGH, message="❄️ Snow/Ice on road. Drive slowly.")
FOG_RISK = DrivingRisk(level=DrivingRiskLevel.HIGH, message="🌫️ Dense fog. Use fog lights.")
RAIN_RISK = DrivingRisk(level=DrivingRiskLevel.MEDIUM, message="🌧️ Wet roads. Reduce speed.")
WIND_RISK = DrivingRisk(level=DrivingRiskLevel.MEDIUM, message="💨 Strong winds. Hold steering firmly.")
CLEAR_RISK = DrivingRisk(level=DrivingRiskLevel.LOW, message="✅ Clear weather. Safe to drive.")

MIN_VISIBILITY_KM = 0.5
MAX_WIND_KMH = 60


def get_driving_risk(
    condition: Optional[str],
    wind_speed_ms: Optional[float] = 0.0,
    visibility_m: Optional[float] = 10000.0,
) -> DrivingRisk:
    """
    Driving risk for current weather.

    `condition` is matched exactly against the provider's main label
    (Thunderstorm, Snow, Fog, Rain, ...). Missing readings fall back to calm
    wind and 10 km visibility.
    """
    wind_kmh = (wind_speed_ms or 0.0) * 3.6
    visibility_km = (10000.0 if visibility_m is None else visibility_m) / 1000

    if condition in ("Thunderstorm", "Tornado"):
        return THUNDERSTORM_RISK
    if condition in ("Snow", "Sleet"):
        return SNOW_RISK
    if condition == "Fog" or visibility_km < MIN_VISIBILITY_KM:
        return FOG_RISK
    if condition in ("Rain", "Drizzle"):
        return RAIN_RISK
    if wind_kmh > MAX_WIND_KMH:
        return WIND_RISK
    return CLEAR_RISK
