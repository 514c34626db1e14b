"""
SafeTrip — Road Condition Categories
Maps free-text weather / traffic labels onto canonical categories once,
before any scoring happens.
"""

from enum import Enum


class WeatherCategory(str, Enum):
    THUNDERSTORM = "Thunderstorm"
    SNOW = "Snow"
    FOG = "Fog"
    MIST = "Mist"
    RAIN = "Rain"
    DRIZZLE = "Drizzle"
    CLEAR = "Clear"

    @property
    def is_adverse(self) -> bool:
        return self is not WeatherCategory.CLEAR


class TrafficCategory(str, Enum):
    STANDSTILL = "standstill"
    SEVERE = "severe"
    HEAVY = "heavy"
    FLOWING = "flowing"

    @property
    def is_congested(self) -> bool:
        return self is not TrafficCategory.FLOWING


# Checked in order; first hit wins. "Drizzle" goes after "Rain" so that
# "Rain and Drizzle" reads as rain.
_ADVERSE_WEATHER = (
    WeatherCategory.THUNDERSTORM,
    WeatherCategory.SNOW,
    WeatherCategory.FOG,
    WeatherCategory.MIST,
    WeatherCategory.RAIN,
    WeatherCategory.DRIZZLE,
)

_CONGESTED_TRAFFIC = (
    TrafficCategory.STANDSTILL,
    TrafficCategory.SEVERE,
    TrafficCategory.HEAVY,
)


def classify_weather(condition: str) -> WeatherCategory:
    """
    Canonical category for a provider weather label.

    Matching is a case-sensitive substring test, the provider reports
    capitalised labels ("Rain", "Thunderstorm"). Anything unrecognised,
    including an empty or non-string value, is CLEAR.
    """
    if not isinstance(condition, str):
        return WeatherCategory.CLEAR
    for category in _ADVERSE_WEATHER:
        if category.value in condition:
            return category
    return WeatherCategory.CLEAR


def classify_traffic(level: str) -> TrafficCategory:
    """Canonical category for a traffic label (case-insensitive substring)."""
    if not isinstance(level, str):
        return TrafficCategory.FLOWING
    lowered = level.lower()
    for category in _CONGESTED_TRAFFIC:
        if category.value in lowered:
            return category
    return TrafficCategory.FLOWING
