"""
SafeTrip — Risk Input Normalization
Turns an untrusted request body into a RiskInput with documented defaults.

Defaults for missing or unparseable fields:
    speedKmh              -> 0.0
    weatherCondition      -> "Clear"
    timeHour              -> current local hour
    trafficLevel          -> "unknown"
    incidentHistoryCount  -> 0
"""

import math
from datetime import datetime
from typing import Any, Mapping, Optional

from safetrip.engine.risk_scorer import RiskInput

DEFAULT_SPEED_KMH = 0.0
DEFAULT_WEATHER = "Clear"
DEFAULT_TRAFFIC = "unknown"
DEFAULT_INCIDENTS = 0


def _to_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _to_int(value: Any) -> Optional[int]:
    """Integer part of a numeric value or numeric string ("7", "7.9" -> 7)."""
    number = _to_float(value)
    if number is None:
        return None
    return int(number)


def _to_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def normalize_risk_input(
    payload: Optional[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> RiskInput:
    """
    Build a RiskInput from a camelCase payload. Never raises.

    An explicit timeHour of 0 is midnight, not a missing value.
    """
    if not isinstance(payload, Mapping):
        payload = {}

    speed = _to_float(payload.get("speedKmh"))
    hour = _to_int(payload.get("timeHour"))
    incidents = _to_int(payload.get("incidentHistoryCount"))

    if hour is None:
        hour = (now or datetime.now()).hour

    return RiskInput(
        speed_kmh=speed if speed is not None else DEFAULT_SPEED_KMH,
        weather_condition=_to_text(payload.get("weatherCondition")) or DEFAULT_WEATHER,
        time_hour=hour,
        traffic_level=_to_text(payload.get("trafficLevel")) or DEFAULT_TRAFFIC,
        incident_history_count=incidents if incidents is not None else DEFAULT_INCIDENTS,
    )
