"""
SafeTrip — Live Speed Check
Cheap per-GPS-fix verdict returned with every location update.
"""

from typing import Optional

from safetrip.engine.risk_scorer import RiskLevel


def check_live_speed(speed_kmh: Optional[float], weather: str = "Clear") -> tuple[RiskLevel, str]:
    speed = speed_kmh or 0.0
    if speed > 80:
        return RiskLevel.HIGH, "⚠️ Speeding! Slow down immediately."
    if weather == "Rainy" and speed > 50:
        return RiskLevel.MEDIUM, "🌧️ Wet road. Reduce speed."
    return RiskLevel.LOW, "✅ Driving safe."
