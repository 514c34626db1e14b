"""
SafeTrip — Traffic Congestion Risk
Converts directions-API congestion annotations to driving risk levels.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from safetrip.models.schemas import DrivingRisk, DrivingRiskLevel


@dataclass(frozen=True)
class CongestionInfo:
    label: str
    risk: DrivingRisk


CONGESTION_MAP: dict[str, CongestionInfo] = {
    "unknown": CongestionInfo(
        label="Unknown",
        risk=DrivingRisk(level=DrivingRiskLevel.LOW, message="🟡 Traffic data unavailable."),
    ),
    "low": CongestionInfo(
        label="Free Flow",
        risk=DrivingRisk(level=DrivingRiskLevel.LOW, message="✅ Light traffic. Road is clear."),
    ),
    "moderate": CongestionInfo(
        label="Moderate",
        risk=DrivingRisk(level=DrivingRiskLevel.LOW, message="🟡 Moderate traffic. Stay alert."),
    ),
    "heavy": CongestionInfo(
        label="Heavy",
        risk=DrivingRisk(level=DrivingRiskLevel.MEDIUM, message="🟠 Heavy traffic. Reduce speed."),
    ),
    "severe": CongestionInfo(
        label="Standstill",
        risk=DrivingRisk(level=DrivingRiskLevel.HIGH, message="🔴 Traffic standstill. Use alternate route."),
    ),
}

# Worst first
CONGESTION_PRIORITY = ("severe", "heavy", "moderate", "low", "unknown")


def congestion_info(congestion: Optional[str]) -> CongestionInfo:
    """Table entry for a congestion label; unrecognised labels read as unknown."""
    return CONGESTION_MAP.get(congestion or "unknown", CONGESTION_MAP["unknown"])


def get_worst_congestion(congestions: Iterable[Optional[str]]) -> str:
    seen = set(congestions)
    for level in CONGESTION_PRIORITY:
        if level in seen:
            return level
    return "unknown"
