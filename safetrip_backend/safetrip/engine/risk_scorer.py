"""
SafeTrip — Accident Risk Scorer
Rule-based accident likelihood heuristic over five weighted factors:
speed, weather, time of day, traffic congestion and incident history.

The output probability is a heuristic percentage in [5, 100], not a
calibrated statistical probability. Same input always yields the same
RiskResult; the scorer keeps no state between calls.
"""

from dataclasses import dataclass, field
from enum import Enum

from safetrip.engine.conditions import classify_traffic, classify_weather
from safetrip.utils.rounding import round_half_up


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# ═══════════════════════════════════════════════════════════════
# Configuration
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RiskWeights:
    """Coefficient applied to each factor's base points."""
    speed: float = 1.5
    weather: float = 1.2
    time: float = 0.8
    traffic: float = 0.5
    history: float = 2.0


@dataclass(frozen=True)
class RiskThresholds:
    """
    Level cut-offs on the final probability. `safe` is informational only:
    everything below `caution` is LOW.
    """
    safe: int = 20
    caution: int = 50
    danger: int = 75


DEFAULT_WEIGHTS = RiskWeights()
DEFAULT_THRESHOLDS = RiskThresholds()

MIN_PROBABILITY = 5
MAX_PROBABILITY = 100


# ═══════════════════════════════════════════════════════════════
# Input / Output
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RiskInput:
    speed_kmh: float = 0.0
    weather_condition: str = "Clear"
    time_hour: int = 12
    traffic_level: str = "unknown"
    incident_history_count: int = 0


@dataclass(frozen=True)
class RiskResult:
    probability: int
    level: RiskLevel
    message: str
    contributing_factors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def headline_factor(self) -> str | None:
        return self.contributing_factors[0] if self.contributing_factors else None

    def to_dict(self) -> dict:
        """JSON body returned by the prediction endpoint."""
        return {
            "probability": self.probability,
            "level": self.level.value,
            "message": self.message,
            "contributingFactors": list(self.contributing_factors),
        }


# ═══════════════════════════════════════════════════════════════
# Scorer
# ═══════════════════════════════════════════════════════════════

class RiskScorer:
    """
    Weighted additive scorer with a non-linear speed curve.

    Stages run in a fixed order (speed, weather, time of day, traffic,
    history) and each records at most one contributing factor, so the
    first factor is always the earliest stage that fired.
    """

    def __init__(
        self,
        weights: RiskWeights = DEFAULT_WEIGHTS,
        thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self.weights = weights
        self.thresholds = thresholds

    def predict(self, risk_input: RiskInput) -> RiskResult:
        w = self.weights
        speed = risk_input.speed_kmh
        hour = risk_input.time_hour
        score = 0.0
        factors: list[str] = []

        # ── Speed ──
        if speed > 120:
            score += 60 * w.speed
            factors.append("Extremely High Speed")
        elif speed > 80:
            score += 30 * w.speed
            factors.append("Speeding (>80km/h)")
        elif speed > 50:
            score += 10 * w.speed

        # ── Weather ──
        if classify_weather(risk_input.weather_condition).is_adverse:
            score += 20 * w.weather
            if speed > 60:
                score += 15
                factors.append(f"Creating hydroplaning risk in {risk_input.weather_condition}")
            else:
                factors.append(f"Reduced visibility due to {risk_input.weather_condition}")

        # ── Time of day ── (hours outside 0..23 match no bracket)
        if 0 <= hour <= 23:
            if hour >= 23 or hour <= 4:
                score += 15 * w.time
                factors.append("Late night driving (Fatigue Risk)")
            elif 8 <= hour <= 10 or 17 <= hour <= 19:
                score += 10 * w.traffic
                factors.append("Rush hour traffic intensity")

        # ── Traffic congestion ──
        if classify_traffic(risk_input.traffic_level).is_congested:
            score += 10 * w.traffic
            # Crawling traffic trades crash risk for fender-benders
            if speed < 20:
                score -= 5
            elif speed > 40:
                score += 10
                factors.append("Fast driving in heavy traffic")

        # ── Incident history ──
        count = risk_input.incident_history_count
        if count > 0:
            score += count * 5 * w.history
            factors.append(f"High-accident zone ({count} past incidents)")

        probability = min(round_half_up(score), MAX_PROBABILITY)
        probability = max(probability, MIN_PROBABILITY)

        level, message = self._classify(probability, factors)
        return RiskResult(
            probability=probability,
            level=level,
            message=message,
            contributing_factors=tuple(factors),
        )

    def _classify(self, probability: int, factors: list[str]) -> tuple[RiskLevel, str]:
        headline = factors[0] if factors else None
        if probability >= self.thresholds.danger:
            cause = headline or "Unsafe driving conditions"
            return RiskLevel.HIGH, f"🚨 CRITICAL RISK: {cause}. Slow down immediately!"
        if probability >= self.thresholds.caution:
            cause = headline or "Elevated risk detected"
            return RiskLevel.MEDIUM, f"⚠️ CAUTION: {cause}. Stay alert."
        if headline:
            return RiskLevel.LOW, f"ℹ️ Safe, but note: {headline}"
        return RiskLevel.LOW, "✅ Safe driving detected."


_default_scorer = RiskScorer()


def predict_risk(risk_input: RiskInput) -> RiskResult:
    """Score with the default weights and thresholds."""
    return _default_scorer.predict(risk_input)
