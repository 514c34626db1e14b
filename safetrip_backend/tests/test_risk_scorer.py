from __future__ import annotations

import pytest

from safetrip.engine.risk_scorer import (
    RiskInput,
    RiskLevel,
    RiskScorer,
    RiskThresholds,
    RiskWeights,
    predict_risk,
)


def test_extreme_speed_is_critical() -> None:
    result = predict_risk(RiskInput(speed_kmh=150, weather_condition="Clear", time_hour=12, traffic_level="light"))

    assert result.probability == 90
    assert result.level is RiskLevel.HIGH
    assert result.contributing_factors == ("Extremely High Speed",)
    assert result.message == "🚨 CRITICAL RISK: Extremely High Speed. Slow down immediately!"


def test_parked_car_hits_probability_floor() -> None:
    result = predict_risk(RiskInput(speed_kmh=0, weather_condition="Clear", time_hour=12, traffic_level="light"))

    assert result.probability == 5
    assert result.level is RiskLevel.LOW
    assert result.contributing_factors == ()
    assert result.message == "✅ Safe driving detected."


def test_rain_at_night_with_speed() -> None:
    result = predict_risk(RiskInput(speed_kmh=70, weather_condition="Rain", time_hour=2, traffic_level="unknown"))

    assert result.probability == 66
    assert result.level is RiskLevel.MEDIUM
    assert result.contributing_factors == (
        "Creating hydroplaning risk in Rain",
        "Late night driving (Fatigue Risk)",
    )
    assert result.message == "⚠️ CAUTION: Creating hydroplaning risk in Rain. Stay alert."


def test_incident_history_only() -> None:
    result = predict_risk(RiskInput(time_hour=12, incident_history_count=3))

    assert result.probability == 30
    assert result.level is RiskLevel.LOW
    assert result.contributing_factors == ("High-accident zone (3 past incidents)",)
    assert result.message == "ℹ️ Safe, but note: High-accident zone (3 past incidents)"


def test_crawling_in_severe_traffic_lowers_score() -> None:
    # 5 for congestion, -5 for crawling speed, then the floor
    result = predict_risk(RiskInput(speed_kmh=15, weather_condition="Clear", time_hour=12, traffic_level="severe"))

    assert result.probability == 5
    assert result.level is RiskLevel.LOW
    assert result.contributing_factors == ()


def test_fast_driving_in_heavy_traffic() -> None:
    result = predict_risk(RiskInput(speed_kmh=45, time_hour=12, traffic_level="Heavy congestion"))

    assert result.probability == 15
    assert result.contributing_factors == ("Fast driving in heavy traffic",)


def test_slow_rain_reports_reduced_visibility() -> None:
    result = predict_risk(RiskInput(speed_kmh=30, weather_condition="Light Drizzle", time_hour=12))

    assert result.probability == 24
    assert result.contributing_factors == ("Reduced visibility due to Light Drizzle",)


def test_rush_hour_uses_traffic_weight() -> None:
    result = predict_risk(RiskInput(time_hour=18))

    assert result.probability == 5
    assert result.contributing_factors == ("Rush hour traffic intensity",)


@pytest.mark.parametrize("hour", [23, 0, 4])
def test_late_night_window(hour: int) -> None:
    result = predict_risk(RiskInput(time_hour=hour))

    assert result.probability == 12
    assert result.contributing_factors == ("Late night driving (Fatigue Risk)",)


def test_probability_is_capped_at_100() -> None:
    result = predict_risk(
        RiskInput(
            speed_kmh=130,
            weather_condition="Thunderstorm",
            time_hour=1,
            traffic_level="standstill",
            incident_history_count=5,
        )
    )

    assert result.probability == 100
    assert result.level is RiskLevel.HIGH
    assert list(result.contributing_factors) == [
        "Extremely High Speed",
        "Creating hydroplaning risk in Thunderstorm",
        "Late night driving (Fatigue Risk)",
        "Fast driving in heavy traffic",
        "High-accident zone (5 past incidents)",
    ]


def test_malformed_values_contribute_nothing() -> None:
    result = predict_risk(
        RiskInput(speed_kmh=-40, weather_condition="", time_hour=37, traffic_level="", incident_history_count=-2)
    )

    assert result.probability == 5
    assert result.level is RiskLevel.LOW
    assert result.contributing_factors == ()


def test_level_boundaries_follow_thresholds() -> None:
    # each past incident adds 10 points
    assert predict_risk(RiskInput(time_hour=12, incident_history_count=5)).level is RiskLevel.MEDIUM
    assert predict_risk(RiskInput(time_hour=12, incident_history_count=4)).level is RiskLevel.LOW
    assert predict_risk(RiskInput(time_hour=12, incident_history_count=8)).level is RiskLevel.HIGH


def test_same_input_same_result() -> None:
    risk_input = RiskInput(speed_kmh=95, weather_condition="Fog", time_hour=8, traffic_level="heavy")

    assert predict_risk(risk_input) == predict_risk(risk_input)


def test_custom_weights_and_thresholds() -> None:
    scorer = RiskScorer(
        weights=RiskWeights(speed=3.0, weather=1.2, time=0.8, traffic=0.5, history=2.0),
        thresholds=RiskThresholds(safe=10, caution=20, danger=30),
    )

    result = scorer.predict(RiskInput(speed_kmh=55, time_hour=12))

    assert result.probability == 30
    assert result.level is RiskLevel.HIGH
    assert result.message == "🚨 CRITICAL RISK: Unsafe driving conditions. Slow down immediately!"


def test_half_points_round_up() -> None:
    scorer = RiskScorer(weights=RiskWeights(history=0.25))

    # 6 * 5 * 0.25 = 7.5
    assert scorer.predict(RiskInput(time_hour=12, incident_history_count=6)).probability == 8


def test_to_dict_is_camel_case() -> None:
    body = predict_risk(RiskInput(speed_kmh=150, time_hour=12)).to_dict()

    assert body == {
        "probability": 90,
        "level": "HIGH",
        "message": "🚨 CRITICAL RISK: Extremely High Speed. Slow down immediately!",
        "contributingFactors": ["Extremely High Speed"],
    }


@pytest.mark.parametrize("hour", [-1, 24, 37])
def test_out_of_range_hour_matches_no_bracket(hour: int) -> None:
    result = predict_risk(RiskInput(time_hour=hour))

    assert result.probability == 5
    assert result.contributing_factors == ()


def test_safe_threshold_does_not_change_levels() -> None:
    risk_input = RiskInput(time_hour=12, incident_history_count=3)

    assert RiskThresholds().safe == 20
    assert RiskScorer(thresholds=RiskThresholds(safe=0)).predict(risk_input) == predict_risk(risk_input)
    assert RiskScorer(thresholds=RiskThresholds(safe=45)).predict(risk_input).level is RiskLevel.LOW


# ── Properties over a grid of inputs ──

FACTOR_STAGES = (
    ("Extremely High Speed", 0),
    ("Speeding", 0),
    ("Creating hydroplaning risk", 1),
    ("Reduced visibility", 1),
    ("Late night driving", 2),
    ("Rush hour", 2),
    ("Fast driving in heavy traffic", 3),
    ("High-accident zone", 4),
)


def factor_stage(factor: str) -> int:
    for prefix, stage in FACTOR_STAGES:
        if factor.startswith(prefix):
            return stage
    raise AssertionError(f"unexpected factor: {factor}")


@pytest.mark.parametrize("weather", ["Clear", "Rain", "Fog", "Clouds"])
@pytest.mark.parametrize("hour", [0, 3, 9, 12, 18, 23])
@pytest.mark.parametrize("traffic", ["light", "heavy", "severe", "unknown"])
@pytest.mark.parametrize("incidents", [0, 2])
def test_score_properties_across_speeds(weather: str, hour: int, traffic: str, incidents: int) -> None:
    previous = None
    for speed in range(0, 200):
        result = predict_risk(
            RiskInput(
                speed_kmh=speed,
                weather_condition=weather,
                time_hour=hour,
                traffic_level=traffic,
                incident_history_count=incidents,
            )
        )

        assert 5 <= result.probability <= 100
        stages = [factor_stage(f) for f in result.contributing_factors]
        assert stages == sorted(set(stages))
        if previous is not None:
            assert result.probability >= previous
        previous = result.probability
