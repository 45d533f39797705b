"""
Tests for the six component scorers and their threshold ladders.

Covers:
    • Threshold ladder first-match semantics and half-up rounding
    • Weather deductions, condition classes and the floor
    • Disaster weights, critical multiplier and compounding
    • Climate, mobility, air quality and infrastructure rules
    • Absent-signal baselines
"""

from __future__ import annotations

import pytest

from resilience_engine.scoring.components import (
    AIR_QUALITY_ABSENT,
    CLIMATE_ABSENT,
    DISASTER_NONE,
    MOBILITY_ABSENT,
    WEATHER_ABSENT,
    ComponentName,
    disaster_deduction,
    normalise_aqi,
    score_air_quality,
    score_climate,
    score_components,
    score_disasters,
    score_infrastructure,
    score_mobility,
    score_weather,
)
from resilience_engine.scoring.thresholds import (
    WEATHER_HEAT,
    WEATHER_PRESSURE,
    ConditionSeverity,
    ThresholdLadder,
    classify_condition,
    round_half_up,
)
from resilience_engine.signals import (
    AirQualitySnapshot,
    ClimateNormals,
    DisasterRecord,
    MobilitySnapshot,
    SignalBundle,
    WeatherReading,
)


def disasters(*titles: str):
    return [DisasterRecord(categories=[{"title": t}]) for t in titles]


# ═══════════════════════════════════════════════════════════════════════════
# Ladders
# ═══════════════════════════════════════════════════════════════════════════

class TestThresholdLadder:
    def test_first_matching_rung_wins(self):
        assert WEATHER_HEAT.evaluate(43) == -45
        assert WEATHER_HEAT.evaluate(36) == -25

    def test_boundary_is_strict(self):
        """42 is not > 42, so the 38 rung applies."""
        assert WEATHER_HEAT.evaluate(42) == -38
        assert WEATHER_HEAT.evaluate(30) == 0.0

    def test_below_direction(self):
        assert WEATHER_PRESSURE.evaluate(950) == -20
        assert WEATHER_PRESSURE.evaluate(990) == -5
        assert WEATHER_PRESSURE.evaluate(1013) == 0.0

    def test_missing_value_is_neutral(self):
        assert WEATHER_HEAT.evaluate(None) == 0.0

    def test_empty_ladder_rejected(self):
        with pytest.raises(ValueError):
            ThresholdLadder(rungs=())


class TestRoundHalfUp:
    def test_half_goes_up(self):
        assert round_half_up(75.5) == 76
        assert round_half_up(2.5) == 3

    def test_negative_half_goes_toward_positive(self):
        assert round_half_up(-2.5) == -2

    def test_below_half(self):
        assert round_half_up(75.49) == 75


# ═══════════════════════════════════════════════════════════════════════════
# Weather
# ═══════════════════════════════════════════════════════════════════════════

class TestWeatherScorer:
    def test_absent(self):
        assert score_weather(None) == WEATHER_ABSENT == 70

    def test_benign(self):
        w = WeatherReading(temp=20, wind_speed=10, humidity=50, pressure=1013)
        assert score_weather(w) == 100

    def test_heat_dominates_clear_bonus(self):
        w = WeatherReading(temp=42, wind_speed=10, humidity=50, pressure=1013, condition="Clear")
        score = score_weather(w)
        assert score == 67
        assert score <= 70

    def test_extreme_heat(self):
        assert score_weather(WeatherReading(temp=43)) == 55

    def test_deep_cold(self):
        assert score_weather(WeatherReading(temp=-15)) == 70

    def test_wind(self):
        assert score_weather(WeatherReading(temp=20, wind_speed=120)) == 65
        assert score_weather(WeatherReading(temp=20, wind_speed=35)) == 97

    def test_humidity_only_counts_in_heat(self):
        assert score_weather(WeatherReading(temp=36, humidity=96)) == 63
        assert score_weather(WeatherReading(temp=28, humidity=96)) == 100

    def test_visibility(self):
        assert score_weather(WeatherReading(temp=20, visibility=0.5)) == 85

    def test_condition_classes(self):
        assert score_weather(WeatherReading(temp=20, condition="Thunderstorm")) == 85
        assert score_weather(WeatherReading(temp=20, condition="Light rain")) == 93
        assert score_weather(WeatherReading(temp=20, condition="Light drizzle")) == 98

    def test_floor(self):
        w = WeatherReading(
            temp=50, wind_speed=150, humidity=99, pressure=900,
            visibility=0.1, condition="Thunderstorm",
        )
        assert score_weather(w) == 20

    def test_camel_case_payload(self):
        w = WeatherReading.model_validate({"temperature": 20, "windSpeed": 120})
        assert score_weather(w) == 65

    def test_malformed_values_are_ignored(self):
        w = WeatherReading.model_validate({"temp": "hot", "windSpeed": float("nan")})
        assert w.temp is None and w.wind_speed is None
        assert score_weather(w) == 100


class TestConditionClassifier:
    @pytest.mark.parametrize("label,expected", [
        ("Heavy Thunderstorm", ConditionSeverity.SEVERE),
        ("Snow showers", ConditionSeverity.MODERATE),
        ("Haze", ConditionSeverity.MINOR),
        ("Clear sky", ConditionSeverity.CLEAR),
        ("Overcast", None),
        (None, None),
    ])
    def test_classes(self, label, expected):
        assert classify_condition(label) == expected


# ═══════════════════════════════════════════════════════════════════════════
# Disasters
# ═══════════════════════════════════════════════════════════════════════════

class TestDisasterScorer:
    def test_no_disasters(self):
        assert score_disasters([]) == DISASTER_NONE == 88
        assert score_disasters(None) == 88

    def test_single_flood_is_critical(self):
        """85 − 20 × 1.2 = 61, no bonus."""
        assert score_disasters(disasters("Floods")) == 61

    def test_single_wildfire_gets_bonus(self):
        """85 − 18 + 5 = 72."""
        assert score_disasters(disasters("Wildfires")) == 72

    def test_two_hazards_compound(self):
        """85 − 36 × 1.15 + 5 = 48.6 → 49."""
        assert score_disasters(disasters("Wildfires", "Wildfires")) == 49

    def test_mixed_critical_removes_bonus(self):
        """85 − (22 × 1.2 + 18) × 1.15 = 33.94 → 34."""
        assert score_disasters(disasters("Earthquakes", "Wildfires")) == 34

    def test_many_hazards_hit_floor(self):
        assert score_disasters(disasters("Floods", "Floods", "Floods", "Floods")) == 15

    def test_unknown_category(self):
        assert score_disasters(disasters("Meteor shower")) == 80

    def test_eonet_id_fallback(self):
        record = DisasterRecord(categories=[{"id": "severeStorms", "title": ""}])
        assert score_disasters([record]) == 75

    def test_deduction_compounding(self):
        assert disaster_deduction(disasters("Drought")) == pytest.approx(12.0)
        assert disaster_deduction(disasters("Drought") * 4) == pytest.approx(48 * 1.3)


# ═══════════════════════════════════════════════════════════════════════════
# Climate
# ═══════════════════════════════════════════════════════════════════════════

class TestClimateScorer:
    def test_absent(self):
        assert score_climate(None) == CLIMATE_ABSENT == 70

    def test_temperate(self):
        assert score_climate(ClimateNormals(avg_temp=20, avg_precip=50)) == 85

    def test_missing_fields_use_temperate_defaults(self):
        assert score_climate(ClimateNormals()) == 85

    @pytest.mark.parametrize("temp,expected", [(33, 70), (29, 77), (-10, 73)])
    def test_temperature(self, temp, expected):
        assert score_climate(ClimateNormals(avg_temp=temp, avg_precip=50)) == expected

    @pytest.mark.parametrize("precip,expected", [(250, 75), (5, 70)])
    def test_precipitation(self, precip, expected):
        assert score_climate(ClimateNormals(avg_temp=20, avg_precip=precip)) == expected

    def test_power_aliases(self):
        climate = ClimateNormals.model_validate({"T2M": 30, "PRECTOTCORR": 5})
        assert score_climate(climate) == 62

    def test_monthly_series_is_averaged(self):
        climate = ClimateNormals.model_validate({"T2M": {"JAN": 30, "FEB": 36}})
        assert climate.avg_temp == pytest.approx(33.0)


# ═══════════════════════════════════════════════════════════════════════════
# Mobility / infrastructure
# ═══════════════════════════════════════════════════════════════════════════

class TestMobilityScorer:
    def test_absent(self):
        assert score_mobility(None) == MOBILITY_ABSENT == 70

    def test_risk_deduction(self):
        assert score_mobility(MobilitySnapshot(overall_risk=50)) == 80

    def test_accessibility_is_averaged(self):
        m = MobilitySnapshot.model_validate(
            {"overallRisk": 50, "accessibility": {"overall": 60}}
        )
        assert score_mobility(m) == 70

    def test_transit_impact(self):
        assert score_mobility(MobilitySnapshot(overall_risk=50, transit_impact=60)) == 65
        assert score_mobility(MobilitySnapshot(overall_risk=50, transit_impact=35)) == 72

    def test_floor(self):
        m = MobilitySnapshot.model_validate({
            "overallRisk": 100, "accessibility": {"overall": 0}, "transitImpact": 80,
        })
        assert score_mobility(m) == 30


class TestInfrastructureScorer:
    def test_absent_is_baseline(self):
        assert score_infrastructure(None) == 75

    def test_evacuation_capacity(self):
        assert score_infrastructure(MobilitySnapshot(evacuation_capacity=80)) == 84

    def test_blocked_roads(self):
        m = MobilitySnapshot.model_validate({"accessibility": {"blockedRoads": 25}})
        assert score_infrastructure(m) == 50

    def test_safe_route_bonus_is_capped(self):
        assert score_infrastructure(MobilitySnapshot(safe_routes=3)) == 81
        assert score_infrastructure(MobilitySnapshot(safe_routes=10)) == 90

    def test_floor(self):
        m = MobilitySnapshot.model_validate({
            "evacuationCapacity": -100, "accessibility": {"blockedRoads": 30},
        })
        assert score_infrastructure(m) == 30


# ═══════════════════════════════════════════════════════════════════════════
# Air quality
# ═══════════════════════════════════════════════════════════════════════════

class TestNormaliseAQI:
    @pytest.mark.parametrize("raw,expected", [
        (1, 25.0), (2, 60.0), (3, 100.0), (4, 175.0), (5, 300.0),
        (4.5, 4.5), (120, 120.0), (812, 500.0), (-3, 0.0),
    ])
    def test_scale(self, raw, expected):
        assert normalise_aqi(raw) == expected


class TestAirQualityScorer:
    def test_absent(self):
        assert score_air_quality(None) == AIR_QUALITY_ABSENT == 75

    @pytest.mark.parametrize("aqi,expected", [(1, 95), (2, 91), (5, 53), (20, 100), (350, 45)])
    def test_aqi(self, aqi, expected):
        assert score_air_quality(AirQualitySnapshot(aqi=aqi)) == expected

    def test_missing_aqi_has_no_adjustment(self):
        assert score_air_quality(AirQualitySnapshot()) == 95

    def test_pollutants_are_additive(self):
        air = AirQualitySnapshot.model_validate({
            "aqi": 3,
            "components": {"pm2_5": 60, "pm10": 300, "no2": 250, "co": 20000},
        })
        assert score_air_quality(air) == 40

    def test_floor(self):
        air = AirQualitySnapshot.model_validate({
            "aqi": 500,
            "components": {"pm2_5": 60, "pm10": 300, "no2": 250, "co": 20000},
        })
        assert score_air_quality(air) == 15

    def test_top_level_pollutants(self):
        air = AirQualitySnapshot.model_validate({"aqi": 1, "pm25": 40})
        assert air.components is not None
        assert score_air_quality(air) == 85


# ═══════════════════════════════════════════════════════════════════════════
# All components
# ═══════════════════════════════════════════════════════════════════════════

class TestScoreComponents:
    def test_empty_bundle_uses_baselines(self):
        scores = score_components(SignalBundle())
        assert {n: c.score for n, c in scores.items()} == {
            ComponentName.WEATHER: 70,
            ComponentName.DISASTER: 88,
            ComponentName.CLIMATE: 70,
            ComponentName.MOBILITY: 70,
            ComponentName.AIR_QUALITY: 75,
            ComponentName.INFRASTRUCTURE: 75,
        }

    def test_labels(self):
        scores = score_components(SignalBundle())
        assert scores[ComponentName.MOBILITY].label == "Mobility & Access"

    def test_scores_always_in_range(self):
        bundle = SignalBundle.model_validate({
            "weather": {"temp": 60, "windSpeed": 300, "pressure": 800, "visibility": 0},
            "disasters": [{"categories": [{"title": "Volcanoes"}]}] * 8,
            "climate": {"avgTemp": 50, "avgPrecip": 900},
            "mobility": {"overallRisk": 500, "evacuationCapacity": -500},
            "airQuality": {"aqi": 9999, "pm25": 900},
        })
        for component in score_components(bundle).values():
            assert 0 <= component.score <= 100
