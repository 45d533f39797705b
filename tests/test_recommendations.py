"""
Tests for the recommendation synthesizer.

Rules fire in a fixed order and the list is cut to five entries without
re-sorting by priority.
"""

from __future__ import annotations

from resilience_engine.scoring.components import ComponentName
from resilience_engine.scoring.recommendations import (
    AIR_QUALITY_ACTION,
    FLOOD_RESPONSE,
    HEAT_PROTOCOL,
    INFRASTRUCTURE_ACTION,
    MAX_RECOMMENDATIONS,
    MOBILITY_ACTION,
    PREPAREDNESS_ACTION,
    WILDFIRE_RESPONSE,
    WIND_WARNING,
    Priority,
    disaster_activation,
    synthesize_recommendations,
)
from resilience_engine.signals import DisasterRecord, WeatherReading


def scores(**overrides: int):
    base = {name: 90 for name in ComponentName}
    for key, value in overrides.items():
        base[ComponentName(key)] = value
    return base


FLOOD = DisasterRecord(categories=[{"title": "Floods"}])
FIRE = DisasterRecord(categories=[{"title": "Wildfires"}])
STORM = DisasterRecord(categories=[{"title": "Severe Storms"}])


class TestWeatherRules:
    def test_heat_needs_hot_reading(self):
        recs = synthesize_recommendations(
            scores(weather=50), weather=WeatherReading(temp=36, wind_speed=10),
        )
        assert recs[0] == HEAT_PROTOCOL

    def test_weak_score_without_hot_reading(self):
        recs = synthesize_recommendations(
            scores(weather=50), weather=WeatherReading(temp=20, wind_speed=10),
        )
        assert HEAT_PROTOCOL not in recs
        assert recs == [PREPAREDNESS_ACTION]

    def test_wind(self):
        recs = synthesize_recommendations(
            scores(weather=50), weather=WeatherReading(temp=20, wind_speed=55),
        )
        assert recs[0] == WIND_WARNING

    def test_good_score_skips_weather_rules(self):
        recs = synthesize_recommendations(
            scores(weather=60), weather=WeatherReading(temp=44, wind_speed=90),
        )
        assert HEAT_PROTOCOL not in recs and WIND_WARNING not in recs


class TestDisasterRules:
    def test_activation_counts_records(self):
        recs = synthesize_recommendations(scores(disaster=40), disasters=[STORM, STORM])
        assert recs[0].action.startswith("Active disasters detected: 2.")
        assert recs[0].priority == Priority.CRITICAL

    def test_hazard_specific_actions(self):
        recs = synthesize_recommendations(scores(disaster=30), disasters=[FIRE, FLOOD])
        assert recs[:3] == [disaster_activation(2), FLOOD_RESPONSE, WILDFIRE_RESPONSE]

    def test_weak_score_without_records(self):
        recs = synthesize_recommendations(scores(disaster=40))
        assert recs == [PREPAREDNESS_ACTION]


class TestDomainRules:
    def test_each_weak_domain_adds_one(self):
        recs = synthesize_recommendations(
            scores(mobility=59, air_quality=59, infrastructure=59),
        )
        assert recs == [MOBILITY_ACTION, AIR_QUALITY_ACTION, INFRASTRUCTURE_ACTION]

    def test_boundary_is_strict(self):
        assert synthesize_recommendations(scores(mobility=60)) == []

    def test_preparedness_catch_all(self):
        assert synthesize_recommendations(scores(disaster=69)) == [PREPAREDNESS_ACTION]
        assert synthesize_recommendations(scores(weather=69)) == [PREPAREDNESS_ACTION]
        assert synthesize_recommendations(scores(disaster=70, weather=70)) == []


class TestTruncation:
    def test_first_five_in_rule_order(self):
        recs = synthesize_recommendations(
            scores(weather=30, disaster=30, mobility=30, air_quality=30, infrastructure=30),
            disasters=[FLOOD, FIRE],
            weather=WeatherReading(temp=40, wind_speed=70),
        )
        assert len(recs) == MAX_RECOMMENDATIONS
        assert recs == [
            HEAT_PROTOCOL, WIND_WARNING, disaster_activation(2),
            FLOOD_RESPONSE, WILDFIRE_RESPONSE,
        ]

    def test_not_resorted_by_priority(self):
        recs = synthesize_recommendations(
            scores(mobility=30, infrastructure=30, disaster=65),
        )
        priorities = [r.priority for r in recs]
        assert priorities == [Priority.MODERATE, Priority.HIGH, Priority.MODERATE]

    def test_custom_limit(self):
        recs = synthesize_recommendations(
            scores(mobility=30, air_quality=30, infrastructure=30), limit=2,
        )
        assert recs == [MOBILITY_ACTION, AIR_QUALITY_ACTION]

    def test_to_dict(self):
        assert MOBILITY_ACTION.to_dict() == {
            "category": "Mobility",
            "priority": "Moderate",
            "action": MOBILITY_ACTION.action,
            "icon": "traffic",
        }
