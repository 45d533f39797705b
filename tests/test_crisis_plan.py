"""
Tests for the crisis plan contract.

Covers:
    • Parsing generated answers (prose, fences, bad payloads)
    • Severity points and level cut-offs
    • Rule-based fallback plan
    • Plan → recommendation mapping
    • Prompt context
"""

from __future__ import annotations

import dataclasses
import json
from datetime import datetime, timezone

import pytest

from resilience_engine.advisory.crisis_plan import (
    PLAN_CATEGORY,
    CrisisPlan,
    PlanSeverity,
    build_crisis_context,
    build_fallback_plan,
    determine_plan_severity,
    parse_crisis_plan,
    recommendations_from_plan,
    severity_points,
)
from resilience_engine.core.errors import CrisisPlanParseError
from resilience_engine.scoring.aggregator import compute_resilience_report
from resilience_engine.scoring.recommendations import Priority
from resilience_engine.signals import SignalBundle

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

PLAN_JSON = {
    "severity": "HIGH",
    "immediateActions": ["Open shelters", "Issue flood alert", "Deploy pumps"],
    "shortTermStrategy": ["Coordinate with regional services"],
    "vulnerableGroups": [
        {"group": "Elderly", "risk": "Mobility", "protection": "Welfare checks"},
    ],
    "resourcePriorities": [
        {"resource": "Pumps", "quantity": "12", "locations": ["Ward 4"]},
    ],
    "communicationPlan": {
        "publicMessage": "Avoid low-lying roads",
        "channels": ["SMS", "Radio"],
        "updateFrequency": "Hourly",
    },
    "evacuationNeeded": False,
    "estimatedImpact": "Localised flooding in two wards",
}


def report_with_score(score: int):
    return dataclasses.replace(compute_resilience_report({}, now=NOW), overall_score=score)


def disasters(n: int):
    return [{"title": f"Event {i}", "categories": [{"title": "Floods"}]} for i in range(n)]


# ═══════════════════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════════════════

class TestParseCrisisPlan:
    def test_plain_json(self):
        plan = parse_crisis_plan(json.dumps(PLAN_JSON))
        assert plan.severity is PlanSeverity.HIGH
        assert plan.immediate_actions[0] == "Open shelters"
        assert plan.communication_plan.update_frequency == "Hourly"
        assert plan.resource_priorities[0].locations == ["Ward 4"]

    def test_embedded_in_prose_and_fences(self):
        text = "Here is the plan:\n```json\n" + json.dumps(PLAN_JSON) + "\n```\nStay safe."
        assert parse_crisis_plan(text).estimated_impact == "Localised flooding in two wards"

    def test_lowercase_severity(self):
        plan = parse_crisis_plan(json.dumps({**PLAN_JSON, "severity": "critical"}))
        assert plan.severity is PlanSeverity.CRITICAL

    def test_missing_optional_sections(self):
        plan = parse_crisis_plan('{"severity": "LOW"}')
        assert plan.immediate_actions == []
        assert plan.evacuation_needed is False

    def test_round_trip_through_wire_format(self):
        plan = parse_crisis_plan(json.dumps(PLAN_JSON))
        assert plan.to_dict()["immediateActions"] == PLAN_JSON["immediateActions"]
        assert parse_crisis_plan(json.dumps(plan.to_dict())) == plan

    @pytest.mark.parametrize("text", [
        "",
        "No structured answer available.",
        "{severity: HIGH}",
        '{"severity": "APOCALYPTIC"}',
        '{"immediateActions": ["x"]}',
    ])
    def test_unparseable(self, text):
        with pytest.raises(CrisisPlanParseError) as exc:
            parse_crisis_plan(text)
        assert exc.value.error_code == "CRISIS_PLAN_PARSE_ERROR"


# ═══════════════════════════════════════════════════════════════════════════
# Severity
# ═══════════════════════════════════════════════════════════════════════════

class TestPlanSeverity:
    def test_calm(self):
        assert determine_plan_severity({}) is PlanSeverity.LOW
        assert determine_plan_severity(None) is PlanSeverity.LOW

    @pytest.mark.parametrize("count,points", [(1, 20), (2, 40), (3, 60), (5, 60)])
    def test_disaster_points_are_capped(self, count, points):
        bundle = SignalBundle.from_raw({"disasters": disasters(count)})
        assert severity_points(bundle) == points

    @pytest.mark.parametrize("score,points", [(30, 30), (45, 20), (60, 10), (70, 0)])
    def test_resilience_points(self, score, points):
        assert severity_points(SignalBundle(), report_with_score(score)) == points

    @pytest.mark.parametrize("weather,points", [
        ({"temp": 41}, 15),
        ({"temp": -6}, 15),
        ({"temp": 20, "windSpeed": 110}, 15),
        ({"temp": 39}, 10),
        ({"temp": -1}, 10),
        ({"temp": 20, "windSpeed": 85}, 10),
        ({"temp": 25, "windSpeed": 20}, 0),
    ])
    def test_weather_points(self, weather, points):
        assert severity_points(SignalBundle.from_raw({"weather": weather})) == points

    @pytest.mark.parametrize("aqi,points", [(350, 10), (5, 5), (250, 5), (150, 0)])
    def test_air_quality_points(self, aqi, points):
        bundle = SignalBundle.from_raw({"airQuality": {"aqi": aqi}})
        assert severity_points(bundle) == points

    @pytest.mark.parametrize("bundle,score,severity", [
        ({"disasters": disasters(1)}, None, PlanSeverity.MODERATE),
        ({"disasters": disasters(1)}, 60, PlanSeverity.MODERATE),
        ({"disasters": disasters(1), "weather": {"temp": 41}, "airQuality": {"aqi": 350}},
         None, PlanSeverity.HIGH),
        ({"disasters": disasters(2)}, 45, PlanSeverity.CRITICAL),
        ({"disasters": disasters(3)}, 30, PlanSeverity.EXTREME),
    ])
    def test_levels(self, bundle, score, severity):
        report = report_with_score(score) if score is not None else None
        assert determine_plan_severity(bundle, report) is severity


# ═══════════════════════════════════════════════════════════════════════════
# Fallback plan
# ═══════════════════════════════════════════════════════════════════════════

class TestFallbackPlan:
    def test_calm_conditions(self):
        plan = build_fallback_plan({})
        assert plan.severity is PlanSeverity.LOW
        assert plan.immediate_actions == [
            "Monitor situation closely",
            "Ensure emergency systems are operational",
            "Maintain communication with residents",
        ]
        assert plan.communication_plan.update_frequency == "Daily"
        assert plan.communication_plan.public_message == "Conditions are stable. Stay informed."
        assert plan.evacuation_needed is False
        assert plan.estimated_impact == "LOW impact scenario with 0 active threat(s)"
        assert plan.vulnerable_groups[0].group == "At-risk populations"

    def test_disasters_with_low_resilience(self):
        plan = build_fallback_plan({"disasters": disasters(2)}, report_with_score(45))
        assert plan.severity is PlanSeverity.CRITICAL
        assert plan.immediate_actions[0] == "Activate emergency operations center"
        assert "Strengthen critical infrastructure resilience" in plan.short_term_strategy
        assert [r.resource for r in plan.resource_priorities] == [
            "Emergency Response Vehicles", "Medical Supplies",
        ]
        assert plan.evacuation_needed is True
        assert plan.communication_plan.update_frequency == "Every 4-6 hours"

    def test_extreme_weather(self):
        plan = build_fallback_plan({"weather": {"temp": 39}})
        assert "Open emergency shelters" in plan.immediate_actions
        assert plan.vulnerable_groups[0].group == "Elderly and Children"
        assert plan.short_term_strategy[0] == "Continue routine preparedness activities"

    def test_extreme_severity_requires_evacuation(self):
        plan = build_fallback_plan({"disasters": disasters(3)}, report_with_score(30))
        assert plan.severity is PlanSeverity.EXTREME
        assert plan.evacuation_needed is True

    def test_same_shape_as_generated_plan(self):
        fallback = build_fallback_plan({"disasters": disasters(1)}).to_dict()
        assert set(fallback) == set(PLAN_JSON)
        assert isinstance(parse_crisis_plan(json.dumps(fallback)), CrisisPlan)


# ═══════════════════════════════════════════════════════════════════════════
# Recommendations / context
# ═══════════════════════════════════════════════════════════════════════════

class TestRecommendationsFromPlan:
    def test_mapping(self):
        recs = recommendations_from_plan(parse_crisis_plan(json.dumps(PLAN_JSON)))
        assert [r.action for r in recs] == PLAN_JSON["immediateActions"]
        assert all(r.category == PLAN_CATEGORY for r in recs)
        assert all(r.priority is Priority.HIGH for r in recs)

    @pytest.mark.parametrize("severity,priority", [
        ("EXTREME", Priority.CRITICAL),
        ("CRITICAL", Priority.CRITICAL),
        ("MODERATE", Priority.MODERATE),
        ("LOW", Priority.MODERATE),
    ])
    def test_priority_from_severity(self, severity, priority):
        plan = CrisisPlan(severity=severity, immediate_actions=["a"])
        assert recommendations_from_plan(plan)[0].priority is priority

    def test_limit(self):
        plan = CrisisPlan(severity="HIGH", immediate_actions=[str(i) for i in range(8)])
        assert len(recommendations_from_plan(plan)) == 5
        assert len(recommendations_from_plan(plan, limit=2)) == 2


class TestCrisisContext:
    def test_calm(self):
        assert build_crisis_context({}) == "No active disasters detected"

    def test_full_context(self):
        bundle = {
            "disasters": [{"title": "River flood", "categories": ["Floods"]}],
            "weather": {"temp": 31, "windSpeed": 12, "humidity": 70, "condition": "Rain"},
            "airQuality": {"aqi": 2, "pm25": 18},
            "mobility": {"overallRisk": 40},
        }
        text = build_crisis_context(bundle, compute_resilience_report(bundle, now=NOW))
        assert "Active Disasters (1):" in text
        assert "- River flood: Active event" in text
        assert "- Temperature: 31.0°C" in text
        assert "- AQI: 60" in text
        assert "City Resilience Score:" in text
        assert "- Overall Risk: 40" in text
