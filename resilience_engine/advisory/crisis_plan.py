"""
crisis_plan.py — Crisis response plan contract and rule-based fallback.

An external text generator may be asked for a structured crisis plan; the
engine does not call it.  This module owns the plan's shape and both ways
of producing one:

    • parse_crisis_plan(text)         — validate a generated JSON answer
    • build_fallback_plan(bundle, …)  — derive a plan from the same inputs
                                        with fixed rules

Either result feeds ``recommendations_from_plan`` so report consumers never
care which source answered.

═══════════════════════════════════════════════════════════════════════════
SEVERITY POINTS
═══════════════════════════════════════════════════════════════════════════

    active disasters        +20 each, at most +60
    resilience score        < 35 → +30,  < 50 → +20,  < 65 → +10
    weather                 temp > 40 or < −5 or wind > 100 → +15
                            else temp > 38 or < 0 or wind > 80 → +10
    air quality (0–500)     > 300 → +10,  > 200 → +5

    ≥ 80 EXTREME   ≥ 60 CRITICAL   ≥ 40 HIGH   ≥ 20 MODERATE   else LOW
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from resilience_engine.core.errors import CrisisPlanParseError
from resilience_engine.scoring.aggregator import ResilienceReport
from resilience_engine.scoring.components import COMPONENT_DISPLAY_NAMES, normalise_aqi
from resilience_engine.scoring.recommendations import (
    MAX_RECOMMENDATIONS,
    Priority,
    Recommendation,
)
from resilience_engine.signals import SignalBundle

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)

PLAN_CATEGORY = "Crisis Response"
PLAN_ICON = "emergency"


class PlanSeverity(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"
    EXTREME = "EXTREME"


# Lower bound of each severity, highest first
PLAN_SEVERITY_THRESHOLDS = (
    (80, PlanSeverity.EXTREME),
    (60, PlanSeverity.CRITICAL),
    (40, PlanSeverity.HIGH),
    (20, PlanSeverity.MODERATE),
)

PLAN_PRIORITY = {
    PlanSeverity.EXTREME: Priority.CRITICAL,
    PlanSeverity.CRITICAL: Priority.CRITICAL,
    PlanSeverity.HIGH: Priority.HIGH,
    PlanSeverity.MODERATE: Priority.MODERATE,
    PlanSeverity.LOW: Priority.MODERATE,
}


# ═══════════════════════════════════════════════════════════════════════════
# Plan schema
# ═══════════════════════════════════════════════════════════════════════════

class _PlanModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class VulnerableGroup(_PlanModel):
    group: str
    risk: str = ""
    protection: str = ""


class ResourcePriority(_PlanModel):
    resource: str
    quantity: str = ""
    locations: List[str] = Field(default_factory=list)


class CommunicationPlan(_PlanModel):
    public_message: str = Field("", alias="publicMessage")
    channels: List[str] = Field(default_factory=list)
    update_frequency: str = Field("", alias="updateFrequency")


class CrisisPlan(_PlanModel):
    """Structured crisis response plan (camelCase on the wire)."""
    severity: PlanSeverity
    immediate_actions: List[str] = Field(default_factory=list, alias="immediateActions")
    short_term_strategy: List[str] = Field(default_factory=list, alias="shortTermStrategy")
    vulnerable_groups: List[VulnerableGroup] = Field(
        default_factory=list, alias="vulnerableGroups",
    )
    resource_priorities: List[ResourcePriority] = Field(
        default_factory=list, alias="resourcePriorities",
    )
    communication_plan: CommunicationPlan = Field(
        default_factory=CommunicationPlan, alias="communicationPlan",
    )
    evacuation_needed: bool = Field(False, alias="evacuationNeeded")
    estimated_impact: str = Field("", alias="estimatedImpact")

    @field_validator("severity", mode="before")
    @classmethod
    def _upper_severity(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def parse_crisis_plan(text: str) -> CrisisPlan:
    """
    Validate a generated answer that embeds a JSON crisis plan.

    The outermost ``{...}`` block is extracted, so surrounding prose or
    markdown fences are tolerated.

    Raises
    ------
    CrisisPlanParseError
        No JSON object, malformed JSON, or a payload that does not match
        the plan schema.
    """
    match = _JSON_BLOCK.search(text or "")
    if match is None:
        raise CrisisPlanParseError("no JSON object found")

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise CrisisPlanParseError(f"malformed JSON ({exc.msg})", position=exc.pos) from exc

    try:
        return CrisisPlan.model_validate(payload)
    except ValidationError as exc:
        raise CrisisPlanParseError(
            "payload does not match the plan schema",
            errors=[e["msg"] for e in exc.errors()],
        ) from exc


# ═══════════════════════════════════════════════════════════════════════════
# Rule-based plan
# ═══════════════════════════════════════════════════════════════════════════

def _extreme_weather(bundle: SignalBundle, temp_hi: float, temp_lo: float, wind: float) -> bool:
    w = bundle.weather
    if w is None:
        return False
    hot_or_cold = w.temp is not None and (w.temp > temp_hi or w.temp < temp_lo)
    windy = w.wind_speed is not None and w.wind_speed > wind
    return hot_or_cold or windy


def severity_points(bundle: SignalBundle, report: Optional[ResilienceReport] = None) -> int:
    points = min(len(bundle.disasters) * 20, 60)

    if report is not None:
        if report.overall_score < 35:
            points += 30
        elif report.overall_score < 50:
            points += 20
        elif report.overall_score < 65:
            points += 10

    if _extreme_weather(bundle, 40, -5, 100):
        points += 15
    elif _extreme_weather(bundle, 38, 0, 80):
        points += 10

    aq = bundle.air_quality
    if aq is not None and aq.aqi is not None:
        aqi = normalise_aqi(aq.aqi)
        if aqi > 300:
            points += 10
        elif aqi > 200:
            points += 5

    return points


def determine_plan_severity(
    bundle: Union[SignalBundle, dict, None],
    report: Optional[ResilienceReport] = None,
) -> PlanSeverity:
    """
    Plan severity from disasters, resilience, weather and air quality.

    >>> determine_plan_severity({})
    <PlanSeverity.LOW: 'LOW'>
    >>> determine_plan_severity({"disasters": [{"title": "a"}, {"title": "b"}]})
    <PlanSeverity.HIGH: 'HIGH'>
    """
    points = severity_points(SignalBundle.from_raw(bundle), report)
    for lower, severity in PLAN_SEVERITY_THRESHOLDS:
        if points >= lower:
            return severity
    return PlanSeverity.LOW


def build_fallback_plan(
    bundle: Union[SignalBundle, dict, None],
    report: Optional[ResilienceReport] = None,
) -> CrisisPlan:
    """Crisis plan from fixed rules, same shape as a generated one."""
    bundle = SignalBundle.from_raw(bundle)
    severity = determine_plan_severity(bundle, report)
    has_disasters = bool(bundle.disasters)
    low_resilience = report is not None and report.overall_score < 50
    extreme_weather = _extreme_weather(bundle, 38, 0, 80)

    immediate: List[str] = []
    strategy: List[str] = []
    groups: List[VulnerableGroup] = []
    resources: List[ResourcePriority] = []

    if has_disasters:
        immediate += [
            "Activate emergency operations center",
            "Issue public alerts about active disasters",
            "Deploy emergency response teams to affected areas",
        ]
        strategy.append("Coordinate with regional emergency services")
        resources.append(ResourcePriority(
            resource="Emergency Response Vehicles",
            quantity="10-20 units",
            locations=["Disaster zones", "Strategic staging areas"],
        ))

    if extreme_weather:
        immediate += ["Issue weather warnings to all residents", "Open emergency shelters"]
        groups.append(VulnerableGroup(
            group="Elderly and Children",
            risk="Extreme temperature exposure",
            protection="Provide cooling/heating centers, welfare checks",
        ))

    if low_resilience:
        strategy += [
            "Strengthen critical infrastructure resilience",
            "Increase resource stockpiles",
        ]
        resources.append(ResourcePriority(
            resource="Medical Supplies",
            quantity="Emergency stockpile",
            locations=["Hospitals", "Community centers"],
        ))

    if not immediate:
        immediate = [
            "Monitor situation closely",
            "Ensure emergency systems are operational",
            "Maintain communication with residents",
        ]
    if not strategy:
        strategy = [
            "Continue routine preparedness activities",
            "Update emergency response plans",
            "Conduct community resilience training",
        ]
    if not groups:
        groups = [VulnerableGroup(
            group="At-risk populations",
            risk="General preparedness",
            protection="Ensure access to emergency information",
        )]
    if not resources:
        resources = [ResourcePriority(
            resource="Emergency Supplies",
            quantity="Standard stockpile",
            locations=["Distribution centers"],
        )]

    stable = severity is PlanSeverity.LOW
    plan = CrisisPlan(
        severity=severity,
        immediate_actions=immediate,
        short_term_strategy=strategy,
        vulnerable_groups=groups,
        resource_priorities=resources,
        communication_plan=CommunicationPlan(
            public_message=(
                "Conditions are stable. Stay informed." if stable
                else "Monitor situation closely and follow official guidance."
            ),
            channels=["Emergency Alert System", "Local News", "City Website"],
            update_frequency="Daily" if stable else "Every 4-6 hours",
        ),
        evacuation_needed=(
            severity is PlanSeverity.EXTREME or (has_disasters and low_resilience)
        ),
        estimated_impact=(
            f"{severity.value} impact scenario with {len(bundle.disasters)} active threat(s)"
        ),
    )
    logger.debug("Fallback crisis plan: %s, %d immediate actions",
                 severity.value, len(plan.immediate_actions))
    return plan


def recommendations_from_plan(
    plan: CrisisPlan, limit: int = MAX_RECOMMENDATIONS,
) -> List[Recommendation]:
    """Immediate actions of a plan as report recommendations."""
    priority = PLAN_PRIORITY[plan.severity]
    return [
        Recommendation(PLAN_CATEGORY, priority, action, PLAN_ICON)
        for action in plan.immediate_actions[:limit]
    ]


# ═══════════════════════════════════════════════════════════════════════════
# Prompt context
# ═══════════════════════════════════════════════════════════════════════════

def build_crisis_context(
    bundle: Union[SignalBundle, dict, None],
    report: Optional[ResilienceReport] = None,
) -> str:
    """Plain-text situation summary for a plan generator prompt."""
    bundle = SignalBundle.from_raw(bundle)
    lines: List[str] = []

    if bundle.disasters:
        lines.append(f"Active Disasters ({len(bundle.disasters)}):")
        for d in bundle.disasters[:5]:
            lines.append(f"- {d.title or d.primary_category.value}: {d.description or 'Active event'}")
    else:
        lines.append("No active disasters detected")

    w = bundle.weather
    if w is not None and w.temp is not None:
        lines += ["", "Weather Conditions:", f"- Temperature: {w.temp}°C"]
        if w.condition:
            lines.append(f"- Conditions: {w.condition}")
        if w.wind_speed is not None:
            lines.append(f"- Wind: {w.wind_speed} km/h")
        if w.humidity is not None:
            lines.append(f"- Humidity: {w.humidity}%")

    aq = bundle.air_quality
    if aq is not None and aq.aqi:
        lines += ["", "Air Quality:", f"- AQI: {normalise_aqi(aq.aqi):g}"]
        if aq.components is not None and aq.components.pm2_5 is not None:
            lines.append(f"- PM2.5: {aq.components.pm2_5} µg/m³")

    if report is not None:
        lines += [
            "",
            f"City Resilience Score: {report.overall_score}/100 ({report.level.value})",
            "Top Vulnerabilities:",
        ]
        for risk in report.top_risks:
            lines.append(f"- {COMPONENT_DISPLAY_NAMES[risk.component]}: {risk.score}/100")

    m = bundle.mobility
    if m is not None and m.overall_risk:
        lines += ["", "Transportation Status:", f"- Overall Risk: {m.overall_risk:g}"]

    return "\n".join(lines)
