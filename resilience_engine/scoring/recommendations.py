"""
recommendations.py — Rule-based recommendation synthesizer.

Rules are evaluated in a fixed order; each appends zero or one
``Recommendation``.  The list is then cut to the first ``MAX_RECOMMENDATIONS``
entries **in rule order**; it is never re-sorted by priority, so the same
scores always yield the same list.

═══════════════════════════════════════════════════════════════════════════
RULE TABLE
═══════════════════════════════════════════════════════════════════════════

    #   Trigger                                          Category        Priority
    ──  ───────────────────────────────────────────────  ──────────────  ────────
    1   weather < 60  and  temp > 35 °C                  Weather         High
    2   weather < 60  and  wind > 50 km/h                Weather         High
    3   disaster < 60 and  events present                Disaster        Critical
    3a    … and a Floods event                           Flooding        Critical
    3b    … and a Wildfires event                        Wildfire        Critical
    4   mobility < 60                                    Mobility        Moderate
    5   air_quality < 60                                 Air Quality     Moderate
    6   infrastructure < 60                              Infrastructure  High
    7   disaster < 70  or  weather < 70                  Preparedness    Moderate

Icons are Material Symbols names so every consumer renders them the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from resilience_engine.scoring.components import ComponentName
from resilience_engine.signals import DisasterRecord, HazardCategory, WeatherReading


MAX_RECOMMENDATIONS = 5

WEAK_COMPONENT_THRESHOLD = 60
PREPAREDNESS_THRESHOLD = 70
HEAT_ACTION_TEMP = 35.0
WIND_ACTION_SPEED = 50.0


class Priority(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MODERATE = "Moderate"


@dataclass(frozen=True)
class Recommendation:
    """One prioritised action for the report consumer."""
    category: str
    priority: Priority
    action: str
    icon: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "priority": self.priority.value,
            "action": self.action,
            "icon": self.icon,
        }


HEAT_PROTOCOL = Recommendation(
    "Weather", Priority.HIGH,
    "Activate heat emergency protocols. Open cooling centers.",
    "thermostat",
)
WIND_WARNING = Recommendation(
    "Weather", Priority.HIGH,
    "Issue wind warnings. Secure outdoor objects and infrastructure.",
    "air",
)
FLOOD_RESPONSE = Recommendation(
    "Flooding", Priority.CRITICAL,
    "Evacuate low-lying areas. Activate flood barriers and drainage systems.",
    "flood",
)
WILDFIRE_RESPONSE = Recommendation(
    "Wildfire", Priority.CRITICAL,
    "Create defensible space. Prepare evacuation routes. Monitor air quality.",
    "local_fire_department",
)
MOBILITY_ACTION = Recommendation(
    "Mobility", Priority.MODERATE,
    "Enhance public transit frequency. Clear blocked routes. Deploy traffic management.",
    "traffic",
)
AIR_QUALITY_ACTION = Recommendation(
    "Air Quality", Priority.MODERATE,
    "Issue air quality alerts. Limit outdoor activities. Distribute masks.",
    "masks",
)
INFRASTRUCTURE_ACTION = Recommendation(
    "Infrastructure", Priority.HIGH,
    "Inspect critical infrastructure. Prioritize repairs. Ensure emergency access routes.",
    "construction",
)
PREPAREDNESS_ACTION = Recommendation(
    "Preparedness", Priority.MODERATE,
    "Update emergency plans. Conduct drills. Stockpile emergency supplies.",
    "checklist",
)


def disaster_activation(count: int) -> Recommendation:
    return Recommendation(
        "Disaster", Priority.CRITICAL,
        f"Active disasters detected: {count}. Activate emergency response plan.",
        "emergency",
    )


def synthesize_recommendations(
    scores: Mapping[ComponentName, int],
    disasters: Sequence[DisasterRecord] = (),
    weather: Optional[WeatherReading] = None,
    limit: int = MAX_RECOMMENDATIONS,
) -> List[Recommendation]:
    """
    Derive prioritised actions from component scores and raw context.

    Parameters
    ----------
    scores : mapping ComponentName → int
        All six component sub-scores.
    disasters : sequence of DisasterRecord
        Active events; categories pick the hazard-specific actions.
    weather : WeatherReading | None
        Raw reading; heat / wind actions need the value itself to cross
        its threshold, not just a weak weather score.
    limit : int
        Maximum number of recommendations returned.

    Returns
    -------
    list of Recommendation
        At most ``limit`` entries, in rule order.
    """
    out: List[Recommendation] = []

    weather_score = scores[ComponentName.WEATHER]
    disaster_score = scores[ComponentName.DISASTER]

    if weather_score < WEAK_COMPONENT_THRESHOLD and weather is not None:
        if weather.temp is not None and weather.temp > HEAT_ACTION_TEMP:
            out.append(HEAT_PROTOCOL)
        if weather.wind_speed is not None and weather.wind_speed > WIND_ACTION_SPEED:
            out.append(WIND_WARNING)

    if disaster_score < WEAK_COMPONENT_THRESHOLD and disasters:
        out.append(disaster_activation(len(disasters)))
        categories = {d.primary_category for d in disasters}
        if HazardCategory.FLOODS in categories:
            out.append(FLOOD_RESPONSE)
        if HazardCategory.WILDFIRES in categories:
            out.append(WILDFIRE_RESPONSE)

    if scores[ComponentName.MOBILITY] < WEAK_COMPONENT_THRESHOLD:
        out.append(MOBILITY_ACTION)

    if scores[ComponentName.AIR_QUALITY] < WEAK_COMPONENT_THRESHOLD:
        out.append(AIR_QUALITY_ACTION)

    if scores[ComponentName.INFRASTRUCTURE] < WEAK_COMPONENT_THRESHOLD:
        out.append(INFRASTRUCTURE_ACTION)

    if disaster_score < PREPAREDNESS_THRESHOLD or weather_score < PREPAREDNESS_THRESHOLD:
        out.append(PREPAREDNESS_ACTION)

    return out[:limit]
