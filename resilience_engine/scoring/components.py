"""
components.py — The six component scorers.

Each scorer maps one domain reading to an integer sub-score in
``[floor, ceiling]`` (higher = more resilient):

    Component        Absent   Baseline   Floor   Ceiling
    ──────────────   ──────   ────────   ─────   ───────
    weather              70        100      20       100
    disaster             88         85      15        88
    climate              70         85      40       100
    mobility             70        100      30       100
    air_quality          75         95      15       100
    infrastructure       75         75      30       100

Absent signals score *below* a benign reading on purpose: missing data must
not look like an all-clear.

Scoring pattern:

    score = baseline
    for each ladder:  score += ladder.evaluate(reading.value)
    score = clamp(round_half_up(score), floor, ceiling)

═══════════════════════════════════════════════════════════════════════════
DISASTER SUB-SCORE
═══════════════════════════════════════════════════════════════════════════

    deduction_i = weight[category_i] × (1.2 if category_i is critical else 1)
    total       = Σ deduction_i × compounding(n)

        compounding(n) = 1.30   n > 3
                         1.15   n ∈ {2, 3}
                         1.00   n = 1

    score = 85 − total + (5 if no critical category present)

Critical categories: Volcanoes, Earthquakes, Floods.

    Single flood:     85 − 20 × 1.2           = 61
    Single wildfire:  85 − 18 + 5             = 72
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence

from resilience_engine.scoring import thresholds as t
from resilience_engine.scoring.thresholds import clamp, round_half_up
from resilience_engine.signals import (
    AirQualitySnapshot,
    ClimateNormals,
    DisasterRecord,
    HazardCategory,
    MobilitySnapshot,
    SignalBundle,
    WeatherReading,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════

WEATHER_ABSENT, WEATHER_BASELINE, WEATHER_FLOOR = 70, 100.0, 20
DISASTER_NONE, DISASTER_BASELINE, DISASTER_FLOOR, DISASTER_CEILING = 88, 85.0, 15, 88
CLIMATE_ABSENT, CLIMATE_BASELINE, CLIMATE_FLOOR = 70, 85.0, 40
MOBILITY_ABSENT, MOBILITY_BASELINE, MOBILITY_FLOOR = 70, 100.0, 30
AIR_QUALITY_ABSENT, AIR_QUALITY_BASELINE, AIR_QUALITY_FLOOR = 75, 95.0, 15
INFRASTRUCTURE_BASELINE, INFRASTRUCTURE_FLOOR = 75.0, 30
SCORE_CEILING = 100

CLIMATE_DEFAULT_TEMP = 20.0
CLIMATE_DEFAULT_PRECIP = 50.0

MOBILITY_RISK_FACTOR = 0.4
EVACUATION_CAPACITY_PIVOT = 50.0
EVACUATION_CAPACITY_FACTOR = 0.3
SAFE_ROUTE_POINTS = 2.0
SAFE_ROUTE_CAP = 15.0

# Per-category deduction from the disaster baseline
DISASTER_WEIGHTS: Mapping[HazardCategory, float] = MappingProxyType({
    HazardCategory.WILDFIRES: 18.0,
    HazardCategory.SEVERE_STORMS: 15.0,
    HazardCategory.FLOODS: 20.0,
    HazardCategory.EARTHQUAKES: 22.0,
    HazardCategory.VOLCANOES: 28.0,
    HazardCategory.DROUGHT: 12.0,
    HazardCategory.LANDSLIDES: 16.0,
    HazardCategory.SEA_LAKE_ICE: 6.0,
    HazardCategory.SNOW: 10.0,
    HazardCategory.DUST_HAZE: 8.0,
    HazardCategory.MANMADE: 14.0,
    HazardCategory.TEMPERATURE_EXTREMES: 15.0,
    HazardCategory.UNKNOWN: 10.0,
})

CRITICAL_CATEGORIES = frozenset({
    HazardCategory.VOLCANOES,
    HazardCategory.EARTHQUAKES,
    HazardCategory.FLOODS,
})
CRITICAL_MULTIPLIER = 1.2
MANY_HAZARDS_MULTIPLIER = 1.3    # more than 3 records
SEVERAL_HAZARDS_MULTIPLIER = 1.15  # 2–3 records
NO_CRITICAL_BONUS = 5.0


# ═══════════════════════════════════════════════════════════════════════════
# Component identity
# ═══════════════════════════════════════════════════════════════════════════

class ComponentName(str, Enum):
    """The six scored domains, in tie-break order."""
    WEATHER = "weather"
    DISASTER = "disaster"
    CLIMATE = "climate"
    MOBILITY = "mobility"
    AIR_QUALITY = "air_quality"
    INFRASTRUCTURE = "infrastructure"


COMPONENT_LABELS = {
    ComponentName.WEATHER: "Weather Resilience",
    ComponentName.DISASTER: "Disaster Preparedness",
    ComponentName.CLIMATE: "Climate Adaptation",
    ComponentName.MOBILITY: "Mobility & Access",
    ComponentName.AIR_QUALITY: "Air Quality",
    ComponentName.INFRASTRUCTURE: "Infrastructure",
}

# Names used in risk / strength highlights
COMPONENT_DISPLAY_NAMES = {
    ComponentName.WEATHER: "Weather",
    ComponentName.DISASTER: "Disasters",
    ComponentName.CLIMATE: "Climate",
    ComponentName.MOBILITY: "Mobility",
    ComponentName.AIR_QUALITY: "Air Quality",
    ComponentName.INFRASTRUCTURE: "Infrastructure",
}


@dataclass(frozen=True)
class ComponentScore:
    """Sub-score for one domain."""
    name: ComponentName
    score: int
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name.value, "score": self.score, "label": self.label}


def _finalise(raw: float, floor: int, ceiling: int = SCORE_CEILING) -> int:
    return int(clamp(round_half_up(raw), floor, ceiling))


# ═══════════════════════════════════════════════════════════════════════════
# Scorers
# ═══════════════════════════════════════════════════════════════════════════

def score_weather(weather: Optional[WeatherReading]) -> int:
    """
    Score current weather conditions.

    Parameters
    ----------
    weather : WeatherReading | None
        Current conditions. None → 70.

    Returns
    -------
    int
        Sub-score in [20, 100].

    Examples
    --------
    >>> score_weather(WeatherReading(temp=42, wind_speed=10, humidity=50,
    ...                              pressure=1013, condition="Clear"))
    67
    """
    if weather is None:
        return WEATHER_ABSENT

    score = WEATHER_BASELINE
    temp = weather.temp

    score += t.WEATHER_HEAT.evaluate(temp)
    score += t.WEATHER_COLD.evaluate(temp)
    score += t.WEATHER_WIND.evaluate(weather.wind_speed)

    if temp is not None and temp > t.HUMID_HEAT_MIN_TEMP:
        score += t.WEATHER_HUMID_HEAT.evaluate(weather.humidity)

    score += t.WEATHER_PRESSURE.evaluate(weather.pressure)

    condition = t.classify_condition(weather.condition)
    if condition is not None:
        score += t.CONDITION_DELTAS[condition]

    score += t.WEATHER_VISIBILITY.evaluate(weather.visibility)

    return _finalise(score, WEATHER_FLOOR)


def disaster_deduction(records: Sequence[DisasterRecord]) -> float:
    """Total deduction for a set of active events, compounding included."""
    total = 0.0
    for record in records:
        category = record.primary_category
        deduction = DISASTER_WEIGHTS[category]
        if category in CRITICAL_CATEGORIES:
            deduction *= CRITICAL_MULTIPLIER
        total += deduction

    count = len(records)
    if count > 3:
        total *= MANY_HAZARDS_MULTIPLIER
    elif count >= 2:
        total *= SEVERAL_HAZARDS_MULTIPLIER
    return total


def score_disasters(records: Optional[Sequence[DisasterRecord]]) -> int:
    """
    Score exposure to active disaster events.

    Examples
    --------
    >>> score_disasters([])
    88
    >>> score_disasters([DisasterRecord(categories=[{"title": "Floods"}])])
    61
    """
    if not records:
        return DISASTER_NONE

    score = DISASTER_BASELINE - disaster_deduction(records)
    if not any(r.primary_category in CRITICAL_CATEGORIES for r in records):
        score += NO_CRITICAL_BONUS

    return _finalise(score, DISASTER_FLOOR, DISASTER_CEILING)


def score_climate(climate: Optional[ClimateNormals]) -> int:
    """Score long-term climate vulnerability. None → 70; floor 40."""
    if climate is None:
        return CLIMATE_ABSENT

    avg_temp = climate.avg_temp if climate.avg_temp is not None else CLIMATE_DEFAULT_TEMP
    avg_precip = (
        climate.avg_precip if climate.avg_precip is not None else CLIMATE_DEFAULT_PRECIP
    )

    score = CLIMATE_BASELINE
    score += t.CLIMATE_HOT.evaluate(avg_temp) or t.CLIMATE_COLD.evaluate(avg_temp)
    score += t.CLIMATE_WET.evaluate(avg_precip) or t.CLIMATE_ARID.evaluate(avg_precip)

    return _finalise(score, CLIMATE_FLOOR)


def score_mobility(mobility: Optional[MobilitySnapshot]) -> int:
    """
    Score transportation resilience.

    ``100 − overall_risk × 0.4``, averaged with ``accessibility.overall``
    when reported, then the transit-impact ladder. Floor 30.
    """
    if mobility is None:
        return MOBILITY_ABSENT

    score = MOBILITY_BASELINE
    if mobility.overall_risk is not None:
        score -= mobility.overall_risk * MOBILITY_RISK_FACTOR

    access = mobility.accessibility
    if access is not None and access.overall is not None:
        score = (score + access.overall) / 2

    score += t.TRANSIT_IMPACT.evaluate(mobility.transit_impact)

    return _finalise(score, MOBILITY_FLOOR)


def normalise_aqi(aqi: float) -> float:
    """
    Put an AQI reading on the 0–500 scale.

    Integral values 1–5 are the categorical index and are mapped through
    ``AQI_CATEGORY_SCALE``; everything else is read as a raw AQI and
    clamped.

    >>> normalise_aqi(4)
    175.0
    >>> normalise_aqi(4.5)
    4.5
    >>> normalise_aqi(812)
    500.0
    """
    if float(aqi).is_integer() and int(aqi) in t.AQI_CATEGORY_SCALE:
        return t.AQI_CATEGORY_SCALE[int(aqi)]
    return clamp(float(aqi), 0.0, 500.0)


def score_air_quality(air: Optional[AirQualitySnapshot]) -> int:
    """Score air quality from AQI plus additive pollutant deductions. Floor 15."""
    if air is None:
        return AIR_QUALITY_ABSENT

    score = AIR_QUALITY_BASELINE
    if air.aqi is not None:
        aqi = normalise_aqi(air.aqi)
        score += t.AQI_POLLUTED.evaluate(aqi) or t.AQI_CLEAN.evaluate(aqi)

    components = air.components
    if components is not None:
        score += t.PM25.evaluate(components.pm2_5)
        score += t.PM10.evaluate(components.pm10)
        score += t.NO2.evaluate(components.no2)
        score += t.CO.evaluate(components.co)

    return _finalise(score, AIR_QUALITY_FLOOR)


def score_infrastructure(mobility: Optional[MobilitySnapshot]) -> int:
    """
    Score built-environment capacity from the mobility snapshot.

    Baseline 75 (also when mobility is absent), adjusted by evacuation
    capacity around 50 %, blocked-road ladder and safe-route bonus.
    """
    score = INFRASTRUCTURE_BASELINE
    if mobility is None:
        return _finalise(score, INFRASTRUCTURE_FLOOR)

    if mobility.evacuation_capacity is not None:
        score += (mobility.evacuation_capacity - EVACUATION_CAPACITY_PIVOT) * EVACUATION_CAPACITY_FACTOR

    if mobility.accessibility is not None:
        score += t.BLOCKED_ROADS.evaluate(mobility.accessibility.blocked_roads)

    if mobility.safe_routes is not None:
        score += clamp(mobility.safe_routes * SAFE_ROUTE_POINTS, 0.0, SAFE_ROUTE_CAP)

    return _finalise(score, INFRASTRUCTURE_FLOOR)


# ═══════════════════════════════════════════════════════════════════════════
# All components
# ═══════════════════════════════════════════════════════════════════════════

def score_components(bundle: SignalBundle) -> Dict[ComponentName, ComponentScore]:
    """Run all six scorers; absent signals fall back to their baselines."""
    raw = {
        ComponentName.WEATHER: score_weather(bundle.weather),
        ComponentName.DISASTER: score_disasters(bundle.disasters),
        ComponentName.CLIMATE: score_climate(bundle.climate),
        ComponentName.MOBILITY: score_mobility(bundle.mobility),
        ComponentName.AIR_QUALITY: score_air_quality(bundle.air_quality),
        ComponentName.INFRASTRUCTURE: score_infrastructure(bundle.mobility),
    }
    logger.debug(
        "Component scores: %s",
        ", ".join(f"{name.value}={score}" for name, score in raw.items()),
    )
    return {
        name: ComponentScore(name=name, score=score, label=COMPONENT_LABELS[name])
        for name, score in raw.items()
    }
