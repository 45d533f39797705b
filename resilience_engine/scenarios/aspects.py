"""
aspects.py — Per-hazard scenario aspect catalogue.

Each hazard category reports its own small set of named aspects over a
simulated timeline.  An aspect is either

    continuous   value = min + intensity · (max − min)
                 (inverse aspects: value = max − intensity · (max − min),
                  e.g. an evacuation window that shrinks as the event grows)
                 rounded to 1 decimal for physical quantities, integer for
                 percentages and counts

    categorical  value = levels[ min(n − 1, ⌊intensity · n⌋) ]

so every aspect moves monotonically with intensity.  Categories without an
entry (Volcanoes, Snow, ...) use the generic one-aspect profile.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple, Union

from resilience_engine.scoring.thresholds import clamp, round_half_up
from resilience_engine.signals import HazardCategory

AspectValue = Union[int, float, str]


class AspectKind(str, Enum):
    CONTINUOUS = "continuous"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class AspectRange:
    """Descriptive band of an aspect's values and what they mean on the ground."""
    level: str
    value_range: str
    impact: str
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "value": self.value_range,
            "impact": self.impact,
            "color": self.color,
        }


@dataclass(frozen=True)
class ScenarioAspect:
    id: str
    name: str
    description: str
    unit: str
    kind: AspectKind
    value_min: float = 0.0
    value_max: float = 100.0
    precision: int = 0
    inverse: bool = False
    levels: Tuple[str, ...] = ()
    ranges: Tuple[AspectRange, ...] = ()

    def __post_init__(self) -> None:
        if self.kind is AspectKind.CATEGORICAL and not self.levels:
            raise ValueError(f"Categorical aspect {self.id!r} needs levels")
        if self.kind is AspectKind.CONTINUOUS and self.value_max <= self.value_min:
            raise ValueError(f"Aspect {self.id!r} has an empty value range")

    def value_at(self, intensity: float) -> AspectValue:
        """
        Aspect value for an intensity in [0, 1].

        >>> MAGNITUDE.value_at(1.0)
        8.0
        >>> MAGNITUDE.value_at(0.5)
        5.5
        """
        intensity = clamp(intensity, 0.0, 1.0)

        if self.kind is AspectKind.CATEGORICAL:
            n = len(self.levels)
            return self.levels[min(n - 1, int(math.floor(intensity * n)))]

        span = self.value_max - self.value_min
        if self.inverse:
            value = self.value_max - intensity * span
        else:
            value = self.value_min + intensity * span

        if self.precision == 0:
            return round_half_up(value)
        scale = 10 ** self.precision
        return round_half_up(value * scale) / scale

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "unit": self.unit,
            "kind": self.kind.value,
        }
        if self.kind is AspectKind.CONTINUOUS:
            out.update(
                min=self.value_min, max=self.value_max,
                precision=self.precision, inverse=self.inverse,
            )
        else:
            out["levels"] = list(self.levels)
        if self.ranges:
            out["ranges"] = [r.to_dict() for r in self.ranges]
        return out


def _continuous(
    id: str, name: str, description: str, unit: str,
    lo: float, hi: float, precision: int = 0, inverse: bool = False,
    ranges: Tuple[AspectRange, ...] = (),
) -> ScenarioAspect:
    return ScenarioAspect(
        id=id, name=name, description=description, unit=unit,
        kind=AspectKind.CONTINUOUS, value_min=lo, value_max=hi,
        precision=precision, inverse=inverse, ranges=ranges,
    )


def _categorical(
    id: str, name: str, description: str, levels: Tuple[str, ...],
) -> ScenarioAspect:
    return ScenarioAspect(
        id=id, name=name, description=description, unit="level",
        kind=AspectKind.CATEGORICAL, levels=levels,
    )


FOUR_LEVELS = ("Low", "Moderate", "High", "Extreme")


# ═══════════════════════════════════════════════════════════════════════════
# Floods
# ═══════════════════════════════════════════════════════════════════════════

FLOOD_ASPECTS = (
    _continuous(
        "water_depth", "Water Depth", "Predicted flood depth in affected areas",
        "meters", 0, 4, precision=1,
        ranges=(
            AspectRange("Low", "0.3-0.5m", "Minor property damage, passable with caution", "yellow"),
            AspectRange("Medium", "0.5-1.5m", "Vehicle access blocked, ground floor flooding", "orange"),
            AspectRange("High", "1.5-3m", "Complete ground floor inundation, dangerous currents", "red"),
            AspectRange("Extreme", ">3m", "Multi-story flooding, life-threatening conditions", "purple"),
        ),
    ),
    _continuous(
        "drainage_capacity", "Drainage System Load",
        "Percentage of drainage system capacity utilized", "%", 0, 100,
    ),
    _continuous(
        "evacuation_time", "Evacuation Window",
        "Time available before roads become impassable", "hours", 0, 12,
        precision=1, inverse=True,
    ),
    _categorical(
        "contamination_risk", "Water Contamination Risk",
        "Likelihood of sewage and chemical contamination",
        ("Low", "Moderate", "High", "Severe"),
    ),
    _continuous(
        "infrastructure_impact", "Infrastructure Vulnerability",
        "Share of critical infrastructure at risk (power, water, roads, bridges)",
        "%", 0, 100,
    ),
)


# ═══════════════════════════════════════════════════════════════════════════
# Wildfires
# ═══════════════════════════════════════════════════════════════════════════

WILDFIRE_ASPECTS = (
    _continuous(
        "fire_spread_rate", "Fire Spread Rate",
        "Speed of fire advancement based on wind and terrain", "km/h", 0, 15,
        precision=1,
        ranges=(
            AspectRange("Slow", "<2 km/h", "Controlled spread, manageable evacuation", "yellow"),
            AspectRange("Moderate", "2-5 km/h", "Rapid containment needed, evacuation recommended", "orange"),
            AspectRange("Fast", "5-10 km/h", "Difficult to control, immediate evacuation", "red"),
            AspectRange("Extreme", ">10 km/h", "Uncontrollable, life-threatening situation", "purple"),
        ),
    ),
    _continuous(
        "wind_influence", "Wind Factor",
        "Wind speed affecting fire behavior", "km/h", 0, 80,
    ),
    _continuous(
        "smoke_dispersion", "Smoke Visibility",
        "Visibility in smoke-affected areas", "meters", 100, 10_000, inverse=True,
    ),
    _continuous(
        "air_quality_impact", "Air Quality Degradation",
        "AQI in smoke-affected areas (PM2.5 and CO)", "AQI", 0, 500,
    ),
    _categorical(
        "fuel_density", "Fuel Load", "Vegetation density and flammability",
        ("Light", "Moderate", "Heavy", "Extreme"),
    ),
    _continuous(
        "containment_lines", "Fire Breaks",
        "Effectiveness of natural and artificial barriers to fire spread",
        "%", 0, 100, inverse=True,
    ),
)


# ═══════════════════════════════════════════════════════════════════════════
# Earthquakes
# ═══════════════════════════════════════════════════════════════════════════

MAGNITUDE = _continuous(
    "magnitude", "Earthquake Magnitude", "Richter scale measurement",
    "Magnitude", 3, 8, precision=1,
    ranges=(
        AspectRange("Minor", "3.0-3.9", "Felt but rarely causes damage", "green"),
        AspectRange("Light", "4.0-4.9", "Noticeable shaking, minor damage", "yellow"),
        AspectRange("Moderate", "5.0-5.9", "Moderate damage to structures", "orange"),
        AspectRange("Strong", "6.0-6.9", "Serious damage in populated areas", "red"),
        AspectRange("Major", "7.0+", "Widespread devastation", "purple"),
    ),
)

EARTHQUAKE_ASPECTS = (
    MAGNITUDE,
    _continuous(
        "building_vulnerability", "Building Damage Assessment",
        "Share of building stock with structural damage", "%", 0, 100,
    ),
    _categorical(
        "liquefaction_risk", "Soil Liquefaction Zones",
        "Areas where soil may lose strength", ("Low", "Moderate", "High", "Very High"),
    ),
    _continuous(
        "aftershock_probability", "Aftershock Likelihood",
        "Probability of significant aftershocks", "%", 0, 100,
    ),
    _continuous(
        "infrastructure_collapse", "Infrastructure Failure Risk",
        "Probability of bridge, dam, power or gas line failure", "%", 0, 100,
    ),
    _categorical(
        "tsunami_risk", "Tsunami Potential",
        "Risk of tsunami generation (coastal areas)", ("None", "Low", "Moderate", "High"),
    ),
)


# ═══════════════════════════════════════════════════════════════════════════
# Severe storms
# ═══════════════════════════════════════════════════════════════════════════

STORM_ASPECTS = (
    _continuous(
        "wind_speed", "Maximum Wind Speed", "Peak wind gusts expected", "km/h", 30, 180,
        ranges=(
            AspectRange("Strong", "50-70", "Tree branches break, minor damage", "yellow"),
            AspectRange("Damaging", "70-100", "Trees uprooted, roof damage", "orange"),
            AspectRange("Destructive", "100-150", "Structural damage, flying debris", "red"),
            AspectRange("Catastrophic", ">150", "Widespread devastation", "purple"),
        ),
    ),
    _continuous(
        "rainfall_intensity", "Rainfall Rate", "Precipitation intensity",
        "mm/hour", 0, 150, precision=1,
    ),
    _categorical(
        "lightning_frequency", "Lightning Activity",
        "Strikes per minute in storm area", FOUR_LEVELS,
    ),
    _continuous("hail_size", "Hail Diameter", "Maximum hail stone size", "cm", 0, 10, precision=1),
    _continuous("storm_surge", "Storm Surge Height", "Coastal water level rise", "meters", 0, 6, precision=1),
    _continuous(
        "power_outage_risk", "Power Grid Vulnerability",
        "Likelihood of widespread outages", "%", 0, 100,
    ),
)


# ═══════════════════════════════════════════════════════════════════════════
# Temperature extremes
# ═══════════════════════════════════════════════════════════════════════════

HEAT_ASPECTS = (
    _continuous(
        "temperature_peak", "Peak Temperature", "Maximum temperature expected",
        "°C", 30, 50, precision=1,
        ranges=(
            AspectRange("Hot", "35-38°C", "Heat stress risk, stay hydrated", "yellow"),
            AspectRange("Very Hot", "38-42°C", "High heat stress, limit outdoor activities", "orange"),
            AspectRange("Extreme", "42-45°C", "Dangerous conditions, heat illness likely", "red"),
            AspectRange("Catastrophic", ">45°C", "Life-threatening heat, stay indoors", "purple"),
        ),
    ),
    _continuous(
        "heat_index", "Feels Like Temperature", "Combined heat and humidity effect",
        "°C", 30, 60, precision=1,
    ),
    _continuous(
        "vulnerable_populations", "At-Risk Population",
        "Vulnerable individuals exposed (elderly, children, outdoor workers)",
        "people", 0, 50_000,
    ),
    _continuous(
        "cooling_center_capacity", "Cooling Center Availability",
        "Utilization of air-conditioned shelters", "%", 0, 100,
    ),
    _continuous(
        "power_demand", "Electrical Grid Stress", "AC usage impact on power system",
        "%", 0, 100,
    ),
    _categorical(
        "wildfire_risk", "Heat-Related Fire Risk",
        "Increased fire danger due to extreme heat", FOUR_LEVELS,
    ),
)


# ═══════════════════════════════════════════════════════════════════════════
# Drought
# ═══════════════════════════════════════════════════════════════════════════

DROUGHT_ASPECTS = (
    _continuous(
        "water_scarcity", "Water Supply Deficit",
        "Percentage below normal water availability", "%", 0, 80,
    ),
    _continuous(
        "crop_impact", "Agricultural Impact", "Crop yield reduction estimate", "%", 0, 70,
    ),
    _continuous(
        "reservoir_levels", "Water Storage",
        "Current capacity of reservoirs and aquifers", "% of capacity", 10, 100,
        inverse=True,
    ),
    _categorical(
        "fire_danger", "Wildfire Risk", "Fire danger rating due to dry conditions",
        ("Low", "Moderate", "High", "Very High", "Extreme"),
    ),
    _continuous(
        "dust_storms", "Dust Storm Visibility",
        "Visibility during dust storms from dry soil", "meters", 200, 10_000,
        inverse=True,
    ),
    _categorical(
        "water_restrictions", "Conservation Measures", "Water use restrictions in effect",
        ("Voluntary", "Level 1", "Level 2", "Level 3 (Emergency)"),
    ),
)


# ═══════════════════════════════════════════════════════════════════════════
# Landslides
# ═══════════════════════════════════════════════════════════════════════════

LANDSLIDE_ASPECTS = (
    _categorical(
        "slope_stability", "Slope Stability Index", "Geological stability of terrain",
        ("Stable", "Marginally Stable", "Unstable", "Failed"),
    ),
    _continuous(
        "soil_saturation", "Soil Moisture Content",
        "Water saturation in soil (trigger factor)", "%", 20, 100,
    ),
    _continuous(
        "affected_roads", "Road Network Impact",
        "Roads at risk or blocked by landslides", "roads", 0, 40,
    ),
    _continuous(
        "population_exposure", "Exposed Population",
        "Number of people in landslide zones", "people", 0, 20_000,
    ),
    _continuous(
        "debris_volume", "Debris Flow Volume",
        "Estimated volume of material movement", "cubic meters", 0, 50_000,
    ),
)


GENERIC_ASPECTS = (
    _categorical(
        "generic_severity", "Severity Level", "Overall impact assessment",
        ("Low", "Moderate", "High", "Severe"),
    ),
)


@dataclass(frozen=True)
class ScenarioProfile:
    """Presentation metadata and aspects for one hazard category."""
    icon: str
    color: str
    aspects: Tuple[ScenarioAspect, ...]


SCENARIO_CATALOGUE: Mapping[HazardCategory, ScenarioProfile] = MappingProxyType({
    HazardCategory.FLOODS: ScenarioProfile("flood", "blue", FLOOD_ASPECTS),
    HazardCategory.WILDFIRES: ScenarioProfile("local_fire_department", "red", WILDFIRE_ASPECTS),
    HazardCategory.EARTHQUAKES: ScenarioProfile("earthquake", "purple", EARTHQUAKE_ASPECTS),
    HazardCategory.SEVERE_STORMS: ScenarioProfile("thunderstorm", "indigo", STORM_ASPECTS),
    HazardCategory.TEMPERATURE_EXTREMES: ScenarioProfile("thermostat", "orange", HEAT_ASPECTS),
    HazardCategory.DROUGHT: ScenarioProfile("water_drop", "yellow", DROUGHT_ASPECTS),
    HazardCategory.LANDSLIDES: ScenarioProfile("landslide", "brown", LANDSLIDE_ASPECTS),
})

GENERIC_PROFILE = ScenarioProfile("warning", "gray", GENERIC_ASPECTS)


def get_scenario_profile(hazard_type: Union[HazardCategory, str]) -> ScenarioProfile:
    return SCENARIO_CATALOGUE.get(HazardCategory.parse(hazard_type), GENERIC_PROFILE)


def get_scenario_aspects(hazard_type: Union[HazardCategory, str]) -> Tuple[ScenarioAspect, ...]:
    """
    Aspects reported by a scenario of the given hazard type.

    >>> [a.id for a in get_scenario_aspects("Volcanoes")]
    ['generic_severity']
    """
    return get_scenario_profile(hazard_type).aspects
