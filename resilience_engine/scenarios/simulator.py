"""
simulator.py — Hazard scenario timelines.

Given a hazard type, a severity tier and a duration, produces one
timepoint per hour (``duration + 1`` in total, hour 0 = start) and a
summary of the event at its peak.

═══════════════════════════════════════════════════════════════════════════
INTENSITY CURVE
═══════════════════════════════════════════════════════════════════════════

    progress  = hour / duration
    curve     = progress / peak_time                               progress < peak_time
              = 1 − ((progress − peak_time) / (1 − peak_time)) · 0.7   otherwise
    intensity = clamp(curve · multiplier + noise, 0, 1)

The curve ramps linearly to 1.0 at ``peak_time`` (0.65) and then decays
to 30 % of peak by the end of the window.  ``noise`` is drawn from
uniform(0, SCENARIO_NOISE_MAX) once per timepoint.

    tier        multiplier
    ────────    ──────────
    Low         0.30
    Moderate    0.60
    High        0.85
    Severe      1.00

═══════════════════════════════════════════════════════════════════════════
SUMMARY
═══════════════════════════════════════════════════════════════════════════

Taken at hour ``round_half_up(peak_time · duration)``:

    estimated impact      = input tier
    affected population   ∈ [10 000, 60 000)
    economic loss (M USD) ∈ [50, 550)
    evacuation needed     = tier ∈ {High, Severe}
    Emergency Services    ∈ [10, 30)
    Medical Teams         ∈ [5, 20)
    Evacuation Vehicles   ∈ [20, 70)

All random draws come from one generator seeded per call: the per-hour
noise first, then the summary estimates in the order above.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import numpy as np

from resilience_engine.core.config import settings
from resilience_engine.core.errors import InvalidScenarioError
from resilience_engine.core.logging_config import set_log_context
from resilience_engine.hazards.engine import LocationLike, resolve_location
from resilience_engine.scenarios.aspects import AspectValue, get_scenario_profile
from resilience_engine.scoring.thresholds import clamp, round_half_up
from resilience_engine.signals import HazardCategory
from resilience_engine.spatial.geo import Coordinate

logger = logging.getLogger(__name__)

DECAY_FLOOR = 0.3

AFFECTED_POPULATION_RANGE = (10_000, 60_000)
ECONOMIC_LOSS_RANGE_MUSD = (50.0, 550.0)

EMERGENCY_SERVICES = "Emergency Services"
MEDICAL_TEAMS = "Medical Teams"
EVACUATION_VEHICLES = "Evacuation Vehicles"

RESPONSE_UNIT_RANGES: Mapping[str, Tuple[int, int]] = MappingProxyType({
    EMERGENCY_SERVICES: (10, 30),
    MEDICAL_TEAMS: (5, 20),
    EVACUATION_VEHICLES: (20, 70),
})


class SeverityTier(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    SEVERE = "Severe"

    @property
    def multiplier(self) -> float:
        return SEVERITY_MULTIPLIERS[self]

    @property
    def needs_evacuation(self) -> bool:
        return self in (SeverityTier.HIGH, SeverityTier.SEVERE)

    @classmethod
    def parse(cls, value: Union["SeverityTier", str]) -> "SeverityTier":
        """Case-insensitive tier lookup; unknown tiers raise InvalidScenarioError."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            needle = value.strip().lower()
            for tier in cls:
                if tier.value.lower() == needle:
                    return tier
        raise InvalidScenarioError(
            f"Unknown severity tier: {value!r}",
            field="severity",
            allowed=[t.value for t in cls],
        )


SEVERITY_MULTIPLIERS: Mapping[SeverityTier, float] = MappingProxyType({
    SeverityTier.LOW: 0.3,
    SeverityTier.MODERATE: 0.6,
    SeverityTier.HIGH: 0.85,
    SeverityTier.SEVERE: 1.0,
})


# ═══════════════════════════════════════════════════════════════════════════
# Result types
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SimulationTimepoint:
    timestamp: datetime
    hour_offset: int
    intensity: float
    aspect_values: Mapping[str, AspectValue]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "hour": self.hour_offset,
            "intensity": round(self.intensity, 4),
            "aspects": dict(self.aspect_values),
        }


@dataclass(frozen=True)
class ScenarioSummary:
    peak_timestamp: datetime
    peak_hour: int
    estimated_impact: SeverityTier
    affected_population: int
    economic_loss_musd: float
    evacuation_needed: bool
    response_units: Mapping[str, int]

    @property
    def economic_loss_label(self) -> str:
        return f"${self.economic_loss_musd:.1f}M"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "peak_time": self.peak_timestamp.isoformat(),
            "peak_hour": self.peak_hour,
            "estimated_impact": self.estimated_impact.value,
            "affected_population": self.affected_population,
            "economic_loss": self.economic_loss_label,
            "evacuation_needed": self.evacuation_needed,
            "response_units_required": dict(self.response_units),
        }


@dataclass(frozen=True)
class ScenarioResult:
    hazard_type: HazardCategory
    severity: SeverityTier
    duration_hours: int
    timeline: Tuple[SimulationTimepoint, ...]
    summary: ScenarioSummary
    icon: str
    color: str
    location: Optional[Coordinate] = None
    seed: Optional[int] = None

    @property
    def peak(self) -> SimulationTimepoint:
        return self.timeline[self.summary.peak_hour]

    def values_of(self, aspect_id: str) -> Tuple[AspectValue, ...]:
        """One aspect's values across the timeline."""
        return tuple(tp.aspect_values[aspect_id] for tp in self.timeline)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hazard_type": self.hazard_type.value,
            "severity": self.severity.value,
            "duration_hours": self.duration_hours,
            "icon": self.icon,
            "color": self.color,
            "location": (
                {"lat": self.location.latitude, "lon": self.location.longitude}
                if self.location else None
            ),
            "timeline": [tp.to_dict() for tp in self.timeline],
            "summary": self.summary.to_dict(),
        }


# ═══════════════════════════════════════════════════════════════════════════
# Curve
# ═══════════════════════════════════════════════════════════════════════════

def intensity_curve(progress: float, peak_time: float = 0.65) -> float:
    """
    Noise-free event curve for progress in [0, 1].

    >>> intensity_curve(0.0)
    0.0
    >>> intensity_curve(0.65)
    1.0
    >>> round(intensity_curve(1.0), 6)
    0.3
    """
    if progress < peak_time:
        return progress / peak_time
    return 1.0 - ((progress - peak_time) / (1.0 - peak_time)) * (1.0 - DECAY_FLOOR)


def _normalise_duration(duration_hours: float) -> int:
    try:
        value = float(duration_hours)
    except (TypeError, ValueError):
        raise InvalidScenarioError(
            f"Duration must be a number of hours, got {duration_hours!r}",
            field="duration_hours",
        ) from None
    if not math.isfinite(value) or value < 1:
        raise InvalidScenarioError(
            f"Duration must be at least 1 hour, got {duration_hours!r}",
            field="duration_hours",
        )
    return int(math.ceil(value))


# ═══════════════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════════════

def simulate_scenario(
    hazard_type: Union[HazardCategory, str],
    severity: Union[SeverityTier, str],
    location: Optional[LocationLike] = None,
    duration_hours: Optional[float] = None,
    *,
    seed: Optional[int] = None,
    start: Optional[datetime] = None,
) -> ScenarioResult:
    """
    Simulate a hazard event as an hourly timeline of aspect values.

    Parameters
    ----------
    hazard_type : HazardCategory | str
        Display title or EONET id. Categories without their own aspect
        set get the generic one.
    severity : SeverityTier | str
        Low, Moderate, High or Severe (case-insensitive).
    location : Coordinate | Location | dict, optional
        Carried through to the result; does not affect the values.
    duration_hours : float, optional
        Rounded up to whole hours. Defaults to
        ``settings.DEFAULT_SCENARIO_DURATION_HOURS``.
    seed : int, optional
        Seed for the noise and summary draws. Falls back to
        ``settings.DEFAULT_SEED``.
    start : datetime, optional
        Timestamp of hour 0. Defaults to now (UTC).

    Returns
    -------
    ScenarioResult

    Raises
    ------
    InvalidScenarioError
        Unknown severity tier, or a duration below one hour.

    Examples
    --------
    >>> result = simulate_scenario("Earthquakes", "Severe", duration_hours=10, seed=7)
    >>> len(result.timeline), result.summary.peak_hour
    (11, 7)
    """
    category = HazardCategory.parse(hazard_type)
    tier = SeverityTier.parse(severity)
    if duration_hours is None:
        duration_hours = settings.DEFAULT_SCENARIO_DURATION_HOURS
    duration = _normalise_duration(duration_hours)
    point = resolve_location(location) if location is not None else None
    set_log_context(hazard=category.value, severity=tier.value)

    if seed is None:
        seed = settings.DEFAULT_SEED
    rng = np.random.default_rng(seed)
    peak_time = settings.SCENARIO_PEAK_TIME
    noise_max = settings.SCENARIO_NOISE_MAX
    start = start or datetime.now(timezone.utc)
    profile = get_scenario_profile(category)

    timeline = []
    for hour in range(duration + 1):
        curve = intensity_curve(hour / duration, peak_time)
        noise = float(rng.uniform(0.0, noise_max))
        intensity = clamp(curve * tier.multiplier + noise, 0.0, 1.0)
        timeline.append(SimulationTimepoint(
            timestamp=start + timedelta(hours=hour),
            hour_offset=hour,
            intensity=intensity,
            aspect_values=MappingProxyType(
                {aspect.id: aspect.value_at(intensity) for aspect in profile.aspects}
            ),
        ))

    peak_hour = round_half_up(peak_time * duration)
    summary = ScenarioSummary(
        peak_timestamp=timeline[peak_hour].timestamp,
        peak_hour=peak_hour,
        estimated_impact=tier,
        affected_population=int(rng.integers(*AFFECTED_POPULATION_RANGE)),
        economic_loss_musd=round(float(rng.uniform(*ECONOMIC_LOSS_RANGE_MUSD)), 1),
        evacuation_needed=tier.needs_evacuation,
        response_units=MappingProxyType({
            name: int(rng.integers(lo, hi)) for name, (lo, hi) in RESPONSE_UNIT_RANGES.items()
        }),
    )

    logger.info(
        "Scenario %s/%s over %dh: peak intensity %.2f at hour %d",
        category.value, tier.value, duration, timeline[peak_hour].intensity, peak_hour,
        extra={
            "hazard": category.value,
            "severity": tier.value,
            "duration_hours": duration,
            "seed": seed,
        },
    )
    return ScenarioResult(
        hazard_type=category,
        severity=tier,
        duration_hours=duration,
        timeline=tuple(timeline),
        summary=summary,
        icon=profile.icon,
        color=profile.color,
        location=point,
        seed=seed,
    )
