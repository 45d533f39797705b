"""
thresholds.py — Declarative threshold ladders for the component scorers.

A ladder is an ordered table of ``(breach, delta)`` rungs plus a direction:

    ABOVE  →  a rung fires when  value >  breach
    BELOW  →  a rung fires when  value <  breach

Rungs are evaluated in order and the **first** rung that fires supplies the
delta; the rest of the ladder is skipped.  Ladders are therefore written
most-extreme first:

    HEAT = ThresholdLadder.above((42, -45), (38, -38), (35, -25), (32, -12), (30, -5))

    HEAT.evaluate(43)  → -45
    HEAT.evaluate(36)  → -25
    HEAT.evaluate(29)  →   0

Every ladder used by the scorers lives in this module as an immutable
constant, so each rung can be unit-tested on its own and alternative
tables can be built without touching the scorer code.

Also hosts the two numeric helpers shared by the whole engine:

    round_half_up(x)      — half-up rounding (2.5 → 3, -2.5 → -2)
    clamp(x, lo, hi)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


# ═══════════════════════════════════════════════════════════════════════════
# Numeric helpers
# ═══════════════════════════════════════════════════════════════════════════

def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, ties toward +∞.

    Python's built-in ``round`` is banker's rounding (``round(2.5) == 2``);
    scores use half-up so that 75.5 lands on 76.

    >>> round_half_up(75.5)
    76
    >>> round_half_up(-2.5)
    -2
    """
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    """Pin ``value`` into ``[lower, upper]``."""
    return max(lower, min(upper, value))


# ═══════════════════════════════════════════════════════════════════════════
# Ladder
# ═══════════════════════════════════════════════════════════════════════════

class Direction(str, Enum):
    ABOVE = "above"
    BELOW = "below"


Rung = Tuple[float, float]


@dataclass(frozen=True)
class ThresholdLadder:
    """
    Ordered ``(breach, delta)`` rungs evaluated first-match-wins.

    Attributes
    ----------
    rungs : tuple of (float, float)
        ``(breach value, score delta)`` pairs, most extreme first.
    direction : Direction
        ABOVE fires on ``value > breach``; BELOW on ``value < breach``.
    """
    rungs: Tuple[Rung, ...]
    direction: Direction = Direction.ABOVE

    def __post_init__(self) -> None:
        if not self.rungs:
            raise ValueError("ThresholdLadder needs at least one rung")

    @classmethod
    def above(cls, *rungs: Rung) -> "ThresholdLadder":
        return cls(rungs=tuple(rungs), direction=Direction.ABOVE)

    @classmethod
    def below(cls, *rungs: Rung) -> "ThresholdLadder":
        return cls(rungs=tuple(rungs), direction=Direction.BELOW)

    def breaches(self, value: float, breach: float) -> bool:
        if self.direction is Direction.ABOVE:
            return value > breach
        return value < breach

    def match(self, value: Optional[float]) -> Optional[Rung]:
        """First rung crossed by ``value``, or None (also for a missing value)."""
        if value is None:
            return None
        for rung in self.rungs:
            if self.breaches(value, rung[0]):
                return rung
        return None

    def evaluate(self, value: Optional[float]) -> float:
        """Delta of the first crossed rung; 0.0 when nothing fires."""
        rung = self.match(value)
        return rung[1] if rung is not None else 0.0


# ═══════════════════════════════════════════════════════════════════════════
# Weather ladders  (°C, km/h, %, hPa, km)
# ═══════════════════════════════════════════════════════════════════════════

WEATHER_HEAT = ThresholdLadder.above(
    (42, -45), (38, -38), (35, -25), (32, -12), (30, -5),
)
WEATHER_COLD = ThresholdLadder.below(
    (-10, -30), (0, -20), (5, -10), (10, -4),
)
WEATHER_WIND = ThresholdLadder.above(
    (100, -35), (80, -25), (60, -15), (40, -8), (30, -3),
)
# Only applied while temp > HUMID_HEAT_MIN_TEMP
WEATHER_HUMID_HEAT = ThresholdLadder.above((95, -12), (80, -6))
HUMID_HEAT_MIN_TEMP = 30.0

WEATHER_PRESSURE = ThresholdLadder.below((960, -20), (980, -12), (1000, -5))
WEATHER_VISIBILITY = ThresholdLadder.below((1, -15), (3, -8), (5, -4))


class ConditionSeverity(str, Enum):
    SEVERE = "severe"
    MODERATE = "moderate"
    MINOR = "minor"
    CLEAR = "clear"


# Keyword → class; searched most-severe first, substring, case-insensitive
CONDITION_KEYWORDS: Tuple[Tuple[ConditionSeverity, Tuple[str, ...]], ...] = (
    (ConditionSeverity.SEVERE, (
        "thunderstorm", "tornado", "hurricane", "hail", "blizzard", "squall", "ash",
    )),
    (ConditionSeverity.MODERATE, (
        "snow", "rain", "sleet", "fog", "dust", "sand", "smoke",
    )),
    (ConditionSeverity.MINOR, ("drizzle", "mist", "haze")),
    (ConditionSeverity.CLEAR, ("clear",)),
)

CONDITION_DELTAS = {
    ConditionSeverity.SEVERE: -15.0,
    ConditionSeverity.MODERATE: -7.0,
    ConditionSeverity.MINOR: -2.0,
    ConditionSeverity.CLEAR: +5.0,
}


def classify_condition(condition: Optional[str]) -> Optional[ConditionSeverity]:
    """
    Bucket a free-text condition label.

    >>> classify_condition("Heavy Thunderstorm")
    <ConditionSeverity.SEVERE: 'severe'>
    >>> classify_condition("Light drizzle")
    <ConditionSeverity.MINOR: 'minor'>
    """
    if not condition:
        return None
    text = condition.lower()
    for severity, keywords in CONDITION_KEYWORDS:
        if any(k in text for k in keywords):
            return severity
    return None


# ═══════════════════════════════════════════════════════════════════════════
# Climate ladders  (long-term °C, mm/month)
# ═══════════════════════════════════════════════════════════════════════════

CLIMATE_HOT = ThresholdLadder.above((32, -15), (28, -8))
CLIMATE_COLD = ThresholdLadder.below((-5, -12))
CLIMATE_WET = ThresholdLadder.above((200, -10))
CLIMATE_ARID = ThresholdLadder.below((10, -15))


# ═══════════════════════════════════════════════════════════════════════════
# Mobility / infrastructure ladders
# ═══════════════════════════════════════════════════════════════════════════

TRANSIT_IMPACT = ThresholdLadder.above((50, -15), (30, -8))
BLOCKED_ROADS = ThresholdLadder.above((20, -25), (10, -15), (5, -8))


# ═══════════════════════════════════════════════════════════════════════════
# Air quality ladders  (AQI 0–500, µg/m³)
# ═══════════════════════════════════════════════════════════════════════════

AQI_POLLUTED = ThresholdLadder.above(
    (300, -50), (250, -42), (200, -35), (150, -25), (100, -15), (75, -8), (50, -4),
)
AQI_CLEAN = ThresholdLadder.below((25, +5))

# Categorical 1–5 index → approximate 0–500 AQI
AQI_CATEGORY_SCALE = {1: 25.0, 2: 60.0, 3: 100.0, 4: 175.0, 5: 300.0}

PM25 = ThresholdLadder.above((55, -15), (35, -10), (15, -5))
PM10 = ThresholdLadder.above((254, -12), (154, -8), (54, -4))
NO2 = ThresholdLadder.above((200, -10), (100, -6), (40, -3))
CO = ThresholdLadder.above((15400, -10), (9400, -6), (4400, -3))
