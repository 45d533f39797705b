"""
models.py — Shared data structures for the disaster risk assessors.

Defines:
    • DisasterType        — the ten assessed hazards
    • SeverityLevel       — Low / Moderate / High / Extreme
    • SeverityBand        — level + lower bound + color + label
    • DisasterRisk        — one hazard's assessment
    • OverallRisk         — mean score across hazards, with its band
    • DisasterRiskSummary — the aggregate fan-in result

═══════════════════════════════════════════════════════════════════════════
SEVERITY BANDS
═══════════════════════════════════════════════════════════════════════════

    score       level       color      label
    ────────    ────────    ───────    ─────────────
    80 – 100    Extreme     #FF0000    Extreme Risk
    60 –  79    High        #FF8C00    High Risk
    30 –  59    Moderate    #FFFF00    Moderate Risk
     0 –  29    Low         #00FF00    Low Risk

A hazard counts as an **active alert** when its score is strictly above 60.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from resilience_engine.spatial.geo import BBox, Coordinate, bbox_to_string


# ═══════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════

class DisasterType(str, Enum):
    """Assessed hazards, in assessment (and tie-break) order."""
    FLOOD = "flood"
    WILDFIRE = "wildfire"
    EARTHQUAKE = "earthquake"
    DROUGHT = "drought"
    LANDSLIDE = "landslide"
    EXTREME_HEAT = "extreme_heat"
    VOLCANO = "volcano"
    TSUNAMI = "tsunami"
    THUNDERSTORM = "thunderstorm"
    RAINBLAST = "rainblast"


class SeverityLevel(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    EXTREME = "Extreme"


@dataclass(frozen=True)
class SeverityBand:
    level: SeverityLevel
    min_score: int
    color: str
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "score": self.min_score,
            "color": self.color,
            "label": self.label,
        }


SEVERITY_EXTREME = SeverityBand(SeverityLevel.EXTREME, 80, "#FF0000", "Extreme Risk")
SEVERITY_HIGH = SeverityBand(SeverityLevel.HIGH, 60, "#FF8C00", "High Risk")
SEVERITY_MODERATE = SeverityBand(SeverityLevel.MODERATE, 30, "#FFFF00", "Moderate Risk")
SEVERITY_LOW = SeverityBand(SeverityLevel.LOW, 0, "#00FF00", "Low Risk")

# Highest first
SEVERITY_BANDS: Tuple[SeverityBand, ...] = (
    SEVERITY_EXTREME, SEVERITY_HIGH, SEVERITY_MODERATE, SEVERITY_LOW,
)

ACTIVE_ALERT_THRESHOLD = 60


def severity_band(score: float) -> SeverityBand:
    """
    Band for a 0–100 hazard score.

    >>> severity_band(80).level
    <SeverityLevel.EXTREME: 'Extreme'>
    >>> severity_band(29.9).level
    <SeverityLevel.LOW: 'Low'>
    """
    for band in SEVERITY_BANDS:
        if score >= band.min_score:
            return band
    return SEVERITY_LOW


# ═══════════════════════════════════════════════════════════════════════════
# Assessment results
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DisasterRisk:
    """
    Assessment of one hazard at one location.

    Attributes
    ----------
    type : DisasterType
    score : int
        0–100, half-up rounded.
    severity : SeverityBand
        Band of ``score``.
    factors : tuple of str
        Human-readable contributing factors, in evaluation order.
    population_at_risk : int
        ``round(base_population × score / 100)``.
    recommendations : tuple of str
        Tier of the hazard's action ladder selected by ``score``.
    data_sources : tuple of str
        Collaborator feeds the readings come from.
    readings : dict
        The factor readings the score was computed from.
    """
    type: DisasterType
    score: int
    severity: SeverityBand
    factors: Tuple[str, ...]
    population_at_risk: int
    recommendations: Tuple[str, ...]
    data_sources: Tuple[str, ...]
    readings: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_active_alert(self) -> bool:
        return self.score > ACTIVE_ALERT_THRESHOLD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "disaster_type": self.type.value,
            "risk_score": self.score,
            "severity": self.severity.to_dict(),
            "factors": list(self.factors),
            "population_at_risk": self.population_at_risk,
            "recommendations": list(self.recommendations),
            "data_sources": list(self.data_sources),
            "readings": dict(self.readings),
        }


@dataclass(frozen=True)
class OverallRisk:
    score: int
    severity: SeverityBand

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "severity": self.severity.to_dict()}


@dataclass(frozen=True)
class DisasterRiskSummary:
    """All ten hazard assessments for a location plus the fan-in aggregates."""
    location: Coordinate
    disasters: Mapping[DisasterType, DisasterRisk]
    overall_risk: OverallRisk
    highest_risk: DisasterRisk
    active_alerts: int
    timestamp: datetime
    seed: Optional[int] = None
    bbox: Optional[BBox] = None  # area the assessment covers

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": {
                "lat": self.location.latitude,
                "lon": self.location.longitude,
                "bbox": bbox_to_string(self.bbox),
            },
            "timestamp": self.timestamp.isoformat(),
            "disasters": {t.value: r.to_dict() for t, r in self.disasters.items()},
            "overall_risk": self.overall_risk.to_dict(),
            "highest_risk": self.highest_risk.to_dict(),
            "active_alerts": self.active_alerts,
        }
