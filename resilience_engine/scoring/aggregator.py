"""
aggregator.py — Resilience report: weighting, classification, ranking.

Combines the six component sub-scores into one 0–100 resilience score and
derives the user-facing report around it.

═══════════════════════════════════════════════════════════════════════════
WEIGHTING FORMULA
═══════════════════════════════════════════════════════════════════════════

    overall = round_half_up( Σ w_i · s_i )        clamped to [0, 100]

    Default weights (sum = 1.0 exactly):

        weather          0.20   current weather risk
        disaster         0.25   active disaster threats
        climate          0.15   long-term climate vulnerability
        mobility         0.15   transportation resilience
        air_quality      0.10   environmental health
        infrastructure   0.15   built-environment capacity

All six scorers always run; absent signals contribute their baseline.
Weight tables are immutable values passed per call, so region-tuned tables
can coexist with the default.

═══════════════════════════════════════════════════════════════════════════
RESILIENCE LEVELS
═══════════════════════════════════════════════════════════════════════════

    overall     level        color      icon
    ────────    ─────────    ───────    ────────────
    80 – 100    Excellent    #22C55E    shield
    65 –  79    Good         #3B82F6    check_circle
    50 –  64    Moderate     #EAB308    warning
    35 –  49    Fair         #F97316    bolt
     0 –  34    Poor         #EF4444    emergency

Boundaries are closed at the bottom: 80 is Excellent, 79 is Good.

═══════════════════════════════════════════════════════════════════════════
RISKS & STRENGTHS
═══════════════════════════════════════════════════════════════════════════

Components are sorted ascending by ``(score, enumeration index)``.  The first
two are the top risks, tagged Critical (< 40), High (< 60) or Moderate; the
last two, reversed, are the top strengths.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from resilience_engine.core.errors import WeightConfigurationError
from resilience_engine.core.logging_config import set_log_context
from resilience_engine.scoring.components import (
    COMPONENT_DISPLAY_NAMES,
    ComponentName,
    ComponentScore,
    score_components,
)
from resilience_engine.scoring.recommendations import (
    Priority,
    Recommendation,
    synthesize_recommendations,
)
from resilience_engine.scoring.thresholds import clamp, round_half_up
from resilience_engine.signals import SignalBundle

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Weights
# ═══════════════════════════════════════════════════════════════════════════

WEIGHT_SUM_TOLERANCE = 1e-9


@dataclass(frozen=True)
class ScoringWeights:
    """
    Component weight table.

    Construction fails with ``WeightConfigurationError`` when a weight is
    negative or not finite, or the weights do not sum to 1.0.
    """
    weather: float = 0.20
    disaster: float = 0.25
    climate: float = 0.15
    mobility: float = 0.15
    air_quality: float = 0.10
    infrastructure: float = 0.15

    def __post_init__(self) -> None:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        invalid = {k: v for k, v in values.items() if not math.isfinite(v) or v < 0}
        if invalid:
            raise WeightConfigurationError(
                "Component weights must be finite and non-negative", invalid=invalid,
            )
        total = math.fsum(values.values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise WeightConfigurationError(
                f"Component weights must sum to 1.0, got {total:.6f}", total=total,
            )

    def as_mapping(self) -> Mapping[ComponentName, float]:
        return MappingProxyType({
            ComponentName.WEATHER: self.weather,
            ComponentName.DISASTER: self.disaster,
            ComponentName.CLIMATE: self.climate,
            ComponentName.MOBILITY: self.mobility,
            ComponentName.AIR_QUALITY: self.air_quality,
            ComponentName.INFRASTRUCTURE: self.infrastructure,
        })

    def combine(self, scores: Mapping[ComponentName, int]) -> int:
        """Weighted overall score, half-up rounded and clamped to [0, 100]."""
        weighted = math.fsum(w * scores[name] for name, w in self.as_mapping().items())
        return int(clamp(round_half_up(weighted), 0, 100))


DEFAULT_WEIGHTS = ScoringWeights()


# ═══════════════════════════════════════════════════════════════════════════
# Severity classifier
# ═══════════════════════════════════════════════════════════════════════════

class ResilienceLevel(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    MODERATE = "Moderate"
    FAIR = "Fair"
    POOR = "Poor"


@dataclass(frozen=True)
class LevelPresentation:
    color: str
    icon: str


# Lower bound of each level, highest first
LEVEL_THRESHOLDS: Tuple[Tuple[int, ResilienceLevel], ...] = (
    (80, ResilienceLevel.EXCELLENT),
    (65, ResilienceLevel.GOOD),
    (50, ResilienceLevel.MODERATE),
    (35, ResilienceLevel.FAIR),
)

LEVEL_PRESENTATION: Mapping[ResilienceLevel, LevelPresentation] = MappingProxyType({
    ResilienceLevel.EXCELLENT: LevelPresentation("#22C55E", "shield"),
    ResilienceLevel.GOOD: LevelPresentation("#3B82F6", "check_circle"),
    ResilienceLevel.MODERATE: LevelPresentation("#EAB308", "warning"),
    ResilienceLevel.FAIR: LevelPresentation("#F97316", "bolt"),
    ResilienceLevel.POOR: LevelPresentation("#EF4444", "emergency"),
})


def classify_resilience(score: float) -> ResilienceLevel:
    """
    Map an overall score to its resilience level.

    >>> classify_resilience(80)
    <ResilienceLevel.EXCELLENT: 'Excellent'>
    >>> classify_resilience(79)
    <ResilienceLevel.GOOD: 'Good'>
    """
    for lower, level in LEVEL_THRESHOLDS:
        if score >= lower:
            return level
    return ResilienceLevel.POOR


# ═══════════════════════════════════════════════════════════════════════════
# Risk / strength ranker
# ═══════════════════════════════════════════════════════════════════════════

RISK_CRITICAL_BELOW = 40
RISK_HIGH_BELOW = 60
HIGHLIGHT_COUNT = 2


@dataclass(frozen=True)
class RiskHighlight:
    """A weakest or strongest component. ``severity`` is set on risks only."""
    component: ComponentName
    category: str
    score: int
    severity: Optional[Priority] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "component": self.component.value,
            "category": self.category,
            "score": self.score,
        }
        if self.severity is not None:
            out["severity"] = self.severity.value
        return out


def risk_severity(score: int) -> Priority:
    if score < RISK_CRITICAL_BELOW:
        return Priority.CRITICAL
    if score < RISK_HIGH_BELOW:
        return Priority.HIGH
    return Priority.MODERATE


def rank_components(
    scores: Mapping[ComponentName, ComponentScore],
) -> Tuple[Tuple[RiskHighlight, ...], Tuple[RiskHighlight, ...]]:
    """
    Surface the two weakest and two strongest components.

    Returns
    -------
    (top_risks, top_strengths)
        Risks ascending by score; strengths descending. Ties keep
        ``ComponentName`` enumeration order.
    """
    order = list(ComponentName)
    ranked = sorted(
        scores.values(),
        key=lambda c: (c.score, order.index(c.name)),
    )

    risks = tuple(
        RiskHighlight(
            component=c.name,
            category=COMPONENT_DISPLAY_NAMES[c.name],
            score=c.score,
            severity=risk_severity(c.score),
        )
        for c in ranked[:HIGHLIGHT_COUNT]
    )
    strengths = tuple(
        RiskHighlight(
            component=c.name,
            category=COMPONENT_DISPLAY_NAMES[c.name],
            score=c.score,
        )
        for c in reversed(ranked[-HIGHLIGHT_COUNT:])
    )
    return risks, strengths


# ═══════════════════════════════════════════════════════════════════════════
# Report
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ResilienceReport:
    """
    Complete resilience assessment for one signal bundle.

    Built fresh on every call and never mutated; ``component_scores`` is a
    read-only mapping.
    """
    overall_score: int
    level: ResilienceLevel
    presentation: LevelPresentation
    component_scores: Mapping[ComponentName, ComponentScore]
    top_risks: Tuple[RiskHighlight, ...]
    top_strengths: Tuple[RiskHighlight, ...]
    recommendations: Tuple[Recommendation, ...]
    timestamp: datetime

    def score_of(self, name: ComponentName) -> int:
        return self.component_scores[name].score

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for consumers (UI / report layers)."""
        return {
            "overall_score": self.overall_score,
            "level": self.level.value,
            "color": self.presentation.color,
            "icon": self.presentation.icon,
            "component_scores": {
                name.value: {"score": c.score, "label": c.label}
                for name, c in self.component_scores.items()
            },
            "top_risks": [r.to_dict() for r in self.top_risks],
            "top_strengths": [s.to_dict() for s in self.top_strengths],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "timestamp": self.timestamp.isoformat(),
        }


def compute_resilience_report(
    bundle: Union[SignalBundle, Mapping[str, Any], None] = None,
    *,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    now: Optional[datetime] = None,
) -> ResilienceReport:
    """
    Score a location's signal bundle.

    Parameters
    ----------
    bundle : SignalBundle | dict | None
        Collected signals. Raw dicts are coerced leniently; None scores
        every component at its baseline.
    weights : ScoringWeights
        Component weight table. Defaults to ``DEFAULT_WEIGHTS``.
    now : datetime | None
        Report timestamp. Defaults to the current UTC time.

    Returns
    -------
    ResilienceReport

    Examples
    --------
    >>> compute_resilience_report({}).overall_score
    76
    """
    t0 = time.perf_counter()
    signals = SignalBundle.from_raw(bundle)
    loc = signals.location
    if loc is not None and loc.lat is not None and loc.lon is not None:
        set_log_context(lat=loc.lat, lon=loc.lon)
    else:
        set_log_context()

    components = score_components(signals)
    raw_scores = {name: c.score for name, c in components.items()}

    overall = weights.combine(raw_scores)
    level = classify_resilience(overall)
    top_risks, top_strengths = rank_components(components)
    recommendations = synthesize_recommendations(
        raw_scores, signals.disasters, signals.weather,
    )

    report = ResilienceReport(
        overall_score=overall,
        level=level,
        presentation=LEVEL_PRESENTATION[level],
        component_scores=MappingProxyType(dict(components)),
        top_risks=top_risks,
        top_strengths=top_strengths,
        recommendations=tuple(recommendations),
        timestamp=now or datetime.now(timezone.utc),
    )

    extra: Dict[str, Any] = {
        "overall_score": overall,
        "duration_ms": round((time.perf_counter() - t0) * 1000, 2),
    }
    if signals.location is not None:
        extra["lat"] = signals.location.lat
        extra["lon"] = signals.location.lon
    logger.info(
        "Resilience report: %d (%s), %d recommendations",
        overall, level.value, len(recommendations),
        extra=extra,
    )
    return report
