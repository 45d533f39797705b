"""
trend.py — 30-day resilience trend estimate.

No score history is persisted by the engine, so the trend is an estimate:
a change drawn uniformly from the integers [-5, 5) with an injected
generator.  Callers that keep history should compare real scores instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

TREND_WINDOW_DAYS = 30
CHANGE_LOW, CHANGE_HIGH = -5, 5  # high is exclusive


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


TREND_ICONS = {
    TrendDirection.IMPROVING: "trending_up",
    TrendDirection.DECLINING: "trending_down",
    TrendDirection.STABLE: "trending_flat",
}


@dataclass(frozen=True)
class ResilienceTrend:
    current_score: int
    trend: TrendDirection
    icon: str
    change: int  # absolute points
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_score": self.current_score,
            "trend": self.trend.value,
            "icon": self.icon,
            "change": self.change,
            "message": self.message,
        }


def resilience_trend(
    current_score: int,
    rng: Optional[np.random.Generator] = None,
) -> ResilienceTrend:
    """
    Estimate how the score moved over the last 30 days.

    Parameters
    ----------
    current_score : int
        Today's overall resilience score.
    rng : numpy.random.Generator | None
        Random source; a fresh unseeded generator when omitted.
    """
    rng = rng if rng is not None else np.random.default_rng()
    change = int(rng.integers(CHANGE_LOW, CHANGE_HIGH))

    if change > 0:
        direction = TrendDirection.IMPROVING
        message = f"Resilience improved by {change} points in the last {TREND_WINDOW_DAYS} days"
    elif change < 0:
        direction = TrendDirection.DECLINING
        message = f"Resilience declined by {-change} points in the last {TREND_WINDOW_DAYS} days"
    else:
        direction = TrendDirection.STABLE
        message = f"Resilience score stable over the last {TREND_WINDOW_DAYS} days"

    return ResilienceTrend(
        current_score=current_score,
        trend=direction,
        icon=TREND_ICONS[direction],
        change=abs(change),
        message=message,
    )
