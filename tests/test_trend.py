"""Tests for the 30-day trend estimate."""

from __future__ import annotations

import numpy as np
import pytest

from resilience_engine.scoring.trend import TrendDirection, resilience_trend


class FixedChange:
    """Generator stand-in returning one preset change."""

    def __init__(self, change: int):
        self.change = change

    def integers(self, low, high):
        assert (low, high) == (-5, 5)
        return np.int64(self.change)


class TestResilienceTrend:
    def test_improving(self):
        trend = resilience_trend(72, FixedChange(3))
        assert trend.trend is TrendDirection.IMPROVING
        assert trend.icon == "trending_up"
        assert trend.change == 3
        assert trend.message == "Resilience improved by 3 points in the last 30 days"

    def test_declining_reports_magnitude(self):
        trend = resilience_trend(72, FixedChange(-4))
        assert trend.trend is TrendDirection.DECLINING
        assert trend.icon == "trending_down"
        assert trend.change == 4
        assert trend.message == "Resilience declined by 4 points in the last 30 days"

    def test_stable(self):
        trend = resilience_trend(72, FixedChange(0))
        assert trend.trend is TrendDirection.STABLE
        assert trend.icon == "trending_flat"
        assert trend.message == "Resilience score stable over the last 30 days"

    @pytest.mark.parametrize("seed", range(20))
    def test_change_range(self, seed):
        trend = resilience_trend(50, np.random.default_rng(seed))
        assert 0 <= trend.change <= 5
        assert trend.current_score == 50

    def test_to_dict(self):
        body = resilience_trend(64, FixedChange(2)).to_dict()
        assert body == {
            "current_score": 64,
            "trend": "improving",
            "icon": "trending_up",
            "change": 2,
            "message": "Resilience improved by 2 points in the last 30 days",
        }
