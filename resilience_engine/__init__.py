"""
Urban resilience scoring and disaster scenario engine.

    compute_resilience_report    six component scores → weighted report
    assess_all_disaster_risks    ten hazard evaluators, fanned out
    get_scenario_aspects         what a hazard scenario reports
    simulate_scenario            hourly intensity timeline + peak summary
    get_preparedness_actions     static preparedness checklist
    resilience_trend             short-term trend indicator
    parse_crisis_plan            validate a generated crisis plan
    build_fallback_plan          rule-based crisis plan
    recommendations_from_plan    crisis plan → report recommendations
"""

from resilience_engine.advisory.crisis_plan import (
    CrisisPlan,
    PlanSeverity,
    build_crisis_context,
    build_fallback_plan,
    determine_plan_severity,
    parse_crisis_plan,
    recommendations_from_plan,
)
from resilience_engine.core.errors import (
    CrisisPlanParseError,
    InvalidInputError,
    InvalidScenarioError,
    ResilienceEngineError,
    WeightConfigurationError,
)
from resilience_engine.hazards.engine import assess_all_disaster_risks
from resilience_engine.hazards.models import DisasterRisk, DisasterRiskSummary, DisasterType
from resilience_engine.scenarios.aspects import ScenarioAspect, get_scenario_aspects
from resilience_engine.scenarios.preparedness import get_preparedness_actions
from resilience_engine.scenarios.simulator import ScenarioResult, SeverityTier, simulate_scenario
from resilience_engine.scoring.aggregator import (
    DEFAULT_WEIGHTS,
    ResilienceLevel,
    ResilienceReport,
    ScoringWeights,
    compute_resilience_report,
)
from resilience_engine.scoring.recommendations import Recommendation
from resilience_engine.scoring.trend import resilience_trend
from resilience_engine.signals import HazardCategory, SignalBundle

__version__ = "1.0.0"

__all__ = [
    "CrisisPlan",
    "CrisisPlanParseError",
    "DEFAULT_WEIGHTS",
    "DisasterRisk",
    "DisasterRiskSummary",
    "DisasterType",
    "HazardCategory",
    "InvalidInputError",
    "InvalidScenarioError",
    "PlanSeverity",
    "Recommendation",
    "ResilienceEngineError",
    "ResilienceLevel",
    "ResilienceReport",
    "ScenarioAspect",
    "ScenarioResult",
    "ScoringWeights",
    "SeverityTier",
    "SignalBundle",
    "WeightConfigurationError",
    "assess_all_disaster_risks",
    "build_crisis_context",
    "build_fallback_plan",
    "compute_resilience_report",
    "determine_plan_severity",
    "get_preparedness_actions",
    "get_scenario_aspects",
    "parse_crisis_plan",
    "recommendations_from_plan",
    "resilience_trend",
    "simulate_scenario",
]
