"""
Tests for the ambient core: settings, structured logging and errors.
"""

from __future__ import annotations

import json
import logging
import sys

import pytest

from resilience_engine.core.config import Settings, get_settings, settings
from resilience_engine.core.errors import (
    CrisisPlanParseError,
    InvalidInputError,
    InvalidScenarioError,
    ResilienceEngineError,
    WeightConfigurationError,
)
from resilience_engine.core.logging_config import (
    JSONFormatter,
    PrettyFormatter,
    get_log_context,
    set_log_context,
    setup_logging,
)
from resilience_engine.hazards.engine import assess_all_disaster_risks
from resilience_engine.scenarios.simulator import simulate_scenario
from resilience_engine.scoring.aggregator import compute_resilience_report
from resilience_engine.spatial.geo import Coordinate


@pytest.fixture
def clean_context():
    set_log_context()
    yield
    set_log_context()


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(msg="Scoring bundle", exc_info=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "resilience_engine.test", logging.INFO, __file__, 10, msg, (), exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# ═══════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════

class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.ASSESSOR_MAX_WORKERS == 10
        assert s.SCENARIO_NOISE_MAX == 0.1
        assert s.SCENARIO_PEAK_TIME == 0.65
        assert s.DEFAULT_SCENARIO_DURATION_HOURS == 24
        assert s.DEFAULT_SEED is None

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DEFAULT_SEED", "7")
        s = Settings(_env_file=None)
        assert s.is_production and not s.is_development
        assert s.DEFAULT_SEED == 7

    def test_cached_singleton(self):
        assert get_settings() is get_settings() is settings


# ═══════════════════════════════════════════════════════════════════════════
# Logging
# ═══════════════════════════════════════════════════════════════════════════

class TestJSONFormatter:
    def test_base_fields(self, clean_context):
        entry = json.loads(JSONFormatter().format(make_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "resilience_engine.test"
        assert entry["message"] == "Scoring bundle"
        assert "context" not in entry

    def test_known_extras_only(self, clean_context):
        record = make_record(hazard="Floods", seed=7, duration_hours=24, unrelated="x")
        entry = json.loads(JSONFormatter().format(record))
        assert (entry["hazard"], entry["seed"], entry["duration_hours"]) == ("Floods", 7, 24)
        assert "unrelated" not in entry

    def test_context_attached(self, clean_context):
        set_log_context(lat=13.08, lon=80.27)
        entry = json.loads(JSONFormatter().format(make_record()))
        assert entry["context"] == {"lat": 13.08, "lon": 80.27}

    def test_exception(self, clean_context):
        try:
            raise InvalidScenarioError("bad tier", field="severity")
        except InvalidScenarioError:
            record = make_record(exc_info=sys.exc_info())
        entry = json.loads(JSONFormatter().format(record))
        assert entry["exception"] == {"type": "InvalidScenarioError", "message": "bad tier"}


class TestPrettyFormatter:
    def test_hazard_context(self, clean_context):
        set_log_context(hazard="Floods")
        assert "[Floods]" in PrettyFormatter().format(make_record())

    def test_location_context(self, clean_context):
        set_log_context(lat=13.0827, lon=80.2707)
        assert "[13.083,80.271]" in PrettyFormatter().format(make_record())

    def test_no_context(self, clean_context):
        line = PrettyFormatter().format(make_record())
        assert "resilience_engine.test: Scoring bundle" in line
        assert get_log_context() == {}


class TestSetupLogging:
    def test_development_uses_pretty(self, monkeypatch, restore_root_logger):
        monkeypatch.setattr(settings, "ENVIRONMENT", "development")
        monkeypatch.setattr(settings, "LOG_LEVEL", "debug")
        setup_logging()
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, PrettyFormatter)
        assert restore_root_logger.level == logging.DEBUG

    def test_production_uses_json(self, monkeypatch, restore_root_logger):
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")
        monkeypatch.setattr(settings, "LOG_LEVEL", "nonsense")
        setup_logging()
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)
        assert restore_root_logger.level == logging.INFO


# ═══════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════

class TestErrors:
    def test_base_to_dict(self):
        assert ResilienceEngineError().to_dict() == {
            "error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"},
        }

    def test_field_in_details(self):
        err = InvalidInputError("radius must be positive", field="radius_km", value=-1)
        assert err.to_dict()["error"]["details"] == {"value": -1, "field": "radius_km"}
        assert isinstance(err, ValueError)

    def test_scenario_error(self):
        err = InvalidScenarioError("Unknown severity tier", field="severity")
        assert err.error_code == "INVALID_SCENARIO"
        assert isinstance(err, InvalidInputError)

    def test_weight_error(self):
        err = WeightConfigurationError("Weights must sum to 1.0", total=0.9)
        assert err.error_code == "WEIGHT_CONFIGURATION"
        assert err.details == {"total": 0.9, "field": "weights"}

    def test_crisis_plan_error(self):
        err = CrisisPlanParseError("no JSON object found")
        assert str(err) == "Crisis plan could not be parsed: no JSON object found"
        assert not isinstance(err, ValueError)


# ═══════════════════════════════════════════════════════════════════════════
# Context set by the entry points
# ═══════════════════════════════════════════════════════════════════════════

class TestEntryPointContext:
    def test_report_sets_location(self, clean_context, caplog):
        with caplog.at_level(logging.INFO, logger="resilience_engine.scoring.aggregator"):
            compute_resilience_report({"location": {"lat": 13.08, "lon": 80.27}})
        record = next(
            r for r in caplog.records if r.name == "resilience_engine.scoring.aggregator"
        )
        entry = json.loads(JSONFormatter().format(record))
        assert entry["context"] == {"lat": 13.08, "lon": 80.27}
        assert entry["overall_score"] == 76

    def test_report_without_location_clears_context(self, clean_context):
        set_log_context(hazard="Floods")
        compute_resilience_report({})
        assert get_log_context() == {}

    def test_disaster_assessment_sets_location(self, clean_context):
        assess_all_disaster_risks(Coordinate(13.0827, 80.2707), seed=1)
        assert get_log_context() == {"lat": 13.0827, "lon": 80.2707}
        assert "[13.083,80.271]" in PrettyFormatter().format(make_record())

    def test_simulator_sets_hazard(self, clean_context):
        simulate_scenario("floods", "high", duration_hours=4, seed=1)
        assert get_log_context() == {"hazard": "Floods", "severity": "High"}
        assert "[Floods]" in PrettyFormatter().format(make_record())
