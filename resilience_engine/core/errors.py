"""
Centralised error hierarchy.

The engine is total over well-typed but partial inputs: missing signals
resolve to per-scorer baselines and malformed readings are coerced away by
the input models. The exceptions below cover the remaining caller-contract
violations (bad scenario parameters, inconsistent weight tables) and the
crisis-plan parser.

Usage:
    from resilience_engine.core.errors import (
        ResilienceEngineError,
        InvalidInputError,
        InvalidScenarioError,
        WeightConfigurationError,
        CrisisPlanParseError,
    )

    raise InvalidScenarioError("Unknown severity tier", field="severity", value="Huge")
"""

from __future__ import annotations

from typing import Any, Dict, Optional


# ═══════════════════════════════════════════════════════════════════════════
# Exception Hierarchy
# ═══════════════════════════════════════════════════════════════════════════

class ResilienceEngineError(Exception):
    """Base exception for all engine errors."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        *,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            body["details"] = self.details
        return {"error": body}


class InvalidInputError(ResilienceEngineError, ValueError):
    """A caller passed a parameter outside the engine's contract."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        error_code: str = "INVALID_INPUT",
        **details: Any,
    ):
        d = {**details}
        if field:
            d["field"] = field
        super().__init__(message, error_code=error_code, details=d)


class InvalidScenarioError(InvalidInputError):
    """Scenario parameters (severity tier, duration) are not simulatable."""

    def __init__(self, message: str, *, field: Optional[str] = None, **details: Any):
        super().__init__(
            message, field=field, error_code="INVALID_SCENARIO", **details,
        )


class WeightConfigurationError(InvalidInputError):
    """A component weight table is negative or does not sum to 1.0."""

    def __init__(self, message: str, **details: Any):
        super().__init__(
            message, field="weights", error_code="WEIGHT_CONFIGURATION", **details,
        )


class CrisisPlanParseError(ResilienceEngineError):
    """An externally generated crisis plan could not be parsed."""

    def __init__(self, message: str = "", **details: Any):
        super().__init__(
            message=f"Crisis plan could not be parsed: {message}",
            error_code="CRISIS_PLAN_PARSE_ERROR",
            details=details,
        )
