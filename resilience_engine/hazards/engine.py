"""
engine.py — Aggregate disaster risk assessment (fan-out / fan-in).

Runs the ten hazard evaluators for one location on a thread pool and
combines their results:

    overall_risk   = round_half_up(mean score) with its severity band
    highest_risk   = first maximum in DisasterType order
    active_alerts  = count of hazards with score > 60

═══════════════════════════════════════════════════════════════════════════
DETERMINISM
═══════════════════════════════════════════════════════════════════════════

Missing readings and base populations are synthesized from random draws.
One ``numpy.random.SeedSequence`` is built from the seed and spawned into
one child per hazard (in DisasterType order) before any work is
submitted, so each evaluator owns an independent generator:

    SeedSequence(seed).spawn(10)  →  child_i  →  default_rng(child_i)

Results therefore never depend on thread scheduling, and the same seed
always reproduces the same summary.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np

from resilience_engine.core.config import settings
from resilience_engine.core.errors import InvalidInputError
from resilience_engine.core.logging_config import set_log_context
from resilience_engine.hazards.assessors import ASSESSORS
from resilience_engine.hazards.models import (
    DisasterRisk,
    DisasterRiskSummary,
    DisasterType,
    OverallRisk,
    severity_band,
)
from resilience_engine.scoring.thresholds import round_half_up
from resilience_engine.signals import Location
from resilience_engine.spatial.geo import BBox, Coordinate, search_bbox

logger = logging.getLogger(__name__)

BASE_POPULATION_MIN = 10_000.0
BASE_POPULATION_MAX = 100_000.0

LocationLike = Union[Coordinate, Location, Mapping[str, Any]]


def resolve_location(location: LocationLike) -> Coordinate:
    """Accept a Coordinate, a Location model or a ``{lat, lon}`` mapping."""
    if isinstance(location, Coordinate):
        return location
    if isinstance(location, Location):
        return location.to_coordinate()
    if isinstance(location, Mapping):
        return Location.model_validate(location).to_coordinate()
    raise InvalidInputError(
        f"Unsupported location type: {type(location).__name__}", field="location",
    )


def resolve_bbox(location: LocationLike, point: Coordinate) -> BBox:
    """Caller-supplied bbox when the location carries one, else a search box around ``point``."""
    bbox = None
    if isinstance(location, Location):
        bbox = location.bbox
    elif isinstance(location, Mapping):
        bbox = Location.model_validate(location).bbox
    return bbox if bbox is not None else search_bbox(point)


def _parse_type_key(key: Union[DisasterType, str]) -> DisasterType:
    try:
        return DisasterType(key)
    except ValueError:
        raise InvalidInputError(
            f"Unknown disaster type: {key!r}", field="readings",
        ) from None


def assess_disaster(
    disaster_type: DisasterType,
    location: Coordinate,
    rng: np.random.Generator,
    readings: Optional[object] = None,
    base_population: Optional[float] = None,
) -> DisasterRisk:
    """
    Assess one hazard, synthesizing whatever the caller did not supply.

    Readings are drawn first, then the base population, both from ``rng``.
    """
    assess, readings_cls = ASSESSORS[disaster_type]

    if readings is None:
        readings = readings_cls.synthesize(rng, location)
    elif not isinstance(readings, readings_cls):
        raise InvalidInputError(
            f"{disaster_type.value} expects {readings_cls.__name__}, "
            f"got {type(readings).__name__}",
            field="readings",
        )

    if base_population is None:
        base_population = float(rng.uniform(BASE_POPULATION_MIN, BASE_POPULATION_MAX))

    risk = assess(readings, base_population=base_population)
    logger.debug(
        "%s risk %d (%s), %d factors",
        disaster_type.value, risk.score, risk.severity.level.value, len(risk.factors),
    )
    return risk


def summarise(
    location: Coordinate,
    risks: Mapping[DisasterType, DisasterRisk],
    *,
    now: Optional[datetime] = None,
    seed: Optional[int] = None,
    bbox: Optional[BBox] = None,
) -> DisasterRiskSummary:
    """Fan-in: overall mean, highest hazard and active-alert count."""
    ordered = [risks[t] for t in DisasterType]

    mean = sum(r.score for r in ordered) / len(ordered)
    overall = OverallRisk(score=round_half_up(mean), severity=severity_band(mean))

    highest = ordered[0]
    for risk in ordered[1:]:
        if risk.score > highest.score:
            highest = risk

    return DisasterRiskSummary(
        location=location,
        disasters={t: risks[t] for t in DisasterType},
        overall_risk=overall,
        highest_risk=highest,
        active_alerts=sum(1 for r in ordered if r.is_active_alert),
        timestamp=now or datetime.now(timezone.utc),
        seed=seed,
        bbox=bbox if bbox is not None else search_bbox(location),
    )


def assess_all_disaster_risks(
    location: LocationLike,
    *,
    readings: Optional[Mapping[Union[DisasterType, str], object]] = None,
    base_population: Optional[float] = None,
    seed: Optional[int] = None,
    max_workers: Optional[int] = None,
    now: Optional[datetime] = None,
) -> DisasterRiskSummary:
    """
    Assess all ten hazards for a location concurrently.

    Parameters
    ----------
    location : Coordinate | Location | dict
        Point of interest; out-of-range lat/lon are clamped. The summary
        covers the location's ``bbox``, or a ±0.5° box around the point.
    readings : mapping DisasterType → readings, optional
        Collaborator-supplied factor readings. Hazards without an entry
        get synthesized readings.
    base_population : float, optional
        Population exposed at this location. Drawn from
        [10 000, 100 000) per hazard when omitted.
    seed : int, optional
        Seed for all synthesized values. Falls back to
        ``settings.DEFAULT_SEED``; None means fresh entropy.
    max_workers : int, optional
        Thread-pool size. Defaults to ``settings.ASSESSOR_MAX_WORKERS``.
    now : datetime, optional
        Summary timestamp.

    Returns
    -------
    DisasterRiskSummary
    """
    t0 = time.perf_counter()
    point = resolve_location(location)
    set_log_context(lat=point.latitude, lon=point.longitude)
    supplied: Dict[DisasterType, object] = {
        _parse_type_key(k): v for k, v in (readings or {}).items()
    }

    if seed is None:
        seed = settings.DEFAULT_SEED
    children = np.random.SeedSequence(seed).spawn(len(DisasterType))
    rngs = {t: np.random.default_rng(child) for t, child in zip(DisasterType, children)}

    workers = max_workers or settings.ASSESSOR_MAX_WORKERS
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            t: executor.submit(
                assess_disaster, t, point, rngs[t], supplied.get(t), base_population,
            )
            for t in DisasterType
        }
        results = {t: f.result() for t, f in futures.items()}

    summary = summarise(
        point, results, now=now, seed=seed, bbox=resolve_bbox(location, point),
    )
    logger.info(
        "Disaster risk: overall %d (%s), highest %s, %d active alerts",
        summary.overall_risk.score,
        summary.overall_risk.severity.level.value,
        summary.highest_risk.type.value,
        summary.active_alerts,
        extra={
            "lat": point.latitude,
            "lon": point.longitude,
            "seed": seed,
            "active_alerts": summary.active_alerts,
            "duration_ms": round((time.perf_counter() - t0) * 1000, 2),
        },
    )
    return summary
