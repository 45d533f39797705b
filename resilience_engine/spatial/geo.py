"""
geo.py — Geographic helpers for location-scoped assessments.

Provides:
    - A validated (lat, lon) point
    - The search box a disaster lookup covers around a point, and its
      ``minX,minY,maxX,maxY`` string form
    - A deterministic coastal-proximity heuristic used when no coastline
      dataset is supplied by the caller

Coordinates are in **decimal degrees**; distances are in **kilometers**.
Boxes use the [minX, minY, maxX, maxY] order of the event feeds:

    (min_lon, min_lat, max_lon, max_lat)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

BBox = Tuple[float, float, float, float]


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Half-width of the search box used when a location carries no bbox
SEARCH_HALF_WIDTH_DEG = 0.5

# Coastal heuristic: a point is treated as "coastal" when either coordinate
# falls inside a COASTAL_BAND_DEG-wide band of every COASTAL_PERIOD_DEG.
COASTAL_PERIOD_DEG = 30.0
COASTAL_BAND_DEG = 10.0


# ---------------------------------------------------------------------------
# Core data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coordinate:
    """A geographic point in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.latitude <= 90.0):
            raise ValueError(
                f"Latitude must be in [-90, 90], got {self.latitude}"
            )
        if not (-180.0 <= self.longitude <= 180.0):
            raise ValueError(
                f"Longitude must be in [-180, 180], got {self.longitude}"
            )

    @classmethod
    def clamped(cls, latitude: float, longitude: float) -> "Coordinate":
        """Build a coordinate, pinning out-of-range values to the valid domain."""
        return cls(
            latitude=max(-90.0, min(90.0, latitude)),
            longitude=max(-180.0, min(180.0, longitude)),
        )


# ---------------------------------------------------------------------------
# Search box
# ---------------------------------------------------------------------------

def search_bbox(center: Coordinate, half_width_deg: float = SEARCH_HALF_WIDTH_DEG) -> BBox:
    """
    Square lat/lon box of ``half_width_deg`` around ``center``, clipped to
    the valid domain.

    >>> search_bbox(Coordinate(13.0, 80.0))
    (79.5, 12.5, 80.5, 13.5)
    """
    if half_width_deg <= 0:
        raise ValueError(f"Half width must be positive, got {half_width_deg}")

    return (
        max(center.longitude - half_width_deg, -180.0),
        max(center.latitude - half_width_deg, -90.0),
        min(center.longitude + half_width_deg, 180.0),
        min(center.latitude + half_width_deg, 90.0),
    )


def bbox_to_string(bbox: Optional[BBox]) -> Optional[str]:
    """
    Format a bbox as ``minX,minY,maxX,maxY`` with 4 decimals.

    >>> bbox_to_string((80.0, 12.5, 80.5, 13.0))
    '80.0000,12.5000,80.5000,13.0000'
    >>> bbox_to_string(None) is None
    True
    """
    if bbox is None:
        return None
    return ",".join(f"{v:.4f}" for v in bbox)


# ---------------------------------------------------------------------------
# Coastal proximity heuristic
# ---------------------------------------------------------------------------

def is_coastal(point: Coordinate) -> bool:
    """Coarse coastal test used when no coastline dataset is available."""
    return (
        abs(point.longitude) % COASTAL_PERIOD_DEG < COASTAL_BAND_DEG
        or abs(point.latitude) % COASTAL_PERIOD_DEG < COASTAL_BAND_DEG
    )


def estimate_distance_to_coast(point: Coordinate, rng: np.random.Generator) -> float:
    """
    Estimate distance to the nearest coastline in km.

    Coastal points land in [0, 50) km, inland points in [50, 550) km.
    The spread inside each band comes from the injected generator so the
    estimate is reproducible for a given seed.
    """
    if is_coastal(point):
        return float(rng.uniform(0.0, 50.0))
    return float(50.0 + rng.uniform(0.0, 500.0))
