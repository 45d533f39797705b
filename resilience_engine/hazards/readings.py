"""
readings.py — Per-hazard factor readings.

Each hazard evaluator consumes a small, typed bundle of factor readings.
Callers with real feeds (GPM, GLDAS, FIRMS, MODIS, USGS, ...) construct
these directly; otherwise ``synthesize`` draws them from an injected
``numpy.random.Generator`` over the ranges below, so a fixed seed always
yields the same readings.

    Hazard         Reading                      Synthetic range
    ────────────   ──────────────────────────   ──────────────────────
    flood          precipitation (mm/day)       20 – 100
                   soil moisture (0–1)          0.2 – 0.7
                   elevation (m)                0 – 100
    wildfire       active fires within 50 km    0 – 11
                   temperature (°C)             20 – 45
                   wind speed (km/h)            0 – 40
                   humidity (%)                 15 – 85
    earthquake     fault distance (km)          50 – 250
                   historical magnitude         4 – 8
                   years since major quake      0 – 100
    drought        NDVI                         0.05 – 0.65
                   NDVI trend (%)               −20 – +10
                   land surface temp (°C)       20 – 45
                   precipitation (mm/month)     0 – 150
    landslide      slope (°)                    0 – 60
                   recent rainfall (mm)         50 – 250
                   loose soil                   p = 0.5
                   vegetation cover (0–1)       0 – 1
    extreme_heat   max temperature (°C)         25 – 47
                   humidity (%)                 20 – 90
                   urban heat island (°C)       0 – 6
    volcano        distance (km)                100 – 600
                   activity (0–1)               0 – 1
                   years since eruption         0 – 1000
    tsunami        coast distance (km)          coastal heuristic
                   elevation (m)                0 – 50
                   subduction zone              p = 0.3
    thunderstorm   instability (0–1)            0 – 1
                   moisture (%)                 50 – 90
                   wind shear (m/s)             0 – 50
    rainblast      convective activity (0–1)    0 – 1
                   rainfall rate (mm/h)         0 – 150
                   poor drainage                p = 0.5
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np

from resilience_engine.spatial.geo import Coordinate, estimate_distance_to_coast


class _Readings:
    """Mixin: plain-dict view of a readings dataclass."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


@dataclass(frozen=True)
class FloodReadings(_Readings):
    precipitation_mm_day: float
    soil_moisture: float
    elevation_m: float

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "FloodReadings":
        return cls(
            precipitation_mm_day=float(20 + rng.random() * 80),
            soil_moisture=float(0.2 + rng.random() * 0.5),
            elevation_m=float(rng.random() * 100),
        )


@dataclass(frozen=True)
class WildfireReadings(_Readings):
    nearby_fires: int
    temperature_c: float
    wind_speed_kmh: float
    humidity_pct: float

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "WildfireReadings":
        return cls(
            nearby_fires=int(rng.integers(0, 12)),
            temperature_c=float(20 + rng.random() * 25),
            wind_speed_kmh=float(rng.random() * 40),
            humidity_pct=float(15 + rng.random() * 70),
        )


@dataclass(frozen=True)
class EarthquakeReadings(_Readings):
    fault_distance_km: float
    historical_magnitude: float
    years_since_quake: float

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "EarthquakeReadings":
        return cls(
            fault_distance_km=float(50 + rng.random() * 200),
            historical_magnitude=float(4 + rng.random() * 4),
            years_since_quake=float(rng.random() * 100),
        )


@dataclass(frozen=True)
class DroughtReadings(_Readings):
    ndvi: float
    ndvi_trend_pct: Optional[float]  # negative = declining
    land_surface_temp_c: Optional[float]
    precipitation_mm_month: Optional[float]

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "DroughtReadings":
        return cls(
            ndvi=float(0.05 + rng.random() * 0.6),
            ndvi_trend_pct=float(-20 + rng.random() * 30),
            land_surface_temp_c=float(20 + rng.random() * 25),
            precipitation_mm_month=float(rng.random() * 150),
        )


@dataclass(frozen=True)
class LandslideReadings(_Readings):
    slope_deg: float
    rainfall_mm: float
    loose_soil: bool
    vegetation_cover: float

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "LandslideReadings":
        return cls(
            slope_deg=float(rng.random() * 60),
            rainfall_mm=float(50 + rng.random() * 200),
            loose_soil=bool(rng.random() > 0.5),
            vegetation_cover=float(rng.random()),
        )


@dataclass(frozen=True)
class ExtremeHeatReadings(_Readings):
    max_temp_c: float
    humidity_pct: float
    urban_heat_island_c: float

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "ExtremeHeatReadings":
        return cls(
            max_temp_c=float(25 + rng.random() * 22),
            humidity_pct=float(20 + rng.random() * 70),
            urban_heat_island_c=float(rng.random() * 6),
        )


@dataclass(frozen=True)
class VolcanoReadings(_Readings):
    distance_km: float
    activity: float
    years_since_eruption: float

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "VolcanoReadings":
        return cls(
            distance_km=float(100 + rng.random() * 500),
            activity=float(rng.random()),
            years_since_eruption=float(rng.random() * 1000),
        )


@dataclass(frozen=True)
class TsunamiReadings(_Readings):
    coast_distance_km: float
    elevation_m: float
    subduction_zone: bool

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "TsunamiReadings":
        return cls(
            coast_distance_km=estimate_distance_to_coast(location, rng),
            elevation_m=float(rng.random() * 50),
            subduction_zone=bool(rng.random() > 0.7),
        )


@dataclass(frozen=True)
class ThunderstormReadings(_Readings):
    instability: float
    moisture_pct: float
    wind_shear_ms: float

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "ThunderstormReadings":
        return cls(
            instability=float(rng.random()),
            moisture_pct=float(50 + rng.random() * 40),
            wind_shear_ms=float(rng.random() * 50),
        )


@dataclass(frozen=True)
class RainblastReadings(_Readings):
    convective_activity: float
    rainfall_rate_mm_h: float
    poor_drainage: bool

    @classmethod
    def synthesize(cls, rng: np.random.Generator, location: Coordinate) -> "RainblastReadings":
        return cls(
            convective_activity=float(rng.random()),
            rainfall_rate_mm_h=float(rng.random() * 150),
            poor_drainage=bool(rng.random() > 0.5),
        )
