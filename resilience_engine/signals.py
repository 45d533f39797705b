"""
signals.py — Input data model for the resilience engine.

A ``SignalBundle`` carries whatever the caller managed to collect for a
location:

    • weather      current conditions (temp, wind, humidity, pressure, ...)
    • disasters    active hazard events (EONET-style records)
    • climate      long-term normals (POWER T2M / PRECTOTCORR)
    • mobility     transportation risk snapshot
    • air_quality  AQI (1–5 categorical or 0–500) + pollutant concentrations
    • location     lat / lon / bbox

Every field is optional.  Collaborator payloads use camelCase or feed-specific
names (``windSpeed``, ``T2M``, ``PRECTOTCORR``); the models accept those as
aliases.  Values that cannot be read as finite numbers (``"n/a"``, NaN, a
list where a scalar was expected) are coerced to ``None`` so that a report
can always be produced; the scorers then fall back to their baselines.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.functional_validators import BeforeValidator

from resilience_engine.spatial.geo import Coordinate

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Hazard categories
# ═══════════════════════════════════════════════════════════════════════════

class HazardCategory(str, Enum):
    """Closed set of disaster-event categories (EONET taxonomy)."""
    WILDFIRES            = "Wildfires"
    SEVERE_STORMS        = "Severe Storms"
    FLOODS               = "Floods"
    EARTHQUAKES          = "Earthquakes"
    VOLCANOES            = "Volcanoes"
    DROUGHT              = "Drought"
    LANDSLIDES           = "Landslides"
    SEA_LAKE_ICE         = "Sea and Lake Ice"
    SNOW                 = "Snow"
    DUST_HAZE            = "Dust and Haze"
    MANMADE              = "Manmade"
    TEMPERATURE_EXTREMES = "Temperature Extremes"
    UNKNOWN              = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> "HazardCategory":
        """
        Resolve a display title or EONET id to a category.

        Matching is case-insensitive; anything unrecognised maps to
        ``UNKNOWN`` rather than raising.

        >>> HazardCategory.parse("floods")
        <HazardCategory.FLOODS: 'Floods'>
        >>> HazardCategory.parse("severeStorms")
        <HazardCategory.SEVERE_STORMS: 'Severe Storms'>
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        key = value.strip().lower()
        return _CATEGORY_LOOKUP.get(key, cls.UNKNOWN)


_EONET_IDS = {
    "wildfires": HazardCategory.WILDFIRES,
    "severestorms": HazardCategory.SEVERE_STORMS,
    "floods": HazardCategory.FLOODS,
    "earthquakes": HazardCategory.EARTHQUAKES,
    "volcanoes": HazardCategory.VOLCANOES,
    "drought": HazardCategory.DROUGHT,
    "landslides": HazardCategory.LANDSLIDES,
    "sealakeice": HazardCategory.SEA_LAKE_ICE,
    "snow": HazardCategory.SNOW,
    "dusthaze": HazardCategory.DUST_HAZE,
    "manmade": HazardCategory.MANMADE,
    "tempextremes": HazardCategory.TEMPERATURE_EXTREMES,
}

_CATEGORY_LOOKUP: Dict[str, HazardCategory] = {
    **{c.value.lower(): c for c in HazardCategory},
    **_EONET_IDS,
}


# ═══════════════════════════════════════════════════════════════════════════
# Lenient coercion helpers
# ═══════════════════════════════════════════════════════════════════════════

def _finite_or_none(value: Any) -> Optional[float]:
    """Read a finite float, or None for anything unreadable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _scalar_or_mean(value: Any) -> Optional[float]:
    """Accept a scalar or a sequence of monthly values (mean of finite ones)."""
    if isinstance(value, (list, tuple)):
        numbers = [n for n in (_finite_or_none(v) for v in value) if n is not None]
        if not numbers:
            return None
        return sum(numbers) / len(numbers)
    if isinstance(value, Mapping):
        return _scalar_or_mean(list(value.values()))
    return _finite_or_none(value)


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _mapping_or_none(value: Any) -> Any:
    """Nested readings must be mappings or model instances; drop anything else."""
    if value is None or isinstance(value, (Mapping, BaseModel)):
        return value
    return None


LenientFloat = Annotated[Optional[float], BeforeValidator(_finite_or_none)]
MonthlyFloat = Annotated[Optional[float], BeforeValidator(_scalar_or_mean)]
LenientText = Annotated[Optional[str], BeforeValidator(_text_or_none)]


class _Reading(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Readings
# ═══════════════════════════════════════════════════════════════════════════

class WeatherReading(_Reading):
    """Current conditions. Units: °C, km/h, %, hPa, km."""
    temp: LenientFloat = Field(
        default=None, validation_alias=AliasChoices("temp", "temperature"),
    )
    wind_speed: LenientFloat = Field(
        default=None, validation_alias=AliasChoices("wind_speed", "windSpeed"),
    )
    humidity: LenientFloat = None
    pressure: LenientFloat = None
    visibility: LenientFloat = None
    condition: LenientText = Field(
        default=None,
        validation_alias=AliasChoices("condition", "conditions", "description"),
    )


class ClimateNormals(_Reading):
    """Long-term monthly averages (°C, mm/month)."""
    avg_temp: MonthlyFloat = Field(
        default=None, validation_alias=AliasChoices("avg_temp", "avgTemp", "T2M"),
    )
    avg_precip: MonthlyFloat = Field(
        default=None,
        validation_alias=AliasChoices("avg_precip", "avgPrecip", "PRECTOTCORR"),
    )


class Accessibility(_Reading):
    overall: LenientFloat = None
    blocked_roads: LenientFloat = Field(
        default=None, validation_alias=AliasChoices("blocked_roads", "blockedRoads"),
    )


class MobilitySnapshot(_Reading):
    """Transportation snapshot. Risk / impact / capacity are 0–100."""
    overall_risk: LenientFloat = Field(
        default=None, validation_alias=AliasChoices("overall_risk", "overallRisk"),
    )
    accessibility: Optional[Accessibility] = None
    transit_impact: LenientFloat = Field(
        default=None, validation_alias=AliasChoices("transit_impact", "transitImpact"),
    )
    evacuation_capacity: LenientFloat = Field(
        default=None,
        validation_alias=AliasChoices("evacuation_capacity", "evacuationCapacity"),
    )
    safe_routes: LenientFloat = Field(
        default=None, validation_alias=AliasChoices("safe_routes", "safeRoutes"),
    )

    @field_validator("accessibility", mode="before")
    @classmethod
    def _coerce_accessibility(cls, value: Any) -> Any:
        return _mapping_or_none(value)


class PollutantConcentrations(_Reading):
    """Concentrations in µg/m³ (OpenWeather air-pollution units)."""
    pm2_5: LenientFloat = Field(
        default=None, validation_alias=AliasChoices("pm2_5", "pm25"),
    )
    pm10: LenientFloat = None
    no2: LenientFloat = None
    co: LenientFloat = None


class AirQualitySnapshot(_Reading):
    aqi: LenientFloat = None
    components: Optional[PollutantConcentrations] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_top_level_pollutants(cls, data: Any) -> Any:
        # Some feeds put pm25 etc. next to aqi instead of under "components"
        if isinstance(data, Mapping) and not data.get("components"):
            flat = {k: data[k] for k in ("pm2_5", "pm25", "pm10", "no2", "co") if k in data}
            if flat:
                data = {**data, "components": flat}
        return data

    @field_validator("components", mode="before")
    @classmethod
    def _coerce_components(cls, value: Any) -> Any:
        return _mapping_or_none(value)


class CategoryRef(_Reading):
    id: LenientText = None
    title: LenientText = None


class DisasterRecord(_Reading):
    """One active hazard event: ``{title, categories: [{title}], description?}``."""
    title: LenientText = None
    categories: List[CategoryRef] = Field(default_factory=list)
    description: LenientText = None

    @field_validator("categories", mode="before")
    @classmethod
    def _normalise_categories(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return []
        out: List[Any] = []
        for item in value:
            if isinstance(item, str):
                out.append({"title": item})
            elif isinstance(item, (Mapping, CategoryRef)):
                out.append(item)
        return out

    @property
    def primary_category(self) -> HazardCategory:
        """Category of the event, taken from its first category entry."""
        if not self.categories:
            return HazardCategory.UNKNOWN
        first = self.categories[0]
        category = HazardCategory.parse(first.title)
        if category is HazardCategory.UNKNOWN:
            category = HazardCategory.parse(first.id)
        return category


class Location(_Reading):
    lat: LenientFloat = Field(
        default=None, validation_alias=AliasChoices("lat", "latitude"),
    )
    lon: LenientFloat = Field(
        default=None, validation_alias=AliasChoices("lon", "lng", "longitude"),
    )
    bbox: Optional[Tuple[float, float, float, float]] = None

    @field_validator("bbox", mode="before")
    @classmethod
    def _coerce_bbox(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)) or len(value) != 4:
            return None
        numbers = [_finite_or_none(v) for v in value]
        if any(n is None for n in numbers):
            return None
        return tuple(numbers)

    def to_coordinate(self) -> Coordinate:
        """Clamped coordinate; missing lat/lon default to 0."""
        return Coordinate.clamped(self.lat or 0.0, self.lon or 0.0)


# ═══════════════════════════════════════════════════════════════════════════
# Bundle
# ═══════════════════════════════════════════════════════════════════════════

class SignalBundle(_Reading):
    """Everything known about a location at scoring time."""
    weather: Optional[WeatherReading] = None
    disasters: List[DisasterRecord] = Field(default_factory=list)
    climate: Optional[ClimateNormals] = None
    mobility: Optional[MobilitySnapshot] = None
    air_quality: Optional[AirQualitySnapshot] = Field(
        default=None, validation_alias=AliasChoices("air_quality", "airQuality"),
    )
    location: Optional[Location] = None

    @field_validator("weather", "climate", "mobility", "air_quality", "location", mode="before")
    @classmethod
    def _coerce_nested(cls, value: Any) -> Any:
        return _mapping_or_none(value)

    @field_validator("disasters", mode="before")
    @classmethod
    def _coerce_disasters(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return []
        return [d for d in value if isinstance(d, (Mapping, DisasterRecord))]

    @classmethod
    def from_raw(cls, raw: Any) -> "SignalBundle":
        """
        Build a bundle from a collaborator payload.

        Accepts an existing bundle, a mapping, or ``None``.  Payloads that
        still fail validation after coercion yield an empty bundle (all
        baselines) and a warning, since a report must always be producible.
        """
        if raw is None:
            return cls()
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            logger.warning("Ignoring non-mapping signal bundle of type %s", type(raw).__name__)
            return cls()
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "Signal bundle failed validation (%d errors); scoring with baselines",
                exc.error_count(),
            )
            return cls()
