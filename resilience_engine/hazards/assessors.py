"""
assessors.py — The ten hazard evaluators.

Every evaluator follows the same recipe:

    1. For each factor whose reading breaches its threshold, add a
       proportional contribution to a running score and record a
       human-readable factor string.
    2. score = round_half_up( clamp(Σ contributions, 0, 100) )
    3. severity = severity_band(score)
    4. population_at_risk = round_half_up( base_population × score / 100 )
    5. recommendations = tier of the hazard's 4-tier action ladder
       (score > 70, > 50, > 30, otherwise)

═══════════════════════════════════════════════════════════════════════════
FACTOR TABLE
═══════════════════════════════════════════════════════════════════════════

    flood         precip > 50 mm/day        → (p − 50) × 0.8
                  soil moisture > 0.6       → (m − 0.6) × 100
                  elevation < 10 m          → (10 − e) × 3
    wildfire      nearby fires              → min(40, n × 5)
                  temp > 35 °C              → min(15, (t − 35) × 2)
                  wind > 20 km/h            → min(10, (w − 20) × 2)
                  humidity < 30 %           → min(5, (30 − h) / 2)
    earthquake    fault distance < 50 km    → (50 − d) × 0.8
                  historical M > 6          → (M − 6) × 15
                  years since quake > 50    → (y − 50) × 0.3
    drought       NDVI < 0.3                → min(40, (0.3 − v) × 100)
                  NDVI declining            → min(20, |trend %| × 2)
                  LST > 35 °C               → min(25, (t − 35) × 2)
                  precip < 50 mm/month      → min(15, (50 − p) / 3)
    landslide     slope > 30°               → (s − 30) × 2
                  rainfall > 100 mm         → (r − 100) × 0.3
                  loose soil                → 20
                  vegetation < 0.3          → (0.3 − v) × 50
    extreme_heat  max temp > 35 °C          → min(60, (t − 35) × 6)
                  humidity > 60 % (t > 30)  → min(20, (h − 60) × 0.5)
                  heat island > 2 °C        → min(20, (u − 2) × 5)
    volcano       distance < 100 km         → (100 − d) × 0.5
                  activity > 0.5            → a × 50
                  eruption < 100 y ago      → (100 − y) × 0.3
    tsunami       coast < 10 km             → (10 − c) × 10
                  elevation < 10 m (c < 50) → (10 − e) × 5
                  subduction zone           → 40
    thunderstorm  instability > 0.6         → i × 40
                  moisture > 70 %           → (m − 70) × 1.5
                  wind shear > 20 m/s       → (s − 20) × 2
    rainblast     convective > 0.7          → c × 50
                  rainfall rate > 50 mm/h   → (r − 50) × 0.8
                  poor drainage             → 30

The evaluators are pure and share no state; they are safe to run on a
thread pool (see ``engine.py``).
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, List, Mapping, Tuple, Type

from resilience_engine.hazards.models import DisasterRisk, DisasterType, severity_band
from resilience_engine.hazards.readings import (
    DroughtReadings,
    EarthquakeReadings,
    ExtremeHeatReadings,
    FloodReadings,
    LandslideReadings,
    RainblastReadings,
    ThunderstormReadings,
    TsunamiReadings,
    VolcanoReadings,
    WildfireReadings,
)
from resilience_engine.scoring.thresholds import clamp, round_half_up


# ═══════════════════════════════════════════════════════════════════════════
# Action ladders: (> 70, > 50, > 30, otherwise)
# ═══════════════════════════════════════════════════════════════════════════

ActionLadder = Tuple[Tuple[str, ...], Tuple[str, ...], Tuple[str, ...], Tuple[str, ...]]

LADDER_CUTS = (70, 50, 30)

ACTION_LADDERS: Mapping[DisasterType, ActionLadder] = MappingProxyType({
    DisasterType.FLOOD: (
        ("EVACUATE IMMEDIATELY if ordered", "Move to higher ground",
         "Do not walk/drive through floodwater", "Keep emergency supplies ready"),
        ("Prepare evacuation plan", "Move valuables to upper floors",
         "Monitor weather alerts", "Clear drainage systems"),
        ("Stay informed", "Check flood insurance", "Prepare emergency kit",
         "Know evacuation routes"),
        ("Monitor weather", "Maintain emergency supplies"),
    ),
    DisasterType.WILDFIRE: (
        ("EVACUATE IMMEDIATELY if ordered", "Follow designated evacuation routes",
         "Do not return until authorities declare safe",
         "Breathe through wet cloth to filter smoke", "Call emergency services if trapped"),
        ("Be ready to evacuate at short notice", "Close all windows and doors",
         "Move flammable items away from house",
         "Keep car fueled and facing exit direction"),
        ("Monitor local fire alerts closely", "Avoid outdoor burning",
         "Prepare evacuation plan", "Have emergency supplies packed"),
        ("Stay informed about local fire conditions",
         "Maintain defensible space around property", "Keep emergency supplies ready"),
    ),
    DisasterType.EARTHQUAKE: (
        ("HIGH RISK ZONE", "Retrofit buildings", "Secure heavy furniture",
         "Practice Drop-Cover-Hold", "Keep 72-hour emergency kit"),
        ("Secure heavy items", "Know safe spots", "Prepare emergency kit",
         "Check building structural integrity"),
        ("Learn earthquake safety", "Prepare emergency kit",
         "Identify safe spots indoors"),
        ("Follow seismic activity reports", "Keep basic emergency supplies"),
    ),
    DisasterType.DROUGHT: (
        ("Critical drought conditions", "Emergency water rationing",
         "Focus on survival of perennial crops", "Seek government drought assistance"),
        ("Severe water conservation required", "Reduce irrigated area if possible",
         "Consider drought-resistant crops", "Prepare for potential crop loss"),
        ("Implement water conservation measures", "Use drip irrigation where possible",
         "Mulch to retain soil moisture", "Monitor weather patterns closely"),
        ("Monitor vegetation regularly", "Maintain normal irrigation schedules",
         "Check weather forecasts"),
    ),
    DisasterType.LANDSLIDE: (
        ("EVACUATE if ground cracks appear", "Avoid steep slopes during rain",
         "Monitor hillside for movement", "Report ground deformation"),
        ("Monitor slope stability", "Avoid building on steep slopes",
         "Plant vegetation for stabilization", "Construct retaining walls"),
        ("Be aware of landslide signs", "Maintain slope drainage",
         "Report unusual ground movement"),
        ("Monitor rainfall forecasts", "Keep drainage channels clear"),
    ),
    DisasterType.EXTREME_HEAT: (
        ("EXTREME HEAT WARNING", "Stay indoors with AC", "Drink water frequently",
         "Check on elderly neighbors", "Go to cooling centers"),
        ("Limit outdoor activity", "Stay hydrated", "Wear light clothing",
         "Never leave children/pets in cars"),
        ("Stay hydrated", "Limit sun exposure", "Check weather forecasts"),
        ("Check weather forecasts", "Keep drinking water available"),
    ),
    DisasterType.VOLCANO: (
        ("EVACUATE if ordered", "Prepare evacuation kit", "Avoid ash cloud areas",
         "Wear masks for ash protection", "Follow official updates"),
        ("Monitor volcanic activity", "Prepare evacuation plan",
         "Stock emergency supplies", "Know evacuation routes"),
        ("Stay informed", "Know volcano alert levels", "Prepare emergency kit"),
        ("Follow volcano observatory bulletins",),
    ),
    DisasterType.TSUNAMI: (
        ("GO TO HIGH GROUND IMMEDIATELY", "Move 3km inland or 30m elevation",
         "Do not return until all-clear given", "Listen to emergency radio"),
        ("Know evacuation routes", "Prepare evacuation kit",
         "Participate in tsunami drills", "Install tsunami warning app"),
        ("Learn tsunami warning signs", "Know evacuation routes",
         "Prepare emergency kit"),
        ("Know local tsunami warning signals",),
    ),
    DisasterType.THUNDERSTORM: (
        ("SEVERE STORM WARNING", "Go indoors immediately", "Avoid windows",
         "Unplug electronics", "Stay away from water/metal"),
        ("Monitor weather radar", "Secure outdoor items", "Charge devices",
         "Avoid tall trees"),
        ("Monitor weather", "Prepare for power outages",
         "Know safe shelter locations"),
        ("Check forecasts before outdoor activities",),
    ),
    DisasterType.RAINBLAST: (
        ("FLASH FLOOD WARNING", "Avoid low-lying areas", "Do not drive through water",
         "Move to higher floors", "Monitor local alerts"),
        ("Avoid driving if possible", "Clear drainage systems",
         "Move vehicles to higher ground", "Monitor weather"),
        ("Clear gutters/drains", "Be prepared for sudden flooding",
         "Know flood-prone areas"),
        ("Keep drains clear", "Monitor rainfall alerts"),
    ),
})

DATA_SOURCES: Mapping[DisasterType, Tuple[str, ...]] = MappingProxyType({
    DisasterType.FLOOD: ("GPM (Precipitation)", "GLDAS (Soil Moisture)", "SRTM (Elevation)"),
    DisasterType.WILDFIRE: ("FIRMS (Active Fires)", "MODIS (Thermal)", "POWER (Weather)"),
    DisasterType.EARTHQUAKE: ("USGS (Seismicity)", "NASA InSAR (Ground Deformation)"),
    DisasterType.DROUGHT: ("MODIS NDVI", "SMAP (Soil Moisture)", "Grace-FO (Groundwater)"),
    DisasterType.LANDSLIDE: ("NASA LHASA", "GPM (Rainfall)", "SRTM (Slope)", "Landsat (Vegetation)"),
    DisasterType.EXTREME_HEAT: ("MODIS LST", "POWER (Temperature)", "Landsat (Urban Heat Island)"),
    DisasterType.VOLCANO: ("MODIS (Thermal)", "OMI (SO2)", "InSAR (Ground Deformation)"),
    DisasterType.TSUNAMI: ("NOAA Tsunami Warning", "Jason-3 (Sea Level)", "USGS (Earthquakes)"),
    DisasterType.THUNDERSTORM: ("GOES-R GLM (Lightning)", "GPM (Rainfall)", "NOAA NWS (Warnings)"),
    DisasterType.RAINBLAST: ("GPM IMERG (Precipitation)", "GOES-R (Cloud Imaging)", "Urban Drainage Maps"),
})


def recommendations_for(disaster_type: DisasterType, score: float) -> Tuple[str, ...]:
    """
    Pick the action tier for a score.

    >>> recommendations_for(DisasterType.FLOOD, 71)[0]
    'EVACUATE IMMEDIATELY if ordered'
    >>> recommendations_for(DisasterType.FLOOD, 30)
    ('Monitor weather', 'Maintain emergency supplies')
    """
    ladder = ACTION_LADDERS[disaster_type]
    for tier, cut in enumerate(LADDER_CUTS):
        if score > cut:
            return ladder[tier]
    return ladder[-1]


def _build(
    disaster_type: DisasterType,
    raw_score: float,
    factors: List[str],
    base_population: float,
    readings: object,
) -> DisasterRisk:
    score = round_half_up(clamp(raw_score, 0.0, 100.0))
    return DisasterRisk(
        type=disaster_type,
        score=score,
        severity=severity_band(score),
        factors=tuple(factors),
        population_at_risk=round_half_up(base_population * score / 100),
        recommendations=recommendations_for(disaster_type, score),
        data_sources=DATA_SOURCES[disaster_type],
        readings=readings.to_dict(),  # type: ignore[attr-defined]
    )


# ═══════════════════════════════════════════════════════════════════════════
# Evaluators
# ═══════════════════════════════════════════════════════════════════════════

def assess_flood(r: FloodReadings, *, base_population: float) -> DisasterRisk:
    """Heavy rain on saturated, low-lying ground."""
    score = 0.0
    factors: List[str] = []

    if r.precipitation_mm_day > 50:
        score += (r.precipitation_mm_day - 50) * 0.8
        factors.append(f"Heavy rainfall: {round_half_up(r.precipitation_mm_day)}mm/day")
    if r.soil_moisture > 0.6:
        score += (r.soil_moisture - 0.6) * 100
        factors.append(f"Saturated soil: {round_half_up(r.soil_moisture * 100)}%")
    if r.elevation_m < 10:
        score += (10 - r.elevation_m) * 3
        factors.append(f"Low elevation: {round_half_up(r.elevation_m)}m")

    return _build(DisasterType.FLOOD, score, factors, base_population, r)


def assess_wildfire(r: WildfireReadings, *, base_population: float) -> DisasterRisk:
    """Nearby active fires plus hot, windy, dry weather."""
    score = 0.0
    factors: List[str] = []

    if r.nearby_fires > 0:
        score += min(40.0, r.nearby_fires * 5.0)
        factors.append(f"{r.nearby_fires} active fires within 50km")
    if r.temperature_c > 35:
        score += min(15.0, (r.temperature_c - 35) * 2)
        factors.append(f"High temperature: {r.temperature_c:.1f}°C")
    if r.wind_speed_kmh > 20:
        score += min(10.0, (r.wind_speed_kmh - 20) * 2)
        factors.append(f"High wind speed: {r.wind_speed_kmh:.1f} km/h")
    if r.humidity_pct < 30:
        score += min(5.0, (30 - r.humidity_pct) / 2)
        factors.append(f"Low humidity: {round_half_up(r.humidity_pct)}%")

    return _build(DisasterType.WILDFIRE, score, factors, base_population, r)


def assess_earthquake(r: EarthquakeReadings, *, base_population: float) -> DisasterRisk:
    """Fault proximity, historical magnitude and seismic gap."""
    score = 0.0
    factors: List[str] = []

    if r.fault_distance_km < 50:
        score += (50 - r.fault_distance_km) * 0.8
        factors.append(f"Near fault line: {round_half_up(r.fault_distance_km)}km")
    if r.historical_magnitude > 6:
        score += (r.historical_magnitude - 6) * 15
        factors.append(f"Historical M{r.historical_magnitude:.1f} earthquakes")
    # Long quiet periods mean accumulated stress
    if r.years_since_quake > 50:
        score += (r.years_since_quake - 50) * 0.3
        factors.append(f"{round_half_up(r.years_since_quake)} years since last major quake")

    return _build(DisasterType.EARTHQUAKE, score, factors, base_population, r)


def assess_drought(r: DroughtReadings, *, base_population: float) -> DisasterRisk:
    """Vegetation stress, surface heat and rainfall deficit."""
    score = 0.0
    factors: List[str] = []

    if r.ndvi < 0.3:
        score += min(40.0, (0.3 - r.ndvi) * 100)
        factors.append(f"Low vegetation index (NDVI: {r.ndvi:.2f})")
    if r.ndvi_trend_pct is not None and r.ndvi_trend_pct < 0:
        score += min(20.0, abs(r.ndvi_trend_pct) * 2)
        factors.append(f"Vegetation declining ({r.ndvi_trend_pct:.1f}%)")
    if r.land_surface_temp_c is not None and r.land_surface_temp_c > 35:
        score += min(25.0, (r.land_surface_temp_c - 35) * 2)
        factors.append(f"High land surface temperature ({r.land_surface_temp_c:.1f}°C)")
    if r.precipitation_mm_month is not None and r.precipitation_mm_month < 50:
        score += min(15.0, (50 - r.precipitation_mm_month) / 3)
        factors.append(f"Low rainfall ({round_half_up(r.precipitation_mm_month)}mm/month)")

    return _build(DisasterType.DROUGHT, score, factors, base_population, r)


def assess_landslide(r: LandslideReadings, *, base_population: float) -> DisasterRisk:
    """Steep, rain-soaked, loose and bare slopes."""
    score = 0.0
    factors: List[str] = []

    if r.slope_deg > 30:
        score += (r.slope_deg - 30) * 2
        factors.append(f"Steep slope: {round_half_up(r.slope_deg)}°")
    if r.rainfall_mm > 100:
        score += (r.rainfall_mm - 100) * 0.3
        factors.append(f"Heavy rainfall: {round_half_up(r.rainfall_mm)}mm")
    if r.loose_soil:
        score += 20
        factors.append("Loose soil composition")
    if r.vegetation_cover < 0.3:
        score += (0.3 - r.vegetation_cover) * 50
        factors.append("Sparse vegetation cover")

    return _build(DisasterType.LANDSLIDE, score, factors, base_population, r)


def assess_extreme_heat(r: ExtremeHeatReadings, *, base_population: float) -> DisasterRisk:
    score = 0.0
    factors: List[str] = []

    if r.max_temp_c > 35:
        score += min(60.0, (r.max_temp_c - 35) * 6)
        factors.append(f"Extreme temperature: {r.max_temp_c:.1f}°C")
    if r.humidity_pct > 60 and r.max_temp_c > 30:
        score += min(20.0, (r.humidity_pct - 60) * 0.5)
        factors.append(f"Oppressive humidity: {round_half_up(r.humidity_pct)}%")
    if r.urban_heat_island_c > 2:
        score += min(20.0, (r.urban_heat_island_c - 2) * 5)
        factors.append(f"Urban heat island: +{r.urban_heat_island_c:.1f}°C")

    return _build(DisasterType.EXTREME_HEAT, score, factors, base_population, r)


def assess_volcano(r: VolcanoReadings, *, base_population: float) -> DisasterRisk:
    score = 0.0
    factors: List[str] = []

    if r.distance_km < 100:
        score += (100 - r.distance_km) * 0.5
        factors.append(f"{round_half_up(r.distance_km)}km from active volcano")
    if r.activity > 0.5:
        score += r.activity * 50
        factors.append("Elevated volcanic activity detected")
    if r.years_since_eruption < 100:
        score += (100 - r.years_since_eruption) * 0.3
        factors.append(f"Erupted {round_half_up(r.years_since_eruption)} years ago")

    return _build(DisasterType.VOLCANO, score, factors, base_population, r)


def assess_tsunami(r: TsunamiReadings, *, base_population: float) -> DisasterRisk:
    score = 0.0
    factors: List[str] = []

    if r.coast_distance_km < 10:
        score += (10 - r.coast_distance_km) * 10
        factors.append(f"{round_half_up(r.coast_distance_km)}km from coast")
    if r.elevation_m < 10 and r.coast_distance_km < 50:
        score += (10 - r.elevation_m) * 5
        factors.append(f"Low elevation: {round_half_up(r.elevation_m)}m")
    if r.subduction_zone:
        score += 40
        factors.append("Near tectonic subduction zone")

    return _build(DisasterType.TSUNAMI, score, factors, base_population, r)


def assess_thunderstorm(r: ThunderstormReadings, *, base_population: float) -> DisasterRisk:
    score = 0.0
    factors: List[str] = []

    if r.instability > 0.6:
        score += r.instability * 40
        factors.append("Unstable atmospheric conditions")
    if r.moisture_pct > 70:
        score += (r.moisture_pct - 70) * 1.5
        factors.append(f"High moisture: {round_half_up(r.moisture_pct)}%")
    # Shear drives rotation (tornado potential)
    if r.wind_shear_ms > 20:
        score += (r.wind_shear_ms - 20) * 2
        factors.append(f"Strong wind shear: {round_half_up(r.wind_shear_ms)} m/s")

    return _build(DisasterType.THUNDERSTORM, score, factors, base_population, r)


def assess_rainblast(r: RainblastReadings, *, base_population: float) -> DisasterRisk:
    """Cloudburst: convective cells dumping rain faster than drains clear it."""
    score = 0.0
    factors: List[str] = []

    if r.convective_activity > 0.7:
        score += r.convective_activity * 50
        factors.append("Strong convective cell detected")
    if r.rainfall_rate_mm_h > 50:
        score += (r.rainfall_rate_mm_h - 50) * 0.8
        factors.append(f"Intense rainfall: {round_half_up(r.rainfall_rate_mm_h)}mm/hour")
    if r.poor_drainage:
        score += 30
        factors.append("Inadequate urban drainage system")

    return _build(DisasterType.RAINBLAST, score, factors, base_population, r)


# ═══════════════════════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════════════════════

Assessor = Callable[..., DisasterRisk]

ASSESSORS: Mapping[DisasterType, Tuple[Assessor, Type]] = MappingProxyType({
    DisasterType.FLOOD: (assess_flood, FloodReadings),
    DisasterType.WILDFIRE: (assess_wildfire, WildfireReadings),
    DisasterType.EARTHQUAKE: (assess_earthquake, EarthquakeReadings),
    DisasterType.DROUGHT: (assess_drought, DroughtReadings),
    DisasterType.LANDSLIDE: (assess_landslide, LandslideReadings),
    DisasterType.EXTREME_HEAT: (assess_extreme_heat, ExtremeHeatReadings),
    DisasterType.VOLCANO: (assess_volcano, VolcanoReadings),
    DisasterType.TSUNAMI: (assess_tsunami, TsunamiReadings),
    DisasterType.THUNDERSTORM: (assess_thunderstorm, ThunderstormReadings),
    DisasterType.RAINBLAST: (assess_rainblast, RainblastReadings),
})
