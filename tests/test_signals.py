"""
Tests for the input signal models.

Covers:
    • Hazard category parsing (titles, EONET ids, unknowns)
    • Collaborator aliases (camelCase, POWER names)
    • Lenient coercion of unreadable values
    • Bundle construction from raw payloads
"""

from __future__ import annotations

import pytest

from resilience_engine.signals import (
    AirQualitySnapshot,
    ClimateNormals,
    DisasterRecord,
    HazardCategory,
    Location,
    SignalBundle,
    WeatherReading,
)
from resilience_engine.spatial.geo import Coordinate


# ═══════════════════════════════════════════════════════════════════════════
# Categories
# ═══════════════════════════════════════════════════════════════════════════

class TestHazardCategory:
    @pytest.mark.parametrize("raw,expected", [
        ("Floods", HazardCategory.FLOODS),
        ("  severe storms ", HazardCategory.SEVERE_STORMS),
        ("seaLakeIce", HazardCategory.SEA_LAKE_ICE),
        ("tempExtremes", HazardCategory.TEMPERATURE_EXTREMES),
        ("Tsunami", HazardCategory.UNKNOWN),
        (None, HazardCategory.UNKNOWN),
        (42, HazardCategory.UNKNOWN),
    ])
    def test_parse(self, raw, expected):
        assert HazardCategory.parse(raw) is expected

    def test_primary_category_from_title_then_id(self):
        assert DisasterRecord(categories=[{"title": "Volcanoes"}]).primary_category is HazardCategory.VOLCANOES
        assert DisasterRecord(categories=[{"id": "dustHaze"}]).primary_category is HazardCategory.DUST_HAZE
        assert DisasterRecord(categories=["Snow"]).primary_category is HazardCategory.SNOW
        assert DisasterRecord().primary_category is HazardCategory.UNKNOWN

    def test_non_list_categories_dropped(self):
        assert DisasterRecord.model_validate({"categories": "Floods"}).categories == []


# ═══════════════════════════════════════════════════════════════════════════
# Readings
# ═══════════════════════════════════════════════════════════════════════════

class TestReadings:
    def test_weather_aliases(self):
        w = WeatherReading.model_validate({"temperature": "31.5", "windSpeed": 20, "conditions": "Rain"})
        assert (w.temp, w.wind_speed, w.condition) == (31.5, 20.0, "Rain")

    @pytest.mark.parametrize("bad", ["n/a", float("nan"), float("inf"), [1, 2], True, {}])
    def test_unreadable_numbers_become_none(self, bad):
        assert WeatherReading.model_validate({"temp": bad}).temp is None

    def test_climate_monthly_series(self):
        c = ClimateNormals.model_validate({"T2M": {"JAN": 20, "FEB": 22, "ANN": "x"}, "PRECTOTCORR": [10, 30]})
        assert c.avg_temp == pytest.approx(21.0)
        assert c.avg_precip == pytest.approx(20.0)

    def test_climate_empty_series(self):
        assert ClimateNormals.model_validate({"T2M": []}).avg_temp is None

    def test_air_quality_top_level_pollutants(self):
        aq = AirQualitySnapshot.model_validate({"aqi": 3, "pm25": 40, "no2": 110})
        assert aq.components.pm2_5 == 40.0
        assert aq.components.no2 == 110.0

    def test_air_quality_nested_components_win(self):
        aq = AirQualitySnapshot.model_validate({"aqi": 3, "pm25": 40, "components": {"pm2_5": 12}})
        assert aq.components.pm2_5 == 12.0

    def test_location_to_coordinate(self):
        loc = Location.model_validate({"latitude": 95, "lng": 80.27, "bbox": [1, 2, 3, "x"]})
        assert loc.bbox is None
        assert loc.to_coordinate() == Coordinate(90.0, 80.27)
        assert Location().to_coordinate() == Coordinate(0.0, 0.0)


# ═══════════════════════════════════════════════════════════════════════════
# Bundle
# ═══════════════════════════════════════════════════════════════════════════

class TestSignalBundle:
    def test_full_payload(self):
        bundle = SignalBundle.from_raw({
            "weather": {"temp": 25, "windSpeed": 12},
            "disasters": [{"title": "Fire", "categories": [{"title": "Wildfires"}]}],
            "climate": {"avgTemp": 24, "avgPrecip": 90},
            "mobility": {"overallRisk": 35, "accessibility": {"overall": 80, "blockedRoads": 2}},
            "airQuality": {"aqi": 2},
            "location": {"lat": 13.08, "lon": 80.27},
        })
        assert bundle.weather.wind_speed == 12.0
        assert bundle.disasters[0].primary_category is HazardCategory.WILDFIRES
        assert bundle.mobility.accessibility.blocked_roads == 2.0
        assert bundle.air_quality.aqi == 2.0
        assert bundle.location.lat == 13.08

    @pytest.mark.parametrize("raw", [None, {}, "weather", 17, ["x"]])
    def test_empty_or_unusable(self, raw):
        assert SignalBundle.from_raw(raw) == SignalBundle()

    def test_existing_bundle_passes_through(self):
        bundle = SignalBundle.from_raw({"weather": {"temp": 10}})
        assert SignalBundle.from_raw(bundle) is bundle

    def test_malformed_sections_dropped(self):
        bundle = SignalBundle.from_raw({
            "weather": "sunny",
            "disasters": [{"title": "ok"}, "garbage", 3],
            "mobility": [1, 2],
            "airQuality": None,
        })
        assert bundle.weather is None
        assert len(bundle.disasters) == 1
        assert bundle.mobility is None
        assert bundle.air_quality is None

    def test_disasters_not_a_list(self):
        assert SignalBundle.from_raw({"disasters": {"title": "x"}}).disasters == []
