"""Tests for ConditionsService — location resolution and every fallback path."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from lureiq.conditions.normalizer import (
    STATUS_AUTOFILLED,
    STATUS_NO_LOCATION,
    STATUS_WEATHER_FAILED,
)
from lureiq.conditions.service import ConditionsService
from lureiq.ingestion.exceptions import GeocodingError, WeatherError
from lureiq.ingestion.location import StaticLocationProvider, no_location
from lureiq.ingestion.weather_client import WeatherSnapshot
from lureiq.models.conditions import Coordinates
from lureiq.taxonomy.conditions import Clarity, Season, SpawnPhase, TimeOfDay

NOW = datetime(2024, 5, 1, 7, 0)
HOME = Coordinates(lat=41.67, lon=-72.94)
ZIP_COORDS = Coordinates(lat=33.75, lon=-84.39)


class FakeWeather:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[Coordinates] = []

    async def fetch(self, coordinates: Coordinates) -> WeatherSnapshot:
        self.calls.append(coordinates)
        if self.fail:
            raise WeatherError("boom", source="test", status_code=502)
        day = NOW.replace(hour=0)
        times = [day + timedelta(hours=h) for h in range(24)]
        return WeatherSnapshot(
            coordinates=coordinates,
            hourly_times=times,
            precipitation_mm=[0.5] * 24,
            temperature_c=[18.0] * 24,
            sunrise=NOW.replace(hour=6),
            sunset=NOW.replace(hour=20),
        )


class FakeGeocoder:
    def __init__(self, result=ZIP_COORDS, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.lookups: list[str] = []

    async def lookup(self, zip_code: str):
        self.lookups.append(zip_code)
        if self.error is not None:
            raise self.error
        return self.result


async def _denied():
    raise PermissionError("location permission denied")


def _service(weather=None, geocoder=None, location=no_location) -> ConditionsService:
    return ConditionsService(
        weather=weather or FakeWeather(),
        geocoder=geocoder,
        location_provider=location,
        clock=lambda: NOW,
    )


@pytest.mark.asyncio
async def test_detect_with_location_autofills():
    weather = FakeWeather()
    result = await _service(weather, location=StaticLocationProvider(HOME)).detect()

    assert weather.calls == [HOME]
    assert result.status == STATUS_AUTOFILLED
    assert result.time_of_day == TimeOfDay.MORNING
    assert result.season == Season.SPRING
    assert result.spawn_phase == SpawnPhase.PRE_SPAWN
    assert result.clarity_guess == Clarity.STAINED
    assert result.coordinates == HOME


@pytest.mark.asyncio
async def test_no_location_falls_back_to_clock():
    weather = FakeWeather()
    result = await _service(weather).detect()

    assert weather.calls == []
    assert result.status == STATUS_NO_LOCATION
    assert result.time_of_day == TimeOfDay.MORNING
    assert result.season == Season.SPRING
    assert result.spawn_phase == SpawnPhase.NONE
    assert result.clarity_guess is None


@pytest.mark.asyncio
async def test_location_error_is_treated_as_denied():
    result = await _service(location=_denied).detect()
    assert result.status == STATUS_NO_LOCATION


@pytest.mark.asyncio
async def test_weather_failure_keeps_coordinates():
    result = await _service(FakeWeather(fail=True), location=StaticLocationProvider(HOME)).detect()

    assert result.status == STATUS_WEATHER_FAILED
    assert result.coordinates == HOME
    assert result.spawn_phase == SpawnPhase.NONE
    assert result.clarity_guess is None


@pytest.mark.asyncio
async def test_zip_used_when_location_unavailable():
    weather = FakeWeather()
    geocoder = FakeGeocoder()
    result = await _service(weather, geocoder=geocoder).detect("30303")

    assert geocoder.lookups == ["30303"]
    assert weather.calls == [ZIP_COORDS]
    assert result.coordinates == ZIP_COORDS


@pytest.mark.asyncio
async def test_device_location_wins_over_zip():
    geocoder = FakeGeocoder()
    result = await _service(geocoder=geocoder, location=StaticLocationProvider(HOME)).detect("30303")

    assert geocoder.lookups == []
    assert result.coordinates == HOME


@pytest.mark.asyncio
async def test_malformed_zip_not_looked_up():
    geocoder = FakeGeocoder()
    result = await _service(geocoder=geocoder).detect("3030")

    assert geocoder.lookups == []
    assert result.status == STATUS_NO_LOCATION


@pytest.mark.asyncio
async def test_geocoder_error_falls_back():
    geocoder = FakeGeocoder(error=GeocodingError("down", source="test", status_code=503))
    result = await _service(geocoder=geocoder).detect("30303")
    assert result.status == STATUS_NO_LOCATION
