"""
Condition detection: location → weather → normalized conditions.

``ConditionsService.detect()`` never raises. Every failure (location denied,
ZIP not found, weather unreachable, malformed payload) degrades to
clock-derived time and season with spawn phase "None" and no clarity guess,
and the reason is reported through ``NormalizedConditions.status``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from lureiq.conditions.normalizer import (
    STATUS_NO_LOCATION,
    STATUS_WEATHER_FAILED,
    fallback_conditions,
    normalize,
)
from lureiq.ingestion.geocoding_client import GeocodingClient, is_valid_zip
from lureiq.ingestion.location import LocationProvider, no_location
from lureiq.ingestion.weather_client import WeatherClient
from lureiq.models.conditions import Coordinates, NormalizedConditions
from lureiq.utils.time_utils import local_now

logger = logging.getLogger(__name__)


class ConditionsService:
    """Resolves coordinates and turns a weather pull into conditions.

    Args:
        weather: Weather source.
        geocoder: ZIP lookup used when the location provider gives nothing.
        location_provider: Device location source.
        clock: Returns the current naive local time.
    """

    def __init__(
        self,
        weather: WeatherClient,
        geocoder: Optional[GeocodingClient] = None,
        location_provider: LocationProvider = no_location,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self.weather = weather
        self.geocoder = geocoder
        self.location_provider = location_provider
        self.clock = clock

    async def resolve_coordinates(self, zip_code: Optional[str] = None) -> Optional[Coordinates]:
        """Device location first, then a 5-digit ZIP lookup."""
        try:
            coords = await self.location_provider()
        except Exception as exc:
            logger.warning("Location lookup failed: %s", exc)
            coords = None
        if coords is not None:
            return coords

        if self.geocoder is None or not is_valid_zip(zip_code):
            return None
        try:
            return await self.geocoder.lookup(zip_code)
        except Exception as exc:
            logger.warning("ZIP lookup for %s failed: %s", zip_code, exc)
            return None

    async def detect(self, zip_code: Optional[str] = None) -> NormalizedConditions:
        """Best-effort conditions for right now."""
        now = self.clock()
        coords = await self.resolve_coordinates(zip_code)
        if coords is None:
            logger.info("No location available; using clock-derived conditions")
            return fallback_conditions(now, STATUS_NO_LOCATION)

        try:
            snapshot = await self.weather.fetch(coords)
            result = normalize(
                now,
                snapshot.hourly_times,
                snapshot.precipitation_mm,
                snapshot.temperature_c,
                snapshot.sunrise,
                snapshot.sunset,
                coords,
            )
        except Exception as exc:
            logger.warning("Weather-based inference failed for %s: %s", coords.label(), exc)
            return fallback_conditions(now, STATUS_WEATHER_FAILED, coordinates=coords)

        logger.info(
            "Conditions for %s: time=%s season=%s spawn=%s clarity_guess=%s",
            coords.label(), result.time_of_day, result.season,
            result.spawn_phase, result.clarity_guess,
        )
        return result
