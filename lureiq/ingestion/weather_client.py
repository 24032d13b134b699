"""
Open-Meteo forecast client.

API:   https://api.open-meteo.com/v1/forecast   (no key required)

Request::

    GET /v1/forecast?latitude=..&longitude=..
        &hourly=precipitation,temperature_2m
        &daily=sunrise,sunset
        &timezone=auto

With ``timezone=auto`` every timestamp is local to the requested location
and carries no offset, which is what the condition normalizer expects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import httpx

from lureiq.ingestion.exceptions import WeatherError
from lureiq.models.conditions import Coordinates
from lureiq.utils.time_utils import as_naive_local

logger = logging.getLogger(__name__)


# ── Response types ─────────────────────────────────────────────────────────────

@dataclass
class WeatherSnapshot:
    """Hourly series plus today's sunrise/sunset for one location.

    ``hourly_times``, ``precipitation_mm`` and ``temperature_c`` are parallel
    lists; missing values are ``None``.
    """

    coordinates: Coordinates
    hourly_times: list[datetime] = field(default_factory=list)
    precipitation_mm: list[Optional[float]] = field(default_factory=list)
    temperature_c: list[Optional[float]] = field(default_factory=list)
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None


# ── Client ─────────────────────────────────────────────────────────────────────

class WeatherClient:
    """Async client for the Open-Meteo forecast endpoint.

    Usage::

        async with httpx.AsyncClient() as http:
            snapshot = await WeatherClient(http_client=http).fetch(coords)

    Attributes:
        base_url: Forecast endpoint URL.
        timeout_s: Per-request timeout in seconds.
    """

    HOURLY_FIELDS = "precipitation,temperature_2m"
    DAILY_FIELDS = "sunrise,sunset"

    def __init__(
        self,
        base_url: str = "https://api.open-meteo.com/v1/forecast",
        timeout_s: float = 15.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_s = timeout_s
        self._http = http_client

    async def fetch(self, coordinates: Coordinates) -> WeatherSnapshot:
        """Fetch hourly precipitation/temperature and sunrise/sunset.

        Raises:
            WeatherError: On network failure, non-2xx status or a non-JSON body.
        """
        params = {
            "latitude": coordinates.lat,
            "longitude": coordinates.lon,
            "hourly": self.HOURLY_FIELDS,
            "daily": self.DAILY_FIELDS,
            "timezone": "auto",
        }
        try:
            if self._http is not None:
                resp = await self._http.get(self.base_url, params=params, timeout=self.timeout_s)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_s) as http:
                    resp = await http.get(self.base_url, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise WeatherError(
                f"Weather request failed: {exc.response.status_code}",
                source="open-meteo",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise WeatherError(f"Weather request failed: {exc}", source="open-meteo") from exc

        snapshot = parse_forecast(payload, coordinates)
        logger.debug(
            "WeatherClient: %d hourly samples for %s (sunrise=%s sunset=%s)",
            len(snapshot.hourly_times), coordinates.label(), snapshot.sunrise, snapshot.sunset,
        )
        return snapshot


# ── Parsing ───────────────────────────────────────────────────────────────────

def parse_forecast(payload: Any, coordinates: Coordinates) -> WeatherSnapshot:
    """Map an Open-Meteo payload onto ``WeatherSnapshot``.

    Missing sections yield empty series and ``None`` sunrise/sunset. Hourly
    entries with an unparseable timestamp are dropped together with their
    values so the series stay aligned.
    """
    if not isinstance(payload, dict):
        raise WeatherError("Weather payload is not a JSON object", source="open-meteo")

    hourly = payload.get("hourly") or {}
    daily = payload.get("daily") or {}

    raw_times = hourly.get("time") or []
    raw_precip = hourly.get("precipitation") or []
    raw_temps = hourly.get("temperature_2m") or []

    times: list[datetime] = []
    precip: list[Optional[float]] = []
    temps: list[Optional[float]] = []
    for i, raw in enumerate(raw_times):
        t = _parse_time(raw)
        if t is None:
            continue
        times.append(t)
        precip.append(_as_float(raw_precip[i]) if i < len(raw_precip) else None)
        temps.append(_as_float(raw_temps[i]) if i < len(raw_temps) else None)

    return WeatherSnapshot(
        coordinates=coordinates,
        hourly_times=times,
        precipitation_mm=precip,
        temperature_c=temps,
        sunrise=_first_time(daily.get("sunrise")),
        sunset=_first_time(daily.get("sunset")),
    )


def _first_time(values: Any) -> Optional[datetime]:
    if not values:
        return None
    return _parse_time(values[0])


def _parse_time(raw: Any) -> Optional[datetime]:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return as_naive_local(datetime.fromisoformat(raw))
    except ValueError:
        return None


def _as_float(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None
