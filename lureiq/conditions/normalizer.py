"""
Condition normalizer: derives categorical conditions from clock, weather and
latitude, with a fallback for every optional input.

All datetimes are naive local time (see ``utils.time_utils``).

Time of day
-----------
With sunrise and sunset known (today's values)::

    [sunrise, sunrise + 2h)                  → Morning
    >= sunrise + 2h and > 2h before sunset   → Midday
    otherwise, at or before sunset           → Evening
    after sunset                             → Night

Before sunrise is still "at or before sunset", so pre-dawn hours read as
Evening; kept as-is. Without sunrise/sunset the clock bands apply:
``<6 Night, 6-10 Morning, 11-16 Midday, 17-20 Evening, >=21 Night``.

Season
------
Jan-Feb Winter, Mar-May Spring, Jun-Aug Summer, Sep-Oct Fall, Nov-Dec Winter.
November lands in Winter, not Fall; kept as-is.

Clarity guess
-------------
Precipitation summed over the 13 hourly samples ending at the sample nearest
``now``: ``> 15 mm`` Muddy, ``> 2 mm`` Stained, else Clear.

Spawn phase
-----------
Water temperature ≈ mean afternoon (12:00-18:00) air temperature over the
trailing 72 h in °F, minus 5, clamped to [35, 90]; 55 °F with no samples.
Spring window: Apr-Jun at latitude >= 37, else Mar-May. Inside the window
60-75 → Spawn, 50-<60 → Pre-Spawn, >75 → Post-Spawn.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from lureiq.models.conditions import Coordinates, NormalizedConditions
from lureiq.taxonomy.conditions import Clarity, Season, SpawnPhase, TimeOfDay
from lureiq.utils.time_utils import hours_between

MORNING_WINDOW = timedelta(hours=2)
EVENING_WINDOW = timedelta(hours=2)

CLARITY_LOOKBACK_SAMPLES = 12
MUDDY_PRECIP_MM = 15.0
STAINED_PRECIP_MM = 2.0

AIR_TEMP_LOOKBACK_HOURS = 72.0
AFTERNOON_HOURS = range(12, 19)    # 12:00 through 18:59
WATER_OFFSET_F = 5.0
WATER_MIN_F = 35.0
WATER_MAX_F = 90.0
DEFAULT_WATER_F = 55.0

NORTHERN_LATITUDE = 37.0

STATUS_AUTOFILLED = "Autofilled time/season/spawn. Two quick questions below."
STATUS_NO_LOCATION = "Location denied. Quick 2 prompts below."
STATUS_WEATHER_FAILED = "Couldn't load weather. Answer the two prompts."


# ── Time and season ───────────────────────────────────────────────────────────


def time_of_day_from_clock(hour: int) -> TimeOfDay:
    """Fixed clock-hour bands used when sunrise/sunset are unknown."""
    if hour < 6:
        return TimeOfDay.NIGHT
    if hour < 11:
        return TimeOfDay.MORNING
    if hour < 17:
        return TimeOfDay.MIDDAY
    if hour < 21:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def infer_time_of_day(
    now: datetime,
    sunrise: Optional[datetime] = None,
    sunset: Optional[datetime] = None,
) -> TimeOfDay:
    """Bucket ``now`` relative to sunrise/sunset, or by clock hour."""
    if sunrise is None or sunset is None:
        return time_of_day_from_clock(now.hour)

    after_sunrise = now - sunrise
    before_sunset = sunset - now
    zero = timedelta(0)

    if zero <= after_sunrise < MORNING_WINDOW:
        return TimeOfDay.MORNING
    if after_sunrise >= MORNING_WINDOW and before_sunset > EVENING_WINDOW:
        return TimeOfDay.MIDDAY
    if before_sunset >= zero:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def season_for_month(month: int) -> Season:
    """Northern-hemisphere season for a 1-based calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}.")
    if month <= 2:
        return Season.WINTER
    if month <= 5:
        return Season.SPRING
    if month <= 8:
        return Season.SUMMER
    if month <= 10:
        return Season.FALL
    return Season.WINTER


# ── Clarity ───────────────────────────────────────────────────────────────────


def nearest_index(times: Sequence[datetime], now: datetime) -> int:
    """Index of the sample closest to ``now``; 0 for an empty series."""
    best_idx = 0
    best_delta: Optional[float] = None
    for idx, t in enumerate(times):
        delta = abs((t - now).total_seconds())
        if best_delta is None or delta < best_delta:
            best_idx, best_delta = idx, delta
    return best_idx


def recent_precipitation_mm(
    times: Sequence[datetime],
    precipitation: Sequence[Optional[float]],
    now: datetime,
) -> float:
    """Sum of precipitation over the trailing 12-hour window ending near ``now``."""
    end_idx = nearest_index(times, now)
    start_idx = max(0, end_idx - CLARITY_LOOKBACK_SAMPLES)
    total = 0.0
    for i in range(start_idx, end_idx + 1):
        if i < len(precipitation) and precipitation[i] is not None:
            total += float(precipitation[i])
    return total


def clarity_from_precipitation(total_mm: float) -> Clarity:
    if total_mm > MUDDY_PRECIP_MM:
        return Clarity.MUDDY
    if total_mm > STAINED_PRECIP_MM:
        return Clarity.STAINED
    return Clarity.CLEAR


def guess_clarity(
    times: Sequence[datetime],
    precipitation: Sequence[Optional[float]],
    now: datetime,
) -> Clarity:
    return clarity_from_precipitation(recent_precipitation_mm(times, precipitation, now))


# ── Water temperature and spawn ───────────────────────────────────────────────


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9.0 / 5.0 + 32.0


def estimate_water_temp_f(
    times: Sequence[datetime],
    temps_c: Sequence[Optional[float]],
    now: datetime,
) -> float:
    """Estimate surface water temperature from recent afternoon air temps.

    Walks the series newest-first and stops at the first sample older than
    72 hours. Samples after ``now`` (forecast hours) are included.
    """
    total_f = 0.0
    count = 0
    for i in range(len(times) - 1, -1, -1):
        t = times[i]
        if hours_between(now, t) > AIR_TEMP_LOOKBACK_HOURS:
            break
        if t.hour not in AFTERNOON_HOURS:
            continue
        if i >= len(temps_c) or temps_c[i] is None:
            continue
        total_f += celsius_to_fahrenheit(float(temps_c[i]))
        count += 1

    if count == 0:
        return DEFAULT_WATER_F
    avg_air_f = total_f / count
    return max(WATER_MIN_F, min(WATER_MAX_F, avg_air_f - WATER_OFFSET_F))


def in_spring_window(month: int, latitude: float) -> bool:
    """Spawn months: Apr-Jun up north (lat >= 37), Mar-May further south."""
    if latitude >= NORTHERN_LATITUDE:
        return 4 <= month <= 6
    return 3 <= month <= 5


def infer_spawn_phase(water_f: float, now: datetime, latitude: float) -> SpawnPhase:
    if not in_spring_window(now.month, latitude):
        return SpawnPhase.NONE
    if 60.0 <= water_f <= 75.0:
        return SpawnPhase.SPAWN
    if 50.0 <= water_f < 60.0:
        return SpawnPhase.PRE_SPAWN
    if water_f > 70.0:
        return SpawnPhase.POST_SPAWN
    return SpawnPhase.NONE


# ── Entry points ──────────────────────────────────────────────────────────────


def fallback_conditions(
    now: datetime,
    status: str,
    coordinates: Optional[Coordinates] = None,
) -> NormalizedConditions:
    """Clock-derived time and season, no spawn phase, no clarity guess."""
    return NormalizedConditions(
        time_of_day=time_of_day_from_clock(now.hour),
        season=season_for_month(now.month),
        spawn_phase=SpawnPhase.NONE,
        clarity_guess=None,
        coordinates=coordinates,
        status=status,
    )


def normalize(
    now: datetime,
    hourly_times: Sequence[datetime],
    precipitation_mm: Sequence[Optional[float]],
    temperature_c: Sequence[Optional[float]],
    sunrise: Optional[datetime],
    sunset: Optional[datetime],
    coordinates: Coordinates,
) -> NormalizedConditions:
    """Derive every categorical condition from one weather pull."""
    water_f = estimate_water_temp_f(hourly_times, temperature_c, now)
    return NormalizedConditions(
        time_of_day=infer_time_of_day(now, sunrise, sunset),
        season=season_for_month(now.month),
        spawn_phase=infer_spawn_phase(water_f, now, coordinates.lat),
        clarity_guess=guess_clarity(hourly_times, precipitation_mm, now),
        coordinates=coordinates,
        status=STATUS_AUTOFILLED,
    )
