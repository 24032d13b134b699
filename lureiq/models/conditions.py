"""
Condition models.

``Conditions`` is the scoring input. Every field is independently nullable
until resolved: the normalizer fills time, season and spawn phase, the user
confirms clarity and cover. Only clarity and cover are required before
scoring, and that gate lives in ``RecommendationSession``.

``NormalizedConditions`` is what the condition normalizer hands to the
session: inferred categories, an optional clarity suggestion, and a status
line for the user.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from lureiq.taxonomy.conditions import Clarity, Cover, Season, SpawnPhase, TimeOfDay


class Coordinates(BaseModel):
    """WGS84 latitude/longitude pair."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float

    @field_validator("lat")
    @classmethod
    def validate_lat(cls, v: float) -> float:
        if not -90.0 <= v <= 90.0:
            raise ValueError(f"lat must be in [-90, 90], got {v}.")
        return v

    @field_validator("lon")
    @classmethod
    def validate_lon(cls, v: float) -> float:
        if not -180.0 <= v <= 180.0:
            raise ValueError(f"lon must be in [-180, 180], got {v}.")
        return v

    def label(self) -> str:
        """Three-decimal ``"lat,lon"`` string used in recommendation ids."""
        return f"{self.lat:.3f},{self.lon:.3f}"


class Conditions(BaseModel):
    """Scoring input.

    Attributes:
        clarity: Confirmed water clarity, or ``None`` until confirmed.
        cover: Confirmed cover type, or ``None`` until confirmed.
        time_of_day: Inferred light window.
        season: Inferred season.
        spawn_phase: Inferred spawn stage.
        coordinates: Where the conditions were observed, if known.
    """

    model_config = ConfigDict(frozen=True)

    clarity: Optional[Clarity] = None
    cover: Optional[Cover] = None
    time_of_day: Optional[TimeOfDay] = None
    season: Optional[Season] = None
    spawn_phase: Optional[SpawnPhase] = None
    coordinates: Optional[Coordinates] = None

    @property
    def is_scoreable(self) -> bool:
        return self.clarity is not None and self.cover is not None


class NormalizedConditions(BaseModel):
    """Categorical conditions derived from clock, weather and location."""

    model_config = ConfigDict(frozen=True)

    time_of_day: TimeOfDay
    season: Season
    spawn_phase: SpawnPhase = SpawnPhase.NONE
    clarity_guess: Optional[Clarity] = None
    coordinates: Optional[Coordinates] = None
    status: str = ""
