"""
Lure catalog and recommendation output models.

``LureProfile`` is one row of the static lure catalog. ``ScoredRecommendation``
is the scoring engine's output; it is derived and never persisted by the
engine. ``RecommendationRecord`` is what the session emits once a result is
shown, carrying the opaque id the feedback prompt is tied to.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from lureiq.models.conditions import Conditions
from lureiq.utils.time_utils import now_ms


class LureProfile(BaseModel):
    """Static catalog entry.

    Attributes:
        name: Display name, also the key used by remote weight overrides.
        base_weight: Starting score before conditional adjustments.
        retrieve: How to work the lure.
        depth: Depth band the lure is usually fished in.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    base_weight: int
    retrieve: str
    depth: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Lure name must not be blank.")
        return v


class ScoredRecommendation(BaseModel):
    """Winning lure plus presentation metadata."""

    model_config = ConfigDict(frozen=True)

    lure: str
    color: str
    retrieve: str
    depth: str


class RecommendationRecord(BaseModel):
    """A recommendation instance the feedback prompt can refer to."""

    model_config = ConfigDict(frozen=True)

    id: str
    lure_name: str
    color: Optional[str] = None
    depth: Optional[str] = None


def build_recommendation_id(
    result: ScoredRecommendation,
    conditions: Conditions,
    created_ms: Optional[int] = None,
) -> str:
    """Build the opaque, per-instance recommendation id.

    Pipe-joined lure, color and every condition value, plus a millisecond
    timestamp so two identical recommendations still get distinct ids.
    """
    coords = conditions.coordinates.label() if conditions.coordinates else "nocoords"
    parts = [
        result.lure,
        result.color,
        conditions.time_of_day or "",
        conditions.season or "",
        conditions.clarity or "",
        conditions.cover or "",
        conditions.spawn_phase or "",
        coords,
        str(created_ms if created_ms is not None else now_ms()),
    ]
    return "|".join(str(p) for p in parts)


def to_record(
    result: ScoredRecommendation,
    conditions: Conditions,
    created_ms: Optional[int] = None,
) -> RecommendationRecord:
    """Wrap a scored result into a ``RecommendationRecord``."""
    return RecommendationRecord(
        id=build_recommendation_id(result, conditions, created_ms),
        lure_name=result.lure,
        color=result.color,
        depth=result.depth,
    )
