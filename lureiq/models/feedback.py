"""
Catch-feedback models.

``ScheduledPrompt`` is the single pending "did it work?" check-in. At most one
exists in durable storage; scheduling a new one overwrites the old.

``FeedbackRecord`` is one resolved prompt, queued locally until the collector
accepts it. ``OutcomeEntry`` is the immediate yes/no answered under a shown
plan, kept with the full conditions for later weight tuning. All are stored
as JSON, so timestamps are epoch milliseconds.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from lureiq.models.conditions import Conditions, Coordinates


class ScheduledPrompt(BaseModel):
    """Persisted single-slot prompt.

    Attributes:
        recommendation_id: Opaque id of the recommendation being followed up.
        lure_name: Lure shown in the prompt.
        due_at: Epoch ms at which the prompt becomes visible.
    """

    model_config = ConfigDict(frozen=True)

    recommendation_id: str
    lure_name: str
    due_at: int

    def is_due(self, now: int) -> bool:
        return now >= self.due_at


class FeedbackOutcome(BaseModel):
    """The user's answer to a prompt."""

    model_config = ConfigDict(frozen=True)

    caught: bool
    count: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("count")
    @classmethod
    def validate_count(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError(f"count must be >= 0, got {v}.")
        return v


class FeedbackRecord(BaseModel):
    """Queued outcome for one recommendation.

    Attributes:
        id: Unique record id (``"<recommendation_id>:<timestamp>"``).
        recommendation_id: Ties back to ``ScheduledPrompt.recommendation_id``.
        lure_name: Lure the user was told to throw.
        caught: Whether the lure produced a fish.
        count: Optional number of fish.
        notes: Optional free text.
        timestamp: Epoch ms when the record was created.
        location: Where the user was when answering, when it could be read.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    recommendation_id: str
    lure_name: str
    caught: bool
    count: Optional[int] = None
    notes: Optional[str] = None
    timestamp: int
    location: Optional[Coordinates] = None

    @classmethod
    def from_prompt(
        cls,
        prompt: ScheduledPrompt,
        outcome: FeedbackOutcome,
        timestamp: int,
        location: Optional[Coordinates] = None,
    ) -> "FeedbackRecord":
        return cls(
            id=f"{prompt.recommendation_id}:{timestamp}",
            recommendation_id=prompt.recommendation_id,
            lure_name=prompt.lure_name,
            caught=outcome.caught,
            count=outcome.count,
            notes=outcome.notes,
            timestamp=timestamp,
            location=location,
        )


class OutcomePlan(BaseModel):
    """The plan the user was shown, as stored with an outcome."""

    model_config = ConfigDict(frozen=True)

    lure_name: str
    color: str
    short_how_to: str


class OutcomeEntry(BaseModel):
    """One "did this plan work?" answer tagged with the conditions it was for.

    Attributes:
        id: Random hex id.
        timestamp: Epoch ms when the answer was recorded.
        success: ``True`` when the plan produced a fish.
        conditions: Conditions the plan was scored for.
        plan: Lure, color and retrieve that were shown.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: int
    success: bool
    conditions: Conditions
    plan: OutcomePlan
