"""
Recommendation session — gathers the two user answers, then scores once.

States::

    AWAITING_CLARITY ─confirm_clarity─▶ AWAITING_COVER ─confirm_cover─▶ READY_TO_SCORE
                                                                            │ trigger()
                                                  SCORED ◀── (delay) ── SCORING

``apply_autofill`` may arrive at any time and only updates the inferred
fields. ``trigger()`` is accepted from READY_TO_SCORE or SCORED (re-roll) and
returns the scoring task. ``back()`` and ``reset()`` are rejected while
scoring; rejected calls return ``False`` / ``None`` and are logged at DEBUG.
"""

from __future__ import annotations

import asyncio
import logging
import random
from enum import StrEnum
from typing import Mapping, Optional

from lureiq.catalog.lures import LURE_CATALOG
from lureiq.models.conditions import Conditions, Coordinates, NormalizedConditions
from lureiq.models.recommendation import (
    LureProfile,
    RecommendationRecord,
    ScoredRecommendation,
    to_record,
)
from lureiq.recommendations.scorer import score
from lureiq.taxonomy.conditions import Clarity, Cover

logger = logging.getLogger(__name__)

DEFAULT_SCORING_DELAY_S = 3.0


class SessionState(StrEnum):
    AWAITING_CLARITY = "awaiting_clarity"
    AWAITING_COVER = "awaiting_cover"
    READY_TO_SCORE = "ready_to_score"
    SCORING = "scoring"
    SCORED = "scored"


class RecommendationSession:
    """One pass from "what's the water like?" to a recommended lure.

    Args:
        catalog: Lures to score.
        overrides: Remote base-weight overrides, if any were fetched.
        scoring_delay_s: Pause before scoring (the "reading the water" beat).
        rng: Tie-break source handed to the scorer.
        jitter: ``False`` makes ties resolve in catalog order.
    """

    def __init__(
        self,
        catalog: tuple[LureProfile, ...] = LURE_CATALOG,
        overrides: Optional[Mapping[str, float]] = None,
        scoring_delay_s: float = DEFAULT_SCORING_DELAY_S,
        rng: Optional[random.Random] = None,
        jitter: bool = True,
    ) -> None:
        self.catalog = catalog
        self.overrides = overrides
        self.scoring_delay_s = scoring_delay_s
        self.rng = rng or random.Random()
        self.jitter = jitter

        self._state = SessionState.AWAITING_CLARITY
        self._conditions = Conditions()
        self._clarity_guess: Optional[Clarity] = None
        self._status = ""
        self._result: Optional[ScoredRecommendation] = None
        self._record: Optional[RecommendationRecord] = None
        self._task: Optional[asyncio.Task] = None

    # ── Read-only view ────────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def conditions(self) -> Conditions:
        return self._conditions

    @property
    def clarity_guess(self) -> Optional[Clarity]:
        """Suggested clarity from recent rainfall; never applied automatically."""
        return self._clarity_guess

    @property
    def status(self) -> str:
        return self._status

    @property
    def result(self) -> Optional[ScoredRecommendation]:
        return self._result

    @property
    def record(self) -> Optional[RecommendationRecord]:
        return self._record

    # ── Inputs ────────────────────────────────────────────────────────────────

    def apply_autofill(
        self,
        normalized: NormalizedConditions,
        coordinates: Optional[Coordinates] = None,
    ) -> None:
        """Store inferred time, season and spawn phase; state is unchanged."""
        self._conditions = self._conditions.model_copy(
            update={
                "time_of_day": normalized.time_of_day,
                "season": normalized.season,
                "spawn_phase": normalized.spawn_phase,
                "coordinates": coordinates or normalized.coordinates,
            }
        )
        self._clarity_guess = normalized.clarity_guess
        self._status = normalized.status

    def confirm_clarity(self, clarity: Clarity) -> bool:
        if self._state != SessionState.AWAITING_CLARITY:
            return self._reject("confirm_clarity")
        self._conditions = self._conditions.model_copy(update={"clarity": Clarity(clarity)})
        self._clear_result()
        self._state = SessionState.AWAITING_COVER
        return True

    def confirm_cover(self, cover: Cover) -> bool:
        if self._state != SessionState.AWAITING_COVER:
            return self._reject("confirm_cover")
        self._conditions = self._conditions.model_copy(update={"cover": Cover(cover)})
        self._clear_result()
        self._state = SessionState.READY_TO_SCORE
        return True

    # ── Scoring ───────────────────────────────────────────────────────────────

    def trigger(self) -> Optional[asyncio.Task]:
        """Start scoring; returns the task resolving to a ``RecommendationRecord``."""
        if self._state not in (SessionState.READY_TO_SCORE, SessionState.SCORED):
            self._reject("trigger")
            return None
        if not self._conditions.is_scoreable:
            self._reject("trigger")
            return None

        self._clear_result()
        self._state = SessionState.SCORING
        self._task = asyncio.get_running_loop().create_task(self._run_scoring(self._conditions))
        return self._task

    async def _run_scoring(self, conditions: Conditions) -> RecommendationRecord:
        await asyncio.sleep(self.scoring_delay_s)
        result = score(
            conditions,
            catalog=self.catalog,
            overrides=self.overrides,
            rng=self.rng,
            jitter=self.jitter,
        )
        self._result = result
        self._record = to_record(result, conditions)
        self._state = SessionState.SCORED
        self._task = None
        logger.info(
            "Recommended %s (%s) for %s/%s", result.lure, result.color,
            conditions.clarity, conditions.cover,
        )
        return self._record

    # ── Navigation ────────────────────────────────────────────────────────────

    def back(self) -> bool:
        """Step back one question, discarding any result."""
        if self._state == SessionState.AWAITING_COVER:
            self._conditions = self._conditions.model_copy(update={"clarity": None})
            self._state = SessionState.AWAITING_CLARITY
        elif self._state in (SessionState.READY_TO_SCORE, SessionState.SCORED):
            self._conditions = self._conditions.model_copy(update={"cover": None})
            self._state = SessionState.AWAITING_COVER
        else:
            return self._reject("back")
        self._clear_result()
        return True

    def reset(self) -> bool:
        """Start over; inferred conditions are kept, answers and result cleared."""
        if self._state == SessionState.SCORING:
            return self._reject("reset")
        self._conditions = self._conditions.model_copy(update={"clarity": None, "cover": None})
        self._clear_result()
        self._state = SessionState.AWAITING_CLARITY
        return True

    def close(self) -> None:
        """Cancel a pending scoring task (teardown)."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        if self._state == SessionState.SCORING:
            self._state = SessionState.READY_TO_SCORE

    # ── Internals ─────────────────────────────────────────────────────────────

    def _clear_result(self) -> None:
        self._result = None
        self._record = None

    def _reject(self, operation: str) -> bool:
        logger.debug("%s ignored in state %s", operation, self._state)
        return False
