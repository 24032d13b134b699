"""
Tests for RecommendationSession (lureiq/session.py).

What we test
------------
  - Autofill stores inferred fields and the clarity suggestion without moving state.
  - Answers are accepted only in their own state, in order.
  - trigger() is gated on READY_TO_SCORE / SCORED, runs the scorer once after
    the delay and yields a RecommendationRecord.
  - back() and reset() discard the result and are refused while scoring.
  - close() cancels a pending scoring task and returns to READY_TO_SCORE.
"""

from __future__ import annotations

import asyncio
import random

import pytest

from lureiq.catalog.lures import CHATTERBAIT, FOOTBALL_JIG, JERKBAIT
from lureiq.models.conditions import Coordinates, NormalizedConditions
from lureiq.session import RecommendationSession, SessionState
from lureiq.taxonomy.conditions import Clarity, Cover, Season, SpawnPhase, TimeOfDay

WINTER_MIDDAY = NormalizedConditions(
    time_of_day=TimeOfDay.MIDDAY,
    season=Season.WINTER,
    spawn_phase=SpawnPhase.NONE,
    clarity_guess=Clarity.CLEAR,
    coordinates=Coordinates(lat=41.67, lon=-72.94),
    status="Autofilled",
)


def _session(**kwargs) -> RecommendationSession:
    kwargs.setdefault("scoring_delay_s", 0)
    kwargs.setdefault("rng", random.Random(1))
    return RecommendationSession(**kwargs)


def _ready(session: RecommendationSession, clarity=Clarity.CLEAR, cover=Cover.ROCK) -> None:
    session.apply_autofill(WINTER_MIDDAY)
    assert session.confirm_clarity(clarity)
    assert session.confirm_cover(cover)


class TestInputs:
    def test_autofill_does_not_transition(self):
        session = _session()
        session.apply_autofill(WINTER_MIDDAY)

        assert session.state == SessionState.AWAITING_CLARITY
        assert session.conditions.season == Season.WINTER
        assert session.conditions.time_of_day == TimeOfDay.MIDDAY
        assert session.conditions.coordinates == WINTER_MIDDAY.coordinates
        assert session.clarity_guess == Clarity.CLEAR
        assert session.conditions.clarity is None
        assert session.status == "Autofilled"

    def test_answers_in_order(self):
        session = _session()
        assert session.confirm_clarity(Clarity.MUDDY)
        assert session.state == SessionState.AWAITING_COVER
        assert session.confirm_cover(Cover.GRASS)
        assert session.state == SessionState.READY_TO_SCORE
        assert session.conditions.clarity == Clarity.MUDDY
        assert session.conditions.cover == Cover.GRASS

    def test_out_of_order_answers_rejected(self):
        session = _session()
        assert session.confirm_cover(Cover.WOOD) is False
        assert session.state == SessionState.AWAITING_CLARITY
        session.confirm_clarity(Clarity.CLEAR)
        assert session.confirm_clarity(Clarity.MUDDY) is False
        assert session.conditions.clarity == Clarity.CLEAR

    def test_answers_accept_display_values(self):
        session = _session()
        assert session.confirm_clarity("Stained")
        assert session.conditions.clarity is Clarity.STAINED


class TestTrigger:
    def test_trigger_rejected_before_answers(self):
        session = _session()
        assert session.trigger() is None
        assert session.state == SessionState.AWAITING_CLARITY

    @pytest.mark.asyncio
    async def test_trigger_scores_once(self):
        session = _session()
        _ready(session)

        task = session.trigger()
        assert task is not None
        assert session.state == SessionState.SCORING
        assert session.trigger() is None

        record = await task
        assert session.state == SessionState.SCORED
        assert session.result.lure == JERKBAIT
        assert record.lure_name == JERKBAIT
        assert record.color == "Natural (Green Pumpkin/Watermelon/Shad)"
        assert record.id.startswith(f"{JERKBAIT}|")
        assert "41.670,-72.940" in record.id

    @pytest.mark.asyncio
    async def test_rescore_from_scored(self):
        session = _session()
        _ready(session)
        first = await session.trigger()

        second_task = session.trigger()
        assert second_task is not None
        assert session.result is None
        second = await second_task
        assert second.lure_name == first.lure_name

    @pytest.mark.asyncio
    async def test_overrides_and_jitter_are_used(self):
        session = _session(overrides={JERKBAIT: 0}, jitter=False)
        _ready(session)
        record = await session.trigger()
        assert record.lure_name == FOOTBALL_JIG

    @pytest.mark.asyncio
    async def test_scoring_delay_is_observed(self):
        session = _session(scoring_delay_s=0.05)
        _ready(session, clarity=Clarity.STAINED, cover=Cover.WOOD)
        task = session.trigger()

        await asyncio.sleep(0)
        assert session.state == SessionState.SCORING
        assert session.result is None

        await task
        assert session.state == SessionState.SCORED


class TestNavigation:
    @pytest.mark.asyncio
    async def test_back_from_scored_discards_result(self):
        session = _session()
        _ready(session)
        await session.trigger()

        assert session.back()
        assert session.state == SessionState.AWAITING_COVER
        assert session.result is None
        assert session.record is None
        assert session.conditions.cover is None
        assert session.conditions.clarity == Clarity.CLEAR

    def test_back_from_cover_to_clarity(self):
        session = _session()
        session.confirm_clarity(Clarity.CLEAR)
        assert session.back()
        assert session.state == SessionState.AWAITING_CLARITY
        assert session.conditions.clarity is None

    def test_back_at_start_rejected(self):
        assert _session().back() is False

    @pytest.mark.asyncio
    async def test_back_and_reset_rejected_while_scoring(self):
        session = _session(scoring_delay_s=10)
        _ready(session)
        session.trigger()

        assert session.back() is False
        assert session.reset() is False
        assert session.state == SessionState.SCORING
        session.close()

    @pytest.mark.asyncio
    async def test_reset_keeps_inferred_fields(self):
        session = _session()
        _ready(session)
        await session.trigger()

        assert session.reset()
        assert session.state == SessionState.AWAITING_CLARITY
        assert session.conditions.clarity is None
        assert session.conditions.cover is None
        assert session.conditions.season == Season.WINTER
        assert session.result is None

    @pytest.mark.asyncio
    async def test_close_cancels_pending_scoring(self):
        session = _session(scoring_delay_s=10)
        _ready(session, clarity=Clarity.MUDDY, cover=Cover.GRASS)
        task = session.trigger()

        session.close()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert session.result is None

    @pytest.mark.asyncio
    async def test_close_while_scoring_allows_navigation_again(self):
        session = _session(scoring_delay_s=10)
        _ready(session)
        task = session.trigger()

        session.close()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert session.state == SessionState.READY_TO_SCORE
        assert session.back()
        assert session.state == SessionState.AWAITING_COVER
        assert session.confirm_cover(Cover.ROCK)
        session.close()
        assert session.state == SessionState.READY_TO_SCORE

        session.scoring_delay_s = 0
        record = await session.trigger()
        assert record.lure_name == JERKBAIT

    @pytest.mark.asyncio
    async def test_muddy_grass_tie_without_jitter(self):
        session = _session(jitter=False)
        session.apply_autofill(
            NormalizedConditions(time_of_day=TimeOfDay.EVENING, season=Season.SUMMER)
        )
        session.confirm_clarity(Clarity.MUDDY)
        session.confirm_cover(Cover.GRASS)
        record = await session.trigger()
        assert record.lure_name == CHATTERBAIT
